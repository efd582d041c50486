"""Shared type definitions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CoreErrors(str, Enum):
    """Error categories shared by every service client."""

    INCOMPLETE_SIGNATURE = "INCOMPLETE_SIGNATURE"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"
    INVALID_ACTION = "INVALID_ACTION"
    INVALID_CLIENT_TOKEN_ID = "INVALID_CLIENT_TOKEN_ID"
    INVALID_PARAMETER_COMBINATION = "INVALID_PARAMETER_COMBINATION"
    INVALID_QUERY_PARAMETER = "INVALID_QUERY_PARAMETER"
    INVALID_PARAMETER_VALUE = "INVALID_PARAMETER_VALUE"
    MISSING_ACTION = "MISSING_ACTION"
    MISSING_AUTHENTICATION_TOKEN = "MISSING_AUTHENTICATION_TOKEN"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    OPT_IN_REQUIRED = "OPT_IN_REQUIRED"
    REQUEST_EXPIRED = "REQUEST_EXPIRED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    THROTTLING = "THROTTLING"
    VALIDATION = "VALIDATION"
    ACCESS_DENIED = "ACCESS_DENIED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    UNRECOGNIZED_CLIENT = "UNRECOGNIZED_CLIENT"
    MALFORMED_QUERY_STRING = "MALFORMED_QUERY_STRING"
    SLOW_DOWN = "SLOW_DOWN"
    REQUEST_TIME_TOO_SKEWED = "REQUEST_TIME_TOO_SKEWED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    SIGNATURE_DOES_NOT_MATCH = "SIGNATURE_DOES_NOT_MATCH"
    INVALID_ACCESS_KEY_ID = "INVALID_ACCESS_KEY_ID"
    REQUEST_TIMEOUT = "REQUEST_TIMEOUT"
    NETWORK_CONNECTION = "NETWORK_CONNECTION"
    UNKNOWN = "UNKNOWN"
    CLIENT_SIGNING_FAILURE = "CLIENT_SIGNING_FAILURE"
    USER_CANCELLED = "USER_CANCELLED"
    ENDPOINT_RESOLUTION_FAILURE = "ENDPOINT_RESOLUTION_FAILURE"
    SERVICE_EXTENSION_START = "SERVICE_EXTENSION_START"


class HttpMethod(str, Enum):
    """HTTP methods used by the clients."""

    GET = "GET"
    POST = "POST"


class EndpointParameters(BaseModel):
    """Inputs to endpoint resolution."""

    region: str | None = Field(default=None, description="Region to resolve for")
    use_fips: bool | None = Field(default=None, description="Resolve a FIPS endpoint")
    use_dual_stack: bool | None = Field(default=None, description="Resolve a dual-stack endpoint")
    endpoint: str | None = Field(default=None, description="Custom endpoint override")


class Endpoint(BaseModel):
    """A resolved service endpoint."""

    url: str = Field(..., description="Base URL requests are sent to")
    signing_region: str | None = Field(default=None, description="Region used for SigV4 signing")
    signing_name: str | None = Field(default=None, description="Service name used for SigV4 signing")
    headers: dict[str, str] = Field(default_factory=dict, description="Headers the endpoint requires")


class OperationResult(BaseModel):
    """Successful outcome of a single service operation."""

    operation: str = Field(..., description="Operation name, e.g. DescribeDBInstances")
    status_code: int = Field(..., description="HTTP status code")
    request_id: str | None = Field(default=None, description="AWS request id")
    data: dict[str, Any] = Field(default_factory=dict, description="Parsed response members")
