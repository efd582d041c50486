"""Base class shared by the AWS service clients.

Every operation runs through the same pipeline: check the endpoint provider,
let the subclass adjust the request, resolve the endpoint, then serialize,
sign, send and parse a single HTTP request. Serialization and parsing are
driven by the botocore service model, so each operation in the model is
available as a snake_case method (``client.describe_db_instances(...)``).
"""

import functools
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx
from botocore import xform_name
from botocore.auth import SigV4Auth, SigV4QueryAuth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from botocore.exceptions import NoCredentialsError, ParamValidationError
from botocore.loaders import create_loader
from botocore.model import OperationModel, ServiceModel
from botocore.parsers import ResponseParserError, create_parser
from botocore.serialize import create_serializer
from botocore.utils import percent_encode_sequence

from services.clients.error_marshaller import marshall_error
from services.endpoints.endpoint_provider import EndpointProvider
from services.telemetry.metrics import Attributes, Meter
from services.telemetry.provider import TelemetryProvider, create_noop_provider
from services.telemetry.tracing_utils import emit_core_http_metrics, make_call_with_timing
from shared.aws_clients import create_http_client, resolve_credentials
from shared.config import Settings, get_settings
from shared.errors import EndpointResolutionError, ServiceClientError
from shared.logging import operation_ctx, request_id_ctx, service_ctx
from shared.types import CoreErrors, Endpoint, EndpointParameters, HttpMethod, OperationResult

logger = logging.getLogger(__name__)

USER_AGENT = "aws-data-clients/0.1.0"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


@functools.lru_cache(maxsize=None)
def load_service_model(service_name: str) -> ServiceModel:
    """Load and cache the botocore service model for a service."""
    loader = create_loader()
    return ServiceModel(loader.load_service_model(service_name, "service-2"), service_name=service_name)


@functools.lru_cache(maxsize=None)
def operation_method_names(service_name: str) -> dict[str, str]:
    """Map snake_case method names to model operation names."""
    return {xform_name(name): name for name in load_service_model(service_name).operation_names}


def join_url(base_url: str, path: str) -> str:
    """Append a request path to an endpoint URL."""
    return base_url.rstrip("/") + path


class _HttpMetricsCollector:
    """httpx trace hook that times TCP connect and TLS handshake."""

    _PHASES = {"connection.connect_tcp": "ConnectLatency", "connection.start_tls": "SslLatency"}

    def __init__(self) -> None:
        self.metrics: dict[str, float] = {}
        self._started: dict[str, float] = {}

    def __call__(self, event_name: str, info: Mapping[str, Any]) -> None:
        phase, _, stage = event_name.rpartition(".")
        metric = self._PHASES.get(phase)
        if metric is None:
            return
        if stage == "started":
            self._started[phase] = time.perf_counter()
        elif stage == "complete" and phase in self._started:
            self.metrics[metric] = (time.perf_counter() - self._started.pop(phase)) * 1000


class AwsServiceClient:
    """Synchronous client for one AWS service."""

    SERVICE_NAME: str = ""
    SERVICE_CLIENT_NAME: str = ""

    def __init__(
        self,
        settings: Settings | None = None,
        credentials: Credentials | None = None,
        endpoint_provider: EndpointProvider | None = None,
        telemetry_provider: TelemetryProvider | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the service client.

        Args:
            settings: Client settings; loaded from the environment when omitted
            credentials: Signing credentials; resolved through boto3 when omitted
            endpoint_provider: Endpoint resolver; the regional default when omitted
            telemetry_provider: Metrics sink; no-op when omitted
            http_client: HTTP client to send requests with; the client owns one when omitted
        """
        self.settings = settings or get_settings()
        self.region = self.settings.aws_region
        self.service_model = load_service_model(self.SERVICE_NAME)
        self.signing_name = self.service_model.signing_name
        self.credentials = credentials if credentials is not None else resolve_credentials(self.settings)

        self.endpoint_provider: EndpointProvider | None = endpoint_provider or EndpointProvider(
            self.SERVICE_NAME, self.signing_name
        )
        self.endpoint_provider.init_built_in_parameters(self.settings)

        self.telemetry_provider = telemetry_provider or create_noop_provider()
        self.telemetry_provider.run_init()

        self._owns_http_client = http_client is None
        self.http_client = http_client or create_http_client(self.settings)

        self._serializer = create_serializer(self.service_model.protocol, include_validation=True)
        self._parser = create_parser(self.service_model.protocol)

        logger.info(
            "Service client initialized",
            extra={"service": self.SERVICE_CLIENT_NAME, "region": self.region},
        )

    def __getattr__(self, name: str) -> Callable[..., OperationResult]:
        if name.startswith("_"):
            raise AttributeError(name)
        operation_name = operation_method_names(type(self).SERVICE_NAME).get(name)
        if operation_name is None:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

        def api_call(**kwargs: Any) -> OperationResult:
            return self.invoke(operation_name, kwargs)

        api_call.__name__ = name
        api_call.__doc__ = f"Invoke the {self.SERVICE_CLIENT_NAME} {operation_name} operation."
        return api_call

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(operation_method_names(type(self).SERVICE_NAME)))

    def __enter__(self) -> "AwsServiceClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            self.http_client.close()

    @property
    def operation_names(self) -> list[str]:
        """Operation names defined by the service model."""
        return list(self.service_model.operation_names)

    def override_endpoint(self, endpoint: str) -> None:
        """Send every subsequent request to a fixed endpoint."""
        if self.endpoint_provider is None:
            raise ServiceClientError(
                CoreErrors.ENDPOINT_RESOLUTION_FAILURE, "Endpoint provider is not initialized"
            )
        self.endpoint_provider.override_endpoint(endpoint)

    def get_meter(self) -> Meter:
        return self.telemetry_provider.get_meter(self.SERVICE_CLIENT_NAME, {})

    def invoke(self, operation_name: str, params: Mapping[str, Any] | None = None) -> OperationResult:
        """Run one operation through the request pipeline.

        Args:
            operation_name: Model operation name, e.g. "DescribeDBInstances"
            params: Request members keyed by their model names

        Returns:
            The parsed operation result

        Raises:
            ServiceClientError: If the endpoint, the request or the service call fails
        """
        if operation_name not in self.service_model.operation_names:
            raise ServiceClientError(
                CoreErrors.INVALID_ACTION,
                f"Unknown {self.SERVICE_CLIENT_NAME} operation",
                operation=operation_name,
            )
        if self.endpoint_provider is None:
            logger.error("Endpoint provider is not initialized", extra={"operation": operation_name})
            raise ServiceClientError(
                CoreErrors.ENDPOINT_RESOLUTION_FAILURE,
                "Endpoint provider is not initialized",
                operation=operation_name,
            )

        meter = self.get_meter()
        attributes = {"rpc.method": operation_name, "rpc.service": self.SERVICE_CLIENT_NAME}
        request_params = dict(params or {})

        service_token = service_ctx.set(self.SERVICE_CLIENT_NAME)
        operation_token = operation_ctx.set(operation_name)
        request_id_token = request_id_ctx.set(None)
        try:
            return make_call_with_timing(
                lambda: self._run_operation(operation_name, request_params, meter, attributes),
                "smithy.client.duration",
                meter,
                attributes,
            )
        finally:
            request_id_ctx.reset(request_id_token)
            operation_ctx.reset(operation_token)
            service_ctx.reset(service_token)

    def _run_operation(
        self, operation_name: str, params: dict[str, Any], meter: Meter, attributes: Attributes
    ) -> OperationResult:
        params = self.prepare_request(operation_name, params)
        endpoint = make_call_with_timing(
            lambda: self.resolve_endpoint(operation_name),
            "smithy.client.resolve_endpoint_duration",
            meter,
            attributes,
        )
        return self.make_request(operation_name, params, endpoint, HttpMethod.POST, meter, attributes)

    def prepare_request(self, operation_name: str, params: dict[str, Any]) -> dict[str, Any]:
        """Adjust request members before the endpoint is resolved."""
        return params

    def resolve_endpoint(self, operation_name: str, parameters: EndpointParameters | None = None) -> Endpoint:
        """Resolve the endpoint for an operation, tagging failures with the operation name."""
        if self.endpoint_provider is None:
            raise EndpointResolutionError("Endpoint provider is not initialized", operation=operation_name)
        try:
            return self.endpoint_provider.resolve_endpoint(parameters)
        except EndpointResolutionError as e:
            e.operation = operation_name
            logger.error("Endpoint resolution failed", extra={"operation": operation_name, "error": e.message})
            raise

    def serialize(self, operation_name: str, params: Mapping[str, Any]) -> dict[str, Any]:
        """Serialize request members with the service protocol's serializer."""
        operation_model = self.service_model.operation_model(operation_name)
        try:
            return self._serializer.serialize_to_request(dict(params), operation_model)
        except ParamValidationError as e:
            raise ServiceClientError(CoreErrors.VALIDATION, str(e), operation=operation_name) from e

    def make_request(
        self,
        operation_name: str,
        params: Mapping[str, Any],
        endpoint: Endpoint,
        method: HttpMethod,
        meter: Meter,
        attributes: Attributes,
    ) -> OperationResult:
        """Serialize, sign, send and parse a single request."""
        operation_model = self.service_model.operation_model(operation_name)
        request_dict = make_call_with_timing(
            lambda: self.serialize(operation_name, params),
            "smithy.client.serialization_duration",
            meter,
            attributes,
        )

        url = join_url(endpoint.url, request_dict.get("url_path", "/"))
        if request_dict.get("query_string"):
            url = f"{url}?{percent_encode_sequence(request_dict['query_string'])}"
        body = request_dict.get("body") or b""
        headers = dict(request_dict.get("headers", {}))
        headers.update(endpoint.headers)
        if isinstance(body, Mapping):
            body = percent_encode_sequence(body)
            headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
        if isinstance(body, str):
            body = body.encode("utf-8")
        headers.setdefault("User-Agent", USER_AGENT)

        aws_request = AWSRequest(method=method.value, url=url, data=body, headers=headers)
        make_call_with_timing(
            lambda: self._sign(aws_request, endpoint, operation_name),
            "smithy.client.auth.signing_duration",
            meter,
            attributes,
        )

        collector = _HttpMetricsCollector()
        sent_at = time.perf_counter()
        try:
            response = self.http_client.request(
                method.value,
                url,
                content=body,
                headers=dict(aws_request.headers.items()),
                extensions={"trace": collector},
            )
        except httpx.TimeoutException as e:
            logger.error("Request timed out", extra={"operation": operation_name, "error": str(e)})
            raise ServiceClientError(
                CoreErrors.REQUEST_TIMEOUT, str(e) or "Request timed out", operation=operation_name, retryable=True
            ) from e
        except httpx.RequestError as e:
            logger.error("Request failed", extra={"operation": operation_name, "error": str(e)})
            raise ServiceClientError(
                CoreErrors.NETWORK_CONNECTION, str(e) or "Connection failed", operation=operation_name, retryable=True
            ) from e

        elapsed = time.perf_counter() - sent_at
        if elapsed > 0:
            collector.metrics["Throughput"] = len(response.content) / elapsed
        emit_core_http_metrics(collector.metrics, meter, attributes)

        try:
            parsed = make_call_with_timing(
                lambda: self._parse(response, operation_model),
                "smithy.client.deserialization_duration",
                meter,
                attributes,
            )
        except ResponseParserError as e:
            status_code = response.status_code
            logger.error(
                "Unable to parse response",
                extra={"operation": operation_name, "status_code": status_code, "error": str(e)},
            )
            raise ServiceClientError(
                CoreErrors.SERVICE_UNAVAILABLE if status_code >= 500 else CoreErrors.UNKNOWN,
                f"Unable to parse response: {e}",
                status_code=status_code,
                operation=operation_name,
                retryable=status_code >= 500,
            ) from e

        request_id = parsed.get("ResponseMetadata", {}).get("RequestId")
        request_id_ctx.set(request_id)

        if response.status_code >= 300 or "Error" in parsed:
            error = marshall_error(operation_name, response.status_code, parsed)
            logger.warning(
                "Service returned an error",
                extra={
                    "operation": operation_name,
                    "status_code": response.status_code,
                    "error_code": error.error_code,
                    "request_id": request_id,
                },
            )
            raise error

        logger.debug("Operation succeeded", extra={"operation": operation_name, "request_id": request_id})
        data = {key: value for key, value in parsed.items() if key != "ResponseMetadata"}
        return OperationResult(
            operation=operation_name,
            status_code=response.status_code,
            request_id=request_id,
            data=data,
        )

    def _sign(self, aws_request: AWSRequest, endpoint: Endpoint, operation_name: str) -> None:
        signer = SigV4Auth(
            self.credentials,
            endpoint.signing_name or self.signing_name,
            endpoint.signing_region or self.region,
        )
        try:
            signer.add_auth(aws_request)
        except NoCredentialsError as e:
            raise ServiceClientError(
                CoreErrors.CLIENT_SIGNING_FAILURE, "Unable to sign request: no credentials", operation=operation_name
            ) from e

    def _parse(self, response: httpx.Response, operation_model: OperationModel) -> dict[str, Any]:
        response_dict = {
            "headers": dict(response.headers.items()),
            "status_code": response.status_code,
            "body": response.content,
            "context": {"operation_name": operation_model.name},
        }
        return self._parser.parse(response_dict, operation_model.output_shape)

    def generate_presigned_url(
        self,
        operation_name: str,
        params: Mapping[str, Any],
        endpoint: Endpoint,
        region: str,
        extra_params: Mapping[str, str] | None = None,
        expires_in: int = 3600,
        http_method: HttpMethod = HttpMethod.GET,
        signing_name: str | None = None,
    ) -> str:
        """Build a SigV4 query-signed URL carrying a serialized request.

        Args:
            operation_name: Operation the URL invokes
            params: Request members
            endpoint: Endpoint the URL points at
            region: Region the signature is scoped to
            extra_params: Query parameters added after serialization
            expires_in: Lifetime of the signature in seconds
            http_method: Method the URL is signed for
            signing_name: SigV4 service name; the endpoint's when omitted

        Returns:
            The presigned URL
        """
        request_dict = self.serialize(operation_name, params)
        body = request_dict.get("body")
        if not isinstance(body, Mapping):
            raise ServiceClientError(
                CoreErrors.INVALID_ACTION,
                f"{self.service_model.protocol} requests cannot be presigned",
                operation=operation_name,
            )
        query = dict(body)
        query.update(extra_params or {})
        url = f"{join_url(endpoint.url, request_dict.get('url_path', '/'))}?{percent_encode_sequence(query)}"
        signing_name = signing_name or endpoint.signing_name or self.signing_name
        return self.presign_url(url, http_method, region, signing_name, expires_in)

    def presign_url(self, url: str, http_method: HttpMethod, region: str, signing_name: str, expires_in: int) -> str:
        """Add SigV4 query authentication to a URL."""
        aws_request = AWSRequest(method=http_method.value, url=url)
        try:
            SigV4QueryAuth(self.credentials, signing_name, region, expires=expires_in).add_auth(aws_request)
        except NoCredentialsError as e:
            raise ServiceClientError(CoreErrors.CLIENT_SIGNING_FAILURE, "Unable to presign URL: no credentials") from e
        return aws_request.url
