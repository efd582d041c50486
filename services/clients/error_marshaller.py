"""Map parsed AWS error responses onto CoreErrors."""

from typing import Any

from shared.errors import ServiceClientError
from shared.types import CoreErrors

_ERROR_CODES: dict[str, CoreErrors] = {
    "IncompleteSignature": CoreErrors.INCOMPLETE_SIGNATURE,
    "IncompleteSignatureException": CoreErrors.INCOMPLETE_SIGNATURE,
    "InternalFailure": CoreErrors.INTERNAL_FAILURE,
    "InternalServiceError": CoreErrors.INTERNAL_FAILURE,
    "InternalServiceException": CoreErrors.INTERNAL_FAILURE,
    "InternalError": CoreErrors.INTERNAL_FAILURE,
    "InvalidAction": CoreErrors.INVALID_ACTION,
    "InvalidClientTokenId": CoreErrors.INVALID_CLIENT_TOKEN_ID,
    "InvalidParameterCombination": CoreErrors.INVALID_PARAMETER_COMBINATION,
    "InvalidQueryParameter": CoreErrors.INVALID_QUERY_PARAMETER,
    "InvalidParameterValue": CoreErrors.INVALID_PARAMETER_VALUE,
    "MissingAction": CoreErrors.MISSING_ACTION,
    "MissingAuthenticationToken": CoreErrors.MISSING_AUTHENTICATION_TOKEN,
    "MissingParameter": CoreErrors.MISSING_PARAMETER,
    "OptInRequired": CoreErrors.OPT_IN_REQUIRED,
    "RequestExpired": CoreErrors.REQUEST_EXPIRED,
    "ServiceUnavailable": CoreErrors.SERVICE_UNAVAILABLE,
    "ServiceUnavailableException": CoreErrors.SERVICE_UNAVAILABLE,
    "Throttling": CoreErrors.THROTTLING,
    "ThrottlingException": CoreErrors.THROTTLING,
    "TooManyRequestsException": CoreErrors.THROTTLING,
    "RequestLimitExceeded": CoreErrors.THROTTLING,
    "ValidationError": CoreErrors.VALIDATION,
    "ValidationException": CoreErrors.VALIDATION,
    "AccessDenied": CoreErrors.ACCESS_DENIED,
    "AccessDeniedException": CoreErrors.ACCESS_DENIED,
    "ResourceNotFound": CoreErrors.RESOURCE_NOT_FOUND,
    "ResourceNotFoundException": CoreErrors.RESOURCE_NOT_FOUND,
    "UnrecognizedClient": CoreErrors.UNRECOGNIZED_CLIENT,
    "UnrecognizedClientException": CoreErrors.UNRECOGNIZED_CLIENT,
    "MalformedQueryString": CoreErrors.MALFORMED_QUERY_STRING,
    "SlowDown": CoreErrors.SLOW_DOWN,
    "RequestTimeTooSkewed": CoreErrors.REQUEST_TIME_TOO_SKEWED,
    "InvalidSignature": CoreErrors.INVALID_SIGNATURE,
    "InvalidSignatureException": CoreErrors.INVALID_SIGNATURE,
    "SignatureDoesNotMatch": CoreErrors.SIGNATURE_DOES_NOT_MATCH,
    "InvalidAccessKeyId": CoreErrors.INVALID_ACCESS_KEY_ID,
    "RequestTimeout": CoreErrors.REQUEST_TIMEOUT,
    "RequestTimeoutException": CoreErrors.REQUEST_TIMEOUT,
}

RETRYABLE_ERRORS = frozenset(
    {
        CoreErrors.INTERNAL_FAILURE,
        CoreErrors.SERVICE_UNAVAILABLE,
        CoreErrors.THROTTLING,
        CoreErrors.SLOW_DOWN,
        CoreErrors.REQUEST_TIMEOUT,
        CoreErrors.NETWORK_CONNECTION,
        CoreErrors.REQUEST_TIME_TOO_SKEWED,
    }
)


def find_error_type(error_code: str) -> CoreErrors:
    """Look up the CoreErrors category for a service error code."""
    # JSON protocols may send "namespace#Code"
    code = error_code.rsplit("#", 1)[-1]
    return _ERROR_CODES.get(code, CoreErrors.UNKNOWN)


def marshall_error(operation: str, status_code: int, parsed: dict[str, Any]) -> ServiceClientError:
    """Build a ServiceClientError from a parsed error response.

    Args:
        operation: Operation that failed
        status_code: HTTP status code of the response
        parsed: Output of the protocol parser, holding "Error" and "ResponseMetadata"

    Returns:
        The typed error
    """
    error = parsed.get("Error", {})
    error_code = str(error.get("Code") or "Unknown")
    message = str(error.get("Message") or f"HTTP {status_code}")
    error_type = find_error_type(error_code)
    retryable = error_type in RETRYABLE_ERRORS or status_code >= 500
    return ServiceClientError(
        error_type,
        message,
        error_code=error_code,
        status_code=status_code,
        request_id=parsed.get("ResponseMetadata", {}).get("RequestId"),
        operation=operation,
        retryable=retryable,
    )
