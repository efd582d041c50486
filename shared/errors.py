"""Exceptions raised by the service clients."""

from shared.types import CoreErrors


class ServiceClientError(Exception):
    """A failed client operation, typed by its CoreErrors category."""

    def __init__(
        self,
        error_type: CoreErrors,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
        operation: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.error_code = error_code or error_type.value
        self.status_code = status_code
        self.request_id = request_id
        self.operation = operation
        self.retryable = retryable

    def __str__(self) -> str:
        prefix = f"{self.operation}: " if self.operation else ""
        return f"{prefix}{self.error_code}: {self.message}"


class EndpointResolutionError(ServiceClientError):
    """Raised when no endpoint can be resolved for the given parameters."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(CoreErrors.ENDPOINT_RESOLUTION_FAILURE, message, operation=operation)
