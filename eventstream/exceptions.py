"""Base exceptions with user-ready messages.

The business exceptions carry messages that can be returned to HTTP clients
as-is. Stream exceptions signal caller errors against a session or transport.
"""


class ConfigurationError(Exception):
    """Raised when application configuration is invalid."""

    pass


class BusinessLogicException(Exception):
    """Base exception class for business logic errors.

    All business logic exceptions include user-ready messages that can be
    displayed directly in the UI without client-side message construction.
    """

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class RecordNotFoundException(BusinessLogicException):
    """Exception raised when a requested record is not found."""

    def __init__(self, resource_type: str, identifier: str | int) -> None:
        message = f"{resource_type} {identifier} was not found"
        super().__init__(message, error_code="RECORD_NOT_FOUND")


class RouteNotAvailableException(BusinessLogicException):
    """Exception raised when accessing endpoints that are disabled by configuration."""

    def __init__(self, message: str = "This endpoint is disabled on this server") -> None:
        super().__init__(message, error_code="ROUTE_NOT_AVAILABLE")


# --- Stream exceptions ---


class StreamError(RuntimeError):
    """Base class for misuse of an event stream."""


class StreamEndedError(StreamError):
    """Raised when writing to a stream that has already ended."""

    def __init__(self, connection_id: str | None = None):
        detail = "write after end" if connection_id is None else f"write after end (id={connection_id})"
        super().__init__(detail)
        self.connection_id = connection_id


class HeadersAlreadySentError(StreamError):
    """Raised when the response head is written a second time."""

    def __init__(self, status: int):
        super().__init__(f"response head already sent with status {status}")
        self.status = status


class InvalidFieldError(ValueError):
    """Raised when a field value cannot be framed on a single SSE line."""

    def __init__(self, field: str, value: str):
        super().__init__(f"{field} must not contain line breaks: {value!r}")
        self.field = field
        self.value = value
