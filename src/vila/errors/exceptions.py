"""Exception hierarchy for request dispatch.

Every failure raised by the client belongs to exactly one ``ErrorKind``:

- ``TRANSPORT``: the request never produced an HTTP response (network, timeout)
- ``DESERIALIZATION``: the response body did not match the declared type
- ``API``: the server answered with a non-success status
- ``REQUEST``: the outgoing request could not be built
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from vila.errors.models import ProblemDetail


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    TRANSPORT = "transport"
    DESERIALIZATION = "deserialization"
    API = "api"
    REQUEST = "request"


class VilaError(Exception):
    """Base exception for everything the client raises."""

    kind: ErrorKind


class TransportError(VilaError):
    """The HTTP exchange failed before a response was received."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, request: "httpx.Request | None" = None):
        super().__init__(message)
        self.request = request


class DeserializationError(VilaError):
    """The response body could not be decoded into the declared type."""

    kind = ErrorKind.DESERIALIZATION

    def __init__(
        self,
        message: str,
        target_type: Any = None,
        body: str = "",
        response: "httpx.Response | None" = None,
        validation_error: Exception | None = None,
    ):
        super().__init__(message)
        self.target_type = target_type
        self.body = body
        self.response = response
        self.validation_error = validation_error


class RequestBuildError(VilaError):
    """The outgoing request could not be constructed."""

    kind = ErrorKind.REQUEST


class PaginationError(RequestBuildError):
    """Pagination data could not be applied to the next request."""

    pass


class APIError(VilaError):
    """Base exception for non-success API responses."""

    kind = ErrorKind.API

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        response: "httpx.Response | None" = None,
        problem_detail: "ProblemDetail | None" = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.response = response
        self.problem_detail = problem_detail


class ClientError(APIError):
    """4xx client errors."""

    pass


class BadRequestError(ClientError):
    """400 Bad Request."""

    pass


class UnauthorizedError(ClientError):
    """401 Unauthorized."""

    pass


class ForbiddenError(ClientError):
    """403 Forbidden."""

    pass


class NotFoundError(ClientError):
    """404 Not Found."""

    pass


class ConflictError(ClientError):
    """409 Conflict."""

    pass


class ValidationError(ClientError):
    """422 Unprocessable Entity (validation errors)."""

    def __init__(self, message: str, validation_errors: list[dict] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.validation_errors = validation_errors if validation_errors is not None else []


class RateLimitError(ClientError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(APIError):
    """5xx server errors."""

    pass
