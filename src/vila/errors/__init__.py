"""Error taxonomy for request dispatch and RFC 7807 support."""

from vila.errors.exceptions import (
    APIError,
    BadRequestError,
    ClientError,
    ConflictError,
    DeserializationError,
    ErrorKind,
    ForbiddenError,
    NotFoundError,
    PaginationError,
    RateLimitError,
    RequestBuildError,
    ServerError,
    TransportError,
    UnauthorizedError,
    ValidationError,
    VilaError,
)
from vila.errors.handler import error_for_response, raise_for_status
from vila.errors.models import ProblemDetail

__all__ = [
    "APIError",
    "BadRequestError",
    "ClientError",
    "ConflictError",
    "DeserializationError",
    "ErrorKind",
    "ForbiddenError",
    "NotFoundError",
    "PaginationError",
    "ProblemDetail",
    "RateLimitError",
    "RequestBuildError",
    "ServerError",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
    "VilaError",
    "error_for_response",
    "raise_for_status",
]
