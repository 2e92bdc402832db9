"""Conversion of non-success HTTP responses into API errors."""

import httpx

from vila.errors.exceptions import (
    APIError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)
from vila.errors.models import ProblemDetail

STATUS_EXCEPTIONS: dict[int, type[APIError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}


def _exception_class(status_code: int) -> type[APIError]:
    if status_code in STATUS_EXCEPTIONS:
        return STATUS_EXCEPTIONS[status_code]
    if 400 <= status_code < 500:
        return ClientError
    if 500 <= status_code < 600:
        return ServerError
    return APIError


def _fallback_message(status_code: int, body: str) -> str:
    if 400 <= status_code < 500:
        prefix = "Invalid request"
    elif 500 <= status_code < 600:
        prefix = "Server error"
    else:
        prefix = "Unexpected response"
    return f"{prefix}. Received status {status_code}. Message: {body[:200]}"


def _parse_retry_after(response: httpx.Response) -> int | None:
    try:
        return int(response.headers["retry-after"])
    except (KeyError, ValueError, TypeError):
        return None


def error_for_response(response: httpx.Response) -> APIError | None:
    """Build the API error matching a response, or None for 2xx statuses.

    The response body must already be read. RFC 7807 problem details are used
    for the message when present, otherwise the status and body text are.
    """
    if response.is_success:
        return None

    status_code = response.status_code
    body = response.text
    problem_detail = ProblemDetail.from_response(response)
    exc_class = _exception_class(status_code)

    if problem_detail:
        message = problem_detail.to_exception_message()
    else:
        message = _fallback_message(status_code, body)

    common = {
        "status_code": status_code,
        "body": body,
        "response": response,
        "problem_detail": problem_detail,
    }

    if exc_class is RateLimitError:
        return RateLimitError(message, retry_after=_parse_retry_after(response), **common)

    if exc_class is ValidationError:
        validation_errors = None
        if problem_detail and problem_detail.extensions:
            # Explicit key check so an empty "errors" list is kept
            if "errors" in problem_detail.extensions:
                validation_errors = problem_detail.extensions["errors"]
            else:
                validation_errors = problem_detail.extensions.get("validation_errors")
        return ValidationError(message, validation_errors=validation_errors, **common)

    return exc_class(message, **common)


def raise_for_status(response: httpx.Response) -> None:
    """Raise the matching APIError subclass for a non-success response."""
    error = error_for_response(response)
    if error is not None:
        raise error
