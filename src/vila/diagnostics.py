"""Inspection of raw outgoing requests.

The client hands every request to a ``RequestLogger`` right before dispatch.
The default writes one DEBUG record through stdlib logging; tests or callers
that want silence pass ``NullRequestLogger()``.
"""

import logging
from typing import Protocol, runtime_checkable

import httpx

SENSITIVE_HEADERS: frozenset[str] = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})
MAX_LOGGED_BODY = 1000


@runtime_checkable
class RequestLogger(Protocol):
    """Receives each outgoing request. Must be safe to call from concurrent tasks."""

    def log_request(self, request: httpx.Request) -> None: ...


def masked_headers(request: httpx.Request, sensitive: frozenset[str] = SENSITIVE_HEADERS) -> dict[str, str]:
    """Request headers with credential values replaced by ``***``."""
    return {name: "***" if name.lower() in sensitive else value for name, value in request.headers.items()}


def _body_preview(request: httpx.Request) -> str:
    try:
        content = request.content
    except httpx.RequestNotRead:
        return "<stream>"
    if not content:
        return ""
    text = content.decode("utf-8", errors="replace")
    if len(text) > MAX_LOGGED_BODY:
        return text[:MAX_LOGGED_BODY] + "..."
    return text


class LoggingRequestLogger:
    """Write raw requests to a stdlib logger.

    Args:
        logger: Target logger (default: ``vila.diagnostics``).
        level: Log level for the records (default: DEBUG).
        sensitive_headers: Lower-case header names whose values are masked.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        level: int = logging.DEBUG,
        sensitive_headers: frozenset[str] = SENSITIVE_HEADERS,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self.sensitive_headers = sensitive_headers

    def log_request(self, request: httpx.Request) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        headers = masked_headers(request, self.sensitive_headers)
        self.logger.log(
            self.level,
            f"Sending request: {request.method} {request.url} headers={headers} body={_body_preview(request)!r}",
        )


class NullRequestLogger:
    """Discard request diagnostics."""

    def log_request(self, request: httpx.Request) -> None:
        return None
