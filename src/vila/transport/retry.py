"""Opt-in retry transport.

The client never retries on its own: every failure reaches the caller as a
typed error. Applications that want retries wrap their transport explicitly
and decide what is safe to repeat through a ``RetryPolicy``.

| Condition | Retried when | Methods |
|-----------|--------------|---------|
| 429 Too Many Requests | ``retry_on_client_error`` | all (server did not process it) |
| other 4xx | ``retry_on_client_error`` | idempotent only |
| 502, 503, 504 | ``retry_on_server_error`` | idempotent only |
| network error / timeout | ``retry_on_transport_error`` | idempotent only |

Example:
    ```python
    import httpx

    from vila import Client
    from vila.transport import RetryPolicy, RetryTransport

    transport = RetryTransport(
        wrapped_transport=httpx.AsyncHTTPTransport(),
        policy=RetryPolicy(max_retries=5, retry_on_client_error=True),
    )
    client = Client("https://api.example.com", transport=transport)
    ```
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """When and how long to wait before repeating a request.

    Attributes:
        max_retries: Retries after the first attempt.
        jitter: Randomize each delay between half and the full backoff.
        retry_on_client_error: Retry 4xx responses (429 for every method).
        retry_on_server_error: Retry ``server_error_codes`` for idempotent methods.
        retry_on_transport_error: Retry network errors for idempotent methods.
        backoff: Delay before the first retry, doubled for every further one.
        max_backoff: Upper bound for any delay, including Retry-After.
    """

    max_retries: int = 3
    jitter: bool = True
    retry_on_client_error: bool = False
    retry_on_server_error: bool = True
    retry_on_transport_error: bool = True
    backoff: float = 1.0
    max_backoff: float = 60.0
    server_error_codes: frozenset[int] = frozenset([502, 503, 504])

    # Idempotent HTTP methods (per RFC 7231)
    IDEMPOTENT_METHODS = frozenset(["HEAD", "GET", "PUT", "DELETE", "OPTIONS", "TRACE"])

    def backoff_delay(self, retry_number: int) -> float:
        """Exponential delay for a 1-indexed retry: backoff, 2*backoff, 4*backoff, ..."""
        delay = min(self.backoff * (2 ** (retry_number - 1)), self.max_backoff)
        if self.jitter:
            delay = random.uniform(delay / 2, delay)
        return delay


class RetryTransport(httpx.AsyncBaseTransport):
    """Transport wrapper that repeats failed exchanges according to a policy."""

    def __init__(
        self,
        *,
        wrapped_transport: httpx.AsyncBaseTransport,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.policy = policy or RetryPolicy()

    async def __aenter__(self):
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        retries = 0

        while True:
            try:
                response = await self._wrapped_transport.handle_async_request(request)
            except httpx.TransportError as e:
                if not self._may_retry_transport_error(request, retries):
                    raise
                retries += 1
                delay = self.policy.backoff_delay(retries)
                logger.warning(
                    f"Request {request.method} {request.url} failed with {e!r}, "
                    f"retrying in {delay:.2f}s (attempt {retries}/{self.policy.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            delay = self._retry_delay(request, response, retries)
            if delay is None:
                return response

            retries += 1
            logger.warning(
                f"Request {request.method} {request.url} failed with {response.status_code}, "
                f"retrying in {delay:.2f}s (attempt {retries}/{self.policy.max_retries})"
            )
            await response.aclose()
            await asyncio.sleep(delay)

    def _may_retry_transport_error(self, request: httpx.Request, retries: int) -> bool:
        return (
            self.policy.retry_on_transport_error
            and retries < self.policy.max_retries
            and request.method in self.policy.IDEMPOTENT_METHODS
        )

    def _retry_delay(self, request: httpx.Request, response: httpx.Response, retries: int) -> float | None:
        """Delay before retrying ``response``, or None if it is final."""
        if retries >= self.policy.max_retries:
            return None

        status = response.status_code
        idempotent = request.method in self.policy.IDEMPOTENT_METHODS

        if status == 429 and self.policy.retry_on_client_error:
            retry_after = self._parse_retry_after(response)
            return retry_after if retry_after is not None else self.policy.backoff_delay(retries + 1)

        if 400 <= status < 500 and self.policy.retry_on_client_error and idempotent:
            return self.policy.backoff_delay(retries + 1)

        if status in self.policy.server_error_codes and self.policy.retry_on_server_error and idempotent:
            return self.policy.backoff_delay(retries + 1)

        return None

    def _parse_retry_after(self, response: httpx.Response) -> float | None:
        """Parse a Retry-After header given as delay-seconds or HTTP-date.

        Negative values and dates in the past are ignored.
        """
        retry_after = response.headers.get("Retry-After")
        if not retry_after:
            return None

        try:
            delay = float(int(retry_after))
        except ValueError:
            try:
                delay = (parsedate_to_datetime(retry_after) - datetime.now(UTC)).total_seconds()
            except (ValueError, TypeError):
                return None

        if delay < 0:
            return None
        return min(delay, self.policy.max_backoff)
