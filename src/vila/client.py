"""The client that dispatches request descriptors.

Example:
    ```python
    from vila import Client
    from vila.auth import BearerAuth

    async with Client("https://api.example.com", authenticator=BearerAuth(token)) as client:
        greeting = await client.send(SayHello(name="world"))

        async for page in client.send_paginated(ListPassengers(size=50)):
            for passenger in page.data:
                print(passenger.name)
    ```
"""

import copy
import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from typing import Any, TypeVar

import httpx

from vila.auth import Authenticator, BasicAuth, BearerAuth, HeaderAuth, NoAuth, QueryAuth
from vila.config import DEFAULT_TIMEOUT, ClientConfig
from vila.diagnostics import LoggingRequestLogger, RequestLogger
from vila.errors import PaginationError, RequestBuildError, TransportError, VilaError, error_for_response
from vila.pagination import PageState, PaginatedRequest
from vila.progress import ProgressReporter
from vila.request import Request
from vila.serialization import decode_response, encode_request_data

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NOTHING_FETCHED = object()


def _already_fetched(data: Any, seen: set, last_fetched: Any) -> bool:
    """Check page data against earlier pages, recording it in ``seen`` when hashable."""
    try:
        if data in seen:
            return True
        seen.add(data)
        return False
    except TypeError:
        return data == last_fetched


class Client:
    """Send typed requests to a REST API.

    A client holds the base URL, default headers and authenticator, all
    read-only once constructed, plus an ``httpx.AsyncClient`` connection pool.
    It is safe to share between tasks; any number of requests and paginated
    sequences may be in flight at once.

    Clients derived with ``with_auth`` and the other auth helpers share the
    connection pool of the client they came from. Closing any of them closes
    the pool.

    Args:
        base_url: Root URL that request endpoints are appended to.
        authenticator: Credentials strategy (default: no authentication).
        headers: Headers sent with every request.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in
            tests or a ``RetryTransport``.
        request_logger: Receives every outgoing request (default: DEBUG log).
        follow_redirects: Whether redirects are followed.
    """

    def __init__(
        self,
        base_url: str,
        *,
        authenticator: Authenticator | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        request_logger: RequestLogger | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.authenticator: Authenticator = authenticator or NoAuth()
        self.headers = httpx.Headers(headers or {})
        self.request_logger: RequestLogger = request_logger or LoggingRequestLogger()
        self._http = httpx.AsyncClient(transport=transport, timeout=timeout, follow_redirects=follow_redirects)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        request_logger: RequestLogger | None = None,
    ) -> "Client":
        return cls(
            config.base_url,
            authenticator=config.authenticator,
            headers=config.headers,
            timeout=config.timeout,
            transport=transport,
            request_logger=request_logger,
            follow_redirects=config.follow_redirects,
        )

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def with_auth(self, authenticator: Authenticator) -> "Client":
        """Return a client identical to this one but using ``authenticator``."""
        derived = copy.copy(self)
        derived.authenticator = authenticator
        return derived

    def bearer_auth(self, token: str) -> "Client":
        return self.with_auth(BearerAuth(token))

    def basic_auth(self, username: str, password: str | None = None) -> "Client":
        return self.with_auth(BasicAuth(username, password))

    def query_auth(self, pairs) -> "Client":
        return self.with_auth(QueryAuth(pairs))

    def header_auth(self, pairs) -> "Client":
        return self.with_auth(HeaderAuth(pairs))

    def build_request(self, request: Request[Any]) -> httpx.Request:
        """Format a request descriptor into an authenticated ``httpx.Request``.

        Raises:
            RequestBuildError: If the URL, headers or data are invalid.
        """
        url = f"{self.base_url}/{request.endpoint().strip('/')}"

        try:
            headers = httpx.Headers(self.headers)
            headers.update(request.headers())
            http_request = self._http.build_request(
                request.method,
                url,
                headers=headers,
                **encode_request_data(request.data()),
            )
        except RequestBuildError:
            raise
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestBuildError(f"Cannot build {request.method} request for {url}: {e}") from e

        return self.authenticator.apply(http_request)

    async def _dispatch(self, http_request: httpx.Request, response_type: Any) -> Any:
        self.request_logger.log_request(http_request)

        try:
            response = await self._http.send(http_request)
        except httpx.RequestError as e:
            raise TransportError(
                f"{http_request.method} {http_request.url} failed: {e!r}", request=http_request
            ) from e

        logger.debug(f"Received {response.status_code} for {http_request.method} {http_request.url}")

        error = error_for_response(response)
        if error is not None:
            raise error
        return decode_response(response, response_type)

    async def send(self, request: Request[T]) -> T:
        """Send a single request and decode its response.

        Raises:
            TransportError: The request did not complete.
            APIError: The server returned a non-success status.
            DeserializationError: The body does not match ``request.response_type``.
            RequestBuildError: The request could not be built.
        """
        return await self._dispatch(self.build_request(request), request.response_type)

    async def send_all(
        self,
        requests: Iterable[Request[T]],
        *,
        return_exceptions: bool = True,
    ) -> AsyncIterator[T | VilaError]:
        """Send requests one after another, yielding one outcome per request in order.

        Each outcome is the decoded response or, when ``return_exceptions`` is
        set, the ``VilaError`` that request failed with. A failed request does
        not stop the ones after it.

        Args:
            requests: Request descriptors to send.
            return_exceptions: Yield failures in place (default). When False the
                first failure is raised and later requests are not sent.
        """
        for request in requests:
            outcome: T | VilaError
            try:
                outcome = await self.send(request)
            except VilaError as e:
                if not return_exceptions:
                    raise
                logger.debug(f"Request to {request.endpoint()} failed: {e.kind.value}")
                outcome = e
            yield outcome

    async def send_paginated(
        self,
        request: PaginatedRequest[T],
        *,
        progress: ProgressReporter | None = None,
    ) -> AsyncIterator[T]:
        """Fetch every page of a paginated request, yielding each decoded page.

        Pages are fetched strictly in sequence: the next request is only built
        once the previous response is decoded and the paginator has decided.
        A failure is raised at the page where it happens; earlier pages have
        already been yielded.

        Args:
            request: The paginated request descriptor.
            progress: Optional reporter, updated once per page and finished
                exactly once when the sequence stops.

        Raises:
            PaginationError: The paginator asked for a page already fetched in
                this sequence. Unhashable page data is only checked against
                the page fetched just before.
        """
        paginator = request.paginator()
        state = PageState.start(request.initial_page())
        seen: set = set()
        last_fetched: Any = _NOTHING_FETCHED
        position = 0
        total = None
        completed = False

        try:
            while not state.is_end:
                if state.data is not None and _already_fetched(state.data, seen, last_fetched):
                    raise PaginationError(f"Paginator requested page {state.data!r} again")
                last_fetched = state.data

                http_request = self.build_request(request)
                if state.data is not None:
                    http_request = paginator.modifier(state.data).modify_request(http_request)

                page = await self._dispatch(http_request, request.response_type)
                position += 1
                total = request.total_pages(page)
                state = paginator.next(state.data, page)
                logger.debug(f"Fetched page {position} of {request.endpoint()}, next state: {state.kind.value}")

                if progress is not None:
                    progress.update(position, total)
                yield page
            completed = True
        finally:
            if progress is not None:
                progress.finish(position, total, completed=completed)
