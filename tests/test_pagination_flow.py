"""Tests for fetching paginated requests through the client."""

import asyncio
import contextlib
from dataclasses import dataclass

import httpx
import pytest
from pydantic import BaseModel

from vila import PaginatedRequest, PaginationError, RequestData, ServerError, TransportError
from vila.pagination import PathPaginator, QueryPaginator
from vila.testing import RecordingProgressReporter

LAST_PAGE = 2


class Page(BaseModel):
    data: str
    next_page: int | None = None


def next_from_response(prev, response: Page):
    return response.next_page


@dataclass(frozen=True)
class ListItems(PaginatedRequest[Page]):
    response_type = Page

    size: int = 10
    page: int | None = None

    def endpoint(self) -> str:
        return "/items"

    def data(self) -> RequestData:
        return RequestData.query(self)

    def initial_page(self):
        return self.page

    def paginator(self) -> QueryPaginator:
        return QueryPaginator(next_from_response, to_query=lambda page: {"page": page})


@dataclass(frozen=True)
class ListCountedItems(ListItems):
    def total_pages(self, response: Page) -> int | None:
        return LAST_PAGE + 1


@dataclass(frozen=True)
class ListNested(PaginatedRequest[Page]):
    response_type = Page

    def endpoint(self) -> str:
        return "/nested/page"

    def paginator(self) -> PathPaginator:
        return PathPaginator(next_from_response, to_path=lambda page: {2: page})


def page_body(page: int) -> dict:
    return {"data": f"page {page}", "next_page": page + 1 if page < LAST_PAGE else None}


def query_pages(seen: list, fail_on: int | None = None):
    """Serve pages 0..LAST_PAGE selected by the ``page`` query parameter."""

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        page = int(request.url.params.get("page", "0"))
        if page == fail_on:
            return httpx.Response(500, text="page unavailable")
        return httpx.Response(200, json=page_body(page))

    return handler


def path_pages(seen: list):
    """Serve pages 0..LAST_PAGE selected by a third path segment."""

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        segments = request.url.path.strip("/").split("/")
        page = int(segments[2]) if len(segments) > 2 else 0
        return httpx.Response(200, json=page_body(page))

    return handler


async def collect(pages) -> list:
    return [page async for page in pages]


class TestQueryPagination:
    async def test_fetches_every_page_in_order(self, make_client):
        seen = []
        client = make_client(query_pages(seen))

        pages = await collect(client.send_paginated(ListItems()))

        assert [page.data for page in pages] == ["page 0", "page 1", "page 2"]
        assert len(seen) == LAST_PAGE + 1
        assert "page" not in seen[0].url.params
        assert [request.url.params.get("page") for request in seen[1:]] == ["1", "2"]
        assert all(request.url.params["size"] == "10" for request in seen)

    async def test_paginator_overwrites_page_from_request_data(self, make_client):
        seen = []
        client = make_client(query_pages(seen))

        pages = await collect(client.send_paginated(ListItems(page=0)))

        assert len(pages) == 3
        assert seen[0].url.params.get_list("page") == ["0"]
        assert seen[1].url.params.get_list("page") == ["1"]
        assert seen[2].url.params.get_list("page") == ["2"]

    async def test_initial_page(self, make_client):
        seen = []
        client = make_client(query_pages(seen))

        pages = await collect(client.send_paginated(ListItems(page=1)))

        assert [page.data for page in pages] == ["page 1", "page 2"]
        assert seen[0].url.params["page"] == "1"

    async def test_single_page(self, make_client):
        seen = []
        client = make_client(query_pages(seen))

        pages = await collect(client.send_paginated(ListItems(page=LAST_PAGE)))

        assert [page.data for page in pages] == ["page 2"]
        assert len(seen) == 1

    async def test_authentication_applied_to_every_page(self, make_client):
        seen = []
        client = make_client(query_pages(seen)).query_auth({"key": "k"})

        await collect(client.send_paginated(ListItems()))

        assert all(request.url.params["key"] == "k" for request in seen)


class TestPathPagination:
    async def test_appends_then_replaces_segment(self, make_client):
        seen = []
        client = make_client(path_pages(seen))

        pages = await collect(client.send_paginated(ListNested()))

        assert [page.data for page in pages] == ["page 0", "page 1", "page 2"]
        assert [request.url.path for request in seen] == ["/nested/page", "/nested/page/1", "/nested/page/2"]


class TestConcurrency:
    async def test_concurrent_sequences_match_sequential(self, make_client):
        client = make_client(query_pages([]))

        sequential = [await collect(client.send_paginated(ListItems())) for _ in range(3)]
        concurrent = await asyncio.gather(*(collect(client.send_paginated(ListItems())) for _ in range(3)))

        assert list(concurrent) == sequential

    async def test_one_request_paginated_twice(self, make_client):
        client = make_client(query_pages([]))
        request = ListItems()

        first, second = await asyncio.gather(
            collect(client.send_paginated(request)),
            collect(client.send_paginated(request)),
        )

        assert first == second


class TestFailures:
    async def test_error_on_later_page_keeps_earlier_pages(self, make_client):
        seen = []
        client = make_client(query_pages(seen, fail_on=1))
        received = []

        with pytest.raises(ServerError) as exc_info:
            async for page in client.send_paginated(ListItems()):
                received.append(page)

        assert [page.data for page in received] == ["page 0"]
        assert exc_info.value.body == "page unavailable"
        assert len(seen) == 2

    async def test_transport_error_on_later_page(self, make_client):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if len(seen) == 2:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json=page_body(0))

        client = make_client(handler)
        received = []

        with pytest.raises(TransportError):
            async for page in client.send_paginated(ListItems()):
                received.append(page)

        assert len(received) == 1

    async def test_repeated_page_stops_sequence(self, make_client):
        seen = []
        client = make_client(lambda request: seen.append(request) or httpx.Response(200, json=page_body(0)))
        received = []

        with pytest.raises(PaginationError):
            async for page in client.send_paginated(ListItems()):
                received.append(page)

        assert len(received) == 2
        assert len(seen) == 2

    async def test_page_cycle_stops_sequence(self, make_client):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            page = int(request.url.params.get("page", "0"))
            return httpx.Response(200, json={"data": f"page {page}", "next_page": 2 if page == 1 else 1})

        client = make_client(handler)
        received = []

        with pytest.raises(PaginationError) as exc_info:
            async for page in client.send_paginated(ListItems()):
                received.append(page)

        assert [page.data for page in received] == ["page 0", "page 1", "page 2"]
        assert [request.url.params.get("page") for request in seen] == [None, "1", "2"]
        assert "page 1 again" in str(exc_info.value)

    async def test_repeated_unhashable_page_data(self, make_client):
        @dataclass(frozen=True)
        class ListByCursor(ListItems):
            def paginator(self) -> QueryPaginator:
                return QueryPaginator(lambda prev, response: {"cursor": "same"})

        seen = []
        client = make_client(lambda request: seen.append(request) or httpx.Response(200, json=page_body(0)))
        received = []

        with pytest.raises(PaginationError):
            async for page in client.send_paginated(ListByCursor()):
                received.append(page)

        assert len(received) == 2
        assert seen[1].url.params["cursor"] == "same"

    async def test_unconvertible_page_data(self, make_client):
        @dataclass(frozen=True)
        class BadPaginator(ListItems):
            def paginator(self) -> QueryPaginator:
                return QueryPaginator(next_from_response)

        client = make_client(query_pages([]))
        received = []

        with pytest.raises(PaginationError):
            async for page in client.send_paginated(BadPaginator()):
                received.append(page)

        assert len(received) == 1


class TestProgress:
    async def test_updates_once_per_page_and_finishes(self, make_client):
        client = make_client(query_pages([]))
        reporter = RecordingProgressReporter()

        with_progress = await collect(client.send_paginated(ListItems(), progress=reporter))
        without_progress = await collect(client.send_paginated(ListItems()))

        assert reporter.updates == [(1, None), (2, None), (3, None)]
        assert reporter.finished == [(3, None, True)]
        assert with_progress == without_progress

    async def test_known_total(self, make_client):
        client = make_client(query_pages([]))
        reporter = RecordingProgressReporter()

        await collect(client.send_paginated(ListCountedItems(), progress=reporter))

        assert reporter.updates == [(1, 3), (2, 3), (3, 3)]
        assert reporter.finished == [(3, 3, True)]

    async def test_failure_finishes_incomplete(self, make_client):
        client = make_client(query_pages([], fail_on=1))
        reporter = RecordingProgressReporter()

        with pytest.raises(ServerError):
            await collect(client.send_paginated(ListItems(), progress=reporter))

        assert reporter.updates == [(1, None)]
        assert reporter.finished == [(1, None, False)]

    async def test_failure_on_first_page(self, make_client):
        client = make_client(query_pages([], fail_on=0))
        reporter = RecordingProgressReporter()

        with pytest.raises(ServerError):
            await collect(client.send_paginated(ListItems(), progress=reporter))

        assert reporter.updates == []
        assert reporter.finished == [(0, None, False)]

    async def test_early_close_finishes_incomplete(self, make_client):
        client = make_client(query_pages([]))
        reporter = RecordingProgressReporter()

        async with contextlib.aclosing(client.send_paginated(ListItems(), progress=reporter)) as pages:
            async for _ in pages:
                break

        assert reporter.updates == [(1, None)]
        assert reporter.finished == [(1, None, False)]
