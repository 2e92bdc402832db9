"""Pagination through one or more query parameters.

Example:
    ```python
    @dataclass(frozen=True)
    class ListPassengers(PaginatedRequest[PassengerPage]):
        response_type = PassengerPage

        size: int
        page: int | None = None

        def endpoint(self) -> str:
            return "/v1/passenger"

        def data(self) -> RequestData:
            return RequestData.query(self)

        def initial_page(self):
            return self.page

        def paginator(self) -> QueryPaginator:
            return QueryPaginator(
                lambda prev, res: None if prev == res.total_pages else (prev or 0) + 1,
                to_query=lambda page: {"page": page},
            )
    ```
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from vila.errors import PaginationError
from vila.pagination.base import PageState


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _default_to_query(data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    to_query = getattr(data, "to_query", None)
    if callable(to_query):
        return to_query()
    raise PaginationError(
        f"Cannot derive query parameters from {type(data).__name__}; "
        "return a mapping, define to_query(), or pass to_query= to QueryPaginator"
    )


@dataclass(frozen=True)
class QueryModifier:
    """Set query parameters on a request.

    Keys present in ``data`` replace every existing occurrence of that key;
    other parameters keep their order and values. New keys are appended.
    """

    data: dict[str, str]

    def modify_request(self, request: httpx.Request) -> httpx.Request:
        unchanged = [(key, value) for key, value in request.url.params.multi_items() if key not in self.data]
        request.url = request.url.copy_with(params=unchanged + list(self.data.items()))
        return request


@dataclass(frozen=True)
class QueryPaginator:
    """Paginator that encodes the next page as query parameters.

    Args:
        next_page: ``(previous_data, response) -> next_data``; return None to stop.
            Must be a pure function of its arguments.
        to_query: Converts page data into a mapping of query parameters.
            Defaults to using mappings as-is or calling ``data.to_query()``.
    """

    next_page: Callable[[Any, Any], Any]
    to_query: Callable[[Any], Mapping[str, Any]] | None = None

    def next(self, prev: Any, response: Any) -> PageState:
        return PageState.following(self.next_page(prev, response))

    def modifier(self, data: Any) -> QueryModifier:
        mapping = (self.to_query or _default_to_query)(data)
        if not isinstance(mapping, Mapping):
            raise PaginationError(f"Query pagination data must be a mapping, got {type(mapping).__name__}")
        return QueryModifier({str(key): _render(value) for key, value in mapping.items()})
