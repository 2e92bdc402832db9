"""Pagination through one or more URL path segments.

Page data maps a zero-based path segment index to its new value. For
``/nested/page`` the segments are ``nested`` (0) and ``page`` (1), so
``{2: "3"}`` requests ``/nested/page/3``. Indexes count from the root of the
full URL path, including any path prefix in the client's base URL.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from vila.errors import PaginationError
from vila.pagination.base import PageState


def _default_to_path(data: Any) -> Mapping[int, Any]:
    if isinstance(data, Mapping):
        return data
    to_path = getattr(data, "to_path", None)
    if callable(to_path):
        return to_path()
    raise PaginationError(
        f"Cannot derive path segments from {type(data).__name__}; "
        "return a mapping, define to_path(), or pass to_path= to PathPaginator"
    )


@dataclass(frozen=True)
class PathModifier:
    """Replace or append URL path segments.

    Indexes inside the current path replace that segment; larger indexes are
    appended in ascending order.
    """

    data: dict[int, str]

    def modify_request(self, request: httpx.Request) -> httpx.Request:
        raw_path = request.url.raw_path.decode("ascii").partition("?")[0]
        segments = raw_path.split("/")[1:] if raw_path.startswith("/") else raw_path.split("/")

        replaced = [quote(self.data[i], safe="") if i in self.data else segment for i, segment in enumerate(segments)]
        appended = [quote(self.data[i], safe="") for i in sorted(self.data) if i >= len(segments)]

        request.url = request.url.copy_with(path="/" + "/".join(replaced + appended))
        return request


@dataclass(frozen=True)
class PathPaginator:
    """Paginator that encodes the next page in the URL path.

    Args:
        next_page: ``(previous_data, response) -> next_data``; return None to stop.
            Must be a pure function of its arguments.
        to_path: Converts page data into ``{segment_index: value}``.
            Defaults to using mappings as-is or calling ``data.to_path()``.
    """

    next_page: Callable[[Any, Any], Any]
    to_path: Callable[[Any], Mapping[int, Any]] | None = None

    def next(self, prev: Any, response: Any) -> PageState:
        return PageState.following(self.next_page(prev, response))

    def modifier(self, data: Any) -> PathModifier:
        mapping = (self.to_path or _default_to_path)(data)
        if not isinstance(mapping, Mapping):
            raise PaginationError(f"Path pagination data must be a mapping, got {type(mapping).__name__}")
        segments = {}
        for index, value in mapping.items():
            if not isinstance(index, int) or index < 0:
                raise PaginationError(f"Path segment index must be a non-negative integer, got {index!r}")
            segments[index] = str(value)
        return PathModifier(segments)
