"""Core pagination types.

A paginated request names a paginator. After every page the paginator looks at
the previous page data and the typed response and returns the next
``PageState``: either ``next(data)``, whose data is turned into a
``RequestModifier`` for the following request, or ``end()``.

Paginators never hold per-sequence state. The previous page data is passed in
on every call, so a single paginator can drive any number of concurrent
sequences.
"""

from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

import httpx

from vila.request import Request, ResponseT

DataT = TypeVar("DataT")


class PageStateKind(str, Enum):
    START = "start"
    NEXT = "next"
    END = "end"


@dataclass(frozen=True)
class PageState(Generic[DataT]):
    """Position of a pagination sequence.

    ``start`` may carry an initial page; ``None`` means whatever page the API
    serves when no pagination data is sent.
    """

    kind: PageStateKind
    data: DataT | None = None

    @classmethod
    def start(cls, initial: DataT | None = None) -> "PageState[DataT]":
        return cls(PageStateKind.START, initial)

    @classmethod
    def next(cls, data: DataT) -> "PageState[DataT]":
        return cls(PageStateKind.NEXT, data)

    @classmethod
    def end(cls) -> "PageState[DataT]":
        return cls(PageStateKind.END)

    @classmethod
    def following(cls, data: DataT | None) -> "PageState[DataT]":
        """``next(data)`` when there is more to fetch, otherwise ``end()``."""
        return cls.end() if data is None else cls.next(data)

    @property
    def is_end(self) -> bool:
        return self.kind is PageStateKind.END


@runtime_checkable
class RequestModifier(Protocol):
    """Applies pagination data to an outgoing request."""

    def modify_request(self, request: httpx.Request) -> httpx.Request: ...


@runtime_checkable
class Paginator(Protocol):
    def next(self, prev: Any, response: Any) -> PageState: ...

    def modifier(self, data: Any) -> RequestModifier: ...


class PaginatedRequest(Request[ResponseT]):
    """A request whose responses span several pages."""

    @abstractmethod
    def paginator(self) -> Paginator:
        """Return the paginator driving this request."""

    def initial_page(self) -> Any | None:
        """Page data for the first request; None starts at the API's default page."""
        return None

    def total_pages(self, response: ResponseT) -> int | None:
        """Total number of pages if the response reveals it. Used for progress only."""
        return None
