"""Constructs for wrapping paginated APIs."""

from vila.pagination.base import (
    PageState,
    PageStateKind,
    PaginatedRequest,
    Paginator,
    RequestModifier,
)
from vila.pagination.path import PathModifier, PathPaginator
from vila.pagination.query import QueryModifier, QueryPaginator

__all__ = [
    "PageState",
    "PageStateKind",
    "PaginatedRequest",
    "Paginator",
    "PathModifier",
    "PathPaginator",
    "QueryModifier",
    "QueryPaginator",
    "RequestModifier",
]
