"""vila - toolkit for building strongly-typed REST API clients.

The library provides:
- Typed request descriptors with query, form and JSON data
- Pluggable authentication (basic, bearer, query, header, custom)
- Typed response decoding with pydantic
- Pagination through path segments or query parameters, with progress reporting
- One error taxonomy for transport, decoding and API failures

Example:
    ```python
    from dataclasses import dataclass

    from pydantic import BaseModel

    from vila import Client, Request, RequestData


    class Greeting(BaseModel):
        message: str


    @dataclass(frozen=True)
    class SayHello(Request[Greeting]):
        response_type = Greeting

        name: str

        def endpoint(self) -> str:
            return "/hello"

        def data(self) -> RequestData:
            return RequestData.query({"name": self.name})


    async with Client("https://api.example.com").bearer_auth(token) as client:
        greeting = await client.send(SayHello(name="world"))
    ```
"""

from vila.client import Client
from vila.config import ClientConfig
from vila.errors import (
    APIError,
    ClientError,
    DeserializationError,
    ErrorKind,
    PaginationError,
    RequestBuildError,
    ServerError,
    TransportError,
    VilaError,
)
from vila.pagination import PaginatedRequest
from vila.request import DataKind, EmptyResponse, Request, RequestData

__version__ = "3.1.0"

__all__ = [
    "APIError",
    "Client",
    "ClientConfig",
    "ClientError",
    "DataKind",
    "DeserializationError",
    "EmptyResponse",
    "ErrorKind",
    "PaginatedRequest",
    "PaginationError",
    "Request",
    "RequestBuildError",
    "RequestData",
    "ServerError",
    "TransportError",
    "VilaError",
    "__version__",
]
