"""Typed request descriptors.

A request descriptor states everything the client needs for one API call: the
HTTP method, the endpoint relative to the client's base URL, extra headers,
the data to send and the type the response body decodes into.

Example:
    ```python
    from dataclasses import dataclass

    from pydantic import BaseModel

    from vila import Request, RequestData


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
    ```
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

ResponseT = TypeVar("ResponseT")


class DataKind(str, Enum):
    """How request data is attached to the outgoing request."""

    EMPTY = "empty"
    FORM = "form"
    JSON = "json"
    QUERY = "query"


@dataclass(frozen=True)
class RequestData:
    """Additional data sent along with a request.

    Values may be mappings, dataclasses or pydantic models. Query and form
    values should be flat; ``None`` fields are left out of both.
    """

    kind: DataKind = DataKind.EMPTY
    value: Any = None

    @classmethod
    def empty(cls) -> "RequestData":
        return cls()

    @classmethod
    def form(cls, value: Any) -> "RequestData":
        return cls(DataKind.FORM, value)

    @classmethod
    def json(cls, value: Any) -> "RequestData":
        return cls(DataKind.JSON, value)

    @classmethod
    def query(cls, value: Any) -> "RequestData":
        return cls(DataKind.QUERY, value)


@dataclass(frozen=True)
class EmptyResponse:
    """Response type for endpoints whose body carries nothing of interest.

    Any body, including none at all, decodes to an ``EmptyResponse``.
    """


class Request(ABC, Generic[ResponseT]):
    """Base class for request descriptors.

    Subclasses set ``response_type`` (any type pydantic can validate) and
    ``method``, and implement ``endpoint``. Concrete requests should be
    immutable, typically frozen dataclasses.
    """

    method: ClassVar[str] = "GET"
    response_type: ClassVar[Any] = EmptyResponse

    @abstractmethod
    def endpoint(self) -> str:
        """Path of the resource, relative to the client's base URL."""

    def headers(self) -> Mapping[str, str]:
        """Extra headers for this request.

        Authentication headers belong on the client's authenticator instead.
        """
        return {}

    def data(self) -> RequestData:
        return RequestData.empty()
