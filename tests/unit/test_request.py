"""Tests for request descriptors."""

import dataclasses
from dataclasses import dataclass

import pytest

from vila.request import DataKind, EmptyResponse, Request, RequestData


@dataclass(frozen=True)
class GetUser(Request[dict]):
    response_type = dict

    user_id: int

    def endpoint(self) -> str:
        return f"/users/{self.user_id}"


@dataclass(frozen=True)
class CreateUser(Request[EmptyResponse]):
    method = "POST"

    name: str

    def endpoint(self) -> str:
        return "/users"

    def headers(self):
        return {"X-Request-Source": "tests"}

    def data(self) -> RequestData:
        return RequestData.json(self)


@pytest.mark.unit
def test_request_defaults():
    """Test default method, headers, data and response type."""
    request = GetUser(user_id=7)

    assert request.method == "GET"
    assert request.endpoint() == "/users/7"
    assert request.headers() == {}
    assert request.data() == RequestData.empty()
    assert GetUser.response_type is dict


@pytest.mark.unit
def test_request_overrides():
    """Test that subclasses override method, headers and data."""
    request = CreateUser(name="User")

    assert request.method == "POST"
    assert request.headers() == {"X-Request-Source": "tests"}
    assert request.data().kind is DataKind.JSON
    assert request.data().value is request
    assert CreateUser.response_type is EmptyResponse


@pytest.mark.unit
def test_request_is_immutable():
    """Test that frozen request descriptors cannot be changed after construction."""
    request = GetUser(user_id=1)

    with pytest.raises(dataclasses.FrozenInstanceError):
        request.user_id = 2


@pytest.mark.unit
def test_request_requires_endpoint():
    """Test that Request cannot be instantiated without an endpoint."""

    class Incomplete(Request[dict]):
        pass

    with pytest.raises(TypeError):
        Incomplete()


@pytest.mark.unit
@pytest.mark.parametrize(
    ("factory", "kind"),
    [
        (RequestData.form, DataKind.FORM),
        (RequestData.json, DataKind.JSON),
        (RequestData.query, DataKind.QUERY),
    ],
)
def test_request_data_constructors(factory, kind):
    """Test that each constructor tags its value with the right kind."""
    data = factory({"name": "world"})

    assert data.kind is kind
    assert data.value == {"name": "world"}


@pytest.mark.unit
def test_empty_responses_are_equal():
    """Test that EmptyResponse carries no data."""
    assert EmptyResponse() == EmptyResponse()
