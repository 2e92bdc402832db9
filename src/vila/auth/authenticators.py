"""Authentication strategies applied to outgoing requests.

An authenticator receives the fully built ``httpx.Request`` right before it is
dispatched and returns it with credentials attached. One authenticator is
shared by every request a client sends, possibly from many tasks at once, so
implementations must not keep mutable state. The built-in variants are frozen
dataclasses.

Example:
    ```python
    from vila import Client
    from vila.auth import BasicAuth, BearerAuth

    client = Client("https://api.example.com", authenticator=BearerAuth("s3cr3t"))

    # Username only: sends "Authorization: Basic base64('user:')"
    client = client.with_auth(BasicAuth("user"))

    # Token from API_TOKEN in the environment or a .env file
    client = client.with_auth(BearerAuth.from_env("API_TOKEN"))
    ```
"""

import base64
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from vila.auth.credentials import CredentialResolver


@runtime_checkable
class Authenticator(Protocol):
    """Anything that can attach credentials to a draft request."""

    def apply(self, request: httpx.Request) -> httpx.Request: ...


def _pairs(pairs: Mapping[str, str] | Sequence[tuple[str, str]]) -> tuple[tuple[str, str], ...]:
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    return tuple((str(key), str(value)) for key, value in items)


@dataclass(frozen=True)
class NoAuth:
    """Send requests without credentials."""

    def apply(self, request: httpx.Request) -> httpx.Request:
        return request


@dataclass(frozen=True)
class BasicAuth:
    """HTTP Basic authentication with an optional password.

    A missing password is encoded as an empty secret after the colon
    (``user:``), matching what servers expect for username-only Basic auth.
    """

    username: str
    password: str | None = None

    @classmethod
    def from_env(
        cls,
        username_var: str,
        password_var: str | None = None,
        *,
        resolver: CredentialResolver | None = None,
    ) -> "BasicAuth":
        """Resolve the username (required) and password (optional) from the environment."""
        resolver = resolver or CredentialResolver()
        username = resolver.resolve(env_var_name=username_var, required=True, mask_in_logs=False)
        password = resolver.resolve(env_var_name=password_var) if password_var else None
        return cls(username, password)

    def header_value(self) -> str:
        credentials = f"{self.username}:{self.password or ''}"
        return "Basic " + base64.b64encode(credentials.encode("utf-8")).decode("ascii")

    def apply(self, request: httpx.Request) -> httpx.Request:
        request.headers["Authorization"] = self.header_value()
        return request

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password={'***' if self.password else None})"


@dataclass(frozen=True)
class BearerAuth:
    """Bearer token authentication."""

    token: str

    @classmethod
    def from_env(cls, env_var_name: str, *, resolver: CredentialResolver | None = None) -> "BearerAuth":
        """Resolve the token from an environment variable or .env file."""
        resolver = resolver or CredentialResolver()
        return cls(resolver.resolve(env_var_name=env_var_name, required=True))

    def apply(self, request: httpx.Request) -> httpx.Request:
        request.headers["Authorization"] = f"Bearer {self.token}"
        return request

    def __repr__(self) -> str:
        return "BearerAuth(token=***)"


@dataclass(frozen=True)
class QueryAuth:
    """Credentials sent as query parameters, appended to any existing ones."""

    pairs: tuple[tuple[str, str], ...]

    def __init__(self, pairs: Mapping[str, str] | Sequence[tuple[str, str]]):
        object.__setattr__(self, "pairs", _pairs(pairs))

    def apply(self, request: httpx.Request) -> httpx.Request:
        params = list(request.url.params.multi_items()) + list(self.pairs)
        request.url = request.url.copy_with(params=params)
        return request

    def __repr__(self) -> str:
        return f"QueryAuth(keys={[key for key, _ in self.pairs]})"


@dataclass(frozen=True)
class HeaderAuth:
    """Credentials sent in custom headers, replacing headers of the same name."""

    pairs: tuple[tuple[str, str], ...]

    def __init__(self, pairs: Mapping[str, str] | Sequence[tuple[str, str]]):
        object.__setattr__(self, "pairs", _pairs(pairs))

    def apply(self, request: httpx.Request) -> httpx.Request:
        for name, value in self.pairs:
            request.headers[name] = value
        return request

    def __repr__(self) -> str:
        return f"HeaderAuth(headers={[name for name, _ in self.pairs]})"


@dataclass(frozen=True)
class CallableAuth:
    """Adapt a plain function into an authenticator.

    The function must be safe to call from concurrent tasks: it may read
    shared configuration but must not mutate captured state.
    """

    func: Callable[[httpx.Request], httpx.Request]

    def apply(self, request: httpx.Request) -> httpx.Request:
        return self.func(request)
