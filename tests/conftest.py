"""Pytest configuration and shared fixtures for vila tests."""

import httpx
import pytest

from vila import Client
from vila.diagnostics import NullRequestLogger

BASE_URL = "https://api.test"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear test-related environment variables before each test.

    This prevents test pollution when testing credential and config resolution.
    """
    import os

    test_prefixes = ("TEST_", "API_", "CLIENT_", "VILA_", "MYAPI_")

    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in test_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
async def make_client():
    """Factory for clients whose requests are answered by an ``httpx.MockTransport`` handler."""
    clients = []

    def factory(handler, **kwargs) -> Client:
        kwargs.setdefault("request_logger", NullRequestLogger())
        client = Client(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
