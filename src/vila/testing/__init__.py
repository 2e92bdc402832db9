"""Testing utilities for clients built on vila.

Example:
    ```python
    import httpx

    from vila import Client
    from vila.testing import RecordingRequestLogger, json_handler


    async def test_greeting():
        recorder = RecordingRequestLogger()
        transport = httpx.MockTransport(json_handler({"/hello": {"message": "Hello, world!"}}))
        async with Client("https://api.test", transport=transport, request_logger=recorder) as client:
            await client.send(SayHello(name="world"))
        assert recorder.requests[0].url.params["name"] == "world"
    ```
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx


class RecordingRequestLogger:
    """Request logger that keeps every request it sees."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def log_request(self, request: httpx.Request) -> None:
        self.requests.append(request)


@dataclass
class RecordingProgressReporter:
    """Progress reporter that records updates and the final finish call."""

    updates: list[tuple[int, int | None]] = field(default_factory=list)
    finished: list[tuple[int, int | None, bool]] = field(default_factory=list)

    def update(self, position: int, total: int | None) -> None:
        self.updates.append((position, total))

    def finish(self, position: int, total: int | None, *, completed: bool) -> None:
        self.finished.append((position, total, completed))


def json_handler(routes: Mapping[str, Any], status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    """Build an ``httpx.MockTransport`` handler serving JSON bodies by URL path.

    Unknown paths get a 404 with an empty body.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path not in routes:
            return httpx.Response(404)
        return httpx.Response(status_code, json=routes[request.url.path])

    return handler


__all__ = ["RecordingProgressReporter", "RecordingRequestLogger", "json_handler"]
