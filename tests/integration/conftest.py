"""
Integration test helper utilities.

Shared fixtures for HTTP and subprocess tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from shellpipe.transport import close_default_client


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it handles, with its body read."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._respond = handler or (lambda request: httpx.Response(200, text="ok"))
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self._respond(request)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    """A transport answering 200 "ok" to everything."""
    return RecordingTransport()


@pytest.fixture
def recording_client(recording_transport: RecordingTransport) -> Iterator[httpx.Client]:
    """An httpx client backed by the recording transport."""
    with httpx.Client(transport=recording_transport) as client:
        yield client


@pytest.fixture(autouse=True)
def _fresh_default_client() -> Iterator[None]:
    """Make every test build its own default client."""
    close_default_client()
    yield
    close_default_client()
