"""
HTTP client capability and the shared default client.

Any object with ``send(request, *, stream)`` can serve HTTP stages; the
default is one ``httpx.Client`` shared by every pipe that was not given
its own.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

import httpx

from shellpipe.transport.config import HttpConfig


@runtime_checkable
class HttpClient(Protocol):
    """The one operation HTTP stages need from a client."""

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response: ...


_default_client: HttpClient | None = None
_default_config: HttpConfig | None = None
_lock = threading.Lock()


def get_http_config() -> HttpConfig:
    """Get the configuration, reading the environment on first use."""
    global _default_config
    with _lock:
        if _default_config is None:
            _default_config = HttpConfig.from_env()
        return _default_config


def create_client(config: HttpConfig | None = None) -> httpx.Client:
    """Create an httpx client from configuration."""
    config = config or get_http_config()
    return httpx.Client(
        timeout=config.to_httpx_timeout(),
        follow_redirects=config.follow_redirects,
        trust_env=config.trust_env,
        headers={"User-Agent": config.user_agent},
    )


def get_default_client() -> HttpClient:
    """Get the shared default client, creating it on first use."""
    global _default_client
    config = get_http_config()
    with _lock:
        if _default_client is None:
            _default_client = create_client(config)
        return _default_client


def set_default_client(client: HttpClient | None) -> None:
    """Replace the shared default client.

    The previous client is not closed.
    """
    global _default_client
    with _lock:
        _default_client = client


def close_default_client() -> None:
    """Close the shared default client; the next use creates a new one."""
    global _default_client, _default_config
    with _lock:
        client, _default_client = _default_client, None
        _default_config = None
    close = getattr(client, "close", None)
    if close is not None:
        close()
