"""
HTTP configuration for the default client.

Settings come from environment variables, read when the default client
is first created:

- SHELLPIPE_HTTP_TIMEOUT_SECS: overall timeout (default 30)
- SHELLPIPE_HTTP_CONNECT_TIMEOUT_SECS: connect timeout (default 10)
- SHELLPIPE_HTTP_FOLLOW_REDIRECTS: "0" disables redirect following
- SHELLPIPE_HTTP_TRUST_ENV: "1" honours proxy/netrc environment settings
"""

from __future__ import annotations

import os
from contextlib import suppress

import httpx
from pydantic import BaseModel, ConfigDict, Field

# Default timeouts
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0

_UA_VERSION: str | None = None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            from importlib.metadata import version

            _UA_VERSION = version("shellpipe")
        except Exception:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class HttpConfig(BaseModel):
    """Settings for the shared default HTTP client."""

    model_config = ConfigDict(extra="forbid")

    timeout_secs: float = Field(default=_DEFAULT_TIMEOUT, gt=0, description="Overall timeout in seconds")
    connect_timeout_secs: float = Field(
        default=_DEFAULT_CONNECT_TIMEOUT, gt=0, description="Connect timeout in seconds"
    )
    follow_redirects: bool = Field(default=True, description="Follow 3xx redirects")
    trust_env: bool = Field(default=False, description="Use proxy settings from the environment")
    user_agent: str = Field(
        default_factory=lambda: f"shellpipe/{_get_ua_version()}",
        description="User-Agent sent with every request",
    )

    @classmethod
    def from_env(cls) -> HttpConfig:
        """Build configuration from SHELLPIPE_HTTP_* variables.

        Malformed numeric values are ignored.
        """
        values: dict[str, object] = {
            "follow_redirects": _env_flag("SHELLPIPE_HTTP_FOLLOW_REDIRECTS", True),
            "trust_env": _env_flag("SHELLPIPE_HTTP_TRUST_ENV", False),
        }
        for field, name in (
            ("timeout_secs", "SHELLPIPE_HTTP_TIMEOUT_SECS"),
            ("connect_timeout_secs", "SHELLPIPE_HTTP_CONNECT_TIMEOUT_SECS"),
        ):
            raw = os.getenv(name)
            if raw:
                with suppress(ValueError):
                    number = float(raw)
                    if number > 0:
                        values[field] = number
        return cls(**values)

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Convert to httpx Timeout."""
        return httpx.Timeout(self.timeout_secs, connect=self.connect_timeout_secs)
