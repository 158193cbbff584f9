"""
Transport layer - HTTP client configuration and the HTTP stage.
"""

from shellpipe.transport.client import (
    HttpClient,
    close_default_client,
    create_client,
    get_default_client,
    get_http_config,
    set_default_client,
)
from shellpipe.transport.config import HttpConfig
from shellpipe.transport.http import (
    HTTPExecutor,
    HTTPPipe,
    ResponseProcessor,
    build_request,
    check_status,
    expect_status,
    response_reader,
)

__all__ = [
    "HTTPExecutor",
    "HTTPPipe",
    "HttpClient",
    "HttpConfig",
    "ResponseProcessor",
    "build_request",
    "check_status",
    "close_default_client",
    "create_client",
    "expect_status",
    "get_default_client",
    "get_http_config",
    "response_reader",
    "set_default_client",
]
