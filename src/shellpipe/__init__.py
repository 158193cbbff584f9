"""
shellpipe: Unix-style pipelines for Python programs.

Build chains of sources, filters, and sinks over byte and line streams,
and check for errors once, at the end of the chain.

    >>> from shellpipe import exec_
    >>> output, err = exec_("ls -l").match(".py").column(9).string()
"""
from __future__ import annotations

from shellpipe.errors import (
    CommandLineError,
    ErrorKind,
    ExitError,
    QueryError,
    RemoteError,
    ShellpipeError,
    TemplateError,
    TransportError,
    classify_error,
)
from shellpipe.pipe import Pipe, SinkResult
from shellpipe.sources import (
    args,
    count_lines,
    do,
    echo,
    exec_,
    file,
    find_files,
    get,
    if_exists,
    list_files,
    new_pipe,
    post,
    slice_,
    stdin,
)
from shellpipe.transport import (
    HTTPPipe,
    HttpClient,
    HttpConfig,
    close_default_client,
    expect_status,
    set_default_client,
)

__version__ = "0.1.0"

__all__ = [
    # Pipe
    "HTTPPipe",
    "Pipe",
    "SinkResult",
    # Sources
    "args",
    "count_lines",
    "do",
    "echo",
    "exec_",
    "file",
    "find_files",
    "get",
    "if_exists",
    "list_files",
    "new_pipe",
    "post",
    "slice_",
    "stdin",
    # HTTP
    "HttpClient",
    "HttpConfig",
    "close_default_client",
    "expect_status",
    "set_default_client",
    # Errors
    "CommandLineError",
    "ErrorKind",
    "ExitError",
    "QueryError",
    "RemoteError",
    "ShellpipeError",
    "TemplateError",
    "TransportError",
    "classify_error",
    # Version
    "__version__",
]
