"""
Error classification for recorded pipe errors.

Maps any exception recorded on a pipe onto one of the error kinds a
caller may want to branch on.
"""

from __future__ import annotations

from enum import Enum

from shellpipe.errors.base import (
    CommandLineError,
    ExitError,
    QueryError,
    RemoteError,
    TemplateError,
    TransportError,
)


class ErrorKind(str, Enum):
    """Kinds of failure a pipe can record."""

    IO = "io"
    """Open/read/write failure on a file, directory, or stream."""

    PROCESS = "process"
    """Subprocess exited non-zero or was killed."""

    HTTP = "http"
    """Transport failure or non-2xx response status."""

    QUERY = "query"
    """Malformed structured-data query."""

    TEMPLATE = "template"
    """Malformed per-line command template."""

    CONFIGURATION = "configuration"
    """Malformed command-line quoting."""

    OTHER = "other"
    """Anything else, including errors set explicitly by the caller."""


_KINDS: list[tuple[type[BaseException], ErrorKind]] = [
    (ExitError, ErrorKind.PROCESS),
    (CommandLineError, ErrorKind.CONFIGURATION),
    (TemplateError, ErrorKind.TEMPLATE),
    (QueryError, ErrorKind.QUERY),
    (TransportError, ErrorKind.HTTP),
    (RemoteError, ErrorKind.HTTP),
    (OSError, ErrorKind.IO),
]


def classify_error(error: BaseException | None) -> ErrorKind | None:
    """Classify a recorded error.

    Args:
        error: The error returned by a pipe, or None

    Returns:
        The error kind, or None when there is no error
    """
    if error is None:
        return None
    for error_type, kind in _KINDS:
        if isinstance(error, error_type):
            return kind
    return ErrorKind.OTHER


def is_exit_error(error: BaseException | None) -> bool:
    """Check whether an error came from a subprocess exit status."""
    return isinstance(error, ExitError)
