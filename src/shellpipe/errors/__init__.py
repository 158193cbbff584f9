"""
Error hierarchy for shellpipe.

Provides structured error types for every failure a pipe can record.
"""

from shellpipe.errors.base import (
    CommandLineError,
    ErrorContext,
    ExitError,
    QueryError,
    RemoteError,
    ShellpipeError,
    TemplateError,
    TransportError,
)
from shellpipe.errors.classification import (
    ErrorKind,
    classify_error,
    is_exit_error,
)

__all__ = [
    # Base errors
    "CommandLineError",
    "ErrorContext",
    "ExitError",
    "QueryError",
    "RemoteError",
    "ShellpipeError",
    "TemplateError",
    "TransportError",
    # Classification
    "ErrorKind",
    "classify_error",
    "is_exit_error",
]
