"""
Base error classes for shellpipe.

Provides a layered error hierarchy:
- ShellpipeError: Base class for all library errors
- CommandLineError: Malformed command lines (configuration errors)
- ExitError: Subprocesses that exited unsuccessfully
- TemplateError: Malformed per-line command templates
- QueryError: Malformed structured-data queries
- TransportError: HTTP/network failures
- RemoteError: HTTP responses with a non-2xx status

Filesystem and process-start failures are not wrapped: they are
recorded on a pipe as the original ``OSError``.
"""

from __future__ import annotations

import signal
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Only the hint is rendered into the error text, so messages with a
    fixed, parseable shape (``exit status 1``) stay intact.
    """

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'process', 'transport', 'query')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        if self.hint:
            return f"(hint: {self.hint})"
        return ""


class ShellpipeError(Exception):
    """Base class for all shellpipe errors.

    All errors created by this library inherit from this class, making it
    easy to catch them with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def __str__(self) -> str:
        return self._format_message()

    def with_hint(self, hint: str) -> ShellpipeError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class CommandLineError(ShellpipeError):
    """Command line that cannot be turned into an argument list.

    Raised when:
    - Quotes or backslash escapes are unbalanced
    - The command line is empty
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        command: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="configuration")
        if command is not None:
            ctx.details["command"] = command
        super().__init__(message, ctx)
        self.command = command

    @classmethod
    def unbalanced(cls, command: str) -> CommandLineError:
        """Create the error reported for unbalanced quoting."""
        return cls(
            f"unbalanced quotes or backslashes in [{command}]",
            command=command,
        )


class ExitError(ShellpipeError):
    """Subprocess that ran but did not exit successfully.

    The message is exactly ``exit status <N>`` for a normal exit, or
    ``signal: <NAME>`` when the process was killed by a signal.

    Attributes:
        exit_code: Process return code (negative for signals)
        command: The argument list that was run
    """

    def __init__(
        self,
        exit_code: int,
        *,
        command: list[str] | None = None,
    ) -> None:
        ctx = ErrorContext(source="process")
        ctx.details["exit_code"] = exit_code
        if command:
            ctx.details["command"] = command
        super().__init__(self._describe(exit_code), ctx)
        self.exit_code = exit_code
        self.command = command

    @staticmethod
    def _describe(exit_code: int) -> str:
        if exit_code < 0:
            try:
                name = signal.Signals(-exit_code).name
            except ValueError:
                name = str(-exit_code)
            return f"signal: {name}"
        return f"exit status {exit_code}"


class TemplateError(ShellpipeError):
    """Per-line command template that cannot be compiled or rendered."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        template: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="template")
        if template is not None:
            ctx.details["template"] = template
        super().__init__(message, ctx)
        self.template = template


class QueryError(ShellpipeError):
    """Structured-data query that cannot be compiled or evaluated."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        query: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="query")
        if query is not None:
            ctx.details["query"] = query
        super().__init__(message, ctx)
        self.query = query


class TransportError(ShellpipeError):
    """An HTTP stage could not get a response.

    Covers requests that cannot be built (an unparsable URL), requests that
    were never sent, and anything httpx raises while sending: connection
    and TLS failures, timeouts, protocol errors.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class RemoteError(ShellpipeError):
    """HTTP response whose status is outside the 200-299 range.

    Attributes:
        status_code: HTTP status code
        reason: Reason phrase sent with the status
        url: Requested URL
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        reason: str = "",
        url: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["status_code"] = status_code
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.status_code = status_code
        self.reason = reason
        self.url = url

    @classmethod
    def from_status(
        cls,
        status_code: int,
        reason: str = "",
        url: str | None = None,
    ) -> RemoteError:
        """Create RemoteError from a response status line.

        Args:
            status_code: HTTP status code
            reason: Reason phrase
            url: Requested URL

        Returns:
            RemoteError describing the unexpected status
        """
        status = f"{status_code} {reason}".strip()
        return cls(
            f"unexpected HTTP response status: {status}",
            status_code=status_code,
            reason=reason,
            url=url,
        )
