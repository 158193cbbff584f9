"""Tests for error classes and classification."""

import signal

import pytest

from shellpipe.errors import (
    CommandLineError,
    ErrorContext,
    ErrorKind,
    ExitError,
    QueryError,
    RemoteError,
    ShellpipeError,
    TemplateError,
    TransportError,
    classify_error,
    is_exit_error,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_default_values(self) -> None:
        """Test default context values."""
        ctx = ErrorContext()
        assert ctx.details == {}
        assert ctx.source is None
        assert ctx.hint is None
        assert str(ctx) == ""

    def test_hint_rendered(self) -> None:
        """Test only the hint appears in the string form."""
        ctx = ErrorContext(details={"k": "v"}, source="process", hint="check PATH")
        assert str(ctx) == "(hint: check PATH)"


class TestShellpipeError:
    """Tests for ShellpipeError."""

    def test_message(self) -> None:
        """Test a plain message."""
        err = ShellpipeError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"

    def test_with_hint(self) -> None:
        """Test adding a hint."""
        err = ShellpipeError("something broke").with_hint("try again")
        assert str(err) == "something broke (hint: try again)"

    def test_subclasses(self) -> None:
        """Test every library error can be caught as ShellpipeError."""
        for err in (
            CommandLineError("x"),
            ExitError(1),
            TemplateError("x"),
            QueryError("x"),
            TransportError("x"),
            RemoteError("x", status_code=500),
        ):
            assert isinstance(err, ShellpipeError)


class TestSpecificErrors:
    """Tests for the concrete error types."""

    def test_unbalanced_command_line(self) -> None:
        """Test the unbalanced quoting message."""
        err = CommandLineError.unbalanced('echo "oh')
        assert str(err) == "unbalanced quotes or backslashes in [echo \"oh]"
        assert err.command == 'echo "oh'
        assert err.context.details["command"] == 'echo "oh'

    def test_exit_error(self) -> None:
        """Test the exit message has the fixed shape."""
        err = ExitError(127, command=["nonexistent"])
        assert str(err) == "exit status 127"
        assert err.exit_code == 127
        assert err.context.details["command"] == ["nonexistent"]

    def test_exit_error_signal(self) -> None:
        """Test a negative code names the signal."""
        err = ExitError(-signal.SIGTERM)
        assert str(err) == "signal: SIGTERM"

    def test_remote_error_from_status(self) -> None:
        """Test the unexpected status message."""
        err = RemoteError.from_status(404, "Not Found", "http://example.com/x")
        assert str(err) == "unexpected HTTP response status: 404 Not Found"
        assert err.status_code == 404
        assert err.url == "http://example.com/x"

    def test_remote_error_without_reason(self) -> None:
        """Test a status with no reason phrase."""
        assert str(RemoteError.from_status(599)) == "unexpected HTTP response status: 599"

    def test_transport_error_cause(self) -> None:
        """Test the underlying exception is chained."""
        cause = ConnectionError("refused")
        err = TransportError("HTTP error: refused", url="http://localhost:1", cause=cause)
        assert err.__cause__ is cause
        assert err.context.details["url"] == "http://localhost:1"

    def test_query_and_template_errors(self) -> None:
        """Test the failing source is kept."""
        assert QueryError("bad", query=".[").query == ".["
        assert TemplateError("bad", template="{{").template == "{{"


class TestClassification:
    """Tests for classify_error."""

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (FileNotFoundError("x"), ErrorKind.IO),
            (PermissionError("x"), ErrorKind.IO),
            (ExitError(1), ErrorKind.PROCESS),
            (CommandLineError("x"), ErrorKind.CONFIGURATION),
            (TemplateError("x"), ErrorKind.TEMPLATE),
            (QueryError("x"), ErrorKind.QUERY),
            (TransportError("x"), ErrorKind.HTTP),
            (RemoteError("x", status_code=503), ErrorKind.HTTP),
            (RuntimeError("x"), ErrorKind.OTHER),
        ],
    )
    def test_classify(self, error: BaseException, kind: ErrorKind) -> None:
        """Test each error maps to its kind."""
        assert classify_error(error) is kind

    def test_classify_none(self) -> None:
        """Test no error has no kind."""
        assert classify_error(None) is None

    def test_is_exit_error(self) -> None:
        """Test exit error detection."""
        assert is_exit_error(ExitError(2))
        assert not is_exit_error(RuntimeError("exit status 2"))
        assert not is_exit_error(None)
