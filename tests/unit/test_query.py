"""Tests for jq query compilation and evaluation."""

import pytest

from shellpipe.errors import QueryError
from shellpipe.query import JQProgram, compile_query


class TestCompileQuery:
    """Tests for compile_query."""

    def test_compile(self) -> None:
        """Test a valid query compiles."""
        program = compile_query(".a")
        assert isinstance(program, JQProgram)
        assert program.query == ".a"

    def test_compile_error(self) -> None:
        """Test a malformed query raises QueryError."""
        with pytest.raises(QueryError) as exc_info:
            compile_query(".[")
        assert exc_info.value.query == ".["


class TestRun:
    """Tests for JQProgram.run."""

    def test_values(self) -> None:
        """Test results for every input value."""
        assert list(compile_query(".x").run('{"x": 1} {"x": "two"}')) == [1, "two"]

    def test_whitespace_input(self) -> None:
        """Test blank input has no results."""
        assert list(compile_query(".").run("  \n")) == []

    def test_runtime_error(self) -> None:
        """Test an evaluation failure raises QueryError."""
        with pytest.raises(QueryError):
            list(compile_query(".a").run("[1, 2]"))

    def test_invalid_json(self) -> None:
        """Test invalid input raises QueryError."""
        with pytest.raises(QueryError):
            list(compile_query(".").run("{"))
