"""
jq query support for the ``jq`` pipe stage.

Wraps the ``jq`` bindings so that compile and evaluation failures are
reported as ``QueryError``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import jq

from shellpipe.errors import QueryError


class JQProgram:
    """A compiled jq query.

    Example:
        >>> program = compile_query(".name")
        >>> list(program.run('{"name": "alice"} {"name": "bob"}'))
        ['alice', 'bob']
    """

    def __init__(self, query: str) -> None:
        self.query = query
        try:
            self._program = jq.compile(query)
        except ValueError as e:
            raise QueryError(str(e), query=query) from e

    def run(self, text: str) -> Iterator[Any]:
        """Evaluate the query against every JSON value in ``text``."""
        if not text.strip():
            return
        try:
            results = self._program.input_text(text)
            yield from results
        except ValueError as e:
            raise QueryError(str(e), query=self.query) from e


def compile_query(query: str) -> JQProgram:
    """Compile a jq query.

    Raises:
        QueryError: If the query is malformed
    """
    return JQProgram(query)
