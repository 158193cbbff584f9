"""
The Pipe class.

Example:
    >>> from shellpipe import file
    >>> count, err = file("access.log").match("GET").column(7).freq().first(10).stdout()
"""

from __future__ import annotations

from shellpipe.pipe.filters import Filters
from shellpipe.pipe.http import HttpStages
from shellpipe.pipe.process import ProcessStages
from shellpipe.pipe.sinks import Sinks


class Pipe(Filters, ProcessStages, HttpStages, Sinks):
    """A stream of bytes plus a sticky error.

    Sources create pipes, filters transform them in place and return
    them, and sinks drain them into a value. Errors are recorded on the
    pipe instead of raised; once one is recorded, later stages do nothing
    and sinks return their zero value along with it.
    """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(error={self._recorded()!r})"
