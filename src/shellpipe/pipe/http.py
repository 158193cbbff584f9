"""
HTTP stages on a pipe.

Each returns a new ``HTTPPipe`` that inherits the pipe's settings and
error. The request is not sent until that pipe is read or its error is
inspected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shellpipe.pipe.core import PipeBase

if TYPE_CHECKING:
    import httpx

    from shellpipe.transport.http import HTTPPipe


class HttpStages(PipeBase):
    """Stages that talk HTTP."""

    def get(self, url: str) -> HTTPPipe:
        """GET ``url``; the pipe's current contents are not used."""
        from shellpipe.transport.http import HTTPPipe

        return HTTPPipe.from_pipe(self, "GET", url)

    def post(self, url: str) -> HTTPPipe:
        """POST the pipe's contents to ``url``, streaming them as the body.

        A stage that fails while the body is streaming aborts the request,
        and its error becomes the returned pipe's error.
        """
        from shellpipe.transport.http import HTTPPipe

        return HTTPPipe.from_pipe(self, "POST", url, body=self._reader)

    def do(self, request: httpx.Request) -> HTTPPipe:
        """Send a prepared request."""
        from shellpipe.transport.http import HTTPPipe

        return HTTPPipe.from_pipe(self, request.method, request=request)
