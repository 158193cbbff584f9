"""
HTTP stage - requests that run lazily, at most once.

An ``HTTPPipe`` holds an ``HTTPExecutor``. The request is sent the first
time the pipe is read or its error is inspected, never again; the
response body then becomes the pipe's contents.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Union

import httpx

from shellpipe.errors import RemoteError, TransportError
from shellpipe.pipe.pipe import Pipe
from shellpipe.stream import IterReader, Reader, iter_chunks, read_all
from shellpipe.telemetry import get_logger
from shellpipe.transport.client import get_http_config

if TYPE_CHECKING:
    from shellpipe.pipe.core import PipeBase
    from shellpipe.transport.client import HttpClient

logger = get_logger("shellpipe.transport")

ResponseProcessor = Callable[[httpx.Response], Reader]
Body = Union[bytes, str, Reader, None]


def _response_url(response: httpx.Response) -> str | None:
    try:
        return str(response.request.url)
    except RuntimeError:
        return None


def response_reader(response: httpx.Response) -> IterReader:
    """Stream a response body; closing the reader closes the response."""
    return IterReader(response.iter_bytes(), on_close=response.close)


def check_status(response: httpx.Response) -> Reader:
    """Default processor: accept any 2xx status.

    Raises:
        RemoteError: For a status outside 200-299
    """
    if not response.is_success:
        response.close()
        raise RemoteError.from_status(
            response.status_code, response.reason_phrase, _response_url(response)
        )
    return response_reader(response)


def expect_status(code: int) -> ResponseProcessor:
    """Processor that accepts exactly one status code.

    Args:
        code: The expected status code

    Returns:
        Response processor raising RemoteError for any other status
    """

    def processor(response: httpx.Response) -> Reader:
        if response.status_code != code:
            response.close()
            raise RemoteError(
                f"got HTTP status code {response.status_code} instead of expected {code}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                url=_response_url(response),
            )
        return response_reader(response)

    return processor


def _content(body: Body) -> bytes | str | Reader | None:
    if body is None or isinstance(body, (bytes, str)):
        return body
    return iter_chunks(body)


def build_request(
    method: str,
    url: str | httpx.URL,
    *,
    body: Body = None,
    headers: Mapping[str, str] | None = None,
) -> httpx.Request:
    """Build a request carrying the configured User-Agent.

    Raises:
        TransportError: If the URL cannot be parsed
    """
    request_headers = {"User-Agent": get_http_config().user_agent}
    if headers:
        request_headers.update(headers)
    try:
        return httpx.Request(method, url, headers=request_headers, content=_content(body))
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise TransportError(f"invalid request: {e}", url=str(url), cause=e) from e


def _with_body(request: httpx.Request, body: Body) -> httpx.Request:
    headers = httpx.Headers(request.headers)
    for name in ("Content-Length", "Transfer-Encoding"):
        headers.pop(name, None)
    return httpx.Request(request.method, request.url, headers=headers, content=_content(body))


class HTTPExecutor:
    """Sends one request, at most once, and exposes the response as a reader.

    ``execute`` is safe to call from any number of threads; only the
    first call sends the request, and every call returns the same error.
    """

    def __init__(
        self,
        request: httpx.Request | None,
        get_client: Callable[[], HttpClient],
        processor: ResponseProcessor | None = None,
    ) -> None:
        self.request = request
        self.processor = processor or check_status
        self._get_client = get_client
        self._lock = threading.Lock()
        self._executed = False
        self._reader: Reader | None = None
        self._error: BaseException | None = None

    @property
    def executed(self) -> bool:
        """True once the request has been sent (or sending was attempted)."""
        with self._lock:
            return self._executed

    def execute(self) -> BaseException | None:
        """Send the request if it has not been sent yet.

        Returns:
            The error from sending or processing, or None
        """
        with self._lock:
            if not self._executed:
                self._executed = True
                try:
                    self._reader = self._send()
                except Exception as e:
                    self._error = e
            return self._error

    def _send(self) -> Reader:
        request = self.request
        if request is None:
            raise TransportError("there is no request set")
        url = str(request.url)
        logger.debug("sending request", method=request.method, url=url)
        try:
            response = self._get_client().send(request, stream=True)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", url=url, cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}", url=url, cause=e) from e
        logger.debug("response received", url=url, status_code=response.status_code)
        try:
            return self.processor(response)
        except BaseException:
            response.close()
            raise

    def read(self, size: int | None = -1) -> bytes:
        """Read the response body, sending the request first if needed."""
        if size is None or size < 0:
            return read_all(self)
        error = self.execute()
        if error is not None:
            raise error
        if self._reader is None:
            return b""
        return self._reader.read(size)

    def close(self) -> None:
        """Close the response body, if there is one."""
        with self._lock:
            reader, self._reader = self._reader, None
        close = getattr(reader, "close", None)
        if close is not None:
            close()


class HTTPPipe(Pipe):
    """A pipe whose contents come from a lazily executed HTTP request.

    Builder calls change the request until it is sent and are ignored
    afterwards.

    Example:
        >>> body, err = get("https://example.com/api").with_header("Accept", "text/plain").string()
    """

    def __init__(
        self,
        request: httpx.Request | None = None,
        *,
        error: BaseException | None = None,
        processor: ResponseProcessor | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(**kwargs)
        self._executor = HTTPExecutor(request, lambda: self.http_client, processor)
        self.with_reader(self._executor)
        if error is not None:
            self.set_error(error)

    @classmethod
    def from_pipe(
        cls,
        pipe: PipeBase,
        method: str,
        url: str | httpx.URL | None = None,
        *,
        body: Body = None,
        request: httpx.Request | None = None,
    ) -> HTTPPipe:
        """Create an HTTP stage that inherits a pipe's settings and error."""
        error = pipe._recorded()
        if request is None and error is None:
            try:
                request = build_request(method, url or "", body=body)
            except TransportError as e:
                error = e
        return cls(
            request,
            error=error,
            stdout=pipe._stdout,
            stderr=pipe._stderr,
            http_client=pipe._http_client,
        )

    @property
    def executor(self) -> HTTPExecutor:
        return self._executor

    @property
    def request(self) -> httpx.Request | None:
        return self._executor.request

    def error(self) -> BaseException | None:
        """Return the pipe's error, sending the request first if needed."""
        err = self._recorded()
        if err is not None:
            return err
        err = self._executor.execute()
        if err is not None:
            self.set_error(err)
        return err

    def _modifiable(self) -> httpx.Request | None:
        if self._executor.executed:
            return None
        return self._executor.request

    def with_method(self, method: str) -> HTTPPipe:
        """Set the request method."""
        request = self._modifiable()
        if request is not None:
            request.method = method.upper()
        return self

    def with_header(self, name: str, value: str) -> HTTPPipe:
        """Set one request header."""
        request = self._modifiable()
        if request is not None:
            request.headers[name] = value
        return self

    def with_headers(self, headers: Mapping[str, str]) -> HTTPPipe:
        """Set several request headers."""
        request = self._modifiable()
        if request is not None:
            request.headers.update(headers)
        return self

    def with_body(self, body: Body) -> HTTPPipe:
        """Replace the request body with bytes, text, or a reader."""
        request = self._modifiable()
        if request is not None:
            self._executor.request = _with_body(request, body)
        return self

    def with_client(self, client: HttpClient) -> HTTPPipe:
        """Send the request with ``client``."""
        return self.with_http_client(client)

    def with_processor(self, processor: ResponseProcessor) -> HTTPPipe:
        """Turn the response into the pipe's reader with ``processor``."""
        if not self._executor.executed:
            self._executor.processor = processor
        return self

    def expect_status(self, code: int) -> HTTPPipe:
        """Accept only ``code`` as the response status."""
        return self.with_processor(expect_status(code))
