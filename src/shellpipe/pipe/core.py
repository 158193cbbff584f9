"""
Pipe core - the stream-plus-error value and the streaming filter engine.

A pipe owns exactly one reader and one sticky error. Every stage of a
chain mutates the same pipe and returns it, so an error recorded by any
stage, on any thread, is seen by every later operation.
"""

from __future__ import annotations

import io
import re
import sys
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TextIO, TypeVar

from shellpipe.stream import (
    CHUNK_SIZE,
    ManagedReader,
    Reader,
    Writer,
    channel,
    encode,
    read_all,
    scan_lines,
)
from shellpipe.telemetry import get_logger

if TYPE_CHECKING:
    from shellpipe.transport.client import HttpClient

logger = get_logger("shellpipe.pipe")

P = TypeVar("P", bound="PipeBase")

Transform = Callable[[Reader, Writer], Any]
LineFunc = Callable[[str], str]
ScanFunc = Callable[[str, TextIO], Any]

_EXIT_STATUS = re.compile(r"exit status (\d+)$")


class PipeBase:
    """State, error handling, and the filter engine shared by every pipe.

    A pipe constructed without a reader is a legal, empty, error-free
    pipe: every operation on it produces or consumes nothing.

    Attributes:
        reader: The current stream reader
    """

    def __init__(
        self,
        reader: Reader | None = None,
        *,
        stdout: Writer | None = None,
        stderr: Writer | None = None,
        http_client: HttpClient | None = None,
    ) -> None:
        self._reader = ManagedReader(reader)
        self._stdout = stdout
        self._stderr = stderr
        self._http_client = http_client
        self._err: BaseException | None = None
        self._err_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def reader(self) -> ManagedReader:
        """The current stream reader."""
        return self._reader

    @property
    def stdout_writer(self) -> Writer:
        """Destination of ``stdout()`` and ``tee()``; process stdout by default."""
        if self._stdout is not None:
            return self._stdout
        return sys.stdout.buffer

    @property
    def stderr_writer(self) -> Writer | None:
        """Separate destination for subprocess stderr, if one was configured."""
        return self._stderr

    @property
    def http_client(self) -> HttpClient:
        """HTTP client used by HTTP stages; the shared default when unset."""
        if self._http_client is not None:
            return self._http_client
        from shellpipe.transport.client import get_default_client

        return get_default_client()

    def with_reader(self: P, reader: Reader, *, close: bool = True) -> P:
        """Replace the pipe's reader.

        The previous reader is detached, not drained or closed.

        Args:
            reader: New source of data
            close: Whether to close ``reader`` once it reaches end-of-stream

        Returns:
            Self for chaining
        """
        self._reader = ManagedReader(reader, close_source=close)
        return self

    def with_stdout(self: P, writer: Writer) -> P:
        """Set the writer used by ``stdout()`` and ``tee()``."""
        self._stdout = writer
        return self

    def with_stderr(self: P, writer: Writer | None) -> P:
        """Send subprocess stderr to ``writer`` instead of combining it with stdout."""
        self._stderr = writer
        return self

    def with_http_client(self: P, client: HttpClient) -> P:
        """Set the HTTP client used by HTTP stages."""
        self._http_client = client
        return self

    # ------------------------------------------------------------------
    # Error cell
    # ------------------------------------------------------------------

    def _recorded(self) -> BaseException | None:
        """The stored error, without triggering any deferred work."""
        with self._err_lock:
            return self._err

    def error(self) -> BaseException | None:
        """Return the error recorded by any stage, or None."""
        return self._recorded()

    def set_error(self, err: BaseException | None) -> None:
        """Record ``err`` on the pipe. Passing None clears it."""
        with self._err_lock:
            self._err = err
        if err is not None:
            logger.debug("error recorded", error=str(err), error_type=type(err).__name__)

    def with_error(self: P, err: BaseException | None) -> P:
        """Record ``err`` on the pipe and return it."""
        self.set_error(err)
        return self

    def exit_status(self) -> int:
        """Exit status of the last failed command, or 0.

        The recorded error text is matched against ``exit status <N>``.
        A pipe with no error and a pipe whose error has any other shape
        both report 0.
        """
        err = self.error()
        if err is None:
            return 0
        match = _EXIT_STATUS.search(str(err))
        if match is None:
            return 0
        return int(match.group(1))

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(self, size: int | None = -1) -> bytes:
        """Read from the pipe.

        Returns ``b""`` once the pipe has an error. A failure while reading
        is recorded on the pipe rather than raised.
        """
        if size is None or size < 0:
            return read_all(self)
        if self._recorded() is not None:
            return b""
        try:
            return self._reader.read(size)
        except Exception as e:
            self.set_error(e)
            return b""

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        """Close the pipe's reader. Always safe."""
        self._reader.close()

    def wait(self) -> BaseException | None:
        """Drain and discard the pipe's output, then return its error.

        Use this to wait for the side effects of streaming stages without
        keeping their output.
        """
        while self.read(CHUNK_SIZE):
            pass
        return self.error()

    def synchronize(self: P) -> P:
        """Buffer the whole stream in memory.

        Returns once every upstream stage has finished, so errors they
        record are visible immediately afterwards.
        """
        if self._recorded() is not None:
            return self
        data = self.read()
        return self.with_reader(io.BytesIO(data))

    # ------------------------------------------------------------------
    # Streaming filter engine
    # ------------------------------------------------------------------

    def filter(self: P, transform: Transform) -> P:
        """Run ``transform(reader, writer)`` concurrently as the next stage.

        ``reader`` is the pipe's current reader and ``writer`` feeds the
        pipe's new reader through a zero-capacity channel, so the transform
        only produces as fast as the pipe is read. An exception raised by
        the transform travels down the channel behind the output written
        before it, and is recorded on the pipe when the reader reaches it.
        Output already produced is never discarded because of it.

        Args:
            transform: Callable taking (reader, writer)

        Returns:
            Self for chaining
        """
        if self._recorded() is not None:
            return self
        self._start_stage(transform)
        return self

    def _start_stage(self, transform: Transform) -> None:
        upstream = self._reader
        reader, writer = channel()
        self._reader = ManagedReader(reader)
        name = getattr(transform, "__name__", type(transform).__name__)

        def run() -> None:
            try:
                transform(upstream, writer)
            except Exception as e:
                logger.debug("stage failed", stage=name, error=str(e))
                if writer.reader_closed:
                    self.set_error(e)
                writer.close_with_error(e)
            finally:
                writer.close()

        threading.Thread(target=run, name=f"shellpipe-{name}", daemon=True).start()

    def filter_line(self: P, fn: LineFunc) -> P:
        """Replace each line with ``fn(line)``."""

        def filter_line(reader: Reader, writer: Writer) -> None:
            for line in scan_lines(reader):
                writer.write(encode(fn(line) + "\n"))

        return self.filter(filter_line)

    def filter_scan(self: P, fn: ScanFunc) -> P:
        """Call ``fn(line, out)`` for each line.

        Whatever ``fn`` writes to ``out`` is passed downstream after each
        line; writing nothing drops the line.
        """

        def filter_scan(reader: Reader, writer: Writer) -> None:
            for line in scan_lines(reader):
                out = io.StringIO()
                fn(line, out)
                text = out.getvalue()
                if text:
                    writer.write(encode(text))

        return self.filter(filter_scan)

    def each_line(self: P, fn: ScanFunc) -> P:
        """Call ``fn(line, out)`` for each line; see ``filter_scan``."""
        return self.filter_scan(fn)
