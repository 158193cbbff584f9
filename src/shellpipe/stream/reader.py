"""
Reader wrappers used as pipe sources.

Provides:
- ManagedReader: releases its source exactly once, at end-of-stream or on close
- ChainReader: reads several readers one after another
- IterReader: adapts an iterator of byte chunks to ``read(size)``
- TeeReader: copies everything read to one or more writers
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Protocol

# Chunk size used when a caller asks for "everything"
CHUNK_SIZE = 32 * 1024


class Reader(Protocol):
    """Anything with a binary ``read(size)``."""

    def read(self, size: int = -1, /) -> bytes: ...


class Writer(Protocol):
    """Anything with a binary ``write(data)``."""

    def write(self, data: bytes, /) -> Any: ...


def read_all(reader: Reader, chunk_size: int = CHUNK_SIZE) -> bytes:
    """Read from a reader until it reports end-of-stream."""
    chunks = []
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


class ManagedReader:
    """Reader that closes its source once the source is exhausted.

    The first empty read from the source releases it: ``source.close()`` is
    called (when ``close_source`` is true and the source has one) exactly
    once, even if ``close()`` is also called explicitly or from another
    thread. After release every read returns ``b""``. A reader constructed
    without a source behaves as an empty stream.

    Nothing is released on garbage collection; a reader abandoned before
    end-of-stream keeps its source open until ``close()`` is called.

    Example:
        >>> reader = ManagedReader(open("data.txt", "rb"))
        >>> data = reader.read()  # file is closed once EOF is seen
    """

    def __init__(self, source: Reader | None = None, *, close_source: bool = True) -> None:
        self._source = source
        self._close_source = close_source
        self._lock = threading.Lock()
        self._released = source is None

    @property
    def source(self) -> Reader | None:
        """The wrapped source."""
        return self._source

    @property
    def closed(self) -> bool:
        """True once the source has been released."""
        return self._released

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` bytes, or everything when ``size`` is negative."""
        if size is None or size < 0:
            return read_all(self)
        source = self._source
        if self._released or source is None:
            return b""
        data = source.read(size)
        if not data:
            if size:
                self.release()
            return b""
        return bytes(data)

    def readinto(self, buffer: bytearray | memoryview) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)

    def release(self) -> None:
        """Release the source. Safe to call any number of times."""
        with self._lock:
            source, self._source = self._source, None
            self._released = True
        if source is None or not self._close_source:
            return
        close = getattr(source, "close", None)
        if close is not None:
            close()

    close = release

    def __enter__(self) -> ManagedReader:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()


class ChainReader:
    """Reads each reader to exhaustion, in order."""

    def __init__(self, readers: Iterable[Reader]) -> None:
        self._readers = list(readers)

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            return read_all(self)
        while self._readers:
            data = self._readers[0].read(size)
            if data or not size:
                return data
            self._readers.pop(0)
        return b""

    def close(self) -> None:
        readers, self._readers = self._readers, []
        for reader in readers:
            close = getattr(reader, "close", None)
            if close is not None:
                close()


class IterReader:
    """Adapts an iterator of byte chunks to a reader.

    ``read(n)`` never returns more than ``n`` bytes; the remainder of a
    chunk is kept for the next call.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        on_close: Callable[[], Any] | None = None,
    ) -> None:
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = b""
        self._on_close = on_close
        self._done = False

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            return read_all(self)
        while not self._pending and not self._done:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                self._done = True
        data, self._pending = self._pending[:size], self._pending[size:]
        return data

    def close(self) -> None:
        self._done = True
        self._pending = b""
        on_close, self._on_close = self._on_close, None
        if on_close is not None:
            on_close()


class TeeReader:
    """Writes everything read from the source to each writer as it passes."""

    def __init__(self, source: Reader, writers: Iterable[Writer]) -> None:
        self._source = source
        self._writers = list(writers)

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            return read_all(self)
        data = self._source.read(size)
        if data:
            for writer in self._writers:
                writer.write(data)
        return data

    def close(self) -> None:
        close = getattr(self._source, "close", None)
        if close is not None:
            close()


def iter_chunks(reader: Reader, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield chunks from a reader until end-of-stream."""
    while chunk := reader.read(chunk_size):
        yield chunk
