"""
Zero-capacity byte channel between one producer and one consumer.

A write does not return until the consumer has taken every byte of it,
so a producer can never run ahead of the consumer.
"""

from __future__ import annotations

import threading

from shellpipe.stream.reader import read_all


class _Channel:
    """Shared state for a reader/writer pair."""

    def __init__(self) -> None:
        self.cond = threading.Condition()
        self.write_lock = threading.Lock()
        self.pending = memoryview(b"")
        self.write_closed = False
        self.read_closed = False
        self.error: BaseException | None = None


class ChannelReader:
    """Read end of a channel."""

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    @property
    def closed(self) -> bool:
        return self._channel.read_closed

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        """Block until the producer offers data or closes the write end.

        Raises the error the write end was closed with, once every byte
        written before it has been read.
        """
        if size is None or size < 0:
            return read_all(self)
        if size == 0:
            return b""
        ch = self._channel
        with ch.cond:
            while not ch.pending and not ch.write_closed and not ch.read_closed:
                ch.cond.wait()
            if ch.read_closed:
                return b""
            if not ch.pending:
                if ch.error is not None:
                    raise ch.error
                return b""
            data = ch.pending[:size].tobytes()
            ch.pending = ch.pending[size:]
            if not ch.pending:
                ch.cond.notify_all()
            return data

    def close(self) -> None:
        """Close the read end; pending and later writes fail with BrokenPipeError."""
        ch = self._channel
        with ch.cond:
            ch.read_closed = True
            ch.cond.notify_all()


class ChannelWriter:
    """Write end of a channel."""

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    @property
    def closed(self) -> bool:
        return self._channel.write_closed

    def writable(self) -> bool:
        return True

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Hand ``data`` to the reader, blocking until all of it is consumed."""
        view = memoryview(bytes(data))
        if not view:
            return 0
        ch = self._channel
        with ch.write_lock, ch.cond:
            if ch.write_closed:
                raise ValueError("write to closed channel")
            if ch.read_closed:
                raise BrokenPipeError("write on closed pipe")
            ch.pending = view
            ch.cond.notify_all()
            while ch.pending and not ch.read_closed:
                ch.cond.wait()
            if ch.pending:
                ch.pending = memoryview(b"")
                raise BrokenPipeError("write on closed pipe")
        return len(view)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        """Close the write end; the reader sees end-of-stream."""
        ch = self._channel
        with ch.cond:
            ch.write_closed = True
            ch.cond.notify_all()

    def close_with_error(self, err: BaseException) -> None:
        """Close the write end; the reader raises ``err`` after the buffered data."""
        ch = self._channel
        with ch.cond:
            if not ch.write_closed:
                ch.error = err
            ch.write_closed = True
            ch.cond.notify_all()

    @property
    def reader_closed(self) -> bool:
        return self._channel.read_closed


def channel() -> tuple[ChannelReader, ChannelWriter]:
    """Create a connected reader/writer pair."""
    state = _Channel()
    return ChannelReader(state), ChannelWriter(state)
