"""
Sinks - terminal operations that drain a pipe into a value.

Every sink returns a ``SinkResult(value, error)``. On a pipe that already
has an error a sink performs no I/O and returns the zero value. Otherwise
it reads to end-of-stream and returns what it read together with the
pipe's error at that point, which may have been recorded by a stage that
failed while the sink was reading.
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterator
from typing import Generic, NamedTuple, TypeVar

from shellpipe.pipe.core import PipeBase
from shellpipe.stream import CHUNK_SIZE, decode, scan_lines

T = TypeVar("T")


class SinkResult(NamedTuple, Generic[T]):
    """Value produced by a sink, and the pipe's error."""

    value: T
    error: BaseException | None


class Sinks(PipeBase):
    """Terminal operations."""

    def _chunks(self) -> Iterator[bytes]:
        try:
            while chunk := self.read(CHUNK_SIZE):
                yield chunk
        finally:
            self._reader.close()

    def bytes(self) -> SinkResult[bytes]:
        """Read the whole stream."""
        if (err := self._recorded()) is not None:
            return SinkResult(b"", err)
        data = b"".join(self._chunks())
        return SinkResult(data, self.error())

    def string(self) -> SinkResult[str]:
        """Read the whole stream as text."""
        data, err = self.bytes()
        return SinkResult(decode(data), err)

    def count_lines(self) -> SinkResult[int]:
        """Count lines; empty input has 0 lines."""
        if (err := self._recorded()) is not None:
            return SinkResult(0, err)
        try:
            count = sum(1 for _ in scan_lines(self))
        finally:
            self._reader.close()
        return SinkResult(count, self.error())

    def slice(self) -> SinkResult[list[str]]:
        """Read every line into a list.

        Empty input gives ``[]``; a lone newline gives ``[""]``.
        """
        if (err := self._recorded()) is not None:
            return SinkResult([], err)
        try:
            lines = list(scan_lines(self))
        finally:
            self._reader.close()
        return SinkResult(lines, self.error())

    def sha256_sum(self) -> SinkResult[str]:
        """Hex SHA-256 of the whole stream."""
        if (err := self._recorded()) is not None:
            return SinkResult("", err)
        digest = hashlib.sha256()
        for chunk in self._chunks():
            digest.update(chunk)
        return SinkResult(digest.hexdigest(), self.error())

    def stdout(self) -> SinkResult[int]:
        """Copy the stream to the pipe's stdout writer; return bytes written."""
        if (err := self._recorded()) is not None:
            return SinkResult(0, err)
        writer = self.stdout_writer
        written = 0
        try:
            for chunk in self._chunks():
                writer.write(chunk)
                written += len(chunk)
            flush = getattr(writer, "flush", None)
            if flush is not None:
                flush()
        except OSError as e:
            self.set_error(e)
        return SinkResult(written, self.error())

    def write_file(self, path: str | os.PathLike[str]) -> SinkResult[int]:
        """Write the stream to ``path``, truncating it; return bytes written."""
        return self._to_file(path, "wb")

    def append_file(self, path: str | os.PathLike[str]) -> SinkResult[int]:
        """Append the stream to ``path``; return bytes written."""
        return self._to_file(path, "ab")

    def _to_file(self, path: str | os.PathLike[str], mode: str) -> SinkResult[int]:
        if (err := self._recorded()) is not None:
            return SinkResult(0, err)
        written = 0
        try:
            with open(path, mode) as f:
                for chunk in self._chunks():
                    written += f.write(chunk)
        except OSError as e:
            self.set_error(e)
        return SinkResult(written, self.error())
