"""
Line and text filters.

Every filter here is a streaming stage built on ``PipeBase.filter`` or
``PipeBase.filter_scan``; none of them blocks the caller.
"""

from __future__ import annotations

import hashlib
import io
import json
import re
from collections import Counter, deque
from typing import TextIO, Union

from shellpipe.errors import QueryError
from shellpipe.pipe import paths
from shellpipe.pipe.core import P, PipeBase
from shellpipe.query import compile_query
from shellpipe.stream import (
    CHUNK_SIZE,
    ChainReader,
    ManagedReader,
    Reader,
    TeeReader,
    Writer,
    decode,
    encode,
    read_all,
    scan_lines,
)

PatternLike = Union[re.Pattern[str], str, None]


def _compile(pattern: PatternLike) -> re.Pattern[str]:
    if pattern is None:
        raise ValueError("nil regular expression")
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


class Filters(PipeBase):
    """Text-processing stages."""

    def echo(self: P, text: str) -> P:
        """Replace the pipe's contents with ``text``."""
        if self._recorded() is not None:
            return self
        return self.with_reader(io.BytesIO(encode(text)))

    def first(self: P, n: int) -> P:
        """Keep only the first ``n`` lines.

        Input beyond the n-th line is left unread.
        """
        if self._recorded() is not None:
            return self
        if n <= 0:
            return self.with_reader(io.BytesIO())

        def first(reader: Reader, writer: Writer) -> None:
            for count, line in enumerate(scan_lines(reader), 1):
                writer.write(encode(line + "\n"))
                if count >= n:
                    break

        return self.filter(first)

    def last(self: P, n: int) -> P:
        """Keep only the last ``n`` lines."""
        if self._recorded() is not None:
            return self
        if n <= 0:
            return self.with_reader(io.BytesIO())

        def last(reader: Reader, writer: Writer) -> None:
            window: deque[str] = deque(maxlen=n)
            window.extend(scan_lines(reader))
            for line in window:
                writer.write(encode(line + "\n"))

        return self.filter(last)

    def freq(self: P) -> P:
        """Count unique lines, most frequent first.

        Each output line is the count, right-aligned to the width of the
        largest count, a space, then the line. Equal counts are ordered
        by line text.
        """

        def freq(reader: Reader, writer: Writer) -> None:
            counts = Counter(scan_lines(reader))
            if not counts:
                return
            ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
            width = len(str(ranked[0][1]))
            for line, count in ranked:
                writer.write(encode(f"{count:>{width}} {line}\n"))

        return self.filter(freq)

    def join(self: P) -> P:
        """Join all lines with spaces, keeping one terminating newline."""

        def join(reader: Reader, writer: Writer) -> None:
            text = decode(read_all(reader))
            terminator = ""
            if text.endswith("\n"):
                terminator = "\n"
                text = text[:-1]
            writer.write(encode(text.replace("\n", " ") + terminator))

        return self.filter(join)

    def match(self: P, substr: str) -> P:
        """Keep lines containing ``substr``."""

        def keep(line: str, out: TextIO) -> None:
            if substr in line:
                out.write(line + "\n")

        return self.filter_scan(keep)

    def reject(self: P, substr: str) -> P:
        """Drop lines containing ``substr``."""

        def keep(line: str, out: TextIO) -> None:
            if substr not in line:
                out.write(line + "\n")

        return self.filter_scan(keep)

    def match_regexp(self: P, pattern: PatternLike) -> P:
        """Keep lines matching ``pattern``."""
        if self._recorded() is not None:
            return self
        try:
            regexp = _compile(pattern)
        except (ValueError, re.error) as e:
            return self.with_error(e)

        def keep(line: str, out: TextIO) -> None:
            if regexp.search(line):
                out.write(line + "\n")

        return self.filter_scan(keep)

    def reject_regexp(self: P, pattern: PatternLike) -> P:
        """Drop lines matching ``pattern``."""
        if self._recorded() is not None:
            return self
        try:
            regexp = _compile(pattern)
        except (ValueError, re.error) as e:
            return self.with_error(e)

        def keep(line: str, out: TextIO) -> None:
            if not regexp.search(line):
                out.write(line + "\n")

        return self.filter_scan(keep)

    def replace(self: P, search: str, replacement: str) -> P:
        """Replace every occurrence of ``search`` in each line."""
        return self.filter_line(lambda line: line.replace(search, replacement))

    def replace_regexp(self: P, pattern: PatternLike, replacement: str) -> P:
        """Replace every match of ``pattern`` in each line.

        ``replacement`` uses ``re.sub`` syntax, so ``\\1`` is the first group.
        """
        if self._recorded() is not None:
            return self
        try:
            regexp = _compile(pattern)
        except (ValueError, re.error) as e:
            return self.with_error(e)
        return self.filter_line(lambda line: regexp.sub(replacement, line))

    def column(self: P, n: int) -> P:
        """Keep the n-th whitespace-separated column (1-based) of each line.

        Lines with fewer than ``n`` columns are dropped.
        """

        def pick(line: str, out: TextIO) -> None:
            columns = line.split()
            if 0 < n <= len(columns):
                out.write(columns[n - 1] + "\n")

        return self.filter_scan(pick)

    def basename(self: P) -> P:
        """Reduce each path to its last element."""
        return self.filter_line(paths.basename)

    def dirname(self: P) -> P:
        """Reduce each path to its parent directory."""
        return self.filter_line(paths.dirname)

    def concat(self: P) -> P:
        """Read the listed files one after another.

        Files that cannot be opened are skipped without recording an
        error, like ``cat``.
        """
        if self._recorded() is not None:
            return self

        def concat(reader: Reader, writer: Writer) -> None:
            files = []
            for path in scan_lines(reader):
                try:
                    files.append(ManagedReader(open(path, "rb")))
                except OSError:
                    continue
            chained = ChainReader(files)
            try:
                while chunk := chained.read(CHUNK_SIZE):
                    writer.write(chunk)
            finally:
                chained.close()

        return self.filter(concat)

    def sha256_sums(self: P) -> P:
        """Replace each listed path with the hex SHA-256 of its contents.

        Unreadable files produce no output; the first such failure is
        recorded once every path has been processed.
        """

        def sha256_sums(reader: Reader, writer: Writer) -> None:
            first_error: OSError | None = None
            for path in scan_lines(reader):
                try:
                    with open(path, "rb") as f:
                        digest = hashlib.sha256()
                        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                            digest.update(chunk)
                except OSError as e:
                    first_error = first_error or e
                    continue
                writer.write(encode(digest.hexdigest() + "\n"))
            if first_error is not None:
                raise first_error

        return self.filter(sha256_sums)

    def tee(self: P, *writers: Writer) -> P:
        """Copy everything that flows through the pipe to ``writers``.

        With no writers, the pipe's stdout writer is used.
        """
        if self._recorded() is not None:
            return self
        targets = list(writers) or [self.stdout_writer]
        return self.with_reader(TeeReader(self._reader, targets))

    def jq(self: P, query: str) -> P:
        """Run a jq query over each JSON value in the pipe.

        Each result is written as compact JSON on its own line. A query
        that does not compile is recorded immediately.
        """
        if self._recorded() is not None:
            return self
        try:
            program = compile_query(query)
        except QueryError as e:
            return self.with_error(e)

        def jq(reader: Reader, writer: Writer) -> None:
            for result in program.run(decode(read_all(reader))):
                line = json.dumps(result, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
                writer.write(encode(line + "\n"))

        return self.filter(jq)
