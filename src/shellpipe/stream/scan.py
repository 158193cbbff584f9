"""
Line scanning over binary readers.

Lines are split on ``\\n`` with one trailing ``\\r`` dropped, and a final
line without a terminator is still reported. Bytes that are not valid
UTF-8 are carried through ``surrogateescape`` so they survive a
decode/encode round trip.
"""

from __future__ import annotations

from collections.abc import Iterator

from shellpipe.stream.reader import CHUNK_SIZE, Reader

ENCODING = "utf-8"
ERRORS = "surrogateescape"


def decode(data: bytes | bytearray) -> str:
    return bytes(data).decode(ENCODING, ERRORS)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, ERRORS)


def _line(data: bytes | bytearray) -> str:
    if data.endswith(b"\r"):
        data = data[:-1]
    return decode(data)


def scan_lines(reader: Reader, chunk_size: int = CHUNK_SIZE) -> Iterator[str]:
    """Yield the lines of a reader, without their terminators.

    The reader is not closed. Reading stops as soon as the caller stops
    iterating, apart from the chunk already fetched.
    """
    pending = bytearray()
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        search_from = len(pending)
        pending += chunk
        start = 0
        while True:
            end = pending.find(b"\n", search_from)
            if end < 0:
                break
            yield _line(pending[start:end])
            start = search_from = end + 1
        del pending[:start]
    if pending:
        yield _line(pending)
