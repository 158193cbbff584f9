"""
Sources - functions that create pipes.

Example:
    >>> from shellpipe import find_files, exec_
    >>> find_files("src").match(".py").exec_for_each("wc -l {{ line }}").stdout()
    >>> exec_("git log --oneline").first(5).stdout()
"""

from __future__ import annotations

import glob
import io
import os
import stat
import sys
from collections.abc import Iterable

import httpx

from shellpipe.pipe import Pipe, SinkResult
from shellpipe.stream import encode
from shellpipe.transport.http import HTTPPipe

# Characters that make list_files treat its argument as a glob pattern
_GLOB_CHARS = frozenset("[]^*?\\{}!")


def new_pipe() -> Pipe:
    """Create an empty pipe."""
    return Pipe()


def echo(text: str) -> Pipe:
    """Create a pipe containing ``text``."""
    return Pipe(io.BytesIO(encode(text)))


def file(path: str | os.PathLike[str]) -> Pipe:
    """Create a pipe reading the file at ``path``.

    A file that cannot be opened is recorded as the pipe's error.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        return Pipe().with_error(e)
    return Pipe(f)


def count_lines(path: str | os.PathLike[str]) -> SinkResult[int]:
    """Count the lines of the file at ``path``."""
    return file(path).count_lines()


def slice_(lines: Iterable[str]) -> Pipe:
    """Create a pipe with one element of ``lines`` per line.

    An empty iterable gives an empty pipe.
    """
    items = list(lines)
    if not items:
        return Pipe()
    return echo("\n".join(items) + "\n")


def args() -> Pipe:
    """Create a pipe with one command-line argument per line."""
    return slice_(sys.argv[1:])


def stdin() -> Pipe:
    """Create a pipe reading the program's standard input.

    Standard input is left open at end-of-stream.
    """
    return Pipe().with_reader(sys.stdin.buffer, close=False)


def exec_(cmd_line: str) -> Pipe:
    """Create a pipe containing the output of ``cmd_line``."""
    return Pipe().exec(cmd_line)


def if_exists(path: str | os.PathLike[str]) -> Pipe:
    """Create an empty pipe whose error records whether ``path`` exists."""
    try:
        os.stat(path)
    except OSError as e:
        return Pipe().with_error(e)
    return Pipe()


def find_files(root: str) -> Pipe:
    """List every file under ``root``, recursively, in lexical order.

    A missing ``root`` is recorded as the pipe's error; subdirectories
    that cannot be read are skipped.
    """
    try:
        info = os.stat(root)
    except OSError as e:
        return Pipe().with_error(e)
    if not stat.S_ISDIR(info.st_mode):
        return slice_([root])
    found = []
    for dirpath, _dirnames, filenames in os.walk(root):
        found.extend(os.path.join(dirpath, name) for name in filenames)
    found.sort(key=lambda path: path.split(os.sep))
    return slice_(found)


def list_files(path: str) -> Pipe:
    """List the files matching ``path``.

    ``path`` may be a glob pattern, a directory (its entries are listed),
    or a single file (listed without a trailing newline).
    """
    if _GLOB_CHARS.intersection(path):
        return slice_(sorted(glob.glob(path)))
    try:
        names = sorted(os.listdir(path))
    except NotADirectoryError:
        return echo(path)
    except OSError as e:
        return Pipe().with_error(e)
    return slice_(os.path.join(path, name) for name in names)


def get(url: str) -> HTTPPipe:
    """Create a pipe containing the response to GET ``url``."""
    return Pipe().get(url)


def post(url: str, body: bytes | str | None = None) -> HTTPPipe:
    """Create a pipe containing the response to POST ``url``."""
    pipe = HTTPPipe.from_pipe(Pipe(), "POST", url)
    if body is not None:
        pipe.with_body(body)
    return pipe


def do(request: httpx.Request) -> HTTPPipe:
    """Create a pipe containing the response to a prepared request."""
    return Pipe().do(request)
