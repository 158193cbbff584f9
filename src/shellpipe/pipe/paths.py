"""
Path helpers with slash-separated, shell-like semantics.

``basename`` and ``dirname`` mirror the Unix utilities: empty input gives
``.``, trailing slashes are ignored, and ``dirname`` keeps a leading
``./``.
"""

from __future__ import annotations

import posixpath


def basename(path: str) -> str:
    """Last element of ``path``."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def dirname(path: str) -> str:
    """All but the last element of ``path``."""
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    head = path[: path.rfind("/") + 1]
    result = posixpath.normpath(head) if head else "."
    # normpath drops a leading "./"
    if len(result) > 1 and path.startswith("./"):
        result = "./" + result
    return result
