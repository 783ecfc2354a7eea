"""POSIX path helpers for sandbox paths.

The sandbox always uses forward slashes regardless of the host platform, so
these helpers operate on plain strings rather than :mod:`pathlib` objects.
"""

from __future__ import annotations

import re

__all__ = ["basename", "dirname", "join", "relative"]

_TRAILING_SLASHES = re.compile(r"/+$")


def _strip_trailing(path: str) -> str:
    return _TRAILING_SLASHES.sub("", path)


def dirname(path: str) -> str:
    """Return the directory portion of *path*.

    Args:
        path: POSIX-style path.

    Returns:
        ``"."`` for an empty or slash-less path, ``"/"`` for a top-level
        entry, otherwise everything before the last segment.

    Example:
        >>> dirname("/home/project/src/app.py")
        '/home/project/src'
        >>> dirname("README.md")
        '.'
    """
    if not path or "/" not in path:
        return "."
    head = _strip_trailing(path).split("/")[:-1]
    return "/".join(head) or "/"


def basename(path: str, ext: str | None = None) -> str:
    """Return the last segment of *path*, optionally without *ext*.

    Example:
        >>> basename("/home/project/app.py", ".py")
        'app'
    """
    base = _strip_trailing(path).split("/")[-1]
    if ext and base.endswith(ext):
        return base[: -len(ext)]
    return base


def relative(from_path: str, to_path: str) -> str:
    """Return *to_path* expressed relative to *from_path*.

    Example:
        >>> relative("/home/project", "/home/project/src/app.py")
        'src/app.py'
        >>> relative("/home/project/src", "/home/project/docs")
        '../docs'
    """
    if not from_path or not to_path:
        return "."

    from_parts = [p for p in _strip_trailing(from_path).split("/") if p]
    to_parts = [p for p in _strip_trailing(to_path).split("/") if p]

    common = 0
    for left, right in zip(from_parts, to_parts, strict=False):
        if left != right:
            break
        common += 1

    parts = [".."] * (len(from_parts) - common) + to_parts[common:]
    return "/".join(parts) if parts else "."


def join(*paths: str) -> str:
    """Join path segments with ``/`` after stripping trailing slashes.

    Example:
        >>> join("/home/project/", "src", "app.py")
        '/home/project/src/app.py'
    """
    if not paths:
        return "."
    return "/".join(_strip_trailing(p) for p in paths)
