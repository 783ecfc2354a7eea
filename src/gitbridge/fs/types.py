"""Value objects and the store protocol shared by the filesystem layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from gitbridge.constants import STAT_GID, STAT_MODE, STAT_UID

__all__ = [
    "DirEntry",
    "FileRecord",
    "FileStat",
    "SandboxFileSystem",
]


@dataclass(frozen=True, slots=True)
class DirEntry:
    """Single directory listing entry returned by a sandbox store.

    Attributes:
        name: Entry name (no directory component).
        is_dir: True for directories.
        size: Size in bytes (0 for directories or when unknown).
        mtime_ms: Modification time in epoch milliseconds, if known.
    """

    name: str
    is_dir: bool = False
    size: int = 0
    mtime_ms: float | None = None


@dataclass(frozen=True, slots=True)
class FileStat:
    """Minimal stat result synthesized for the version-control engine.

    The sandbox has no inode or permission model, so ownership and mode are
    fixed placeholders.
    """

    type: str
    size: int
    mtime_ms: float
    mode: int = STAT_MODE
    uid: int = STAT_UID
    gid: int = STAT_GID

    def is_file(self) -> bool:
        return self.type == "file"

    def is_directory(self) -> bool:
        return self.type == "dir"

    def is_symbolic_link(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Content written through the adapter, kept for export after a clone.

    Attributes:
        path: Path the engine wrote to (may be absolute).
        data: Raw bytes or decoded text exactly as written.
        encoding: Encoding the engine passed with the write, if any.
    """

    path: str
    data: bytes | str
    encoding: str | None = None


@runtime_checkable
class SandboxFileSystem(Protocol):
    """File API of a sandbox, addressed with workdir-relative paths.

    Implementations raise :class:`~gitbridge.exceptions.SandboxPathNotFoundError`
    for missing paths and :class:`~gitbridge.exceptions.SandboxError` for
    every other failure.
    """

    async def read_file(self, path: str, encoding: str | None = None) -> bytes | str:
        """Return bytes, or text decoded with *encoding* when given."""
        ...

    async def write_file(
        self, path: str, data: bytes | str, encoding: str | None = None
    ) -> None:
        """Create or replace the file at *path*."""
        ...

    async def mkdir(self, path: str, recursive: bool = True) -> None:
        """Create the directory at *path*."""
        ...

    async def readdir(self, path: str) -> list[DirEntry]:
        """List the entries of the directory at *path*."""
        ...

    async def rm(self, path: str, recursive: bool = False) -> None:
        """Remove the file or directory at *path*."""
        ...
