"""Filesystem adapter between the version-control engine and a sandbox store.

The engine expects a Node-style ``fs.promises`` surface: read/write/stat and
friends, with POSIX error codes on failure. The sandbox store only offers a
narrow read/write/mkdir/readdir/rm API addressed relative to the project
root. :class:`FilesystemAdapter` bridges the two and records every write in a
side table so callers can rebuild the project's file map after a clone.

Example:
    ```python
    from gitbridge.fs import FilesystemAdapter, MemoryFileStore

    adapter = FilesystemAdapter(MemoryFileStore(url), workdir="/home/project")
    await adapter.write_file("/home/project/README.md", "# hi", encoding="utf8")
    files = adapter.export_files()  # {"README.md": FileRecord(...)}
    ```
"""

from __future__ import annotations

import time

from gitbridge.constants import DEFAULT_WORKDIR
from gitbridge.exceptions import (
    SandboxError,
    SandboxPathNotFoundError,
    UnsupportedOperationError,
)
from gitbridge.fs.types import FileRecord, FileStat, SandboxFileSystem
from gitbridge.logging import get_logger
from gitbridge.utils import paths

logger = get_logger(__name__)

__all__ = ["FilesystemAdapter"]


class FilesystemAdapter:
    """Engine-facing filesystem over a :class:`SandboxFileSystem`.

    Every method propagates the store's errors unchanged, except the symlink
    stand-ins, which fail predictably, and ``chmod``, which is a no-op.

    Attributes:
        store: Underlying sandbox store.
        workdir: Absolute project root as seen by the engine.
        remote_url: Remote this adapter was created for, if any.
    """

    def __init__(
        self,
        store: SandboxFileSystem,
        workdir: str = DEFAULT_WORKDIR,
        remote_url: str | None = None,
    ) -> None:
        self.store = store
        self.workdir = workdir.rstrip("/") or "/"
        self.remote_url = remote_url
        self._records: dict[str, FileRecord] = {}

    def _to_store_path(self, path: str) -> str:
        """Map an engine path onto the store, refusing paths outside the workdir.

        Raises:
            SandboxError: With code ``EACCES`` if *path* escapes the project root.
        """
        store_path = paths.relative(self.workdir, path) if path.startswith("/") else path
        if store_path == ".." or store_path.startswith("../"):
            raise SandboxError(
                f"EACCES: permission denied, '{path}' is outside '{self.workdir}'",
                code="EACCES",
                path=path,
            )
        return store_path or "."

    def _to_project_path(self, path: str) -> str:
        if path.startswith("/"):
            return paths.relative(self.workdir, path)
        return path

    # =========================================================================
    # Side table
    # =========================================================================

    @property
    def records(self) -> dict[str, FileRecord]:
        """Copy of the side table keyed by engine-visible path."""
        return dict(self._records)

    def export_files(self) -> dict[str, FileRecord]:
        """Return every recorded write keyed relative to the project root."""
        return {
            self._to_project_path(path): record
            for path, record in self._records.items()
        }

    def reset(self) -> None:
        """Discard the side table."""
        self._records.clear()

    # =========================================================================
    # fs.promises surface
    # =========================================================================

    async def read_file(self, path: str, encoding: str | None = None) -> bytes | str:
        store_path = self._to_store_path(path)
        logger.debug("fs_read_file", path=store_path, encoding=encoding)
        return await self.store.read_file(store_path, encoding)

    async def write_file(
        self, path: str, data: bytes | str, encoding: str | None = None
    ) -> None:
        store_path = self._to_store_path(path)
        logger.debug("fs_write_file", path=store_path, encoding=encoding)
        if isinstance(data, bytearray | memoryview):
            data = bytes(data)
        await self.store.write_file(store_path, data, encoding)
        self._records[path] = FileRecord(path=path, data=data, encoding=encoding)

    async def mkdir(self, path: str, recursive: bool = True) -> None:
        store_path = self._to_store_path(path)
        logger.debug("fs_mkdir", path=store_path)
        await self.store.mkdir(store_path, recursive=True)

    async def readdir(self, path: str) -> list[str]:
        store_path = self._to_store_path(path)
        logger.debug("fs_readdir", path=store_path)
        return [entry.name for entry in await self.store.readdir(store_path)]

    async def rm(self, path: str, recursive: bool = False) -> None:
        store_path = self._to_store_path(path)
        logger.debug("fs_rm", path=store_path, recursive=recursive)
        await self.store.rm(store_path, recursive=recursive)

    async def rmdir(self, path: str) -> None:
        await self.rm(path, recursive=True)

    async def unlink(self, path: str) -> None:
        await self.rm(path, recursive=False)

    async def stat(self, path: str) -> FileStat:
        """Synthesize stat metadata by listing the parent directory.

        Raises:
            SandboxPathNotFoundError: If the parent has no entry with the
                base name, or the parent itself does not exist.
        """
        store_path = self._to_store_path(path)
        if store_path in ("", "."):
            return FileStat(type="dir", size=0, mtime_ms=time.time() * 1000)

        try:
            entries = await self.store.readdir(paths.dirname(store_path))
        except SandboxPathNotFoundError as e:
            raise SandboxPathNotFoundError(path, "stat") from e

        name = paths.basename(store_path)
        entry = next((e for e in entries if e.name == name), None)
        if entry is None:
            raise SandboxPathNotFoundError(path, "stat")

        return FileStat(
            type="dir" if entry.is_dir else "file",
            size=entry.size,
            mtime_ms=entry.mtime_ms if entry.mtime_ms is not None else time.time() * 1000,
        )

    async def lstat(self, path: str) -> FileStat:
        # No symlinks in the sandbox, so lstat and stat agree.
        return await self.stat(path)

    async def readlink(self, path: str) -> str:
        raise UnsupportedOperationError(
            f"EINVAL: invalid argument, readlink '{path}'",
            code="EINVAL",
            syscall="readlink",
        )

    async def symlink(self, target: str, path: str) -> None:
        raise UnsupportedOperationError(
            f"EPERM: operation not permitted, symlink '{target}' -> '{path}'",
            code="EPERM",
            syscall="symlink",
        )

    async def chmod(self, path: str, mode: int) -> None:
        return None
