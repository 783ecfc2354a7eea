"""In-memory sandbox store.

Acts as the local embedded filesystem: one independent tree per namespace,
where the namespace is the remote URL being synchronized. Reopening a
namespace through the same :class:`MemoryStoreFactory` returns the same tree.
"""

from __future__ import annotations

import time

from gitbridge.exceptions import SandboxError, SandboxPathNotFoundError
from gitbridge.fs.types import DirEntry
from gitbridge.logging import get_logger

logger = get_logger(__name__)

__all__ = ["MemoryFileStore", "MemoryStoreFactory"]

_ROOT = ""


def _normalize(path: str) -> str:
    parts: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                raise SandboxError(
                    f"EACCES: permission denied, '{path}' is outside the sandbox",
                    code="EACCES",
                    path=path,
                )
            parts.pop()
            continue
        parts.append(part)
    return "/".join(parts)


def _parent(path: str) -> str:
    return path.rpartition("/")[0]


def _now_ms() -> float:
    return time.time() * 1000


class MemoryFileStore:
    """Dictionary-backed :class:`~gitbridge.fs.types.SandboxFileSystem`.

    Attributes:
        namespace: Name of the tree (usually the remote URL).
    """

    def __init__(self, namespace: str = "default") -> None:
        self.namespace = namespace
        self._files: dict[str, bytes] = {}
        self._mtimes: dict[str, float] = {_ROOT: _now_ms()}
        self._dirs: set[str] = {_ROOT}

    def _require_dir(self, path: str, original: str, syscall: str) -> None:
        if path in self._dirs:
            return
        if path in self._files:
            raise SandboxError(
                f"ENOTDIR: not a directory, {syscall} '{original}'",
                code="ENOTDIR",
                path=original,
            )
        raise SandboxPathNotFoundError(original, syscall)

    async def read_file(self, path: str, encoding: str | None = None) -> bytes | str:
        key = _normalize(path)
        if key in self._dirs:
            raise SandboxError(
                f"EISDIR: illegal operation on a directory, read '{path}'",
                code="EISDIR",
                path=path,
            )
        try:
            data = self._files[key]
        except KeyError:
            raise SandboxPathNotFoundError(path, "open") from None
        if encoding:
            return data.decode(encoding)
        return data

    async def write_file(
        self, path: str, data: bytes | str, encoding: str | None = None
    ) -> None:
        key = _normalize(path)
        if key in self._dirs:
            raise SandboxError(
                f"EISDIR: illegal operation on a directory, open '{path}'",
                code="EISDIR",
                path=path,
            )
        self._require_dir(_parent(key), path, "open")
        if isinstance(data, str):
            data = data.encode(encoding or "utf-8")
        self._files[key] = bytes(data)
        self._mtimes[key] = _now_ms()

    async def mkdir(self, path: str, recursive: bool = True) -> None:
        key = _normalize(path)
        if key in self._files:
            raise SandboxError(
                f"EEXIST: file already exists, mkdir '{path}'",
                code="EEXIST",
                path=path,
            )
        if key in self._dirs:
            if recursive:
                return
            raise SandboxError(
                f"EEXIST: file already exists, mkdir '{path}'",
                code="EEXIST",
                path=path,
            )
        parent = _parent(key)
        if parent not in self._dirs:
            if not recursive:
                raise SandboxPathNotFoundError(path, "mkdir")
            await self.mkdir(parent, recursive=True)
        self._dirs.add(key)
        self._mtimes[key] = _now_ms()

    async def readdir(self, path: str) -> list[DirEntry]:
        key = _normalize(path)
        self._require_dir(key, path, "scandir")
        prefix = f"{key}/" if key else ""
        entries: list[DirEntry] = []
        for d in self._dirs:
            if d and _parent(d) == key:
                entries.append(
                    DirEntry(name=d[len(prefix) :], is_dir=True, mtime_ms=self._mtimes.get(d))
                )
        for f, data in self._files.items():
            if _parent(f) == key:
                entries.append(
                    DirEntry(
                        name=f[len(prefix) :],
                        is_dir=False,
                        size=len(data),
                        mtime_ms=self._mtimes.get(f),
                    )
                )
        return sorted(entries, key=lambda e: e.name)

    async def rm(self, path: str, recursive: bool = False) -> None:
        key = _normalize(path)
        if key in self._files:
            del self._files[key]
            self._mtimes.pop(key, None)
            return
        if key not in self._dirs:
            raise SandboxPathNotFoundError(path, "rm")

        prefix = f"{key}/" if key else ""
        children = [f for f in self._files if f.startswith(prefix)]
        subdirs = [d for d in self._dirs if d and d != key and d.startswith(prefix)]
        if (children or subdirs) and not recursive:
            raise SandboxError(
                f"ENOTEMPTY: directory not empty, rmdir '{path}'",
                code="ENOTEMPTY",
                path=path,
            )
        for f in children:
            del self._files[f]
            self._mtimes.pop(f, None)
        for d in subdirs:
            self._dirs.discard(d)
            self._mtimes.pop(d, None)
        if key != _ROOT:
            self._dirs.discard(key)
            self._mtimes.pop(key, None)


class MemoryStoreFactory:
    """Hands out one :class:`MemoryFileStore` per namespace.

    Used as the ``store_factory`` of the sync orchestrator so that switching
    back to a previously used remote finds its tree intact.
    """

    def __init__(self) -> None:
        self._stores: dict[str, MemoryFileStore] = {}

    def __call__(self, namespace: str) -> MemoryFileStore:
        store = self._stores.get(namespace)
        if store is None:
            logger.debug("memory_store_created", namespace=namespace)
            store = MemoryFileStore(namespace)
            self._stores[namespace] = store
        return store

    def discard(self, namespace: str) -> None:
        """Drop the tree for *namespace*; unknown namespaces are ignored."""
        self._stores.pop(namespace, None)
