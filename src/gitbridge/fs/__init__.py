"""Filesystem layer: the engine-facing adapter and the sandbox stores behind it."""

from __future__ import annotations

from gitbridge.fs.adapter import FilesystemAdapter
from gitbridge.fs.factory import create_store_factory
from gitbridge.fs.http import HttpFileStore
from gitbridge.fs.memory import MemoryFileStore, MemoryStoreFactory
from gitbridge.fs.types import DirEntry, FileRecord, FileStat, SandboxFileSystem

__all__ = [
    "DirEntry",
    "FileRecord",
    "FileStat",
    "FilesystemAdapter",
    "HttpFileStore",
    "MemoryFileStore",
    "MemoryStoreFactory",
    "SandboxFileSystem",
    "create_store_factory",
]
