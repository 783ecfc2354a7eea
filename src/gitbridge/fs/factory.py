"""Selection of the sandbox store backing the sync orchestrator."""

from __future__ import annotations

from collections.abc import Callable

from gitbridge.config import FileServerConfig
from gitbridge.fs.http import HttpFileStore
from gitbridge.fs.memory import MemoryStoreFactory
from gitbridge.fs.types import SandboxFileSystem
from gitbridge.logging import get_logger

logger = get_logger(__name__)

__all__ = ["create_store_factory"]


def create_store_factory(
    config: FileServerConfig | None = None,
) -> Callable[[str], SandboxFileSystem]:
    """Return a callable mapping a remote URL to its sandbox store.

    With a file server URL configured every remote shares the server's single
    project directory. Otherwise each remote gets its own in-memory tree.
    """
    config = config or FileServerConfig()
    if not config.url:
        return MemoryStoreFactory()

    url, api_key = config.url, config.api_key
    logger.info("file_server_selected", url=url, has_api_key=bool(api_key))

    def factory(namespace: str) -> SandboxFileSystem:
        return HttpFileStore(url, api_key=api_key)

    return factory
