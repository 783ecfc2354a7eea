"""Last-used remote metadata for a project."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["GitMeta", "GitMetaStore", "MemoryGitMetaStore"]


class GitMeta(BaseModel):
    """Remote URL and branch a project was cloned from.

    Attributes:
        url: Remote URL.
        branch: Branch that was checked out.
        source_hash: Commit the project was built from, when known. Stored as
            ``sourceHash`` by the chat persistence layer.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    branch: str
    source_hash: str | None = Field(default=None, alias="sourceHash")


class GitMetaStore(Protocol):
    """Persistence collaborator holding one :class:`GitMeta` per project."""

    async def load(self) -> GitMeta | None: ...

    async def save(self, meta: GitMeta) -> None: ...


class MemoryGitMetaStore:
    """Process-local :class:`GitMetaStore`."""

    def __init__(self, meta: GitMeta | None = None) -> None:
        self._meta = meta

    async def load(self) -> GitMeta | None:
        return self._meta

    async def save(self, meta: GitMeta) -> None:
        self._meta = meta
