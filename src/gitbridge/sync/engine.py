"""Boundary of the embedded version-control engine.

gitbridge does not implement object storage, packfiles or merges. Any engine
that can run against a :class:`~gitbridge.fs.FilesystemAdapter` and accepts
the authentication callbacks below can drive a :class:`SyncOrchestrator`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from gitbridge.fs.adapter import FilesystemAdapter
from gitbridge.status import StatusRow
from gitbridge.vault import Credential

__all__ = [
    "AuthCallback",
    "AuthDecision",
    "AuthResultCallback",
    "CommitAuthor",
    "GitEngine",
]


@dataclass(frozen=True, slots=True)
class AuthDecision:
    """Answer to an engine's authentication request.

    Either carries a username/password pair or asks the engine to cancel the
    operation instead of proceeding unauthenticated.
    """

    username: str | None = None
    password: str | None = None
    cancel: bool = False

    @classmethod
    def cancelled(cls) -> AuthDecision:
        return cls(cancel=True)

    @classmethod
    def from_credential(cls, credential: Credential) -> AuthDecision:
        return cls(username=credential.username, password=credential.secret)

    def to_credential(self) -> Credential | None:
        if self.cancel or not self.username or not self.password:
            return None
        return Credential(username=self.username, secret=self.password)

    def __repr__(self) -> str:
        if self.cancel:
            return "AuthDecision(cancel=True)"
        return f"AuthDecision(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class CommitAuthor:
    name: str
    email: str


AuthCallback = Callable[[str], Awaitable[AuthDecision]]
AuthResultCallback = Callable[[str, AuthDecision], Awaitable[None]]


class GitEngine(Protocol):
    """Async operations the orchestrator needs from the engine.

    Every call receives the adapter as ``fs`` and the project root as ``dir``.
    Network calls additionally receive the three authentication callbacks.
    """

    async def clone(
        self,
        *,
        fs: FilesystemAdapter,
        dir: str,
        url: str,
        ref: str,
        depth: int,
        single_branch: bool,
        remote: str,
        cors_proxy: str | None,
        on_auth: AuthCallback,
        on_auth_success: AuthResultCallback,
        on_auth_failure: AuthResultCallback,
    ) -> None: ...

    async def fetch(
        self,
        *,
        fs: FilesystemAdapter,
        dir: str,
        remote: str,
        ref: str | None,
        cors_proxy: str | None,
        on_auth: AuthCallback,
        on_auth_success: AuthResultCallback,
        on_auth_failure: AuthResultCallback,
    ) -> None: ...

    async def push(
        self,
        *,
        fs: FilesystemAdapter,
        dir: str,
        remote: str,
        ref: str,
        remote_ref: str,
        cors_proxy: str | None,
        on_auth: AuthCallback,
        on_auth_success: AuthResultCallback,
        on_auth_failure: AuthResultCallback,
    ) -> None: ...

    async def commit(
        self, *, fs: FilesystemAdapter, dir: str, message: str, author: CommitAuthor
    ) -> str:
        """Record the index as a new commit and return its sha."""
        ...

    async def add(self, *, fs: FilesystemAdapter, dir: str, filepath: str) -> None: ...

    async def remove(self, *, fs: FilesystemAdapter, dir: str, filepath: str) -> None: ...

    async def is_ignored(
        self, *, fs: FilesystemAdapter, dir: str, filepath: str
    ) -> bool: ...

    async def status_matrix(
        self, *, fs: FilesystemAdapter, dir: str
    ) -> list[StatusRow]: ...
