"""Sync orchestrator: drives the engine against the current remote's adapter.

The orchestrator owns a single :class:`~gitbridge.fs.FilesystemAdapter`,
tied to the current remote URL. Switching remotes builds a new adapter
over a fresh store namespace.

Concurrency is caller discipline: do not start a second network operation
(``clone``, ``fetch``, ``push``) against the same remote before the first
one completes. No internal lock enforces this.

Network operations authenticate through the vault. When no credential is
stored and no ``request_credentials`` callback is injected, the
authentication callback answers "cancel" so the engine never proceeds
unauthenticated.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from gitbridge.config import SyncConfig
from gitbridge.constants import DEFAULT_REMOTE
from gitbridge.exceptions import NoRemoteUrlError, SyncError
from gitbridge.fs import FileRecord, FilesystemAdapter, SandboxFileSystem
from gitbridge.logging import get_logger
from gitbridge.status import GitFileStatus, StatusRow, classify
from gitbridge.sync.engine import AuthDecision, CommitAuthor, GitEngine
from gitbridge.sync.meta import GitMeta, GitMetaStore, MemoryGitMetaStore
from gitbridge.utils import paths
from gitbridge.vault import Credential, CredentialVault, get_domain

logger = get_logger(__name__)

__all__ = ["CloneResult", "CredentialPrompt", "StoreFactory", "SyncOrchestrator"]

#: Builds the sandbox store for a remote URL (the store namespace)
StoreFactory = Callable[[str], SandboxFileSystem]

#: Interactive credential entry, consulted when the vault has nothing stored
CredentialPrompt = Callable[[str], Credential | None | Awaitable[Credential | None]]


@dataclass(frozen=True, slots=True)
class CloneResult:
    """Project root and the files written during a clone.

    Attributes:
        root_dir: Absolute project root inside the sandbox.
        file_map: Written files keyed relative to ``root_dir``.
    """

    root_dir: str
    file_map: dict[str, FileRecord]


class SyncOrchestrator:
    """Clone/fetch/commit/push/status against one remote at a time.

    Args:
        engine: Version-control engine.
        vault: Credential vault used by the authentication callbacks.
        store_factory: Builds the sandbox store for a remote URL.
        workdir: Project root; defaults to ``config.workdir``.
        meta_store: Persistence for the last-used remote URL and branch.
        config: Sync settings (refs, clone depth, commit author, proxy).
        request_credentials: Optional interactive credential entry.
    """

    def __init__(
        self,
        engine: GitEngine,
        vault: CredentialVault,
        store_factory: StoreFactory,
        workdir: str | None = None,
        meta_store: GitMetaStore | None = None,
        config: SyncConfig | None = None,
        request_credentials: CredentialPrompt | None = None,
    ) -> None:
        self.engine = engine
        self.vault = vault
        self.config = config or SyncConfig()
        self.workdir = (workdir or self.config.workdir).rstrip("/") or "/"
        self.meta_store = meta_store if meta_store is not None else MemoryGitMetaStore()
        self._store_factory = store_factory
        self._request_credentials = request_credentials
        self._adapter: FilesystemAdapter | None = None

    @property
    def adapter(self) -> FilesystemAdapter | None:
        """Adapter for the current remote, if one has been used."""
        return self._adapter

    def adapter_for(self, url: str) -> FilesystemAdapter:
        """Return the adapter for *url*, replacing it if the remote changed."""
        if self._adapter is None or self._adapter.remote_url != url:
            logger.debug("adapter_created", domain=get_domain(url))
            self._adapter = FilesystemAdapter(
                self._store_factory(url), workdir=self.workdir, remote_url=url
            )
        return self._adapter

    async def _resolve_url(self, url: str | None, operation: str) -> str:
        if url:
            return url
        meta = await self.meta_store.load()
        if meta is None or not meta.url:
            raise NoRemoteUrlError(operation)
        return meta.url

    async def _ensure_vault(self, operation: str) -> None:
        if not await self.vault.ensure_encryption():
            raise SyncError("Failed to initialize secure storage", operation=operation)

    def _project_path(self, path: str) -> str:
        if path.startswith("/"):
            return paths.relative(self.workdir, path)
        return path

    # =========================================================================
    # Authentication callbacks
    # =========================================================================

    async def _on_auth(self, url: str) -> AuthDecision:
        credential = await self.vault.lookup(url)
        if credential is not None:
            return AuthDecision.from_credential(credential)

        if self._request_credentials is not None:
            entered = self._request_credentials(url)
            if inspect.isawaitable(entered):
                entered = await entered
            if entered is not None:
                return AuthDecision.from_credential(entered)

        logger.info("auth_cancelled", domain=get_domain(url))
        return AuthDecision.cancelled()

    async def _on_auth_success(self, url: str, auth: AuthDecision) -> None:
        credential = auth.to_credential()
        if credential is not None:
            await self.vault.save(url, credential)

    async def _on_auth_failure(self, url: str, auth: AuthDecision) -> None:
        logger.warning(
            "auth_failed", domain=get_domain(url), username=auth.username
        )

    def _auth_kwargs(self) -> dict[str, object]:
        return {
            "cors_proxy": self.config.cors_proxy,
            "on_auth": self._on_auth,
            "on_auth_success": self._on_auth_success,
            "on_auth_failure": self._on_auth_failure,
        }

    # =========================================================================
    # Remote operations
    # =========================================================================

    async def clone(self, url: str, ref: str | None = None) -> CloneResult:
        """Shallow single-branch clone of *url* into the project root.

        The side table is emptied first; on failure or cancellation it is
        emptied again so no partial file map survives.
        """
        await self._ensure_vault("clone")
        branch = ref or self.config.default_ref
        adapter = self.adapter_for(url)
        adapter.reset()

        log = logger.bind(domain=get_domain(url), ref=branch)
        log.info("clone_started")
        try:
            await self.engine.clone(
                fs=adapter,
                dir=self.workdir,
                url=url,
                ref=branch,
                depth=self.config.clone_depth,
                single_branch=True,
                remote=DEFAULT_REMOTE,
                **self._auth_kwargs(),
            )
        except (Exception, asyncio.CancelledError):
            adapter.reset()
            log.warning("clone_aborted")
            raise

        file_map = adapter.export_files()
        await self.meta_store.save(GitMeta(url=url, branch=branch))
        log.info("clone_completed", files=len(file_map))
        return CloneResult(root_dir=self.workdir, file_map=file_map)

    async def fetch(self, ref: str | None = None, url: str | None = None) -> None:
        url = await self._resolve_url(url, "fetch")
        await self._ensure_vault("fetch")
        await self.engine.fetch(
            fs=self.adapter_for(url),
            dir=self.workdir,
            remote=DEFAULT_REMOTE,
            ref=ref,
            **self._auth_kwargs(),
        )
        logger.info("fetch_completed", domain=get_domain(url), ref=ref)

    async def push(self, ref: str, url: str | None = None) -> None:
        url = await self._resolve_url(url, "push")
        await self._ensure_vault("push")
        await self.engine.push(
            fs=self.adapter_for(url),
            dir=self.workdir,
            remote=DEFAULT_REMOTE,
            ref=ref,
            remote_ref=ref,
            **self._auth_kwargs(),
        )
        logger.info("push_completed", domain=get_domain(url), ref=ref)

    # =========================================================================
    # Local operations
    # =========================================================================

    async def commit(self, message: str, url: str | None = None) -> str:
        url = await self._resolve_url(url, "commit")
        sha = await self.engine.commit(
            fs=self.adapter_for(url),
            dir=self.workdir,
            message=message,
            author=CommitAuthor(self.config.author_name, self.config.author_email),
        )
        logger.info("commit_created", sha=sha[:7] if sha else None)
        return sha

    async def stage_file(self, path: str, url: str | None = None) -> None:
        url = await self._resolve_url(url, "stage")
        await self.engine.add(
            fs=self.adapter_for(url), dir=self.workdir, filepath=path
        )

    async def unstage_file(self, path: str, url: str | None = None) -> None:
        url = await self._resolve_url(url, "unstage")
        await self.engine.remove(
            fs=self.adapter_for(url), dir=self.workdir, filepath=path
        )

    async def is_ignored(self, path: str, url: str | None = None) -> bool:
        url = await self._resolve_url(url, "is_ignored")
        return await self.engine.is_ignored(
            fs=self.adapter_for(url),
            dir=self.workdir,
            filepath=self._project_path(path),
        )

    async def status_matrix(self, url: str | None = None) -> list[StatusRow]:
        """Ask the engine for fresh status rows. Never cached."""
        url = await self._resolve_url(url, "status")
        return await self.engine.status_matrix(fs=self.adapter_for(url), dir=self.workdir)

    async def status(
        self, url: str | None = None
    ) -> list[tuple[StatusRow, GitFileStatus]]:
        """Status rows paired with their classified state.

        Raises:
            StatusClassificationError: If the engine reports an unknown state.
        """
        return [(row, classify(row)) for row in await self.status_matrix(url)]

    async def sync_changes(self, files: Mapping[str, str], url: str | None = None) -> None:
        """Write text *files* into the project so the engine sees them.

        Keys outside the project root, including sibling directories that
        share its prefix, are joined onto it.
        """
        url = await self._resolve_url(url, "sync")
        adapter = self.adapter_for(url)
        for key, content in files.items():
            if key == self.workdir or key.startswith(f"{self.workdir}/"):
                path = key
            else:
                path = paths.join(self.workdir, key.lstrip("/"))
            await adapter.mkdir(paths.dirname(path))
            await adapter.write_file(path, content, encoding="utf8")
        logger.debug("changes_synced", files=len(files))
