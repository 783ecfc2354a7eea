"""Provider abstraction shared by the GitHub and GitLab bindings.

Each binding implements the HTTP calls; the push orchestration in
:meth:`GitProviderAPI.push_with_repo_handling` is identical for both:

1. look the repository up
2. if missing, ask whether to create it, then push everything as the
   initial commit
3. if present, ask for a commit message and commit
4. if the commit is rejected as a non-fast-forward, ask whether to pull
   and retry, re-entering the flow at most ``max_retries`` times

User decisions come from injected callbacks so the flow runs without a UI.
Expected failures are returned as :class:`PushResult`; only programming
errors (:class:`~gitbridge.exceptions.RepoHandleMissingError`) are raised.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from gitbridge.constants import (
    DEFAULT_MAX_PUSH_RETRIES,
    DEFAULT_REF,
    INITIAL_COMMIT_MESSAGE,
    MAX_NETWORK_RETRIES,
)
from gitbridge.exceptions import (
    NonFastForwardError,
    ProviderError,
    ProviderNetworkError,
    RepoHandleMissingError,
    RepositoryCreationCancelledError,
)
from gitbridge.logging import get_logger
from gitbridge.providers.descriptors import RemoteProviderDescriptor

logger = get_logger(__name__)

__all__ = [
    "ConfirmCallback",
    "FileContents",
    "GitProviderAPI",
    "InputCallback",
    "PushResult",
    "RepoHandle",
    "network_retry",
]

#: Relative path -> file content
FileContents = Mapping[str, str | bytes]

ConfirmCallback = Callable[[str], bool | Awaitable[bool]]
InputCallback = Callable[[str], str | None | Awaitable[str | None]]

# Retry for idempotent reads only; writes are never replayed automatically.
network_retry = retry(
    retry=retry_if_exception_type(ProviderNetworkError),
    stop=stop_after_attempt(MAX_NETWORK_RETRIES),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    reraise=True,
)


@dataclass(frozen=True, slots=True)
class RepoHandle:
    """Provider-side project reference for one push session.

    Attributes:
        id: Provider identifier (GitLab project id, GitHub full name).
        owner: Owning user or namespace.
        name: Repository name.
        default_branch: Default branch, if the repository has one.
        web_url: Browser URL of the repository.
        branch: Branch to commit to instead of the default, if set.
    """

    id: int | str
    owner: str
    name: str
    default_branch: str | None
    web_url: str
    branch: str | None = None

    @property
    def target_branch(self) -> str:
        return self.branch or self.default_branch or DEFAULT_REF


@dataclass(frozen=True, slots=True)
class PushResult:
    """Outcome of a push-initiating operation, safe to hand to the UI.

    Attributes:
        success: True if the files reached the remote.
        message: Human-readable outcome.
        cancelled: True when the user declined, as opposed to a failure.
    """

    success: bool
    message: str
    cancelled: bool = False


async def _ask(callback: Callable[[str], object], message: str) -> object:
    answer = callback(message)
    if inspect.isawaitable(answer):
        answer = await answer
    return answer


class GitProviderAPI(ABC):
    """Capability interface for one hosting provider.

    Instances hold the token and the current :class:`RepoHandle`, so use one
    instance per push session.

    Attributes:
        descriptor: Static provider metadata.
        max_push_retries: Default pull-and-retry budget for non-fast-forward pushes.
    """

    descriptor: RemoteProviderDescriptor

    def __init__(self, max_push_retries: int = DEFAULT_MAX_PUSH_RETRIES) -> None:
        self.max_push_retries = max_push_retries
        self._repo: RepoHandle | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def repo(self) -> RepoHandle | None:
        """Handle set by the last successful ``get_repo``/``create_repo``."""
        return self._repo

    def reset(self) -> None:
        """Forget the cached repository handle."""
        self._repo = None

    def _require_repo(self) -> RepoHandle:
        if self._repo is None:
            raise RepoHandleMissingError(self.name)
        return self._repo

    # =========================================================================
    # Provider bindings
    # =========================================================================

    @abstractmethod
    def set_token(self, secret: str) -> None:
        """Authenticate subsequent calls with *secret*."""

    @abstractmethod
    async def validate_credentials(self, username: str, secret: str) -> bool:
        """Return True if *secret* authenticates as *username*."""

    @abstractmethod
    async def get_repo(self, name: str, owner: str) -> RepoHandle | None:
        """Look up ``owner/name``; return None if it does not exist."""

    @abstractmethod
    async def create_repo(self, name: str) -> RepoHandle:
        """Create *name* under the authenticated user with an initial commit."""

    @abstractmethod
    async def check_file_existence(self, branch: str, path: str) -> bool:
        """Return True if *path* exists on *branch* of the current repository."""

    @abstractmethod
    async def create_commit(self, files: FileContents, message: str) -> str:
        """Commit *files* to the target branch and return the new commit id.

        Raises:
            NonFastForwardError: If the branch moved ahead of the base commit.
        """

    @abstractmethod
    async def create_branch(self, name: str, from_ref: str) -> None:
        """Create branch *name* pointing at *from_ref*."""

    @abstractmethod
    async def create_merge_request(
        self, source_branch: str, target_branch: str, title: str
    ) -> str:
        """Open a pull/merge request and return its web URL."""

    # =========================================================================
    # Orchestration
    # =========================================================================

    async def push(self, files: FileContents) -> PushResult:
        """Push *files* as the initial commit of a freshly created repository."""
        await self.create_commit(files, INITIAL_COMMIT_MESSAGE)
        return PushResult(success=True, message="Initial commit pushed")

    async def push_with_repo_handling(
        self,
        repo_name: str,
        username: str,
        files: FileContents,
        secret: str,
        *,
        request_confirmation: ConfirmCallback,
        request_input: InputCallback,
        max_retries: int | None = None,
    ) -> PushResult:
        """Create-or-commit *files* to ``username/repo_name``.

        Args:
            repo_name: Repository name.
            username: Repository owner.
            files: Relative path -> content.
            secret: Access token.
            request_confirmation: Yes/no question callback (sync or async).
            request_input: Free-text question callback (sync or async).
            max_retries: Pull-and-retry budget; defaults to ``max_push_retries``.

        Returns:
            PushResult describing the outcome.

        Raises:
            RepoHandleMissingError: If a binding violates the handle contract.
        """
        retries = self.max_push_retries if max_retries is None else max_retries
        log = logger.bind(provider=self.name, repo=f"{username}/{repo_name}")

        try:
            self.set_token(secret)
            self.reset()
            repo = await self.get_repo(repo_name, username)

            if repo is None:
                create = await _ask(
                    request_confirmation,
                    f'Repository "{repo_name}" doesn\'t exist. '
                    "Would you like to create it?",
                )
                if not create:
                    raise RepositoryCreationCancelledError(self.name)
                repo = await self.create_repo(repo_name)
                await self.push(files)
                log.info("repository_created", url=repo.web_url, files=len(files))
                return PushResult(
                    success=True,
                    message=f"Repository created and code pushed: {repo.web_url}",
                )

            commit_message = await _ask(request_input, "Enter commit message:")
            if not commit_message:
                return PushResult(success=False, message="Commit message is required")

            try:
                await self.create_commit(files, str(commit_message))
            except NonFastForwardError:
                log.warning("push_not_fast_forward", retries_left=retries)
                if retries <= 0:
                    return PushResult(
                        success=False,
                        message="Push failed after retrying. Pull changes and try again.",
                    )
                pull = await _ask(
                    request_confirmation,
                    "Do you want to pull changes and try pushing again?",
                )
                if not pull:
                    return PushResult(
                        success=False,
                        message="Push failed. Consider pulling changes and trying again.",
                    )
                return await self.push_with_repo_handling(
                    repo_name,
                    username,
                    files,
                    secret,
                    request_confirmation=request_confirmation,
                    request_input=request_input,
                    max_retries=retries - 1,
                )

            log.info("commit_pushed", url=repo.web_url, files=len(files))
            return PushResult(
                success=True, message=f"Successfully committed to: {repo.web_url}"
            )
        except RepositoryCreationCancelledError as e:
            log.info("repository_creation_cancelled")
            return PushResult(success=False, message=e.message, cancelled=True)
        except RepoHandleMissingError:
            raise
        except ProviderError as e:
            log.error("push_failed", error=e.message, status=e.status)
            return PushResult(success=False, message=e.message)
