"""GitHub binding built on PyGithub.

PyGithub is synchronous, so every call runs in a worker thread via
``asyncio.to_thread``. An optional aiolimiter rate limit keeps bursts of
blob uploads under GitHub's hourly request budget.

Commits use the Git Data API: one blob per file, a tree on top of the
branch head's tree, a commit whose parent is the head, then a ref update.
Only the ref update is durable; a failure or cancellation before it leaves
unreferenced objects that GitHub garbage-collects.
"""

from __future__ import annotations

import asyncio
import base64
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from aiolimiter import AsyncLimiter
from github import Auth, Github, GithubException, InputGitTreeElement
from requests import RequestException

from gitbridge.config import GitHubConfig
from gitbridge.constants import DEFAULT_MAX_PUSH_RETRIES
from gitbridge.exceptions import (
    NonFastForwardError,
    ProviderAuthError,
    ProviderError,
    ProviderNetworkError,
    RepositoryNotFoundError,
)
from gitbridge.logging import get_logger
from gitbridge.providers.base import FileContents, GitProviderAPI, RepoHandle, network_retry
from gitbridge.providers.descriptors import GITHUB_PROVIDER

if TYPE_CHECKING:
    from github.Repository import Repository

logger = get_logger(__name__)

__all__ = ["GitHubProvider", "NON_FAST_FORWARD_MARKER"]

T = TypeVar("T")

#: Substring GitHub returns when a ref update would drop remote commits
NON_FAST_FORWARD_MARKER = "Update is not a fast-forward"

_SHA_PATTERN = re.compile(r"^[0-9a-f]{40}$")


def _error_text(exc: GithubException) -> str:
    data = exc.data if isinstance(exc.data, dict) else {}
    return str(data.get("message") or exc)


class GitHubProvider(GitProviderAPI):
    """:class:`GitProviderAPI` for github.com (or GitHub Enterprise).

    Args:
        config: GitHub settings (API URL and optional rate limit).
        github: Pre-built PyGithub client, mainly for tests. ``set_token``
            replaces it.
        max_push_retries: Pull-and-retry budget for non-fast-forward pushes.
    """

    descriptor = GITHUB_PROVIDER

    def __init__(
        self,
        config: GitHubConfig | None = None,
        github: Github | None = None,
        max_push_retries: int = DEFAULT_MAX_PUSH_RETRIES,
    ) -> None:
        super().__init__(max_push_retries=max_push_retries)
        self._config = config or GitHubConfig()
        self._github = github
        self._gh_repo: Repository | None = None
        if self._config.rate_limit is not None:
            self._rate_limiter: AsyncLimiter | None = AsyncLimiter(
                self._config.rate_limit, self._config.rate_period
            )
        else:
            self._rate_limiter = None

    @property
    def github(self) -> Github:
        if self._github is None:
            raise ProviderError("No token set. Call set_token first.", provider=self.name)
        return self._github

    def set_token(self, secret: str) -> None:
        if self._github is not None:
            self._github.close()
        self._github = Github(auth=Auth.Token(secret), base_url=self._config.api_url)

    def reset(self) -> None:
        super().reset()
        self._gh_repo = None

    def _require_gh_repo(self) -> Repository:
        handle = self._require_repo()
        if self._gh_repo is None:
            self._gh_repo = self.github.get_repo(str(handle.id))
        return self._gh_repo

    def _convert_error(self, exc: Exception, operation: str) -> ProviderError:
        if isinstance(exc, RequestException):
            return ProviderNetworkError(
                f"GitHub {operation} failed: {exc}", provider=self.name
            )
        if isinstance(exc, GithubException):
            text = _error_text(exc)
            if NON_FAST_FORWARD_MARKER in text:
                return NonFastForwardError(text, provider=self.name, status=exc.status)
            if exc.status == 401:
                return ProviderAuthError(self.name, self.descriptor.title)
            if exc.status == 404:
                return RepositoryNotFoundError(
                    f"GitHub {operation} failed: {text}", provider=self.name, status=404
                )
            return ProviderError(
                f"GitHub {operation} failed: {text}", provider=self.name, status=exc.status
            )
        raise TypeError(f"Unexpected exception type: {type(exc).__name__}")

    async def _call(self, operation: str, fn: Callable[[], T]) -> T:
        """Run a blocking PyGithub call off the event loop, mapping its errors."""

        def _run() -> T:
            try:
                return fn()
            except (GithubException, RequestException) as e:
                raise self._convert_error(e, operation) from e

        if self._rate_limiter is not None:
            async with self._rate_limiter:
                return await asyncio.to_thread(_run)
        return await asyncio.to_thread(_run)

    def _to_handle(self, gh_repo: Repository) -> RepoHandle:
        return RepoHandle(
            id=gh_repo.full_name,
            owner=gh_repo.owner.login,
            name=gh_repo.name,
            default_branch=gh_repo.default_branch,
            web_url=gh_repo.html_url,
        )

    # =========================================================================
    # Credentials and repositories
    # =========================================================================

    async def validate_credentials(self, username: str, secret: str) -> bool:
        self.set_token(secret)
        try:
            login = await self._call("user lookup", lambda: self.github.get_user().login)
        except ProviderError as e:
            logger.warning("github_credentials_invalid", error=e.message)
            return False
        return login == username

    @network_retry
    async def get_repo(self, name: str, owner: str) -> RepoHandle | None:
        def _get() -> Repository | None:
            try:
                return self.github.get_repo(f"{owner}/{name}")
            except GithubException as e:
                if e.status == 404:
                    return None
                raise

        gh_repo = await self._call("repository lookup", _get)
        if gh_repo is None:
            logger.debug("github_repo_not_found", repo=f"{owner}/{name}")
            return None
        self._gh_repo = gh_repo
        self._repo = self._to_handle(gh_repo)
        return self._repo

    async def create_repo(self, name: str) -> RepoHandle:
        gh_repo = await self._call(
            "repository creation",
            lambda: self.github.get_user().create_repo(name, auto_init=True),
        )
        self._gh_repo = gh_repo
        self._repo = self._to_handle(gh_repo)
        logger.info("github_repo_created", repo=gh_repo.full_name)
        return self._repo

    @network_retry
    async def check_file_existence(self, branch: str, path: str) -> bool:
        gh_repo = self._require_gh_repo()

        def _exists() -> bool:
            try:
                gh_repo.get_contents(path, ref=branch)
            except GithubException as e:
                if e.status == 404:
                    return False
                raise
            return True

        return await self._call("file lookup", _exists)

    # =========================================================================
    # Commits, branches, pull requests
    # =========================================================================

    async def create_commit(self, files: FileContents, message: str) -> str:
        gh_repo = self._require_gh_repo()
        branch = self._require_repo().target_branch

        def _commit() -> str:
            try:
                ref = gh_repo.get_git_ref(f"heads/{branch}")
            except GithubException as e:
                if e.status not in (404, 409):
                    raise
                ref = None

            elements = []
            for path, content in files.items():
                if isinstance(content, bytes):
                    blob = gh_repo.create_git_blob(
                        base64.b64encode(content).decode("ascii"), "base64"
                    )
                else:
                    blob = gh_repo.create_git_blob(content, "utf-8")
                elements.append(InputGitTreeElement(path, "100644", "blob", sha=blob.sha))

            if ref is None:
                tree = gh_repo.create_git_tree(elements)
                commit = gh_repo.create_git_commit(message, tree, [])
                gh_repo.create_git_ref(f"refs/heads/{branch}", commit.sha)
                return commit.sha

            parent = gh_repo.get_git_commit(ref.object.sha)
            tree = gh_repo.create_git_tree(elements, parent.tree)
            commit = gh_repo.create_git_commit(message, tree, [parent])
            ref.edit(commit.sha)
            return commit.sha

        sha = await self._call("commit", _commit)
        logger.info("github_commit_created", branch=branch, sha=sha[:7], files=len(files))
        return sha

    async def create_branch(self, name: str, from_ref: str) -> None:
        gh_repo = self._require_gh_repo()

        def _create() -> None:
            sha = from_ref
            if not _SHA_PATTERN.match(from_ref):
                sha = gh_repo.get_branch(from_ref).commit.sha
            gh_repo.create_git_ref(f"refs/heads/{name}", sha)

        await self._call("branch creation", _create)
        logger.info("github_branch_created", branch=name, from_ref=from_ref)

    async def create_merge_request(
        self, source_branch: str, target_branch: str, title: str
    ) -> str:
        gh_repo = self._require_gh_repo()
        pull = await self._call(
            "pull request creation",
            lambda: gh_repo.create_pull(
                base=target_branch, head=source_branch, title=title, body=""
            ),
        )
        logger.info("github_pull_request_created", number=pull.number)
        return pull.html_url
