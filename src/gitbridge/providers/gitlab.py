"""GitLab binding over the REST API v4.

One commit carries every file as a ``create`` or ``update`` action, chosen
by looking the file up on the target branch first.
"""

from __future__ import annotations

import base64
import json
from typing import Any
from urllib.parse import quote

import aiohttp

from gitbridge.config import GitLabConfig
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
from gitbridge.providers.descriptors import GITLAB_PROVIDER

logger = get_logger(__name__)

__all__ = ["GitLabProvider"]


def _error_detail(body: Any, status: int) -> str:
    if isinstance(body, dict):
        detail = body.get("message") or body.get("error")
        if detail:
            return detail if isinstance(detail, str) else json.dumps(detail)
    return f"HTTP {status}"


class GitLabProvider(GitProviderAPI):
    """:class:`GitProviderAPI` for gitlab.com or a self-managed GitLab.

    Args:
        config: API URL and request timeout.
        max_push_retries: Pull-and-retry budget for non-fast-forward pushes.
    """

    descriptor = GITLAB_PROVIDER

    def __init__(
        self,
        config: GitLabConfig | None = None,
        max_push_retries: int = DEFAULT_MAX_PUSH_RETRIES,
    ) -> None:
        super().__init__(max_push_retries=max_push_retries)
        self._config = config or GitLabConfig()
        self._token: str | None = None

    def set_token(self, secret: str) -> None:
        self._token = secret

    def _headers(self) -> dict[str, str]:
        if self._token is None:
            raise ProviderError("No token set. Call set_token first.", provider=self.name)
        return {"PRIVATE-TOKEN": self._token, "Content-Type": "application/json"}

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        """Send one API request and return ``(status, decoded JSON body)``.

        Raises:
            ProviderNetworkError: On connection failures and timeouts.
        """
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.request(
                    method,
                    f"{self._config.api_url}{endpoint}",
                    params=params,
                    json=payload,
                    headers=self._headers(),
                ) as resp,
            ):
                raw = await resp.read()
                status = resp.status
        except (aiohttp.ClientError, TimeoutError) as e:
            raise ProviderNetworkError(
                f"GitLab request failed: {e or type(e).__name__}", provider=self.name
            ) from e

        try:
            body = json.loads(raw) if raw else None
        except ValueError:
            body = raw.decode("utf-8", errors="replace")
        return status, body

    def _check(self, status: int, body: Any, operation: str) -> None:
        if 200 <= status < 300:
            return
        detail = _error_detail(body, status)
        if status == 401:
            raise ProviderAuthError(self.name, self.descriptor.title)
        if status == 404:
            raise RepositoryNotFoundError(
                f"GitLab {operation} failed: {detail}", provider=self.name, status=status
            )
        if "is not a fast-forward" in detail or (
            status == 400 and "has changed since" in detail
        ):
            raise NonFastForwardError(detail, provider=self.name, status=status)
        raise ProviderError(
            f"GitLab {operation} failed: {detail}", provider=self.name, status=status
        )

    def _to_handle(self, data: dict[str, Any]) -> RepoHandle:
        namespace = data.get("namespace") or {}
        return RepoHandle(
            id=data["id"],
            owner=namespace.get("path") or namespace.get("full_path") or "",
            name=data.get("path") or data.get("name") or "",
            default_branch=data.get("default_branch"),
            web_url=data.get("web_url") or "",
        )

    # =========================================================================
    # Credentials and repositories
    # =========================================================================

    async def validate_credentials(self, username: str, secret: str) -> bool:
        self.set_token(secret)
        try:
            status, body = await self._request("GET", "/user")
        except ProviderError as e:
            logger.warning("gitlab_credentials_invalid", error=e.message)
            return False
        if status != 200 or not isinstance(body, dict):
            return False
        return body.get("username") == username

    @network_retry
    async def get_repo(self, name: str, owner: str) -> RepoHandle | None:
        project_path = quote(f"{owner}/{name}", safe="")
        status, body = await self._request("GET", f"/projects/{project_path}")
        if status == 404:
            logger.debug("gitlab_project_not_found", repo=f"{owner}/{name}")
            return None
        self._check(status, body, "project lookup")
        self._repo = self._to_handle(body)
        return self._repo

    async def create_repo(self, name: str) -> RepoHandle:
        status, body = await self._request(
            "POST", "/projects", payload={"name": name, "initialize_with_readme": True}
        )
        self._check(status, body, "project creation")
        self._repo = self._to_handle(body)
        logger.info("gitlab_project_created", project_id=self._repo.id)
        return self._repo

    @network_retry
    async def check_file_existence(self, branch: str, path: str) -> bool:
        repo = self._require_repo()
        status, body = await self._request(
            "GET",
            f"/projects/{repo.id}/repository/files/{quote(path, safe='')}",
            params={"ref": branch},
        )
        if status == 404:
            return False
        self._check(status, body, "file lookup")
        return True

    # =========================================================================
    # Commits, branches, merge requests
    # =========================================================================

    async def create_commit(self, files: FileContents, message: str) -> str:
        repo = self._require_repo()
        branch = repo.target_branch

        actions: list[dict[str, str]] = []
        for path, content in files.items():
            exists = await self.check_file_existence(branch, path)
            action = {"action": "update" if exists else "create", "file_path": path}
            if isinstance(content, bytes):
                action["content"] = base64.b64encode(content).decode("ascii")
                action["encoding"] = "base64"
            else:
                action["content"] = content
            actions.append(action)

        status, body = await self._request(
            "POST",
            f"/projects/{repo.id}/repository/commits",
            payload={"branch": branch, "commit_message": message, "actions": actions},
        )
        self._check(status, body, "commit")
        sha = str(body.get("id", "")) if isinstance(body, dict) else ""
        logger.info("gitlab_commit_created", branch=branch, sha=sha[:7], files=len(files))
        return sha

    async def create_branch(self, name: str, from_ref: str) -> None:
        repo = self._require_repo()
        status, body = await self._request(
            "POST",
            f"/projects/{repo.id}/repository/branches",
            payload={"branch": name, "ref": from_ref},
        )
        self._check(status, body, "branch creation")
        logger.info("gitlab_branch_created", branch=name, from_ref=from_ref)

    async def create_merge_request(
        self, source_branch: str, target_branch: str, title: str
    ) -> str:
        repo = self._require_repo()
        status, body = await self._request(
            "POST",
            f"/projects/{repo.id}/merge_requests",
            payload={
                "source_branch": source_branch,
                "target_branch": target_branch,
                "title": title,
            },
        )
        self._check(status, body, "merge request creation")
        return body.get("web_url", "") if isinstance(body, dict) else ""
