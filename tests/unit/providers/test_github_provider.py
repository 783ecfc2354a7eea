"""Tests for gitbridge.providers.github."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests
from github import GithubException
from tenacity import wait_none

from gitbridge.config import GitHubConfig
from gitbridge.exceptions import (
    NonFastForwardError,
    ProviderAuthError,
    ProviderError,
    ProviderNetworkError,
    RepoHandleMissingError,
    RepositoryNotFoundError,
)
from gitbridge.providers import GitHubProvider

HEAD_SHA = "a" * 40
NEW_SHA = "c" * 40


def make_gh_repo() -> MagicMock:
    gh_repo = MagicMock()
    gh_repo.full_name = "octo/app"
    gh_repo.owner.login = "octo"
    gh_repo.name = "app"
    gh_repo.default_branch = "main"
    gh_repo.html_url = "https://github.com/octo/app"
    gh_repo.get_git_ref.return_value.object.sha = HEAD_SHA
    gh_repo.create_git_blob.return_value.sha = "b" * 40
    gh_repo.create_git_commit.return_value.sha = NEW_SHA
    return gh_repo


@pytest.fixture
def gh_repo() -> MagicMock:
    return make_gh_repo()


@pytest.fixture
def github(gh_repo: MagicMock) -> MagicMock:
    client = MagicMock()
    client.get_repo.return_value = gh_repo
    client.get_user.return_value.login = "octo"
    client.get_user.return_value.create_repo.return_value = gh_repo
    return client


@pytest.fixture
def provider(github: MagicMock) -> GitHubProvider:
    return GitHubProvider(github=github)


@pytest.fixture
def no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    for method in (GitHubProvider.get_repo, GitHubProvider.check_file_existence):
        monkeypatch.setattr(method.retry, "wait", wait_none())


class TestRepositories:
    """Tests for get_repo/create_repo/check_file_existence."""

    @pytest.mark.asyncio
    async def test_get_repo_found(self, provider: GitHubProvider, github: MagicMock) -> None:
        repo = await provider.get_repo("app", "octo")

        github.get_repo.assert_called_once_with("octo/app")
        assert repo is not None
        assert repo.id == "octo/app"
        assert repo.web_url == "https://github.com/octo/app"
        assert provider.repo == repo

    @pytest.mark.asyncio
    async def test_get_repo_not_found(
        self, provider: GitHubProvider, github: MagicMock
    ) -> None:
        github.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, None)

        assert await provider.get_repo("app", "octo") is None
        assert provider.repo is None

    @pytest.mark.asyncio
    async def test_get_repo_bad_token(
        self, provider: GitHubProvider, github: MagicMock
    ) -> None:
        github.get_repo.side_effect = GithubException(
            401, {"message": "Bad credentials"}, None
        )

        with pytest.raises(ProviderAuthError, match="Authentication failed for GitHub"):
            await provider.get_repo("app", "octo")

    @pytest.mark.asyncio
    async def test_create_repo_auto_init(
        self, provider: GitHubProvider, github: MagicMock
    ) -> None:
        repo = await provider.create_repo("app")

        github.get_user.return_value.create_repo.assert_called_once_with(
            "app", auto_init=True
        )
        assert repo.default_branch == "main"

    @pytest.mark.asyncio
    async def test_check_file_existence(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.get_contents.side_effect = [
            MagicMock(),
            GithubException(404, {"message": "Not Found"}, None),
        ]

        assert await provider.check_file_existence("main", "README.md")
        assert not await provider.check_file_existence("main", "missing.md")
        gh_repo.get_contents.assert_called_with("missing.md", ref="main")

    @pytest.mark.asyncio
    async def test_handle_required(self, provider: GitHubProvider) -> None:
        with pytest.raises(RepoHandleMissingError):
            await provider.check_file_existence("main", "README.md")


class TestCreateCommit:
    """Tests for blob -> tree -> commit -> ref construction."""

    @pytest.mark.asyncio
    async def test_call_order(self, provider: GitHubProvider, gh_repo: MagicMock) -> None:
        await provider.get_repo("app", "octo")

        sha = await provider.create_commit({"a.txt": "x", "b.txt": "y"}, "feat: things")

        assert sha == NEW_SHA
        names = [call[0] for call in gh_repo.mock_calls]
        assert names == [
            "get_git_ref",
            "create_git_blob",
            "create_git_blob",
            "get_git_commit",
            "create_git_tree",
            "create_git_commit",
            "get_git_ref().edit",
        ]
        gh_repo.get_git_ref.assert_called_once_with("heads/main")
        gh_repo.get_git_commit.assert_called_once_with(HEAD_SHA)
        gh_repo.get_git_ref.return_value.edit.assert_called_once_with(NEW_SHA)

    @pytest.mark.asyncio
    async def test_commit_parent_is_head(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")

        await provider.create_commit({"a.txt": "x"}, "msg")

        parent = gh_repo.get_git_commit.return_value
        tree = gh_repo.create_git_tree.return_value
        gh_repo.create_git_commit.assert_called_once_with("msg", tree, [parent])
        assert gh_repo.create_git_tree.call_args.args[1] is parent.tree

    @pytest.mark.asyncio
    async def test_binary_blob_base64(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")

        await provider.create_commit({"logo.png": b"\x89PNG"}, "msg")

        content, encoding = gh_repo.create_git_blob.call_args.args
        assert encoding == "base64"
        assert base64.b64decode(content) == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_non_fast_forward(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.get_git_ref.return_value.edit.side_effect = GithubException(
            422, {"message": "Update is not a fast-forward"}, None
        )

        with pytest.raises(NonFastForwardError):
            await provider.create_commit({"a.txt": "x"}, "msg")

    @pytest.mark.asyncio
    async def test_empty_repository_creates_ref(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.get_git_ref.side_effect = GithubException(
            409, {"message": "Git Repository is empty."}, None
        )

        await provider.create_commit({"a.txt": "x"}, "msg")

        gh_repo.create_git_commit.assert_called_once_with(
            "msg", gh_repo.create_git_tree.return_value, []
        )
        gh_repo.create_git_ref.assert_called_once_with("refs/heads/main", NEW_SHA)

    @pytest.mark.asyncio
    async def test_other_errors_mapped(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.create_git_blob.side_effect = GithubException(
            500, {"message": "Server Error"}, None
        )

        with pytest.raises(ProviderError, match="GitHub commit failed: Server Error"):
            await provider.create_commit({"a.txt": "x"}, "msg")


class TestBranchesAndPulls:
    """Tests for create_branch/create_merge_request."""

    @pytest.mark.asyncio
    async def test_create_branch_from_branch_name(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.get_branch.return_value.commit.sha = HEAD_SHA

        await provider.create_branch("feature", "main")

        gh_repo.get_branch.assert_called_once_with("main")
        gh_repo.create_git_ref.assert_called_once_with("refs/heads/feature", HEAD_SHA)

    @pytest.mark.asyncio
    async def test_create_branch_from_sha(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")

        await provider.create_branch("feature", HEAD_SHA)

        gh_repo.get_branch.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_merge_request(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.create_pull.return_value.html_url = "https://github.com/octo/app/pull/7"

        url = await provider.create_merge_request("feature", "main", "Add feature")

        assert url == "https://github.com/octo/app/pull/7"
        gh_repo.create_pull.assert_called_once_with(
            base="main", head="feature", title="Add feature", body=""
        )

    @pytest.mark.asyncio
    async def test_missing_repo_on_pull(
        self, provider: GitHubProvider, gh_repo: MagicMock
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.create_pull.side_effect = GithubException(404, {"message": "Not Found"}, None)

        with pytest.raises(RepositoryNotFoundError):
            await provider.create_merge_request("feature", "main", "t")


class TestTokenHandling:
    """Tests for set_token/validate_credentials and the full push."""

    def test_no_token(self) -> None:
        with pytest.raises(ProviderError, match="No token set"):
            _ = GitHubProvider().github

    @pytest.mark.asyncio
    async def test_validate_credentials(self, github: MagicMock) -> None:
        with patch("gitbridge.providers.github.Github", return_value=github) as gh_cls:
            provider = GitHubProvider(config=GitHubConfig(api_url="https://ghe.local/api/v3"))

            assert await provider.validate_credentials("octo", "ghp_x")
            assert not await provider.validate_credentials("someone-else", "ghp_x")

        assert gh_cls.call_args.kwargs["base_url"] == "https://ghe.local/api/v3"

    @pytest.mark.asyncio
    async def test_validate_credentials_rejected(self, github: MagicMock) -> None:
        github.get_user.side_effect = GithubException(401, {"message": "Bad credentials"}, None)
        with patch("gitbridge.providers.github.Github", return_value=github):
            assert not await GitHubProvider().validate_credentials("octo", "bad")

    @pytest.mark.asyncio
    async def test_push_with_repo_handling_commits(
        self, github: MagicMock, gh_repo: MagicMock
    ) -> None:
        with patch("gitbridge.providers.github.Github", return_value=github):
            result = await GitHubProvider().push_with_repo_handling(
                "app",
                "octo",
                {"a.txt": "x"},
                "ghp_x",
                request_confirmation=MagicMock(return_value=True),
                request_input=MagicMock(return_value="feat: update"),
            )

        assert result.success
        assert result.message == "Successfully committed to: https://github.com/octo/app"
        gh_repo.get_git_ref.return_value.edit.assert_called_once_with(NEW_SHA)

    @pytest.mark.asyncio
    async def test_rate_limiter_enabled(self, github: MagicMock) -> None:
        provider = GitHubProvider(config=GitHubConfig(rate_limit=100), github=github)

        assert provider._rate_limiter is not None
        assert await provider.get_repo("app", "octo") is not None


class TestNetworkErrors:
    """Tests for transport failures under PyGithub and the read retry."""

    @pytest.mark.asyncio
    async def test_get_repo_retries_then_succeeds(
        self,
        provider: GitHubProvider,
        github: MagicMock,
        gh_repo: MagicMock,
        no_retry_wait: None,
    ) -> None:
        github.get_repo.side_effect = [requests.ConnectionError("connection reset"), gh_repo]

        repo = await provider.get_repo("app", "octo")

        assert repo is not None
        assert repo.id == "octo/app"
        assert github.get_repo.call_count == 2

    @pytest.mark.asyncio
    async def test_get_repo_gives_up_after_three_attempts(
        self, provider: GitHubProvider, github: MagicMock, no_retry_wait: None
    ) -> None:
        github.get_repo.side_effect = requests.Timeout("read timed out")

        with pytest.raises(ProviderNetworkError, match="read timed out") as exc_info:
            await provider.get_repo("app", "octo")

        assert exc_info.value.provider == "github"
        assert isinstance(exc_info.value.__cause__, requests.Timeout)
        assert github.get_repo.call_count == 3

    @pytest.mark.asyncio
    async def test_check_file_existence_retries_then_succeeds(
        self, provider: GitHubProvider, gh_repo: MagicMock, no_retry_wait: None
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.get_contents.side_effect = [
            requests.ConnectionError("connection reset"),
            MagicMock(),
        ]

        assert await provider.check_file_existence("main", "README.md")
        assert gh_repo.get_contents.call_count == 2

    @pytest.mark.asyncio
    async def test_commit_not_replayed(
        self, provider: GitHubProvider, gh_repo: MagicMock, no_retry_wait: None
    ) -> None:
        await provider.get_repo("app", "octo")
        gh_repo.create_git_blob.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(ProviderNetworkError, match="GitHub commit failed"):
            await provider.create_commit({"a.txt": "x"}, "msg")

        assert gh_repo.create_git_blob.call_count == 1
        gh_repo.get_git_ref.return_value.edit.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_repo_not_replayed(
        self, provider: GitHubProvider, github: MagicMock
    ) -> None:
        create_repo = github.get_user.return_value.create_repo
        create_repo.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(ProviderNetworkError):
            await provider.create_repo("app")

        assert create_repo.call_count == 1
