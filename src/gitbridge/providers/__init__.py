"""Hosting provider bindings and the shared push orchestration."""

from __future__ import annotations

from gitbridge.providers.base import (
    ConfirmCallback,
    FileContents,
    GitProviderAPI,
    InputCallback,
    PushResult,
    RepoHandle,
)
from gitbridge.providers.descriptors import (
    GITHUB_PROVIDER,
    GITLAB_PROVIDER,
    PROVIDERS,
    RemoteProviderDescriptor,
)
from gitbridge.providers.github import GitHubProvider
from gitbridge.providers.gitlab import GitLabProvider
from gitbridge.providers.registry import create_provider_api, get_provider_descriptor

__all__ = [
    "ConfirmCallback",
    "FileContents",
    "GITHUB_PROVIDER",
    "GITLAB_PROVIDER",
    "GitHubProvider",
    "GitLabProvider",
    "GitProviderAPI",
    "InputCallback",
    "PROVIDERS",
    "PushResult",
    "RemoteProviderDescriptor",
    "RepoHandle",
    "create_provider_api",
    "get_provider_descriptor",
]
