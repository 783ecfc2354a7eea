"""Lookup of provider metadata and construction of provider bindings."""

from __future__ import annotations

from gitbridge.config import GitBridgeConfig
from gitbridge.providers.base import GitProviderAPI
from gitbridge.providers.descriptors import PROVIDERS, RemoteProviderDescriptor
from gitbridge.providers.github import GitHubProvider
from gitbridge.providers.gitlab import GitLabProvider
from gitbridge.vault.vault import get_domain

__all__ = ["create_provider_api", "get_provider_descriptor"]


def get_provider_descriptor(name_or_url: str) -> RemoteProviderDescriptor | None:
    """Return the descriptor matching a provider name, domain or remote URL.

    Example:
        >>> get_provider_descriptor("https://gitlab.com/group/app.git").title
        'GitLab'
    """
    key = name_or_url.lower()
    domain = get_domain(key)
    for descriptor in PROVIDERS:
        if key == descriptor.name or domain == descriptor.domain:
            return descriptor
    return None


def create_provider_api(
    name_or_url: str, config: GitBridgeConfig | None = None
) -> GitProviderAPI:
    """Build a fresh provider binding for one push session.

    Raises:
        ValueError: If no provider matches *name_or_url*.
    """
    descriptor = get_provider_descriptor(name_or_url)
    if descriptor is None:
        raise ValueError(f"Unsupported git provider: {name_or_url}")

    config = config or GitBridgeConfig()
    retries = config.sync.max_push_retries
    if descriptor.name == "github":
        return GitHubProvider(config=config.github, max_push_retries=retries)
    return GitLabProvider(config=config.gitlab, max_push_retries=retries)
