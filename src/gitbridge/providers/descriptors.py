"""Static metadata for the supported hosting providers."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "GITHUB_PROVIDER",
    "GITLAB_PROVIDER",
    "PROVIDERS",
    "RemoteProviderDescriptor",
]


@dataclass(frozen=True, slots=True)
class RemoteProviderDescriptor:
    """Display and setup information for one hosting provider.

    Attributes:
        name: Machine name, also the legacy credential prefix ("github").
        title: Display title ("GitHub").
        domain: Host name credentials are stored under.
        instructions: One-line token setup instruction.
        token_setup_url: Page where the user creates a token.
        token_setup_steps: Step-by-step token setup guide.
        icon: Icon key used by the UI.
    """

    name: str
    title: str
    domain: str
    instructions: str
    token_setup_url: str
    token_setup_steps: tuple[str, ...]
    icon: str


GITHUB_PROVIDER = RemoteProviderDescriptor(
    name="github",
    title="GitHub",
    domain="github.com",
    instructions="Create a Personal Access Token with repo scope:",
    token_setup_url="https://github.com/settings/tokens",
    token_setup_steps=(
        "1. Go to GitHub Settings > Developer settings > Personal access tokens",
        '2. Generate a new token with "repo" scope',
        "3. Copy the token",
    ),
    icon="i-ph:github-logo-duotone",
)

GITLAB_PROVIDER = RemoteProviderDescriptor(
    name="gitlab",
    title="GitLab",
    domain="gitlab.com",
    instructions="Create a Personal Access Token with api and write_repository scopes:",
    token_setup_url="https://gitlab.com/-/user_settings/personal_access_tokens",
    token_setup_steps=(
        "1. Go to GitLab Settings > Access Tokens",
        '2. Create a new token with "api" and "write_repository" scopes',
        "3. Generate and copy the token",
    ),
    icon="i-ph:gitlab-logo-duotone",
)

PROVIDERS: tuple[RemoteProviderDescriptor, ...] = (GITHUB_PROVIDER, GITLAB_PROVIDER)
