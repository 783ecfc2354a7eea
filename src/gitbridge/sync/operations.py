"""Entry points used by the "push to GitHub/GitLab" menu actions."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable

from gitbridge.constants import DEFAULT_REPO_NAME
from gitbridge.logging import get_logger
from gitbridge.providers.base import InputCallback, PushResult
from gitbridge.providers.descriptors import PROVIDERS, RemoteProviderDescriptor
from gitbridge.providers.registry import get_provider_descriptor
from gitbridge.vault import CredentialVault

logger = get_logger(__name__)

__all__ = ["PushToRepo", "check_credentials", "handle_git_push"]

#: ``(repo_name, username, secret) -> PushResult``
PushToRepo = Callable[[str, str, str], PushResult | Awaitable[PushResult]]


async def handle_git_push(
    provider_name: str,
    vault: CredentialVault,
    request_input: InputCallback,
    push_to_repo: PushToRepo,
    default_repo_name: str = DEFAULT_REPO_NAME,
) -> PushResult:
    """Ask for a repository name and push with the stored credentials.

    Args:
        provider_name: ``"github"`` or ``"gitlab"``.
        vault: Credential vault; initialized here if needed.
        request_input: Asks the user for the repository name. An empty answer
            picks ``default_repo_name``; None cancels.
        push_to_repo: Performs the push, typically
            :meth:`GitProviderAPI.push_with_repo_handling` bound to the files.
        default_repo_name: Name suggested to the user.

    Returns:
        The push outcome, or a failure explaining what the user must do.

    Raises:
        ValueError: If *provider_name* is not a supported provider.
    """
    descriptor = get_provider_descriptor(provider_name)
    if descriptor is None:
        raise ValueError(f"Unsupported git provider: {provider_name}")

    answer = request_input(
        f"Please enter a name for your new {descriptor.title} repository "
        f"(default: {default_repo_name}):"
    )
    if inspect.isawaitable(answer):
        answer = await answer
    if answer is None:
        return PushResult(success=False, message="Repository name is required", cancelled=True)
    repo_name = answer.strip() or default_repo_name

    if not await vault.ensure_encryption():
        return PushResult(success=False, message="Failed to initialize secure storage")

    credential = await vault.lookup(descriptor.domain)
    if credential is None:
        logger.info("push_without_credentials", provider=descriptor.name)
        return PushResult(
            success=False,
            message=(
                f"Please set up your {descriptor.title} credentials "
                "in the Connections tab"
            ),
        )

    result = push_to_repo(repo_name, credential.username, credential.secret)
    if inspect.isawaitable(result):
        result = await result
    return result


async def check_credentials(
    vault: CredentialVault,
    providers: Iterable[RemoteProviderDescriptor] = PROVIDERS,
) -> dict[str, bool]:
    """Report which providers have a usable stored credential."""
    if not await vault.ensure_encryption():
        return {descriptor.name: False for descriptor in providers}
    return {
        descriptor.name: await vault.lookup(descriptor.domain) is not None
        for descriptor in providers
    }
