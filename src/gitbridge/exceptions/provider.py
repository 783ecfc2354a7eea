from __future__ import annotations

from gitbridge.exceptions.base import GitBridgeError


class ProviderError(GitBridgeError):
    """Exception for hosting provider API failures.

    Attributes:
        message: Human-readable error message.
        provider: Name of the provider that failed (e.g., "github").
        status: HTTP status code returned by the provider, if any.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status: int | None = None,
    ) -> None:
        """Initialize the ProviderError.

        Args:
            message: Human-readable error message.
            provider: Name of the provider that failed.
            status: HTTP status code returned by the provider.
        """
        self.provider = provider
        self.status = status
        super().__init__(message)


class ProviderAuthError(ProviderError):
    """The provider rejected the supplied token."""

    def __init__(self, provider: str, title: str | None = None) -> None:
        """Initialize the ProviderAuthError.

        Args:
            provider: Name of the provider that rejected the token.
            title: Display title used in the message. Defaults to ``provider``.
        """
        super().__init__(
            f"Authentication failed for {title or provider}",
            provider=provider,
            status=401,
        )


class RepositoryNotFoundError(ProviderError):
    """The requested repository does not exist or is not visible."""


class NonFastForwardError(ProviderError):
    """The remote branch moved ahead of the local reference."""


class RepositoryCreationCancelledError(ProviderError):
    """The user declined to create a missing repository.

    This is a user decision rather than a fault and is reported separately
    from real failures.
    """

    def __init__(self, provider: str | None = None) -> None:
        """Initialize the RepositoryCreationCancelledError.

        Args:
            provider: Name of the provider the push targeted.
        """
        super().__init__("Repository creation cancelled", provider=provider)


class ProviderNetworkError(ProviderError):
    """Network failure or timeout while talking to a provider."""


class RepoHandleMissingError(ProviderError):
    """A handle-requiring call ran before ``get_repo`` or ``create_repo``.

    This signals a programming error and is raised, never converted into a
    failed result.
    """

    def __init__(self, provider: str | None = None) -> None:
        """Initialize the RepoHandleMissingError.

        Args:
            provider: Name of the provider the call was made against.
        """
        super().__init__(
            "Project not set. Please call get_repo first.", provider=provider
        )
