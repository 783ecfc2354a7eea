from __future__ import annotations

from gitbridge.exceptions.base import GitBridgeError


class SyncError(GitBridgeError):
    """Exception for sync orchestration failures.

    Attributes:
        message: Human-readable error message.
        operation: Sync operation that failed (e.g., "clone", "push").
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize the SyncError.

        Args:
            message: Human-readable error message.
            operation: Sync operation that failed.
        """
        self.operation = operation
        super().__init__(message)


class NoRemoteUrlError(SyncError):
    """No remote URL was passed and none is stored in the git metadata."""

    def __init__(self, operation: str | None = None) -> None:
        """Initialize the NoRemoteUrlError.

        Args:
            operation: Sync operation that needed the URL.
        """
        super().__init__("No url provided", operation=operation)
