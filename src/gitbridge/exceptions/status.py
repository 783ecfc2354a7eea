from __future__ import annotations

from gitbridge.exceptions.base import GitBridgeError


class StatusClassificationError(GitBridgeError):
    """Exception raised for a (head, worktree, stage) tuple outside the known table.

    An unknown tuple means the version-control engine changed its status
    contract. It is never mapped to a default status.

    Attributes:
        message: Human-readable error message.
        key: The three-digit status key that failed to classify.
    """

    def __init__(self, key: str) -> None:
        """Initialize the StatusClassificationError.

        Args:
            key: The three-digit status key that failed to classify.
        """
        self.key = key
        super().__init__(f"Invalid status combination: {key}")
