from __future__ import annotations


class GitBridgeError(Exception):
    """Base exception class for all gitbridge-specific errors.

    This is the root of the gitbridge exception hierarchy. All custom exceptions
    in the package inherit from this class, which allows callers at the UI
    boundary to catch every gitbridge failure while letting system exceptions
    (including ``asyncio.CancelledError``) propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            await orchestrator.fetch()
        except GitBridgeError as e:
            logger.error("fetch_failed", error=e.message)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the GitBridgeError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
