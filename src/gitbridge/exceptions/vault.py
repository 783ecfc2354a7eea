from __future__ import annotations

from gitbridge.exceptions.base import GitBridgeError


class VaultError(GitBridgeError):
    """Base exception for credential vault failures."""


class VaultNotInitializedError(VaultError):
    """Exception raised when the vault is used before ``ensure_encryption()``."""

    def __init__(self, message: str = "Master key not initialized") -> None:
        """Initialize the VaultNotInitializedError.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class DecryptionError(VaultError):
    """Exception raised when a stored blob fails to decrypt.

    Covers authentication-tag mismatches, malformed base64 and truncated
    blobs. Callers treat this as "credential invalid or corrupt" and never
    retry.
    """

    def __init__(self, message: str = "Decryption failed") -> None:
        """Initialize the DecryptionError.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
