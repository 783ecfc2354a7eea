"""gitbridge exception hierarchy.

All exceptions can be imported from this package:
    from gitbridge.exceptions import GitBridgeError, ProviderError, VaultError
"""

from __future__ import annotations

# Base exception
from gitbridge.exceptions.base import GitBridgeError

# Configuration exceptions
from gitbridge.exceptions.config import ConfigError

# Provider exceptions
from gitbridge.exceptions.provider import (
    NonFastForwardError,
    ProviderAuthError,
    ProviderError,
    ProviderNetworkError,
    RepoHandleMissingError,
    RepositoryCreationCancelledError,
    RepositoryNotFoundError,
)

# Sandbox filesystem exceptions
from gitbridge.exceptions.sandbox import (
    SandboxError,
    SandboxPathNotFoundError,
    UnsupportedOperationError,
)

# Status classification exceptions
from gitbridge.exceptions.status import StatusClassificationError

# Sync orchestration exceptions
from gitbridge.exceptions.sync import NoRemoteUrlError, SyncError

# Vault exceptions
from gitbridge.exceptions.vault import (
    DecryptionError,
    VaultError,
    VaultNotInitializedError,
)

__all__ = [
    "ConfigError",
    "DecryptionError",
    "GitBridgeError",
    "NoRemoteUrlError",
    "NonFastForwardError",
    "ProviderAuthError",
    "ProviderError",
    "ProviderNetworkError",
    "RepoHandleMissingError",
    "RepositoryCreationCancelledError",
    "RepositoryNotFoundError",
    "SandboxError",
    "SandboxPathNotFoundError",
    "StatusClassificationError",
    "SyncError",
    "UnsupportedOperationError",
    "VaultError",
    "VaultNotInitializedError",
]
