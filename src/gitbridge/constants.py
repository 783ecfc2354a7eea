"""gitbridge constants shared across the adapter, vault, providers and sync layers."""

from __future__ import annotations

# =============================================================================
# Sandbox
# =============================================================================

#: Project root inside the sandbox
DEFAULT_WORKDIR: str = "/home/project"

#: Placeholder ownership reported by synthesized stat results
STAT_UID: int = 1000
STAT_GID: int = 1000

#: Permission bits reported by synthesized stat results
STAT_MODE: int = 0o666

# =============================================================================
# Sync
# =============================================================================

DEFAULT_REF: str = "main"

DEFAULT_REMOTE: str = "origin"

DEFAULT_CLONE_DEPTH: int = 1

DEFAULT_CORS_PROXY: str = "https://cors.isomorphic-git.org"

DEFAULT_AUTHOR_NAME: str = "bolt.diy"

DEFAULT_AUTHOR_EMAIL: str = "bolt.diy@noreply.github.com"

DEFAULT_REPO_NAME: str = "bolt-generated-project"

# =============================================================================
# Vault
# =============================================================================

#: Key under which the base64 master key is stored
MASTER_KEY_NAME: str = "masterKey"

#: Raw master key length in bytes (AES-256)
MASTER_KEY_BYTES: int = 32

#: AES-GCM nonce length in bytes
NONCE_BYTES: int = 12

#: AES-GCM authentication tag length in bytes
TAG_BYTES: int = 16

#: Legacy per-provider cookie suffixes holding encrypted username and token
LEGACY_USERNAME_SUFFIX: str = "Username"
LEGACY_TOKEN_SUFFIX: str = "Token"

#: Historical cookie suffixes removed during migration
LEGACY_CLEANUP_SUFFIXES: tuple[str, ...] = (
    "AccessToken",
    "Auth",
    "Credentials",
    "_username",
    "_token",
)

# =============================================================================
# Providers
# =============================================================================

INITIAL_COMMIT_MESSAGE: str = "feat: initial commit"

DEFAULT_MAX_PUSH_RETRIES: int = 1

DEFAULT_GITLAB_API_URL: str = "https://gitlab.com/api/v4"

DEFAULT_GITLAB_TIMEOUT: float = 10.0

#: Time period for rate limiting in seconds (1 hour)
DEFAULT_GITHUB_RATE_PERIOD: float = 3600.0

#: Attempts for idempotent provider reads before giving up
MAX_NETWORK_RETRIES: int = 3
