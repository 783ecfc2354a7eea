"""Encrypted per-domain credential storage.

Credentials are stored one entry per host name (``github.com``), encrypted
with a master key that lives base64-encoded in a key-value store. Older
installations kept each provider's username and token in separate
``<provider>Username``/``<provider>Token`` entries; :meth:`CredentialVault.lookup`
migrates those on first read and removes every legacy entry.

Example:
    ```python
    vault = CredentialVault(JsonFileKeyValueStore(path))
    await vault.ensure_encryption()
    await vault.save("https://github.com/octo/repo", Credential("octo", "ghp_x"))
    cred = await vault.lookup("github.com")
    ```
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import re
from dataclasses import dataclass

from gitbridge.config import VaultConfig
from gitbridge.constants import (
    LEGACY_CLEANUP_SUFFIXES,
    LEGACY_TOKEN_SUFFIX,
    LEGACY_USERNAME_SUFFIX,
    MASTER_KEY_NAME,
)
from gitbridge.exceptions import DecryptionError, VaultNotInitializedError
from gitbridge.logging import get_logger
from gitbridge.vault.cipher import AesGcmCipher, generate_key
from gitbridge.vault.stores import JsonFileKeyValueStore, KeyValueStore

logger = get_logger(__name__)

__all__ = ["Credential", "CredentialVault", "create_vault", "get_domain"]

_SCHEME = re.compile(r"^https?://")
_DOMAIN_END = re.compile(r"[/?#]")


def get_domain(url: str) -> str:
    """Return the host portion of *url* (or *url* itself if it is a bare host).

    Example:
        >>> get_domain("https://github.com/octo/repo.git")
        'github.com'
    """
    without_scheme = _SCHEME.sub("", url)
    return _DOMAIN_END.split(without_scheme, maxsplit=1)[0]


@dataclass(frozen=True, slots=True)
class Credential:
    """Username plus secret (a personal access token acting as password)."""

    username: str
    secret: str

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, secret='***')"

    def to_json(self) -> str:
        return json.dumps({"username": self.username, "password": self.secret})

    @classmethod
    def from_json(cls, text: str) -> Credential | None:
        """Parse stored JSON; returns None when either field is missing or empty."""
        data = json.loads(text)
        if not isinstance(data, dict):
            return None
        username, password = data.get("username"), data.get("password")
        if not username or not password:
            return None
        return cls(username=str(username), secret=str(password))


class CredentialVault:
    """Master-key lifecycle plus encrypted credential lookup and storage.

    The vault starts uninitialized; :meth:`ensure_encryption` loads or
    creates the master key. Every other operation raises
    :class:`~gitbridge.exceptions.VaultNotInitializedError` until then.

    Args:
        cookie_store: Store holding one encrypted entry per domain, plus any
            legacy entries awaiting migration.
        key_store: Store holding the master key. Defaults to ``cookie_store``.
    """

    def __init__(
        self,
        cookie_store: KeyValueStore,
        key_store: KeyValueStore | None = None,
    ) -> None:
        self._cookies = cookie_store
        self._keys = key_store if key_store is not None else cookie_store
        self._cipher: AesGcmCipher | None = None
        self._locks: dict[str, asyncio.Lock] = {}

    # =========================================================================
    # Key lifecycle
    # =========================================================================

    @property
    def is_ready(self) -> bool:
        return self._cipher is not None

    async def ensure_encryption(self) -> bool:
        """Load or create the master key.

        Returns:
            True once the vault is ready; False if a stored key is unusable.
        """
        if self._cipher is not None:
            return True

        stored = self._keys.get(MASTER_KEY_NAME)
        try:
            if stored:
                key = base64.b64decode(stored, validate=True)
            else:
                key = generate_key()
                self._keys.set(MASTER_KEY_NAME, base64.b64encode(key).decode("ascii"))
                logger.info("master_key_created")
            self._cipher = AesGcmCipher(key)
        except (binascii.Error, ValueError) as e:
            logger.error("master_key_invalid", error=str(e))
            return False
        return True

    def _require_cipher(self) -> AesGcmCipher:
        if self._cipher is None:
            raise VaultNotInitializedError()
        return self._cipher

    def encrypt(self, text: str) -> str:
        return self._require_cipher().encrypt(text)

    def decrypt(self, blob: str) -> str:
        return self._require_cipher().decrypt(blob)

    def _lock_for(self, domain: str) -> asyncio.Lock:
        lock = self._locks.get(domain)
        if lock is None:
            lock = self._locks[domain] = asyncio.Lock()
        return lock

    # =========================================================================
    # Credentials
    # =========================================================================

    async def lookup(self, url: str) -> Credential | None:
        """Return the stored credential for the domain of *url*.

        Falls back to legacy per-provider entries and migrates them. A stored
        entry that fails to decrypt is deleted and treated as absent.

        Raises:
            VaultNotInitializedError: If :meth:`ensure_encryption` has not run.
        """
        self._require_cipher()
        domain = get_domain(url)

        credential = self._read_domain_entry(domain)
        if credential is not None:
            return credential

        legacy = self._read_legacy_entries(domain)
        if legacy is None:
            return None

        async with self._lock_for(domain):
            self._cookies.set(domain, self.encrypt(legacy.to_json()))
            self._remove_legacy_entries(domain)
        logger.info("legacy_credentials_migrated", domain=domain)
        return legacy

    async def save(self, url: str, credential: Credential) -> None:
        """Encrypt *credential* and store it under the domain of *url*."""
        domain = get_domain(url)
        blob = self.encrypt(credential.to_json())
        async with self._lock_for(domain):
            self._cookies.set(domain, blob)
        logger.info(
            "credential_saved",
            domain=domain,
            username=credential.username,
            has_token=bool(credential.secret),
        )

    async def remove(self, url: str) -> None:
        """Delete the credential for the domain of *url*; a no-op if absent."""
        self._require_cipher()
        domain = get_domain(url)
        async with self._lock_for(domain):
            self._cookies.delete(domain)
        logger.info("credential_removed", domain=domain)

    def _read_domain_entry(self, domain: str) -> Credential | None:
        blob = self._cookies.get(domain)
        if not blob:
            return None
        try:
            credential = Credential.from_json(self.decrypt(blob))
        except (DecryptionError, ValueError) as e:
            logger.error("credential_unreadable", domain=domain, error=str(e))
            self._cookies.delete(domain)
            return None
        if credential is None:
            self._cookies.delete(domain)
        return credential

    def _read_legacy_entries(self, domain: str) -> Credential | None:
        provider = domain.split(".")[0]
        username_blob = self._cookies.get(f"{provider}{LEGACY_USERNAME_SUFFIX}")
        token_blob = self._cookies.get(f"{provider}{LEGACY_TOKEN_SUFFIX}")
        if not username_blob or not token_blob:
            return None

        try:
            username = self.decrypt(username_blob)
            token = self.decrypt(token_blob)
        except DecryptionError as e:
            logger.error("legacy_credentials_unreadable", provider=provider, error=str(e))
            self._remove_legacy_entries(domain)
            return None

        if not username or not token:
            self._remove_legacy_entries(domain)
            return None
        return Credential(username=username, secret=token)

    def _remove_legacy_entries(self, domain: str) -> None:
        provider = domain.split(".")[0]
        suffixes = (LEGACY_USERNAME_SUFFIX, LEGACY_TOKEN_SUFFIX, *LEGACY_CLEANUP_SUFFIXES)
        for suffix in suffixes:
            key = f"{provider}{suffix}"
            if self._cookies.get(key) is not None:
                self._cookies.delete(key)
                logger.debug("legacy_entry_removed", key=key)


def create_vault(config: VaultConfig | None = None) -> CredentialVault:
    """Build a vault persisted to ``config.store_path``.

    Credentials and the master key share the one JSON file. Call
    :meth:`CredentialVault.ensure_encryption` before use.
    """
    config = config or VaultConfig()
    store = JsonFileKeyValueStore(config.store_path)
    logger.debug("vault_created", path=str(config.store_path))
    return CredentialVault(store)
