"""Credential vault: AES-GCM encrypted host credentials keyed by domain."""

from __future__ import annotations

from gitbridge.vault.cipher import AesGcmCipher, generate_key
from gitbridge.vault.stores import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from gitbridge.vault.vault import Credential, CredentialVault, create_vault, get_domain

__all__ = [
    "AesGcmCipher",
    "Credential",
    "CredentialVault",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "create_vault",
    "generate_key",
    "get_domain",
]
