"""AES-256-GCM encryption of credential blobs.

Blob layout: ``base64(nonce[12] || ciphertext || tag[16])``. Every call to
:meth:`AesGcmCipher.encrypt` draws a fresh random nonce.
"""

from __future__ import annotations

import base64
import binascii
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from gitbridge.constants import MASTER_KEY_BYTES, NONCE_BYTES, TAG_BYTES
from gitbridge.exceptions import DecryptionError

__all__ = ["AesGcmCipher", "generate_key"]


def generate_key() -> bytes:
    """Return fresh random key material for :class:`AesGcmCipher`."""
    return secrets.token_bytes(MASTER_KEY_BYTES)


class AesGcmCipher:
    """Authenticated encryption of UTF-8 text under one key."""

    def __init__(self, key: bytes) -> None:
        if len(key) != MASTER_KEY_BYTES:
            raise ValueError(
                f"Master key must be {MASTER_KEY_BYTES} bytes, got {len(key)}"
            )
        self._aesgcm = AESGCM(key)

    def encrypt(self, text: str) -> str:
        nonce = secrets.token_bytes(NONCE_BYTES)
        ciphertext = self._aesgcm.encrypt(nonce, text.encode("utf-8"), None)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, blob: str) -> str:
        """Decrypt a blob produced by :meth:`encrypt`.

        Raises:
            DecryptionError: If the blob is not base64, is too short, fails
                authentication, or does not decode as UTF-8.
        """
        try:
            raw = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Encrypted data is not valid base64") from e

        if len(raw) < NONCE_BYTES + TAG_BYTES:
            raise DecryptionError("Encrypted data too short")

        nonce, ciphertext = raw[:NONCE_BYTES], raw[NONCE_BYTES:]
        try:
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionError("Authentication tag mismatch") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted data is not valid UTF-8") from e
