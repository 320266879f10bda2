"""
AES-256-GCM encryption for stored credentials.

Tokens look like ``crypt://<hex>`` where the hex decodes to
nonce (12 bytes) + ciphertext + tag (16 bytes).
"""

from __future__ import annotations

import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from lucypos_exporter.vault.errors import (
    AuthenticationError,
    CipherInitError,
    MalformedTokenError,
)
from lucypos_exporter.vault.keys import KEY_SIZE

TOKEN_PREFIX = "crypt://"
NONCE_SIZE = 12


def _cipher(key: bytes) -> AESGCM:
    # AESGCM also accepts 128/192-bit keys, only 256 is valid here
    if len(key) != KEY_SIZE:
        raise CipherInitError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    return AESGCM(key)


def is_encrypted(value: str) -> bool:
    """Return True if the value is a crypt:// token."""
    return value.startswith(TOKEN_PREFIX)


def encrypt(plaintext: str | bytes, key: bytes) -> str:
    """Encrypt plaintext and return a crypt:// token."""
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")

    aesgcm = _cipher(key)
    nonce = secrets.token_bytes(NONCE_SIZE)
    ciphertext = aesgcm.encrypt(nonce, plaintext, None)
    return TOKEN_PREFIX + (nonce + ciphertext).hex()


def decrypt(token: str, key: bytes) -> str:
    """
    Decrypt a crypt:// token back to plaintext.

    Values without the prefix are legacy plaintext secrets and are returned
    unchanged.
    """
    if not is_encrypted(token):
        return token

    try:
        data = bytes.fromhex(token[len(TOKEN_PREFIX):])
    except ValueError as e:
        raise MalformedTokenError(f"Token is not valid hex: {e}") from e

    if len(data) < NONCE_SIZE:
        raise MalformedTokenError(
            f"Token holds {len(data)} bytes, shorter than the {NONCE_SIZE}-byte nonce"
        )

    aesgcm = _cipher(key)
    nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        plaintext = aesgcm.decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationError("Token failed authentication (wrong key or tampered data)") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedTokenError("Decrypted secret is not valid UTF-8") from e
