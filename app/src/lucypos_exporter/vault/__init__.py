"""
Tenant-keyed credential vault.

Public API:
    seal_secret(plaintext, tenant_id, passphrase)  → crypt:// token
    reveal_secret(value, tenant_id, passphrase)    → plaintext (passthrough if not a token)
"""

from __future__ import annotations

from lucypos_exporter.vault.crypto import decrypt, encrypt, is_encrypted
from lucypos_exporter.vault.errors import (
    AuthenticationError,
    CipherInitError,
    InvalidKeyLength,
    MalformedTokenError,
    VaultError,
)
from lucypos_exporter.vault.keys import derive_key


def seal_secret(plaintext: str, tenant_id: str, passphrase: str) -> str:
    """Encrypt a secret with the tenant's derived key."""
    return encrypt(plaintext, derive_key(tenant_id, passphrase))


def reveal_secret(value: str, tenant_id: str, passphrase: str) -> str:
    """Recover a plaintext secret. Plain values skip key derivation entirely."""
    if not is_encrypted(value):
        return value
    return decrypt(value, derive_key(tenant_id, passphrase))


__all__ = [
    "AuthenticationError",
    "CipherInitError",
    "InvalidKeyLength",
    "MalformedTokenError",
    "VaultError",
    "decrypt",
    "derive_key",
    "encrypt",
    "is_encrypted",
    "reveal_secret",
    "seal_secret",
]
