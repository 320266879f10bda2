"""
Tenant-keyed key derivation.

The key is the tenant id followed by as much of the shared passphrase as
is needed to reach 32 bytes. Stored tokens depend on this exact layout, so
it must not change without a migration of every encrypted secret.
"""

from lucypos_exporter.vault.errors import InvalidKeyLength

KEY_SIZE = 32


def derive_key(tenant_id: str, passphrase: str) -> bytes:
    """Derive the 32-byte AES key for a tenant."""
    tenant = tenant_id.encode("utf-8")
    secret = passphrase.encode("utf-8")

    if len(tenant) > len(secret):
        raise InvalidKeyLength(
            f"Tenant id ({len(tenant)} bytes) is longer than the passphrase ({len(secret)} bytes)"
        )
    if len(tenant) > KEY_SIZE:
        raise InvalidKeyLength(f"Tenant id must be at most {KEY_SIZE} bytes, got {len(tenant)}")

    key = tenant + secret[: KEY_SIZE - len(tenant)]
    if len(key) != KEY_SIZE:
        raise InvalidKeyLength(
            f"Passphrase too short: derived key is {len(key)} bytes, need {KEY_SIZE}"
        )
    return key
