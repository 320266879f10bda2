"""Errors raised by the credential vault."""


class VaultError(Exception):
    """Base class for credential vault failures."""


class InvalidKeyLength(VaultError):
    """Tenant id and passphrase cannot produce a 32-byte key."""


class CipherInitError(VaultError):
    """The cipher could not be initialised with the given key."""


class AuthenticationError(VaultError):
    """The authentication tag did not verify (wrong key or tampered token)."""


class MalformedTokenError(VaultError):
    """The token is not valid hex or is too short to hold a nonce."""
