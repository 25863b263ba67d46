"""Encryption at rest for Plaid access tokens.

Access tokens must be replayed to Plaid on every refresh, so they are
encrypted (Fernet, from ``cryptography``) rather than hashed.
"""

import logging

from cryptography.fernet import Fernet, InvalidToken

from config import settings
from services.credential_manager import set_credential

logger = logging.getLogger(__name__)


class CredentialDecryptionError(Exception):
    """Stored ciphertext could not be decrypted with the current key."""

    pass


def _resolve_key() -> str:
    """Determine the Fernet key to use.

    Order: ``CREDENTIAL_ENCRYPTION_KEY`` setting (env, .env or keychain),
    then a freshly generated key persisted to the keychain. When the
    keychain is unavailable the generated key only lives as long as the
    process, and tokens stored with it become unreadable after a restart.
    """
    configured_key = settings.CREDENTIAL_ENCRYPTION_KEY
    if configured_key:
        return configured_key

    key = Fernet.generate_key().decode()
    if set_credential("CREDENTIAL_ENCRYPTION_KEY", key):
        logger.info("Generated new credential encryption key and stored it in keychain")
    else:
        logger.warning(
            "No CREDENTIAL_ENCRYPTION_KEY configured and the keychain is unavailable; "
            "using a process-lifetime key. Linked banks will need relinking after restart."
        )
    return key


class CredentialCipher:
    """Encrypt and decrypt access tokens for database storage."""

    def __init__(self, key: str | bytes | None = None):
        if key is None:
            key = _resolve_key()
        if isinstance(key, str):
            key = key.encode()
        # Raises ValueError for malformed keys
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a token; returns URL-safe base64 text suitable for a String column."""
        if not plaintext:
            raise ValueError("Refusing to encrypt an empty credential")
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored token.

        Raises:
            CredentialDecryptionError: Wrong key or tampered ciphertext.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            raise CredentialDecryptionError("Stored credential could not be decrypted") from e


_default_cipher: CredentialCipher | None = None


def get_credential_cipher() -> CredentialCipher:
    """Return the process-wide cipher, resolving the key on first use."""
    global _default_cipher
    if _default_cipher is None:
        _default_cipher = CredentialCipher()
    return _default_cipher
