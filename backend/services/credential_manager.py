"""OS keychain storage for Finale's own secrets.

Holds the Plaid API keys and the Fernet key that encrypts users' access
tokens. Users' access tokens themselves live in the database, never in
the keychain. ``keyring`` is imported lazily; when it is missing or its
backend fails, every function degrades to "nothing stored".
"""

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "finale"

CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "PLAID_CLIENT_ID",
        "PLAID_SECRET",
        "CREDENTIAL_ENCRYPTION_KEY",
    }
)


def _load_keyring():
    """Return the ``keyring`` module, or None if it is not installed."""
    try:
        import keyring
    except ImportError:
        return None
    return keyring


def _check_key(key: str, action: str) -> bool:
    if key in CREDENTIAL_KEYS:
        return True
    logger.warning("Refusing to %s non-credential key %s", action, key)
    return False


def get_credential(key: str) -> str | None:
    """Look up ``key`` in the keychain; None when absent or unavailable."""
    keyring = _load_keyring()
    if keyring is None:
        return None
    try:
        return keyring.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("keyring lookup failed for %s", key, exc_info=True)
        return None


def set_credential(key: str, value: str) -> bool:
    """Store ``value`` under ``key``.

    Only names in :data:`CREDENTIAL_KEYS` with a non-blank value are
    accepted.

    Returns:
        True if the keychain accepted the value.
    """
    if not _check_key(key, "store"):
        return False
    if not value or not value.strip():
        logger.warning("Refusing to store an empty value for %s", key)
        return False

    keyring = _load_keyring()
    if keyring is None:
        logger.warning("keyring is not installed; cannot store %s", key)
        return False
    try:
        keyring.set_password(SERVICE_NAME, key, value)
    except Exception:
        logger.warning("Failed to store %s in keychain", key, exc_info=True)
        return False
    logger.info("Stored %s in keychain", key)
    return True


def delete_credential(key: str) -> bool:
    """Remove ``key`` from the keychain. Returns True on success."""
    if not _check_key(key, "delete"):
        return False

    keyring = _load_keyring()
    if keyring is None:
        return False
    try:
        keyring.delete_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("Failed to delete %s from keychain", key, exc_info=True)
        return False
    logger.info("Deleted %s from keychain", key)
    return True


def list_credentials() -> dict[str, str]:
    """Every allow-listed secret currently in the keychain."""
    stored = {key: get_credential(key) for key in sorted(CREDENTIAL_KEYS)}
    return {key: value for key, value in stored.items() if value is not None}
