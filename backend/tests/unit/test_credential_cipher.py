"""Unit tests for access-token encryption at rest."""

from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet

import services.credential_cipher as credential_cipher_module
from services.credential_cipher import (
    CredentialCipher,
    CredentialDecryptionError,
    get_credential_cipher,
)


class TestCredentialCipher:
    def test_ciphertext_differs_from_plaintext(self):
        cipher = CredentialCipher(Fernet.generate_key())

        token = cipher.encrypt("access-sandbox-123")

        assert "access-sandbox-123" not in token
        assert cipher.decrypt(token) == "access-sandbox-123"

    def test_encryption_is_randomized(self):
        cipher = CredentialCipher(Fernet.generate_key())
        assert cipher.encrypt("access-sandbox-123") != cipher.encrypt("access-sandbox-123")

    def test_accepts_str_key(self):
        key = Fernet.generate_key().decode()
        cipher = CredentialCipher(key)
        assert cipher.decrypt(cipher.encrypt("abc")) == "abc"

    def test_wrong_key_raises(self):
        token = CredentialCipher(Fernet.generate_key()).encrypt("access-sandbox-123")

        with pytest.raises(CredentialDecryptionError):
            CredentialCipher(Fernet.generate_key()).decrypt(token)

    def test_tampered_ciphertext_raises(self):
        with pytest.raises(CredentialDecryptionError):
            CredentialCipher(Fernet.generate_key()).decrypt("not-a-fernet-token")

    def test_refuses_empty_plaintext(self):
        with pytest.raises(ValueError):
            CredentialCipher(Fernet.generate_key()).encrypt("")

    def test_malformed_key_raises(self):
        with pytest.raises(ValueError):
            CredentialCipher("too-short")


class TestKeyResolution:
    def test_uses_configured_key(self):
        key = Fernet.generate_key().decode()
        with patch.object(credential_cipher_module, "settings") as ms, \
             patch.object(credential_cipher_module, "set_credential") as mock_set:
            ms.CREDENTIAL_ENCRYPTION_KEY = key
            cipher = CredentialCipher()

        mock_set.assert_not_called()
        token = CredentialCipher(key).encrypt("abc")
        assert cipher.decrypt(token) == "abc"

    def test_generates_and_stores_key_when_missing(self):
        with patch.object(credential_cipher_module, "settings") as ms, \
             patch.object(credential_cipher_module, "set_credential", return_value=True) as mock_set:
            ms.CREDENTIAL_ENCRYPTION_KEY = ""
            cipher = CredentialCipher()

        mock_set.assert_called_once()
        name, stored_key = mock_set.call_args.args
        assert name == "CREDENTIAL_ENCRYPTION_KEY"
        assert CredentialCipher(stored_key).decrypt(cipher.encrypt("abc")) == "abc"

    def test_falls_back_to_process_key_without_keychain(self):
        with patch.object(credential_cipher_module, "settings") as ms, \
             patch.object(credential_cipher_module, "set_credential", return_value=False):
            ms.CREDENTIAL_ENCRYPTION_KEY = ""
            cipher = CredentialCipher()

        assert cipher.decrypt(cipher.encrypt("abc")) == "abc"


def test_default_cipher_is_shared(cipher):
    assert get_credential_cipher() is cipher
    assert get_credential_cipher() is get_credential_cipher()
