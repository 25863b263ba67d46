"""Tests for services.credential_manager."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from services.credential_manager import (
    CREDENTIAL_KEYS,
    SERVICE_NAME,
    delete_credential,
    get_credential,
    list_credentials,
    set_credential,
)


@pytest.fixture
def mock_keyring():
    """A fake ``keyring`` module installed in sys.modules."""
    fake = MagicMock()
    with patch.dict(sys.modules, {"keyring": fake}):
        yield fake


@pytest.fixture
def no_keyring():
    """Simulate keyring not being installed."""
    with patch.dict(sys.modules, {"keyring": None}):
        yield


class TestGetCredential:
    def test_reads_from_service(self, mock_keyring):
        mock_keyring.get_password.return_value = "shh"

        assert get_credential("PLAID_SECRET") == "shh"
        mock_keyring.get_password.assert_called_once_with(SERVICE_NAME, "PLAID_SECRET")

    def test_missing_value(self, mock_keyring):
        mock_keyring.get_password.return_value = None
        assert get_credential("PLAID_SECRET") is None

    def test_without_keyring(self, no_keyring):
        assert get_credential("PLAID_SECRET") is None

    def test_backend_failure_is_swallowed(self, mock_keyring):
        mock_keyring.get_password.side_effect = RuntimeError("locked keychain")
        assert get_credential("PLAID_SECRET") is None


class TestSetCredential:
    def test_stores_allow_listed_key(self, mock_keyring):
        assert set_credential("CREDENTIAL_ENCRYPTION_KEY", "fernet-key") is True
        mock_keyring.set_password.assert_called_once_with(
            SERVICE_NAME, "CREDENTIAL_ENCRYPTION_KEY", "fernet-key"
        )

    @pytest.mark.parametrize("key", ["DATABASE_URL", "PLAID_ENVIRONMENT", "access_token"])
    def test_rejects_other_keys(self, mock_keyring, key):
        assert set_credential(key, "value") is False
        mock_keyring.set_password.assert_not_called()

    @pytest.mark.parametrize("value", ["", "   "])
    def test_rejects_blank_values(self, mock_keyring, value):
        assert set_credential("PLAID_SECRET", value) is False
        mock_keyring.set_password.assert_not_called()

    def test_without_keyring(self, no_keyring):
        assert set_credential("PLAID_SECRET", "shh") is False

    def test_backend_failure(self, mock_keyring):
        mock_keyring.set_password.side_effect = RuntimeError("read-only backend")
        assert set_credential("PLAID_SECRET", "shh") is False


class TestDeleteCredential:
    def test_deletes(self, mock_keyring):
        assert delete_credential("PLAID_CLIENT_ID") is True
        mock_keyring.delete_password.assert_called_once_with(SERVICE_NAME, "PLAID_CLIENT_ID")

    def test_rejects_other_keys(self, mock_keyring):
        assert delete_credential("DATABASE_URL") is False
        mock_keyring.delete_password.assert_not_called()

    def test_without_keyring(self, no_keyring):
        assert delete_credential("PLAID_CLIENT_ID") is False

    def test_nothing_to_delete(self, mock_keyring):
        mock_keyring.delete_password.side_effect = RuntimeError("not found")
        assert delete_credential("PLAID_CLIENT_ID") is False


class TestListCredentials:
    def test_only_stored_values(self, mock_keyring):
        stored = {"PLAID_CLIENT_ID": "cid", "PLAID_SECRET": "shh"}
        mock_keyring.get_password.side_effect = lambda service, key: stored.get(key)

        assert list_credentials() == stored

    def test_empty_keychain(self, mock_keyring):
        mock_keyring.get_password.return_value = None
        assert list_credentials() == {}

    def test_without_keyring(self, no_keyring):
        assert list_credentials() == {}


class TestCredentialKeys:
    def test_allow_list(self):
        assert CREDENTIAL_KEYS == frozenset(
            {"PLAID_CLIENT_ID", "PLAID_SECRET", "CREDENTIAL_ENCRYPTION_KEY"}
        )

    def test_settings_that_are_not_secrets_are_excluded(self):
        for key in ("DATABASE_URL", "PLAID_ENVIRONMENT", "PLAID_PRODUCTS", "LOG_LEVEL"):
            assert key not in CREDENTIAL_KEYS
