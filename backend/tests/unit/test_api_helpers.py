"""Tests for shared API helpers and error mapping."""

import json
from decimal import Decimal

import pytest

from api.errors import error_response
from api.helpers import account_with_history_dict, linked_account_response_dict
from integrations.exceptions import (
    ExchangeError,
    GatewayError,
    GatewayTimeoutError,
    ReauthRequiredError,
)
from schemas import LinkedAccountResponse
from services.credential_store import AccountWithHistory
from services.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NoCredentialError,
    OwnershipConflictError,
    PersistenceError,
    SyncError,
    SyncInProgressError,
    UserNotFoundError,
)


class TestLinkedAccountResponseDict:
    """Tests for linked_account_response_dict."""

    def test_without_history(self, linked_account):
        result = linked_account_response_dict(linked_account)

        assert result["id"] == linked_account.id
        assert result["external_id"] == "acc-1"
        assert result["current_balance"] == Decimal("1000.00")
        assert result["balance_history"] == []

    def test_with_history(self, linked_account):
        history = list(linked_account.balance_snapshots)

        result = linked_account_response_dict(linked_account, history)

        assert len(result["balance_history"]) == 1
        assert result["balance_history"][0]["balance"] == Decimal("1000.00")
        assert result["balance_history"][0]["available"] == Decimal("950.00")

    def test_validates_against_schema(self, linked_account):
        entry = AccountWithHistory(account=linked_account, history=list(linked_account.balance_snapshots))

        model = LinkedAccountResponse(**account_with_history_dict(entry))

        assert model.name == "Checking"
        assert len(model.balance_history) == 1


def _body(response):
    return json.loads(response.body)


class TestErrorResponse:
    """Tests for error_response."""

    @pytest.mark.parametrize(
        "exc, status, kind, action",
        [
            (ExchangeError("x"), 400, "exchange_failed", "relink"),
            (ReauthRequiredError("x"), 409, "reauth_required", "relink"),
            (GatewayTimeoutError("x"), 504, "gateway_timeout", "retry"),
            (GatewayError("x"), 502, "gateway_error", "retry"),
            (NoCredentialError("x"), 409, "no_credential", "relink"),
            (SyncInProgressError("x"), 409, "sync_in_progress", "retry_sync"),
            (SyncError("x"), 502, "sync_failed", "retry_sync"),
            (OwnershipConflictError("x"), 409, "ownership_conflict", "none"),
            (UserNotFoundError("x"), 404, "user_not_found", "none"),
            (DuplicateEmailError("x"), 409, "duplicate_email", "none"),
            (InvalidCredentialsError("x"), 401, "invalid_credentials", "none"),
        ],
    )
    def test_mapping(self, exc, status, kind, action):
        response = error_response(exc)

        assert response.status_code == status
        body = _body(response)
        assert body["error"] == kind
        assert body["action"] == action
        assert body["detail"]

    def test_persistence_during_link_asks_for_relink(self):
        body = _body(error_response(PersistenceError("x", during_link=True)))

        assert body["error"] == "persistence_error"
        assert body["action"] == "relink"
        assert "linking again" in body["detail"]

    def test_persistence_during_sync_asks_for_resync(self):
        response = error_response(PersistenceError("x"))

        assert response.status_code == 500
        assert _body(response)["action"] == "retry_sync"

    def test_gateway_message_not_echoed(self):
        body = _body(error_response(GatewayError("Plaid error (X): internal host db-7 down")))
        assert "db-7" not in body["detail"]

    def test_unknown_exception(self):
        response = error_response(RuntimeError("boom"))

        assert response.status_code == 500
        assert _body(response) == {
            "detail": "An unexpected error occurred.",
            "error": "internal_error",
            "action": "none",
        }
