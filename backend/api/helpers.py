"""Shared API helpers for route handlers."""

from models import LinkedAccount
from services.credential_store import AccountWithHistory


def linked_account_response_dict(
    account: LinkedAccount,
    history: list | None = None,
) -> dict:
    """Build a LinkedAccountResponse-compatible dict.

    Args:
        account: The linked account.
        history: Snapshots to include, newest first. Omitted when None.

    Returns:
        Dict matching the LinkedAccountResponse schema.
    """
    return {
        "id": account.id,
        "external_id": account.external_id,
        "name": account.name,
        "mask": account.mask,
        "account_type": account.account_type,
        "account_subtype": account.account_subtype,
        "iso_currency_code": account.iso_currency_code,
        "current_balance": account.current_balance,
        "available_balance": account.available_balance,
        "last_updated": account.last_updated,
        "balance_history": [
            {"balance": s.balance, "available": s.available, "timestamp": s.timestamp}
            for s in (history or [])
        ],
    }


def account_with_history_dict(entry: AccountWithHistory) -> dict:
    return linked_account_response_dict(entry.account, entry.history)
