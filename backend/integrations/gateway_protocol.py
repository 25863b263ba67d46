"""Banking gateway protocol definitions.

This module defines the contract the link/sync workflow needs from a
bank-data aggregator. ``PlaidClient`` is the production implementation;
tests substitute an in-memory double.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol


@dataclass
class GatewayAccount:
    """Normalized account and balance data returned by the gateway."""

    external_id: str  # Gateway's account ID, unique across all users
    name: str
    mask: str | None = None  # Last digits of the account number
    type: str | None = None  # e.g., "depository", "credit", "loan"
    subtype: str | None = None  # e.g., "checking", "savings"
    current_balance: Decimal | None = None
    available_balance: Decimal | None = None
    iso_currency_code: str | None = None


@dataclass
class ExchangeResult:
    """Durable credential produced by exchanging a public token."""

    access_token: str
    item_id: str


class BankingGateway(Protocol):
    """Protocol every banking gateway client must implement.

    All methods raise :class:`~integrations.exceptions.GatewayError` (or a
    subclass) on failure and never return partial results.
    """

    def is_configured(self) -> bool:
        """Check whether API credentials are present."""
        ...

    def create_link_token(self, user_id: str) -> str:
        """Mint a short-lived link token scoped to ``user_id``."""
        ...

    def exchange_public_token(self, public_token: str) -> ExchangeResult:
        """Trade a one-time public token for a durable access token.

        Raises:
            ExchangeError: If the public token is invalid, expired or used.
        """
        ...

    def fetch_balances(self, access_token: str) -> list[GatewayAccount]:
        """Fetch current balances for every account under the credential.

        Raises:
            ReauthRequiredError: If the credential needs re-authentication.
        """
        ...

    def remove_item(self, access_token: str) -> None:
        """Revoke the credential at the gateway."""
        ...
