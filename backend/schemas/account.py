"""Schemas for linked accounts and balance history."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class BalanceSnapshotResponse(BaseModel):
    """One historical balance reading."""

    balance: Decimal | None = None
    available: Decimal | None = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class LinkedAccountResponse(BaseModel):
    """A linked bank account with its newest balance snapshots."""

    id: str
    external_id: str
    name: str
    mask: str | None = None
    account_type: str | None = None
    account_subtype: str | None = None
    iso_currency_code: str | None = None
    current_balance: Decimal | None = None
    available_balance: Decimal | None = None
    last_updated: datetime | None = None
    balance_history: list[BalanceSnapshotResponse] = []

    model_config = ConfigDict(from_attributes=True)


class AccountSummaryResponse(BaseModel):
    """Dashboard totals across all of a user's accounts."""

    linked: bool
    account_count: int
    total_current_balance: Decimal
    total_available_balance: Decimal
    last_synced_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
