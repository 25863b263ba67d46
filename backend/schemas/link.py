"""Schemas for the bank-link workflow endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from integrations.exceptions import RecoveryAction
from schemas.account import LinkedAccountResponse


class LinkTokenResponse(BaseModel):
    link_token: str


class CompleteLinkRequest(BaseModel):
    public_token: str = Field(min_length=1)


class CompleteLinkResponse(BaseModel):
    item_id: str | None = None
    accounts: list[LinkedAccountResponse]


class RefreshResponse(BaseModel):
    accounts: list[LinkedAccountResponse]


class LinkStatusResponse(BaseModel):
    """Whether a user has a bank linked. The credential itself is never exposed."""

    linked: bool
    item_id: str | None = None
    linked_at: datetime | None = None


class ErrorResponse(BaseModel):
    """Structured error body.

    ``error`` names the failure kind; ``action`` tells the UI which
    recovery path to offer (relink vs. retry the sync).
    """

    detail: str
    error: str
    action: RecoveryAction
