"""Pydantic schemas for API request/response validation."""

from .account import AccountSummaryResponse, BalanceSnapshotResponse, LinkedAccountResponse
from .link import (
    CompleteLinkRequest,
    CompleteLinkResponse,
    ErrorResponse,
    LinkStatusResponse,
    LinkTokenResponse,
    RefreshResponse,
)
from .user import LoginRequest, UserCreate, UserResponse

__all__ = [
    "AccountSummaryResponse",
    "BalanceSnapshotResponse",
    "CompleteLinkRequest",
    "CompleteLinkResponse",
    "ErrorResponse",
    "LinkStatusResponse",
    "LinkTokenResponse",
    "LinkedAccountResponse",
    "LoginRequest",
    "RefreshResponse",
    "UserCreate",
    "UserResponse",
]
