"""Accounts API endpoints (read side of the dashboard)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import get_link_service
from api.helpers import account_with_history_dict
from config import settings
from database import get_db
from schemas import AccountSummaryResponse, ErrorResponse, LinkedAccountResponse
from services.link_service import LinkSyncService

router = APIRouter(prefix="/api/users/{user_id}", tags=["accounts"])


@router.get(
    "/accounts",
    response_model=list[LinkedAccountResponse],
    responses={404: {"model": ErrorResponse}},
)
def list_accounts(
    user_id: str,
    limit: int | None = Query(None, ge=1, le=365, description="Snapshots per account"),
    db: Session = Depends(get_db),
    service: LinkSyncService = Depends(get_link_service),
):
    """List linked accounts with their most recent balance snapshots, newest first."""
    history_limit = limit or settings.BALANCE_HISTORY_LIMIT
    entries = service.get_accounts(db, user_id, history_limit)
    return [account_with_history_dict(e) for e in entries]


@router.get(
    "/summary",
    response_model=AccountSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_summary(
    user_id: str,
    db: Session = Depends(get_db),
    service: LinkSyncService = Depends(get_link_service),
):
    """Totals across all linked accounts for the dashboard header."""
    return service.get_summary(db, user_id)
