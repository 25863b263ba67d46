"""Bank link API endpoints.

Server side of the Plaid Link browser flow: creating link tokens,
completing a link with the resulting public token, refreshing balances,
and unlinking.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_gateway, get_link_service
from api.helpers import linked_account_response_dict
from database import get_db
from integrations.gateway_protocol import BankingGateway
from schemas import (
    CompleteLinkRequest,
    CompleteLinkResponse,
    ErrorResponse,
    LinkStatusResponse,
    LinkTokenResponse,
    RefreshResponse,
)
from services.exceptions import SyncInProgressError
from services.link_service import LinkSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users/{user_id}", tags=["link"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def _require_configured(gateway: BankingGateway) -> None:
    if not gateway.is_configured():
        raise HTTPException(status_code=400, detail="Plaid is not configured")


@router.post("/link-token", response_model=LinkTokenResponse, responses=_ERROR_RESPONSES)
def create_link_token(
    user_id: str,
    db: Session = Depends(get_db),
    gateway: BankingGateway = Depends(get_gateway),
    service: LinkSyncService = Depends(get_link_service),
):
    """Create a Plaid Link token for the frontend."""
    _require_configured(gateway)
    link_token = service.request_link_token(db, user_id)
    return LinkTokenResponse(link_token=link_token)


@router.post("/link", response_model=CompleteLinkResponse, responses=_ERROR_RESPONSES)
def complete_link(
    user_id: str,
    body: CompleteLinkRequest,
    db: Session = Depends(get_db),
    gateway: BankingGateway = Depends(get_gateway),
    service: LinkSyncService = Depends(get_link_service),
):
    """Exchange a Plaid Link public_token, store the credential and sync balances."""
    _require_configured(gateway)
    accounts = service.complete_link(db, user_id, body.public_token)
    user = service.get_link_status(db, user_id)
    return CompleteLinkResponse(
        item_id=user.item_id,
        accounts=[linked_account_response_dict(a) for a in accounts],
    )


@router.get("/link", response_model=LinkStatusResponse, responses=_ERROR_RESPONSES)
def get_link_status(
    user_id: str,
    db: Session = Depends(get_db),
    service: LinkSyncService = Depends(get_link_service),
):
    """Report whether the user has a bank linked."""
    user = service.get_link_status(db, user_id)
    return LinkStatusResponse(
        linked=user.is_linked,
        item_id=user.item_id,
        linked_at=user.linked_at,
    )


@router.delete("/link", responses=_ERROR_RESPONSES)
def unlink(
    user_id: str,
    db: Session = Depends(get_db),
    service: LinkSyncService = Depends(get_link_service),
):
    """Revoke the bank link with Plaid (best effort) and clear it locally."""
    was_linked = service.unlink(db, user_id)
    if not was_linked:
        raise HTTPException(status_code=404, detail="No bank is linked for this user")
    logger.info("Unlinked bank for user %s", user_id)
    return {"status": "ok", "user_id": user_id}


@router.post("/accounts/refresh", response_model=RefreshResponse, responses=_ERROR_RESPONSES)
def refresh_balances(
    user_id: str,
    db: Session = Depends(get_db),
    service: LinkSyncService = Depends(get_link_service),
):
    """Re-sync balances for all of the user's linked accounts.

    Raises:
        HTTPException:
            - 409 Conflict: Sync already in progress, no bank linked, or
              the bank needs re-authentication
            - 502 Bad Gateway / 504 Gateway Timeout: Plaid failure
    """
    # Early check so a double-click is rejected before any DB work
    if service.is_sync_in_progress(user_id):
        raise SyncInProgressError(
            "Sync already in progress for this user", user_id=user_id
        )
    accounts = service.refresh_balances(db, user_id)
    return RefreshResponse(accounts=[linked_account_response_dict(a) for a in accounts])
