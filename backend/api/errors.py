"""Mapping of gateway and workflow exceptions to HTTP error responses.

Registered on the app in ``main.py`` so no workflow failure ever
escapes as an unhandled 500. Each body names the failure kind and the
recovery action, letting the UI tell "link your bank again" apart from
"we'll retry your sync".
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from integrations.exceptions import (
    ExchangeError,
    GatewayError,
    GatewayTimeoutError,
    ReauthRequiredError,
)
from services.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NoCredentialError,
    OwnershipConflictError,
    PersistenceError,
    SyncError,
    SyncInProgressError,
    UserNotFoundError,
    WorkflowError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses must precede their bases
_ERROR_TABLE: list[tuple[type[Exception], int, str, str]] = [
    (ExchangeError, 400, "exchange_failed",
     "The bank link could not be completed. Please try linking again."),
    (ReauthRequiredError, 409, "reauth_required",
     "Your bank connection needs to be re-authenticated. Please link your bank again."),
    (GatewayTimeoutError, 504, "gateway_timeout",
     "The bank data service took too long to respond. Please try again."),
    (GatewayError, 502, "gateway_error",
     "The bank data service is unavailable. Please try again."),
    (NoCredentialError, 409, "no_credential",
     "No bank is linked yet. Please link your bank first."),
    (SyncInProgressError, 409, "sync_in_progress",
     "A sync is already in progress. Please wait for it to complete."),
    (SyncError, 502, "sync_failed",
     "Your bank is linked, but balances could not be synced yet. We'll retry your sync."),
    (OwnershipConflictError, 409, "ownership_conflict",
     "This bank account is already linked to another user."),
    (UserNotFoundError, 404, "user_not_found", "User not found"),
    (DuplicateEmailError, 409, "duplicate_email", "User with this email already exists"),
    (InvalidCredentialsError, 401, "invalid_credentials", "Invalid credentials."),
]


def _persistence_detail(exc: PersistenceError) -> str:
    if exc.during_link:
        return "We couldn't save your bank link. Please try linking again."
    return "We couldn't save your latest balances. We'll retry your sync."


def error_response(exc: Exception) -> JSONResponse:
    """Build the JSON error response for a gateway or workflow exception.

    Gateway messages are never echoed to the client; they may contain
    upstream details.
    """
    if isinstance(exc, PersistenceError):
        status, kind, detail = 500, "persistence_error", _persistence_detail(exc)
    else:
        for exc_type, status, kind, detail in _ERROR_TABLE:
            if isinstance(exc, exc_type):
                break
        else:
            status, kind, detail = 500, "internal_error", "An unexpected error occurred."

    action = getattr(exc, "recovery", None)
    return JSONResponse(
        status_code=status,
        content={"detail": detail, "error": kind, "action": action.value if action else "none"},
    )


async def _handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    logger.warning(
        "Gateway error on %s %s: %s (code=%s, request_id=%s)",
        request.method, request.url.path, type(exc).__name__, exc.error_code, exc.request_id,
    )
    return error_response(exc)


async def _handle_workflow_error(request: Request, exc: WorkflowError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        logger.error("Persistence error on %s %s: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s on %s %s", type(exc).__name__, request.method, request.url.path)
    return error_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    """Install the gateway/workflow exception handlers on ``app``."""
    app.add_exception_handler(GatewayError, _handle_gateway_error)
    app.add_exception_handler(WorkflowError, _handle_workflow_error)
