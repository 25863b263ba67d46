"""Typed exception hierarchy for banking gateway errors.

Lets callers tell a bad one-time token apart from a revoked credential
and from ordinary network trouble, since each calls for a different
recovery path in the UI.
"""

from enum import Enum


class RecoveryAction(str, Enum):
    """What the user (or the UI on their behalf) should do next."""

    RELINK = "relink"  # Start over from a fresh link token
    RETRY_SYNC = "retry_sync"  # The link is fine; only the balance sync needs a retry
    RETRY = "retry"  # Transient failure; repeat the same request
    NONE = "none"  # Needs manual intervention


class GatewayError(Exception):
    """Base exception for all failures talking to the banking gateway.

    Carries the gateway's error code, HTTP status and request id when
    the remote side returned them.
    """

    recovery = RecoveryAction.RETRY

    def __init__(
        self,
        message: str,
        error_code: str = "",
        status_code: int | None = None,
        request_id: str | None = None,
    ):
        self.error_code = error_code
        self.status_code = status_code
        self.request_id = request_id
        super().__init__(message)

    @property
    def retriable(self) -> bool:
        """429, 5xx and transport-level failures (no status) are retriable."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class GatewayTimeoutError(GatewayError):
    """The gateway call did not finish within the configured timeout."""

    pass


class ExchangeError(GatewayError):
    """The one-time public token was invalid, expired, or already used.

    Terminal for that token: the flow must restart with a new link token.
    """

    recovery = RecoveryAction.RELINK

    @property
    def retriable(self) -> bool:
        return False


class ReauthRequiredError(GatewayError):
    """The stored credential was rejected and the bank must be relinked."""

    recovery = RecoveryAction.RELINK

    @property
    def retriable(self) -> bool:
        return False
