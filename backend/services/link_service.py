"""Link/sync service - the bank-link and balance-synchronization workflow.

Drives the credential lifecycle end to end:

1. ``request_link_token``: mint a link token for the browser widget.
2. ``complete_link``: exchange the public token, persist the credential,
   fetch balances and reconcile them.
3. ``refresh_balances``: re-fetch balances with the stored credential,
   clearing it if the bank demands re-authentication.

Link and sync for the same user are serialized through
:class:`~services.user_locks.UserLockRegistry`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from integrations.exceptions import GatewayError, ReauthRequiredError
from integrations.gateway_protocol import BankingGateway, GatewayAccount
from models import LinkedAccount, User, utc_now
from services.credential_cipher import CredentialCipher, CredentialDecryptionError
from services.credential_store import AccountWithHistory, CredentialStore
from services.exceptions import NoCredentialError, SyncError
from services.reconciliation_service import ReconciliationService
from services.user_locks import UserLockRegistry, get_user_lock_registry

logger = logging.getLogger(__name__)


@dataclass
class AccountSummary:
    """Dashboard totals across a user's linked accounts."""

    linked: bool
    account_count: int
    total_current_balance: Decimal
    total_available_balance: Decimal
    last_synced_at: datetime | None


class LinkSyncService:
    """Service for linking a bank via the gateway and syncing balances."""

    def __init__(
        self,
        gateway: Optional[BankingGateway] = None,
        cipher: Optional[CredentialCipher] = None,
        lock_registry: Optional[UserLockRegistry] = None,
        reconciler: Optional[ReconciliationService] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize with optional collaborators for dependency injection.

        Args:
            gateway: Banking gateway client. If None, a PlaidClient is
                created on first use.
            cipher: Access-token cipher. If None, the process-wide cipher
                is used.
            lock_registry: Per-user lock registry. Defaults to the
                process-wide registry.
            reconciler: Account reconciliation service.
            clock: Source of "now" for timestamps.
        """
        self._gateway = gateway
        self._cipher = cipher
        self._locks = lock_registry if lock_registry is not None else get_user_lock_registry()
        self._reconciler = reconciler or ReconciliationService()
        self._clock = clock

    @property
    def gateway(self) -> BankingGateway:
        """Get the banking gateway, creating the Plaid client if not provided."""
        if self._gateway is None:
            from integrations.plaid_client import PlaidClient

            self._gateway = PlaidClient()
        return self._gateway

    def _store(self, db: Session) -> CredentialStore:
        return CredentialStore(db, self._cipher)

    def is_sync_in_progress(self, user_id: str) -> bool:
        return self._locks.is_locked(user_id)

    # ------------------------------------------------------------------
    # Workflow entry points
    # ------------------------------------------------------------------

    def request_link_token(self, db: Session, user_id: str) -> str:
        """Mint a link token for ``user_id``.

        Raises:
            UserNotFoundError: Unknown user.
            GatewayError: The gateway call failed. Not retried here; link
                tokens are cheap to request again.
        """
        self._store(db).get_user(user_id)
        token = self.gateway.create_link_token(user_id)
        logger.info("Created link token for user %s", user_id)
        return token

    def complete_link(self, db: Session, user_id: str, public_token: str) -> list[LinkedAccount]:
        """Finish a link: exchange, persist, fetch and reconcile.

        The credential is committed before balances are fetched. If the
        fetch fails the link still stands and ``SyncError`` is raised so
        the caller can offer a resync instead of a relink.

        Raises:
            UserNotFoundError: Unknown user.
            SyncInProgressError: A link or sync is already running.
            ExchangeError: The public token is unusable; restart linking.
            PersistenceError: The credential (``during_link``) or the
                synced balances could not be saved.
            ReauthRequiredError: The fresh credential was rejected; it has
                been cleared.
            SyncError: Balances could not be fetched after linking.
            OwnershipConflictError: A returned account belongs to another user.
        """
        store = self._store(db)
        user = store.get_user(user_id)

        with self._locks.hold(user_id):
            exchange = self.gateway.exchange_public_token(public_token)
            if user.access_token is not None:
                logger.info("User %s is relinking; replacing existing credential", user_id)
            store.save_credential(user, exchange.access_token, exchange.item_id, self._clock())

            try:
                remote_accounts = self.gateway.fetch_balances(exchange.access_token)
            except ReauthRequiredError:
                store.clear_credential(user)
                raise
            except GatewayError as e:
                logger.warning(
                    "User %s linked item %s but the balance fetch failed: %s",
                    user_id, exchange.item_id, e,
                )
                raise SyncError(
                    "Bank linked, but balances could not be fetched yet",
                    user_id=user_id,
                ) from e

            return self._reconcile(store, user_id, remote_accounts)

    def refresh_balances(self, db: Session, user_id: str) -> list[LinkedAccount]:
        """Re-sync balances using the stored credential.

        Raises:
            UserNotFoundError: Unknown user.
            SyncInProgressError: A link or sync is already running.
            NoCredentialError: The user is not linked; nothing is written.
            ReauthRequiredError: The credential was rejected (or could not
                be decrypted) and has been cleared.
            GatewayError: Transient gateway failure; nothing is written.
            OwnershipConflictError: A returned account belongs to another user.
            PersistenceError: The synced balances could not be saved.
        """
        store = self._store(db)
        user = store.get_user(user_id)

        with self._locks.hold(user_id):
            access_token = self._load_credential(store, user)
            if access_token is None:
                raise NoCredentialError(
                    "No bank is linked for this user", user_id=user_id
                )

            try:
                remote_accounts = self.gateway.fetch_balances(access_token)
            except ReauthRequiredError:
                logger.warning("Credential for user %s needs re-authentication; clearing it", user_id)
                store.clear_credential(user)
                raise

            return self._reconcile(store, user_id, remote_accounts)

    def unlink(self, db: Session, user_id: str) -> bool:
        """Revoke and clear the user's credential.

        Remote revocation is best-effort; the local credential is always
        cleared. Accounts and balance history are kept.

        Returns:
            True if a credential was present.
        """
        store = self._store(db)
        user = store.get_user(user_id)

        with self._locks.hold(user_id):
            if user.access_token is None:
                return False
            try:
                access_token = store.load_credential(user)
            except CredentialDecryptionError:
                access_token = None

            if access_token is not None:
                try:
                    self.gateway.remove_item(access_token)
                except GatewayError as e:
                    logger.warning(
                        "Failed to revoke item for user %s remotely (clearing locally anyway): %s",
                        user_id, e,
                    )
            store.clear_credential(user)
            return True

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_link_status(self, db: Session, user_id: str) -> User:
        """Return the user record; callers read ``is_linked``/``item_id``."""
        return self._store(db).get_user(user_id)

    def get_accounts(
        self, db: Session, user_id: str, history_limit: int
    ) -> list[AccountWithHistory]:
        """The user's accounts, each with its newest ``history_limit`` snapshots."""
        store = self._store(db)
        store.get_user(user_id)
        return store.list_accounts(user_id, history_limit)

    def get_summary(self, db: Session, user_id: str) -> AccountSummary:
        """Aggregate balances across the user's accounts."""
        store = self._store(db)
        user = store.get_user(user_id)
        accounts = store.list_accounts(user_id, history_limit=1)

        total_current = sum(
            (a.account.current_balance or Decimal("0") for a in accounts), Decimal("0")
        )
        total_available = sum(
            (a.account.available_balance or Decimal("0") for a in accounts), Decimal("0")
        )
        last_synced = max(
            (a.account.last_updated for a in accounts if a.account.last_updated),
            default=None,
        )
        return AccountSummary(
            linked=user.is_linked,
            account_count=len(accounts),
            total_current_balance=total_current,
            total_available_balance=total_available,
            last_synced_at=last_synced,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load_credential(self, store: CredentialStore, user: User) -> str | None:
        """Decrypt the stored credential, clearing it if it is unreadable."""
        try:
            return store.load_credential(user)
        except CredentialDecryptionError as e:
            logger.warning(
                "Stored credential for user %s could not be decrypted; clearing it", user.id
            )
            store.clear_credential(user)
            raise ReauthRequiredError(
                "Stored bank credential is unreadable; please relink"
            ) from e

    def _reconcile(
        self,
        store: CredentialStore,
        user_id: str,
        remote_accounts: list[GatewayAccount],
    ) -> list[LinkedAccount]:
        try:
            result = self._reconciler.reconcile_accounts(
                store, user_id, remote_accounts, self._clock()
            )
        except Exception:
            store.rollback()
            raise
        store.commit_sync(user_id)
        return result.accounts
