"""Credential store - persistence for bank links, accounts and balance history.

Wraps a SQLAlchemy session so the workflow never touches the ORM
directly. Write failures are rolled back and re-raised as
``PersistenceError``.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import BalanceSnapshot, LinkedAccount, User
from services.credential_cipher import CredentialCipher, get_credential_cipher
from services.exceptions import PersistenceError, UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class AccountWithHistory:
    """A linked account plus its most recent snapshots, newest first."""

    account: LinkedAccount
    history: list[BalanceSnapshot]


class CredentialStore:
    """Store access for one request's database session."""

    def __init__(self, db: Session, cipher: CredentialCipher | None = None):
        self.db = db
        self._cipher = cipher

    @property
    def cipher(self) -> CredentialCipher:
        if self._cipher is None:
            self._cipher = get_credential_cipher()
        return self._cipher

    # ------------------------------------------------------------------
    # Users & credentials
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User:
        """Load a user or raise ``UserNotFoundError``."""
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}", user_id=user_id)
        return user

    def load_credential(self, user: User) -> str | None:
        """Return the decrypted access token, or None if the user is not linked.

        Raises:
            CredentialDecryptionError: The stored value is unreadable.
        """
        if user.access_token is None:
            return None
        return self.cipher.decrypt(user.access_token)

    def save_credential(
        self, user: User, access_token: str, item_id: str, linked_at: datetime
    ) -> None:
        """Encrypt and commit a new credential, replacing any previous one."""
        user.access_token = self.cipher.encrypt(access_token)
        user.item_id = item_id
        user.linked_at = linked_at
        self._commit(user.id, "saving bank credential", during_link=True)
        logger.info("Stored credential for user %s (item %s)", user.id, item_id)

    def clear_credential(self, user: User) -> None:
        """Remove the user's credential and commit immediately."""
        user.access_token = None
        user.item_id = None
        user.linked_at = None
        self._commit(user.id, "clearing bank credential")
        logger.info("Cleared credential for user %s", user.id)

    # ------------------------------------------------------------------
    # Accounts & snapshots
    # ------------------------------------------------------------------

    def get_account_by_external_id(self, external_id: str) -> LinkedAccount | None:
        """Look up an account by its gateway id, across all users."""
        return (
            self.db.query(LinkedAccount)
            .filter(LinkedAccount.external_id == external_id)
            .first()
        )

    def add_account(self, account: LinkedAccount) -> LinkedAccount:
        self.db.add(account)
        self._flush(account.user_id)
        return account

    def append_snapshot(self, snapshot: BalanceSnapshot) -> BalanceSnapshot:
        self.db.add(snapshot)
        return snapshot

    def commit_sync(self, user_id: str) -> None:
        """Commit all reconciled accounts and snapshots of one sync."""
        self._commit(user_id, "saving synced balances")

    def rollback(self) -> None:
        self.db.rollback()

    def list_accounts(self, user_id: str, history_limit: int) -> list[AccountWithHistory]:
        """Return the user's accounts, each with its newest ``history_limit`` snapshots.

        Accounts are ordered by type then name, matching the dashboard layout.
        History for all accounts is loaded in one windowed query.
        """
        accounts = (
            self.db.query(LinkedAccount)
            .filter(LinkedAccount.user_id == user_id)
            .order_by(LinkedAccount.account_type.asc(), LinkedAccount.name.asc())
            .all()
        )
        if not accounts:
            return []

        ranked = (
            self.db.query(
                BalanceSnapshot.id.label("snapshot_id"),
                func.row_number()
                .over(
                    partition_by=BalanceSnapshot.account_id,
                    order_by=BalanceSnapshot.timestamp.desc(),
                )
                .label("recency"),
            )
            .filter(BalanceSnapshot.account_id.in_([a.id for a in accounts]))
            .subquery()
        )
        snapshots = (
            self.db.query(BalanceSnapshot)
            .join(ranked, BalanceSnapshot.id == ranked.c.snapshot_id)
            .filter(ranked.c.recency <= history_limit)
            .order_by(BalanceSnapshot.account_id, ranked.c.recency)
            .all()
        )

        history: dict[str, list[BalanceSnapshot]] = defaultdict(list)
        for snapshot in snapshots:
            history[snapshot.account_id].append(snapshot)
        return [
            AccountWithHistory(account=account, history=history[account.id])
            for account in accounts
        ]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _flush(self, user_id: str) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Flush failed for user %s", user_id, exc_info=True)
            raise PersistenceError("Failed to write account data", user_id=user_id) from e

    def _commit(self, user_id: str, action: str, during_link: bool = False) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error while %s for user %s", action, user_id, exc_info=True)
            raise PersistenceError(
                f"Database error while {action}",
                user_id=user_id,
                during_link=during_link,
            ) from e
