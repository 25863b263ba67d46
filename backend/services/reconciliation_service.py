"""Reconciliation - upsert gateway accounts and append balance snapshots."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from integrations.gateway_protocol import GatewayAccount
from models import BalanceSnapshot, LinkedAccount
from services.credential_store import CredentialStore
from services.exceptions import OwnershipConflictError

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Accounts touched by one reconciliation pass."""

    accounts: list[LinkedAccount] = field(default_factory=list)
    created: int = 0
    updated: int = 0


class ReconciliationService:
    """Create-or-update accounts keyed on their gateway id.

    Every account written gets exactly one new BalanceSnapshot carrying
    the same balances. Nothing is committed here; the caller commits
    once the whole batch is reconciled.
    """

    def reconcile_accounts(
        self,
        store: CredentialStore,
        user_id: str,
        remote_accounts: list[GatewayAccount],
        now: datetime,
    ) -> ReconcileResult:
        """Reconcile a full gateway response for one user.

        Ownership is checked for the whole batch before anything is
        written, so a conflict leaves the store untouched.

        Raises:
            OwnershipConflictError: An external id belongs to another user.
        """
        remote_accounts = self._dedupe(remote_accounts)

        existing: dict[str, LinkedAccount | None] = {}
        for remote in remote_accounts:
            account = store.get_account_by_external_id(remote.external_id)
            if account is not None and account.user_id != user_id:
                logger.error(
                    "Account %s is owned by user %s, refusing to reassign to %s",
                    remote.external_id, account.user_id, user_id,
                )
                raise OwnershipConflictError(
                    "Bank account is already linked to a different user",
                    user_id=user_id,
                    external_id=remote.external_id,
                )
            existing[remote.external_id] = account

        result = ReconcileResult()
        for remote in remote_accounts:
            account = existing[remote.external_id]
            if account is None:
                account = self._create_account(store, user_id, remote, now)
                result.created += 1
            else:
                self._update_account(account, remote, now)
                result.updated += 1
            store.append_snapshot(
                BalanceSnapshot(
                    account_id=account.id,
                    balance=remote.current_balance,
                    available=remote.available_balance,
                    timestamp=now,
                )
            )
            result.accounts.append(account)

        logger.info(
            "User %s: accounts reconciled (%d new, %d existing)",
            user_id, result.created, result.updated,
        )
        return result

    def reconcile_account(
        self,
        store: CredentialStore,
        user_id: str,
        remote: GatewayAccount,
        now: datetime,
    ) -> LinkedAccount:
        """Reconcile a single gateway account. See ``reconcile_accounts``."""
        return self.reconcile_accounts(store, user_id, [remote], now).accounts[0]

    @staticmethod
    def _create_account(
        store: CredentialStore,
        user_id: str,
        remote: GatewayAccount,
        now: datetime,
    ) -> LinkedAccount:
        account = LinkedAccount(
            user_id=user_id,
            external_id=remote.external_id,
            name=remote.name,
            mask=remote.mask,
            account_type=remote.type,
            account_subtype=remote.subtype,
            iso_currency_code=remote.iso_currency_code,
            current_balance=remote.current_balance,
            available_balance=remote.available_balance,
            last_updated=now,
        )
        # Flush so the snapshot can reference the new id
        return store.add_account(account)

    @staticmethod
    def _update_account(account: LinkedAccount, remote: GatewayAccount, now: datetime) -> None:
        account.name = remote.name
        account.current_balance = remote.current_balance
        account.available_balance = remote.available_balance
        account.last_updated = now

    @staticmethod
    def _dedupe(remote_accounts: list[GatewayAccount]) -> list[GatewayAccount]:
        """Keep the last entry per external id, preserving first-seen order."""
        by_id: dict[str, GatewayAccount] = {}
        for remote in remote_accounts:
            if remote.external_id in by_id:
                logger.warning("Gateway returned account %s more than once", remote.external_id)
            by_id[remote.external_id] = remote
        return list(by_id.values())
