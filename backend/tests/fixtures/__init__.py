"""Test fixtures and sample data."""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from models import BalanceSnapshot, LinkedAccount, User
from services.credential_cipher import get_credential_cipher
from services.user_service import hash_password

TEST_PASSWORD = "secret123"
_password_hash: str | None = None


def cached_password_hash() -> str:
    """bcrypt hash of TEST_PASSWORD, computed once per session."""
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(TEST_PASSWORD)
    return _password_hash


def count_snapshots(db: Session, account_id: str) -> int:
    """Number of balance snapshots stored for one account."""
    return db.query(BalanceSnapshot).filter(BalanceSnapshot.account_id == account_id).count()


def create_user(
    db: Session,
    email: str = "ada@example.com",
    name: str = "Ada",
    access_token: str | None = None,
    item_id: str | None = None,
) -> User:
    """Create a user, optionally already linked with ``access_token``."""
    user = User(name=name, email=email, password_hash=cached_password_hash())
    if access_token is not None:
        user.access_token = get_credential_cipher().encrypt(access_token)
        user.item_id = item_id or "item-existing"
        user.linked_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    """A user with no bank linked."""
    return create_user(db)


@pytest.fixture
def linked_user(db):
    """A user whose stored credential is ``access-existing``."""
    return create_user(
        db,
        email="grace@example.com",
        name="Grace",
        access_token="access-existing",
        item_id="item-existing",
    )


@pytest.fixture
def linked_account(db, linked_user):
    """A checking account for ``linked_user`` with one snapshot."""
    ts = datetime(2026, 2, 1, 9, 0)
    account = LinkedAccount(
        user_id=linked_user.id,
        external_id="acc-1",
        name="Checking",
        mask="0000",
        account_type="depository",
        account_subtype="checking",
        current_balance=Decimal("1000.00"),
        available_balance=Decimal("950.00"),
        last_updated=ts,
    )
    db.add(account)
    db.flush()
    db.add(BalanceSnapshot(
        account_id=account.id,
        balance=Decimal("1000.00"),
        available=Decimal("950.00"),
        timestamp=ts,
    ))
    db.commit()
    db.refresh(account)
    return account
