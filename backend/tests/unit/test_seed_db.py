"""Tests for scripts.seed_db."""

import random
from decimal import Decimal

import pytest

from models import BalanceSnapshot, LinkedAccount, User
from scripts.seed_db import DEMO_EMAIL, DEMO_PASSWORD, clear_data, seed
from services.user_service import verify_password


def test_seed_creates_demo_user_and_account(db):
    user = seed(db, rng=random.Random(0))

    assert user.email == DEMO_EMAIL
    assert verify_password(DEMO_PASSWORD, user.password_hash)
    assert user.email_verified_at is not None

    account = db.query(LinkedAccount).one()
    assert account.user_id == user.id
    assert account.name == "Demo Checking Account"
    assert account.mask == "1234"
    assert account.account_type == "depository"
    assert account.account_subtype == "checking"
    assert account.current_balance == Decimal("1000.00")
    assert account.available_balance == Decimal("950.00")


def test_seed_creates_daily_history(db):
    seed(db, days=30, rng=random.Random(0))

    snapshots = (
        db.query(BalanceSnapshot)
        .order_by(BalanceSnapshot.timestamp.desc())
        .all()
    )
    assert len(snapshots) == 30
    deltas = {(a.timestamp - b.timestamp).days for a, b in zip(snapshots, snapshots[1:])}
    assert deltas == {1}
    for s in snapshots:
        assert Decimal("900.00") <= s.balance <= Decimal("1100.00")


def test_seed_replaces_existing_data(db, linked_user, linked_account):
    seed(db, days=3, rng=random.Random(0))

    assert db.query(User).count() == 1
    assert db.query(User).one().email == DEMO_EMAIL
    assert db.query(LinkedAccount).count() == 1
    assert db.query(BalanceSnapshot).count() == 3


def test_seed_is_rerunnable(db):
    seed(db, days=2, rng=random.Random(0))
    seed(db, days=2, rng=random.Random(1))

    assert db.query(User).count() == 1
    assert db.query(BalanceSnapshot).count() == 2


def test_seed_failure_rolls_back(db, user, monkeypatch):
    def broken_hash(password):
        raise RuntimeError("hashing unavailable")

    monkeypatch.setattr("scripts.seed_db.hash_password", broken_hash)

    with pytest.raises(RuntimeError):
        seed(db, days=1)

    assert db.query(User).one().id == user.id


def test_clear_data(db, linked_user, linked_account):
    clear_data(db)
    db.commit()

    assert db.query(User).count() == 0
    assert db.query(LinkedAccount).count() == 0
    assert db.query(BalanceSnapshot).count() == 0
