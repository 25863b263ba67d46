#!/usr/bin/env python
"""Seed the database with a demo user and account.

Wipes all users, linked accounts and balance history, then creates a
demo login with one checking account and 30 days of balance snapshots.

Usage:
    cd backend
    uv run python -m scripts.seed_db [--days 30] [--yes]
"""

import argparse
import logging
import random
import sys
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from database import Base, get_engine, get_session_local
from models import BalanceSnapshot, LinkedAccount, User, utc_now
from services.user_service import hash_password

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "123456"
DEMO_CURRENT = Decimal("1000.00")
DEMO_AVAILABLE = Decimal("950.00")


def clear_data(db: Session) -> None:
    """Delete all rows, children first."""
    db.query(BalanceSnapshot).delete()
    db.query(LinkedAccount).delete()
    db.query(User).delete()
    db.flush()


def seed(db: Session, days: int = 30, rng: random.Random | None = None) -> User:
    """Create the demo user, account and ``days`` daily snapshots.

    The whole seed runs in one transaction; on any error nothing is kept.

    Returns:
        The demo user.
    """
    rng = rng or random.Random()
    try:
        clear_data(db)

        now = utc_now()
        user = User(
            name="Demo User",
            email=DEMO_EMAIL,
            password_hash=hash_password(DEMO_PASSWORD),
            email_verified_at=now,
        )
        db.add(user)
        db.flush()

        account = LinkedAccount(
            user_id=user.id,
            external_id="demo_account_id",
            name="Demo Checking Account",
            mask="1234",
            account_type="depository",
            account_subtype="checking",
            iso_currency_code="USD",
            current_balance=DEMO_CURRENT,
            available_balance=DEMO_AVAILABLE,
            last_updated=now,
        )
        db.add(account)
        db.flush()

        for i in range(days):
            jitter = Decimal(str(round(rng.uniform(-100, 100), 2)))
            db.add(BalanceSnapshot(
                account_id=account.id,
                balance=DEMO_CURRENT + jitter,
                available=DEMO_AVAILABLE + jitter,
                timestamp=now - timedelta(days=i),
            ))

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Seeded demo user %s with %d balance snapshots", DEMO_EMAIL, days)
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the database with demo data")
    parser.add_argument("--days", type=int, default=30, help="Days of balance history")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args(argv)

    if not args.yes:
        answer = input("This deletes ALL users and account data. Continue? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Aborted.")
            return 1

    Base.metadata.create_all(bind=get_engine())
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        seed(db, days=args.days)
    except Exception as e:
        print(f"Error seeding database: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"Database seeded successfully. Log in as {DEMO_EMAIL} / {DEMO_PASSWORD}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
