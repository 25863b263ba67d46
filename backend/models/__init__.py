"""SQLAlchemy ORM models."""

from .balance_snapshot import BalanceSnapshot
from .linked_account import LinkedAccount
from .user import User
from .utils import generate_uuid, utc_now

__all__ = ["BalanceSnapshot", "LinkedAccount", "User", "generate_uuid", "utc_now"]
