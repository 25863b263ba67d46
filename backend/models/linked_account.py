"""LinkedAccount model - a bank account discovered through Plaid."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now


class LinkedAccount(Base):
    """A bank account belonging to one user, with its latest balances.

    ``external_id`` is Plaid's ``account_id`` and is unique across the
    whole table, not just per user: reconciliation upserts on it.
    """

    __tablename__ = "linked_accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    external_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    mask = Column(String, nullable=True)  # Last digits of the account number
    account_type = Column(String, nullable=True)  # e.g., "depository", "credit"
    account_subtype = Column(String, nullable=True)  # e.g., "checking", "savings"
    iso_currency_code = Column(String(3), nullable=True)
    current_balance = Column(Numeric(18, 2), nullable=True)
    available_balance = Column(Numeric(18, 2), nullable=True)
    last_updated = Column(DateTime, default=utc_now)
    created_at = Column(DateTime, default=utc_now)

    user = relationship("User", back_populates="linked_accounts")
    balance_snapshots = relationship(
        "BalanceSnapshot",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="BalanceSnapshot.timestamp.desc()",
    )
