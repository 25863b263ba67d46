"""BalanceSnapshot model - append-only balance history."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now


class BalanceSnapshot(Base):
    """Balances of one account as observed by a single sync.

    Rows are only ever inserted. Reads go newest-first through the
    ``(account_id, timestamp DESC)`` index.
    """

    __tablename__ = "balance_snapshots"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("linked_accounts.id"), nullable=False)
    balance = Column(Numeric(18, 2), nullable=True)
    available = Column(Numeric(18, 2), nullable=True)
    timestamp = Column(DateTime, nullable=False, default=utc_now)

    account = relationship("LinkedAccount", back_populates="balance_snapshots")


Index(
    "ix_balance_snapshots_account_timestamp",
    BalanceSnapshot.account_id,
    BalanceSnapshot.timestamp.desc(),
)
