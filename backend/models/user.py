"""User model - a dashboard login plus its (optional) bank link."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now


class User(Base):
    """A registered user.

    ``access_token`` holds the Plaid access token encrypted at rest. Its
    presence is what marks the user as linked; it is cleared whenever
    Plaid reports the Item needs re-authentication.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    email_verified_at = Column(DateTime, nullable=True)

    # Bank link state
    access_token = Column(String, nullable=True)  # Fernet ciphertext, never plaintext
    item_id = Column(String, nullable=True)
    linked_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    linked_accounts = relationship(
        "LinkedAccount",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_linked(self) -> bool:
        return self.access_token is not None
