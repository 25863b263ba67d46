"""User service - sign-up and password login."""

import logging

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import User
from services.exceptions import DuplicateEmailError, InvalidCredentialsError, UserNotFoundError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class UserService:
    """Service for user registration and authentication."""

    @staticmethod
    def create_user(db: Session, name: str, email: str, password: str) -> User:
        """Register a new user.

        Field validation (non-blank name, email syntax, password length) is
        done by the request schema; this enforces uniqueness.

        Raises:
            DuplicateEmailError: The email is already registered.
        """
        email = email.strip().lower()
        if db.query(User).filter(User.email == email).first() is not None:
            raise DuplicateEmailError("User with this email already exists")

        user = User(name=name.strip(), email=email, password_hash=hash_password(password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            # Concurrent sign-up with the same email won the race
            db.rollback()
            raise DuplicateEmailError("User with this email already exists") from e
        db.refresh(user)
        logger.info("Created user %s", user.id)
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User:
        """Check an email/password pair.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password. The
                message is identical for both cases.
        """
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError("Invalid credentials.")
        return user

    @staticmethod
    def get_user(db: Session, user_id: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}", user_id=user_id)
        return user
