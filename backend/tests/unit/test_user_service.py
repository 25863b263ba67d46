"""Unit tests for UserService and password hashing."""

import pytest

from services.exceptions import DuplicateEmailError, InvalidCredentialsError, UserNotFoundError
from services.user_service import UserService, hash_password, verify_password
from tests.fixtures import TEST_PASSWORD


def test_hash_password_is_not_plaintext():
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed) is True
    assert verify_password("hunter23", hashed) is False


def test_create_user(db):
    user = UserService.create_user(db, "  Ada  ", "Ada@Example.com", "secret123")

    assert user.id is not None
    assert user.name == "Ada"
    assert user.email == "ada@example.com"
    assert user.password_hash != "secret123"
    assert user.is_linked is False
    assert user.created_at is not None


def test_create_user_duplicate_email_is_case_insensitive(db, user):
    with pytest.raises(DuplicateEmailError):
        UserService.create_user(db, "Imposter", "ADA@example.com", "secret123")


def test_authenticate(db, user):
    assert UserService.authenticate(db, "ada@example.com", TEST_PASSWORD).id == user.id


def test_authenticate_normalizes_email(db, user):
    assert UserService.authenticate(db, " Ada@Example.COM ", TEST_PASSWORD).id == user.id


def test_authenticate_wrong_password(db, user):
    with pytest.raises(InvalidCredentialsError, match="Invalid credentials."):
        UserService.authenticate(db, "ada@example.com", "wrong-password")


def test_authenticate_unknown_email_same_message(db):
    with pytest.raises(InvalidCredentialsError, match="Invalid credentials."):
        UserService.authenticate(db, "nobody@example.com", TEST_PASSWORD)


def test_get_user(db, user):
    assert UserService.get_user(db, user.id).email == "ada@example.com"


def test_get_unknown_user(db):
    with pytest.raises(UserNotFoundError):
        UserService.get_user(db, "missing-user")
