"""Pytest configuration and fixtures."""

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import services.credential_cipher as credential_cipher_module
from api.dependencies import get_gateway
from database import Base, get_db
from main import app
from services.credential_cipher import CredentialCipher
from services.link_service import LinkSyncService
from services.user_locks import UserLockRegistry
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    linked_account,
    linked_user,
    user,
)
from tests.fixtures.mocks import MockBankingGateway, TickingClock


@pytest.fixture(autouse=True)
def cipher(monkeypatch):
    """Use a throwaway encryption key so tests never touch the keychain."""
    cipher = CredentialCipher(Fernet.generate_key())
    monkeypatch.setattr(credential_cipher_module, "_default_cipher", cipher)
    return cipher


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mock_gateway")
def mock_gateway_fixture():
    """A configured gateway double returning the sample accounts."""
    return MockBankingGateway()


@pytest.fixture(name="clock")
def clock_fixture():
    return TickingClock()


@pytest.fixture(name="service")
def service_fixture(mock_gateway, cipher, clock):
    """LinkSyncService wired to the mock gateway with its own lock registry."""
    return LinkSyncService(
        gateway=mock_gateway,
        cipher=cipher,
        lock_registry=UserLockRegistry(),
        clock=clock,
    )


@pytest.fixture(name="client")
def client_fixture(db, mock_gateway):
    """Create a test client with the test database and mock gateway."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_gateway():
        return mock_gateway

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = override_get_gateway
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
