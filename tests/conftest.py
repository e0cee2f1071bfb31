"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker.database import Base, get_db
from finance_tracker.models.password_reset import PasswordReset, ResetGrant  # noqa: F401
from finance_tracker.models.transaction import Transaction  # noqa: F401
from finance_tracker.models.user import User  # noqa: F401
from finance_tracker.services.auth import AuthService

TEST_USERNAME = "alice"
TEST_EMAIL = "alice@x.com"
TEST_MOBILE = "+15551234567"
TEST_PASSWORD = "pw1"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from finance_tracker.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_service")
def auth_service_fixture() -> AuthService:
    return AuthService()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session, auth_service: AuthService):
    """Create a test user and return its data with a session token."""
    from finance_tracker.services.jwt import get_jwt_service

    result = auth_service.register(db_session, TEST_USERNAME, TEST_EMAIL, TEST_MOBILE, TEST_PASSWORD)
    assert result.success

    token = get_jwt_service().create_token(user_id=result.user_id, username=result.username)

    return {
        "user_id": result.user_id,
        "username": result.username,
        "email": result.email,
        "mobile": result.mobile,
        "password": TEST_PASSWORD,
        "token": token,
    }
