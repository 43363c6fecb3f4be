"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from api.helpers import get_owner_id
from database import Base, enable_sqlite_foreign_keys, get_db
from main import app
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    OWNER_ID,
    cover_plan,
    fixed_deposit,
    liquid_account,
    recurring_deposit,
    savings_goal,
    sip,
    traded_holding,
    valued_asset,
)


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_owner_id():
        return OWNER_ID

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_owner_id] = override_get_owner_id
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
