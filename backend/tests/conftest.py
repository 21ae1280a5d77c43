"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time: point the app at SQLite and switch the
# rate limiter off before anything from the application is imported.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["TABLE_NUMBERS"] = "[1, 2, 3, 4]"
os.environ["LINE_MATCH_KEY"] = "name"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ordering_api.main import app
from ordering_api.models import Base
from shared.config.settings import Settings
from shared.infrastructure.db import get_db


TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="session")
def engine():
    """One in-memory database shared by every connection (StaticPool)."""
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    """Fresh schema per test, dropped afterwards."""
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient whose requests all share the test database session."""
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_settings():
    """Four tables, name matching, three write attempts."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        table_numbers=[1, 2, 3, 4],
        line_match_key="name",
        write_max_retries=3,
        prep_target_minutes=15,
        business_timezone="Asia/Manila",
    )
