# tests/conftest.py

import os

# Settings are read at import time, so the test environment is pinned
# before anything from eventvax is imported.
os.environ["ENV"] = "local"
os.environ["DATABASE_URL_LOCAL"] = "sqlite://"
os.environ["SYNC_ON_STARTUP"] = "false"
os.environ["SYNC_INTERVAL_SECONDS"] = "0"

import pytest
from starlette.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from eventvax.main import app
from eventvax.db.session import build_engine, get_db
from eventvax.models import Base


@pytest.fixture(scope="function")
def engine():
    """A fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def test_client(db_session):
    """
    Provides a TestClient whose database dependency uses the test session.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
