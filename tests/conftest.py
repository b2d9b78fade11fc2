# Pytest configuration for the search API tests.
# Forces a local SQLite DB and disables Redis for deterministic runs.
import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

# Test-time environment: local SQLite DB, Redis disabled
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("REDIS_ENABLED", "false")

import sys
# Ensure the repo root is on sys.path so 'app' resolves when running pytest from anywhere
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.main import app  # noqa: E402
from app.db import Base, SessionLocal, engine  # noqa: E402
from app import models  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _bootstrap_db() -> Iterator[None]:
    """
    Session-level database bootstrap using a local SQLite file.

    Drops and recreates schema once per test session to ensure a clean slate.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_db() -> Iterator[None]:
    """Function-level isolation: drop and recreate schema before each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def client() -> Iterator[TestClient]:
    """FastAPI TestClient bound to the application for HTTP-level tests."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db() -> Iterator:
    """A session for seeding rows and calling services directly."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_property(db):
    """
    Factory fixture: insert a listing and return its id.

    Defaults describe an active, available apartment; override any column via kwargs.
    """
    def _make(title: str = "Listing", latitude=None, longitude=None, **overrides) -> int:
        values = {
            "title": title,
            "description": f"{title} description",
            "type": "apartment",
            "price": 100000,
            "address": "Rue 1",
            "city": "Douala",
            "neighborhood": "Bonanjo",
            "latitude": latitude,
            "longitude": longitude,
            "status": "active",
            "is_available": True,
        }
        values.update(overrides)
        obj = models.Property(**values)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj.id

    return _make
