"""
Shared test fixtures — SQLite test database, test client, sample account.
"""

import os

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time, so the URL has to be set first
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from backend.database import Base, SessionLocal, engine, get_db
from backend.main import app


def override_get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="session", autouse=True)
def remove_test_db():
    yield
    engine.dispose()
    if os.path.exists("test.db"):
        os.remove("test.db")


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def account(client):
    """A customer account to attach leads and quotes to."""
    response = client.post("/api/accounts/", json={
        "account_name": "Highway Builders Ltd",
        "industry": "EPC Contractor",
        "assigned_employee": "ravi",
    })
    assert response.status_code == 200
    return response.json()
