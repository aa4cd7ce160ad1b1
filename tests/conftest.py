"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database and an in-memory storage
bucket, wired into the app through dependency overrides.
"""
import os

# Settings are read at import time, so these must be set before nyonjo is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAIL"] = "admin@nyonjoherbs.com"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["STORAGE_ENDPOINT_URL"] = ""
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import nyonjo.models  # noqa: F401
from nyonjo.db.session import get_session
from nyonjo.main import app
from nyonjo.services.storage import InMemoryStorage, get_storage


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def client(engine, storage):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/login",
        json={"email": "admin@nyonjoherbs.com", "password": "admin123"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI, JFIF header, EOI."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )
