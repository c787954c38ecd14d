# tests/conftest.py

import os
import sys
import tempfile
from uuid import uuid4

# Add the project root (the folder containing `elitehome/`) to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="elitehome-uploads-"))

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from elitehome.core.config import settings
from elitehome.core.security import create_access_token
from elitehome.db.mongo import get_db
from elitehome.main import app


class RecordingPublisher:
    """Stands in for the socket hub; remembers every publish."""

    def __init__(self):
        self.events = []

    async def publish(self, room, event, data, exclude=None):
        self.events.append((room, event, data))
        return 1

    def rooms(self):
        return [room for room, _, _ in self.events]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "ADMIN_USER_ID", None)
    monkeypatch.setattr(settings, "SENDGRID_API_KEY", None)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))


@pytest.fixture
def db():
    return AsyncMongoMockClient()[f"elitehome_test_{uuid4().hex}"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def live_client(db, monkeypatch):
    """
    Client whose sockets all share one running app, so a publish from one
    connection reaches the others.
    """
    async def noop(*args, **kwargs):
        return None

    monkeypatch.setattr("elitehome.main.verify_mongodb_connection", noop)
    monkeypatch.setattr("elitehome.main.ensure_indexes", noop)
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def make_token():
    def _make(user_id: str, role: str) -> str:
        return create_access_token({"sub": user_id, "role": role})
    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(user_id: str, role: str) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}
    return _headers
