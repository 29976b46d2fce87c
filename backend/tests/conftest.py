# backend/tests/conftest.py

import pytest
from fastapi.testclient import TestClient

from honeyward.config import Settings
from honeyward.db import MemoryStore
from honeyward.main import create_app
from honeyward.models import ClientContext
from honeyward.services.classifier import Classifier
from honeyward.services.log_store import LogStore
from honeyward.services.recorder import IncidentRecorder


class FailingSink:
    def __init__(self):
        self.calls = 0

    def create(self, kind, record):
        self.calls += 1
        raise ConnectionError("sink unreachable")


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def sink():
    return MemoryStore()


@pytest.fixture
def log_store():
    return LogStore(activity_capacity=100, attack_capacity=100, honeypot_capacity=200)


@pytest.fixture
def recorder(log_store, sink):
    return IncidentRecorder(log_store, sink)


@pytest.fixture
def classifier():
    return Classifier()


@pytest.fixture
def context():
    return ClientContext(
        user_agent= "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/122.0.0.0",
        ip_address= "203.0.113.7",
        language=   "en-US",
        languages=  ["en-US", "en"],
        platform=   "Win32",
        screen=     "1920x1080",
        timezone=   "Asia/Kolkata",
    )


@pytest.fixture
def app():
    return create_app(Settings(enable_scanner=False), sink=MemoryStore())


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    resp = client.post(
        "/auth/login",
        data={"username": "admin", "password": "honeyward123"},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
