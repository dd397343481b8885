"""Shared fixtures.

Each test gets its own SQLite file and its own app instance, so nothing leaks
between tests and no environment variables are needed.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from blood_platform.api.server import create_app
from blood_platform.auth.crud import create_user
from blood_platform.config import Config
from blood_platform.db import Store
from blood_platform.identity import TrustingBridge


TEST_SECRET = "test-secret"


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        APP_ENV="test",
        DB_DSN=str(tmp_path / "blood_test.sqlite"),
        STORE_TIMEOUT_SECONDS=5.0,
        AUTH_JWT_SECRET=TEST_SECRET,
        AUTH_TOKEN_EXPIRE_MINUTES=60,
        AUTH_BOOTSTRAP_ADMIN_EMAIL="",
        AUTH_BOOTSTRAP_ADMIN_PASSWORD="",
        IDP_MODE="trust",
        CORS_ALLOW_ORIGINS="",
        STRIPE_SECRET_KEY=None,
    )


@pytest.fixture
def app(cfg: Config):
    return create_app(cfg, identity=TrustingBridge())


@pytest.fixture
def client(app):
    # Entering the context runs the lifespan (schema creation).
    with TestClient(app) as c:
        yield c


@pytest.fixture
def store(app, client) -> Store:
    return app.state.ctx.store


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, password: str = "pw", **extra: Any) -> Tuple[str, Dict[str, Any]]:
    r = client.post("/api/auth/register", json={"email": email, "password": password, **extra})
    assert r.status_code == 201, r.text
    body = r.json()
    return body["token"], body["user"]


@pytest.fixture
def admin_token(client: TestClient, store: Store) -> str:
    with store.connect() as conn:
        create_user(conn, email="admin@example.com", password="admin-pw", name="Admin", role="admin")
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "admin-pw"})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def request_body(**overrides: Any) -> Dict[str, Any]:
    body = {
        "recipientName": "Rahim Uddin",
        "recipientDistrict": "Dhaka",
        "recipientSubDistrict": "Mirpur",
        "hospitalName": "Dhaka Medical College Hospital",
        "fullAddress": "Secretariat Rd, Dhaka",
        "bloodGroup": "A+",
        "donationDate": "2026-11-01",
        "donationTime": "10:30",
        "requestMessage": "Needed before surgery",
    }
    body.update(overrides)
    return body
