"""Shared fixtures: settings with a known admin, an in-memory store and a client."""

import bcrypt
import pytest
from fastapi.testclient import TestClient

from realty_api.auth import TokenService
from realty_api.config import AdminIdentity, Settings
from realty_api.main import create_app
from realty_api.store import MemoryRecordStore


ADMIN_EMAIL = "admin@ssprealty.com"
ADMIN_PASSWORD = "correct-horse"
JWT_SECRET = "test-secret"

# Low cost factor keeps the suite fast
ADMIN_HASH = bcrypt.hashpw(ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


def make_settings(password_hash: str | None = ADMIN_HASH) -> Settings:
    return Settings(
        host="127.0.0.1",
        port=3000,
        store_uri="memory://",
        admin=AdminIdentity(email=ADMIN_EMAIL, password_hash=password_hash),
        jwt_secret=JWT_SECRET,
    )


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def client(settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def token():
    return TokenService(JWT_SECRET).issue(AdminIdentity(email=ADMIN_EMAIL))


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
