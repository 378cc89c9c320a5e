"""Fixtures for web API tests: signed reviewer tokens and an isolated app."""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from web.user_store import init_db

JWT_SECRET = "test-nextauth-secret"


@pytest.fixture
def jwt_secret():
    return JWT_SECRET


@pytest.fixture
def bearer(jwt_secret):
    """Build Authorization headers for any reviewer id."""

    def _headers(user_id: str, **claims) -> dict:
        token = jwt.encode({"sub": user_id, **claims}, jwt_secret, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def auth_headers(bearer):
    return bearer("user-123", email="test@example.com", name="Test")


@pytest.fixture
def auth_headers_b(bearer):
    """A second reviewer, for isolation checks."""
    return bearer("user-456", email="b@test.com", name="UserB")


@pytest.fixture
def users_db(tmp_path):
    path = tmp_path / "users.db"
    init_db(path)
    return path


@pytest.fixture
def store_paths(tmp_path):
    return {
        "db_path": tmp_path / "profile.db",
        "users_db": tmp_path / "users.db",
        "log_file": tmp_path / "profile-commits.log",
    }


@pytest.fixture
def client(monkeypatch, jwt_secret, users_db, store_paths):
    """App client whose stores all live under tmp_path."""
    import web.deps
    import web.user_store
    from web.app import app

    monkeypatch.setenv("NEXTAUTH_SECRET", jwt_secret)
    monkeypatch.setattr(web.deps, "get_store_paths", lambda: store_paths)
    monkeypatch.setattr(web.user_store, "_DEFAULT_DB_PATH", users_db)
    return TestClient(app)
