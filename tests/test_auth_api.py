"""End-to-end tests for the auth and profile endpoints against in-memory SQLite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.session import Session

REGISTER = {"email": "a@b.com", "password": "secret1", "fullname": "A B", "phone": "000"}


def _register(client, **overrides):
    return client.post(
        "/api/v1/auth/register",
        json=dict(REGISTER, **overrides),
        headers={"User-Agent": "pytest-agent/1.0"},
    )


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_register_returns_tokens(client, app):
    resp = _register(client)
    assert resp.status_code == 201

    data = resp.get_json()["data"]
    assert data["access_token"] and data["refresh_token"] and data["session_id"]
    assert datetime.fromisoformat(data["access_token_expires_at"]) < datetime.fromisoformat(
        data["refresh_token_expires_at"]
    )

    with app.app_context():
        session = app.extensions["storage"].get(Session, data["session_id"])
        assert session.refresh_token == data["refresh_token"]
        assert session.user_agent == "pytest-agent/1.0"
        assert session.client_ip == "127.0.0.1"


def test_register_normalizes_email(client):
    assert _register(client, email="  A@B.com ").status_code == 201
    resp = client.post("/api/v1/auth/login", json={"email": "a@b.com", "password": "secret1"})
    assert resp.status_code == 200


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    resp = _register(client)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "CONFLICT"


@pytest.mark.parametrize(
    "override",
    [
        {"email": "not-an-email"},
        {"password": "12345"},
        {"fullname": ""},
        {"phone": None},
    ],
)
def test_register_validation(client, override):
    resp = _register(client, **override)
    assert resp.status_code == 422
    assert resp.get_json()["error"] == "VALIDATION_ERROR"


def test_login_wrong_password_and_unknown_email_look_the_same(client):
    _register(client)
    wrong = client.post("/api/v1/auth/login", json={"email": "a@b.com", "password": "wrong"})
    unknown = client.post("/api/v1/auth/login", json={"email": "x@b.com", "password": "secret1"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.get_json() == unknown.get_json()
    assert wrong.get_json()["error"] == "INVALID_CREDENTIALS"


def test_refresh_keeps_refresh_token(client):
    registered = _register(client).get_json()["data"]

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["refresh_token"] == registered["refresh_token"]
    assert data["session_id"] == registered["session_id"]
    assert data["access_token"] != registered["access_token"]


def test_refresh_blocked_session(client, app):
    registered = _register(client).get_json()["data"]
    with app.app_context():
        storage = app.extensions["storage"]
        with storage.transaction():
            storage.get(Session, registered["session_id"]).is_blocked = True

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "SESSION_BLOCKED"


def test_refresh_expired_session(client, app):
    registered = _register(client).get_json()["data"]
    with app.app_context():
        storage = app.extensions["storage"]
        with storage.transaction():
            session = storage.get(Session, registered["session_id"])
            session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "SESSION_EXPIRED"


def test_refresh_wrongly_signed(client):
    registered = _register(client).get_json()["data"]
    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["access_token"]})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "INVALID_SIGNATURE"


def test_refresh_requires_token(client):
    resp = client.post("/api/v1/auth/refresh", json={})
    assert resp.status_code == 422


def test_logout_blocks_refresh(client):
    registered = _register(client).get_json()["data"]

    resp = client.post("/api/v1/auth/logout", json={"refresh_token": registered["refresh_token"]})
    assert resp.status_code == 204

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]})
    assert resp.get_json()["error"] == "SESSION_BLOCKED"


def test_me_returns_profile(client):
    registered = _register(client).get_json()["data"]

    resp = client.get("/api/v1/me", headers=_bearer(registered["access_token"]))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["email"] == "a@b.com"
    assert data["fullname"] == "A B"
    assert data["phone"] == "000"
    assert "password_hash" not in data


def test_me_requires_bearer(client):
    resp = client.get("/api/v1/me")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "UNAUTHORIZED"


def test_me_rejects_refresh_token(client):
    registered = _register(client).get_json()["data"]
    resp = client.get("/api/v1/me", headers=_bearer(registered["refresh_token"]))
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "INVALID_SIGNATURE"


def test_me_rejects_garbage(client):
    resp = client.get("/api/v1/me", headers=_bearer("garbage"))
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "INVALID_TOKEN"
