"""API endpoint tests for signup, login, sessions and id lookup."""

import logging

from fastapi.testclient import TestClient
from jose import jwt

from yang.main import app


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="yang.main"):
        client.get("/health")
    assert "GET /health -> 200 (" in caplog.text


def test_logging_configured_on_startup(monkeypatch):
    calls = []
    monkeypatch.setattr("yang.main.setup_logging", lambda: calls.append(True))
    with TestClient(app):
        pass
    assert calls == [True]


def test_signup_user(client):
    """Test user signup."""
    response = client.post(
        "/auth/signup",
        json={
            "email": "NewUser@Example.com",
            "username": "newuser",
            "password": "password123",
            "confirmPassword": "password123",
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert "accessToken" in data
    assert data["user"]["email"] == "newuser@example.com"
    assert data["user"]["username"] == "newuser"
    assert "passwordHash" not in data["user"]
    assert "session" in response.cookies


def test_signup_password_mismatch(client):
    response = client.post(
        "/auth/signup",
        json={
            "email": "a@example.com",
            "username": "a",
            "password": "password123",
            "confirmPassword": "password124",
        },
    )
    assert response.status_code == 400


def test_signup_missing_field(client):
    response = client.post(
        "/auth/signup",
        json={"email": "a@example.com", "password": "password123", "confirmPassword": "password123"},
    )
    assert response.status_code == 400
    assert "detail" in response.json()


def test_signup_duplicate_email(client, auth_headers):
    """Test signup with duplicate email fails, whatever the case."""
    response = client.post(
        "/auth/signup",
        json={
            "email": auth_headers.email.upper(),
            "username": "someoneelse",
            "password": "password123",
            "confirmPassword": "password123",
        },
    )
    assert response.status_code == 409
    assert "already registered" in response.json()["detail"]


def test_signup_duplicate_username(client, auth_headers):
    response = client.post(
        "/auth/signup",
        json={
            "email": "fresh@example.com",
            "username": "tester",
            "password": "password123",
            "confirmPassword": "password123",
        },
    )
    assert response.status_code == 409


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    assert "accessToken" in response.json()
    assert response.json()["user"]["id"] == auth_headers.user_id


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post("/auth/login", json={"email": auth_headers.email, "password": "wrongpass"})
    assert response.status_code == 401


def test_login_unknown_email(client):
    response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert response.status_code == 401


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_session_cookie_authenticates(client):
    client.post(
        "/auth/signup",
        json={
            "email": "cookie@example.com",
            "username": "cookie",
            "password": "password123",
            "confirmPassword": "password123",
        },
    )
    response = client.get("/auth/me")
    assert response.status_code == 200
    assert response.json()["username"] == "cookie"

    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401


def test_me_requires_session(client):
    assert client.get("/auth/me").status_code == 401


def test_forged_session_rejected(client, auth_headers):
    forged = jwt.encode({"sub": str(auth_headers.user_id)}, "not-the-secret", algorithm="HS256")
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401


def test_garbage_session_cookie_rejected(client, auth_headers):
    client.cookies.set("session", "not-a-token")
    assert client.get("/auth/me").status_code == 401


def test_user_id_header_is_not_trusted(client, auth_headers):
    response = client.get("/auth/me", headers={"x-user-id": str(auth_headers.user_id)})
    assert response.status_code == 401


def test_find_id(client, auth_headers):
    response = client.post("/auth/find-id", json={"email": " TEST@example.com "})
    assert response.status_code == 200
    assert response.json()["username"] == "tester"


def test_find_id_unknown_email(client):
    response = client.post("/auth/find-id", json={"email": "ghost@example.com"})
    assert response.status_code == 404


def test_find_id_blank_email(client):
    response = client.post("/auth/find-id", json={"email": "   "})
    assert response.status_code == 400


def test_login_after_signup_only_with_same_password(client, signup):
    headers = signup(email="p@example.com", username="p", password="rightpass")
    ok = client.post("/auth/login", json={"email": headers.email, "password": "rightpass"})
    bad = client.post("/auth/login", json={"email": headers.email, "password": "rightpasS"})
    assert ok.status_code == 200
    assert bad.status_code == 401
