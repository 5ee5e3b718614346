"""Tests for registration, login and profile endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from quillpost.core.security import decode_access_token, verify_password


def test_register_returns_token_and_profile(client: TestClient) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "  Carol  ", "email": "Carol@Example.com", "password": "hunter22"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"

    user = body["data"]["user"]
    assert user["name"] == "Carol"
    assert user["email"] == "carol@example.com"
    assert "password" not in user and "password_hash" not in user
    assert decode_access_token(body["data"]["token"]) == user["id"]


def test_register_duplicate_email_conflicts(client: TestClient, author) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "Imposter", "email": "ALICE@example.com", "password": "hunter22"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {
        "success": False,
        "message": "User already exists with this email",
        "data": None,
    }


def test_register_rejects_short_password(client: TestClient) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "Dan", "email": "dan@example.com", "password": "123"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["message"].startswith("password:")


def test_register_rejects_invalid_email(client: TestClient) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "Dan", "email": "not-an-email", "password": "hunter22"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("email:")


def test_login_success(client: TestClient, author) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["user"]["id"] == author.id
    assert decode_access_token(data["token"]) == author.id


def test_login_wrong_password(client: TestClient, author) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "wrong-password"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password"


def test_login_unknown_email_is_indistinguishable(client: TestClient) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "whatever"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password"


def test_me_requires_token(client: TestClient) -> None:
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Not authorized, no token"


def test_me_returns_profile(client: TestClient, author, author_headers) -> None:
    response = client.get("/api/auth/me", headers=author_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["email"] == author.email


def test_update_profile_fields(client: TestClient, author, author_headers) -> None:
    response = client.put(
        "/api/auth/profile",
        json={"name": "Alice A.", "bio": "Writes about tea.", "avatar": "https://img.test/a.png"},
        headers=author_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["name"] == "Alice A."
    assert data["bio"] == "Writes about tea."
    assert data["avatar"] == "https://img.test/a.png"


def test_update_profile_password_rotates_hash(
    client: TestClient, db_session, author, author_headers
) -> None:
    response = client.put(
        "/api/auth/profile",
        json={"password": "brand-new-pass"},
        headers=author_headers,
    )
    assert response.status_code == status.HTTP_200_OK

    db_session.refresh(author)
    assert verify_password("brand-new-pass", author.password_hash)
    assert not verify_password("secret123", author.password_hash)

    login = client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "brand-new-pass"},
    )
    assert login.status_code == status.HTTP_200_OK


def test_update_profile_rejects_long_bio(client: TestClient, author_headers) -> None:
    response = client.put("/api/auth/profile", json={"bio": "x" * 201}, headers=author_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("bio:")
