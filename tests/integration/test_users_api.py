"""
Integration tests for user registration, login and account updates.
"""

import pytest

from conduit.kernel.identity.jwt import TokenAuthenticator


def registration(username="jake", email="jake@jake.jake", password="jakejake"):
    return {"user": {"username": username, "email": email, "password": password}}


class TestRegistration:
    @pytest.mark.asyncio
    async def test_register_returns_user_with_token(self, client):
        response = await client.post("/api/users", json=registration())

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["username"] == "jake"
        assert user["email"] == "jake@jake.jake"
        assert user["bio"] == ""
        assert user["image"] is None
        assert TokenAuthenticator().verify(user["token"]).user_id

    @pytest.mark.asyncio
    async def test_email_is_normalized(self, client):
        response = await client.post("/api/users", json=registration(email="Jake@Jake.JAKE"))

        assert response.status_code == 201
        assert response.json()["user"]["email"] == "jake@jake.jake"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client, alice):
        response = await client.post("/api/users", json=registration(username="alice"))

        assert response.status_code == 422
        assert response.json() == {"errors": {"username": ["username taken"]}}

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, alice):
        response = await client.post("/api/users", json=registration(email="alice@example.com"))

        assert response.status_code == 422
        assert response.json() == {"errors": {"email": ["email taken"]}}

    @pytest.mark.asyncio
    async def test_missing_field_uses_error_shape(self, client):
        response = await client.post("/api/users", json={"user": {"username": "jake", "password": "x"}})

        assert response.status_code == 422
        assert list(response.json()["errors"]) == ["email"]


class TestLogin:
    @pytest.mark.asyncio
    async def test_login(self, client, alice, user_password):
        response = await client.post(
            "/api/users/login",
            json={"user": {"email": "alice@example.com", "password": user_password}},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["username"] == "alice"
        assert TokenAuthenticator().verify(user["token"]).user_id == alice.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, alice):
        response = await client.post(
            "/api/users/login",
            json={"user": {"email": "alice@example.com", "password": "wrong"}},
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Token"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        response = await client.post(
            "/api/users/login",
            json={"user": {"email": "nobody@example.com", "password": "whatever"}},
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "User not found"}

    @pytest.mark.asyncio
    async def test_register_then_login(self, client):
        await client.post("/api/users", json=registration())

        response = await client.post(
            "/api/users/login",
            json={"user": {"email": "jake@jake.jake", "password": "jakejake"}},
        )

        assert response.status_code == 200


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/user")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_rejects_bearer_scheme(self, client, alice, token_headers):
        token = token_headers(alice)["Authorization"].split(" ", 1)[1]

        response = await client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_current_user(self, client, alice, token_headers):
        response = await client.get("/api/user", headers=token_headers(alice))

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_update_fields(self, client, alice, token_headers):
        response = await client.put(
            "/api/user",
            json={"user": {"bio": "I like to skateboard", "image": "https://example.com/a.png"}},
            headers=token_headers(alice),
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["bio"] == "I like to skateboard"
        assert user["image"] == "https://example.com/a.png"
        assert user["username"] == "alice"

    @pytest.mark.asyncio
    async def test_update_password(self, client, alice, token_headers):
        await client.put(
            "/api/user",
            json={"user": {"password": "new password"}},
            headers=token_headers(alice),
        )

        response = await client.post(
            "/api/users/login",
            json={"user": {"email": "alice@example.com", "password": "new password"}},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_update_to_taken_username(self, client, alice, bob, token_headers):
        response = await client.put(
            "/api/user",
            json={"user": {"username": "bob"}},
            headers=token_headers(alice),
        )

        assert response.status_code == 422
        assert response.json() == {"errors": {"username": ["username taken"]}}
