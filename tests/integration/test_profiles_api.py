"""
Integration tests for profiles and the follow graph.
"""

import pytest


class TestProfiles:
    @pytest.mark.asyncio
    async def test_get_profile_anonymous(self, client, alice):
        response = await client.get("/api/profiles/alice")

        assert response.status_code == 200
        assert response.json() == {
            "profile": {"username": "alice", "bio": "", "image": None, "following": False}
        }

    @pytest.mark.asyncio
    async def test_unknown_profile(self, client):
        response = await client.get("/api/profiles/nobody")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_follow_and_unfollow(self, client, alice, bob, token_headers):
        url = "/api/profiles/bob/follow"

        followed = await client.post(url, headers=token_headers(alice))
        again = await client.post(url, headers=token_headers(alice))
        seen = await client.get("/api/profiles/bob", headers=token_headers(alice))

        assert followed.status_code == 200
        assert followed.json()["profile"]["following"] is True
        assert again.json()["profile"]["following"] is True
        assert seen.json()["profile"]["following"] is True

        unfollowed = await client.delete(url, headers=token_headers(alice))
        assert unfollowed.json()["profile"]["following"] is False

        seen = await client.get("/api/profiles/bob", headers=token_headers(alice))
        assert seen.json()["profile"]["following"] is False

    @pytest.mark.asyncio
    async def test_following_is_directional(self, client, alice, bob, token_headers):
        await client.post("/api/profiles/bob/follow", headers=token_headers(alice))

        response = await client.get("/api/profiles/alice", headers=token_headers(bob))

        assert response.json()["profile"]["following"] is False

    @pytest.mark.asyncio
    async def test_follow_self_forbidden(self, client, alice, token_headers):
        response = await client.post("/api/profiles/alice/follow", headers=token_headers(alice))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_follow_unknown_user(self, client, alice, token_headers):
        response = await client.post("/api/profiles/nobody/follow", headers=token_headers(alice))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unfollow_unknown_user(self, client, alice, token_headers):
        response = await client.delete("/api/profiles/nobody/follow", headers=token_headers(alice))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_follow_requires_auth(self, client, bob):
        response = await client.post("/api/profiles/bob/follow")

        assert response.status_code == 401
