"""
Integration tests for article comments.
"""

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def article(client, alice, token_headers):
    response = await client.post(
        "/api/articles",
        json={"article": {"title": "Dragons", "description": "d", "body": "b"}},
        headers=token_headers(alice),
    )
    assert response.status_code == 201
    return response.json()["article"]


async def comment_on(client, headers, slug="dragons", body="Thank you so much!"):
    return await client.post(
        f"/api/articles/{slug}/comments",
        json={"comment": {"body": body}},
        headers=headers,
    )


class TestComments:
    @pytest.mark.asyncio
    async def test_add_comment(self, client, article, bob, token_headers):
        response = await comment_on(client, token_headers(bob))

        assert response.status_code == 200
        comment = response.json()["comment"]
        assert comment["body"] == "Thank you so much!"
        assert comment["author"]["username"] == "bob"
        assert isinstance(comment["id"], int)
        assert "createdAt" in comment

    @pytest.mark.asyncio
    async def test_add_to_missing_article(self, client, bob, token_headers):
        response = await comment_on(client, token_headers(bob), slug="missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_add_requires_auth(self, client, article):
        response = await comment_on(client, {})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_list_comments(self, client, article, alice, bob, token_headers):
        await comment_on(client, token_headers(bob), body="first")
        await comment_on(client, token_headers(alice), body="second")
        await client.post("/api/profiles/bob/follow", headers=token_headers(alice))

        response = await client.get("/api/articles/dragons/comments", headers=token_headers(alice))

        assert response.status_code == 200
        comments = response.json()["comments"]
        assert [comment["body"] for comment in comments] == ["first", "second"]
        assert comments[0]["author"]["following"] is True
        assert comments[1]["author"]["following"] is False

    @pytest.mark.asyncio
    async def test_list_for_missing_article(self, client):
        response = await client.get("/api/articles/missing/comments")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_outcomes(self, client, article, alice, bob, token_headers):
        comment_id = (await comment_on(client, token_headers(bob))).json()["comment"]["id"]
        url = f"/api/articles/dragons/comments/{comment_id}"

        assert (await client.delete(url, headers=token_headers(alice))).status_code == 403
        assert (await client.delete(url, headers=token_headers(bob))).status_code == 200
        assert (await client.delete(url, headers=token_headers(bob))).status_code == 404

        response = await client.get("/api/articles/dragons/comments")
        assert response.json() == {"comments": []}

    @pytest.mark.asyncio
    async def test_delete_through_other_article(self, client, article, alice, bob, token_headers):
        await client.post(
            "/api/articles",
            json={"article": {"title": "Other", "description": "d", "body": "b"}},
            headers=token_headers(alice),
        )
        comment_id = (await comment_on(client, token_headers(bob))).json()["comment"]["id"]

        response = await client.delete(
            f"/api/articles/other/comments/{comment_id}", headers=token_headers(bob)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_deleting_article_removes_comments(self, client, article, alice, bob, token_headers):
        await comment_on(client, token_headers(bob))

        await client.delete("/api/articles/dragons", headers=token_headers(alice))

        assert (await client.get("/api/articles/dragons/comments")).status_code == 404
