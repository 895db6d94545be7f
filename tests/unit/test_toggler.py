"""
Unit tests for idempotent association toggles on the in-memory engine.
"""

import asyncio
import uuid

import pytest

from conduit.kernel.errors import ForbiddenError, NotFoundError
from conduit.kernel.mutations import AssociationToggler
from conduit.kernel.storage import EdgeRef, RowLookup
from conduit.kernel.storage.memory import InMemoryTransaction


@pytest.fixture
def toggler(memory_storage):
    return AssociationToggler(memory_storage)


def favorite(user_id, slug):
    return EdgeRef(
        table="article_favorites",
        subject_column="user_id",
        object_column="article_id",
        subject=user_id,
        object=RowLookup("articles", {"slug": slug}),
    )


def follow(follower_id, username):
    return EdgeRef(
        table="follows",
        subject_column="following_user_id",
        object_column="followed_user_id",
        subject=follower_id,
        object=RowLookup("users", {"username": username}),
        forbidden_on=("user_cannot_follow_self",),
    )


class TestFavorites:
    @pytest.mark.asyncio
    async def test_add_twice_remove_twice(self, memory_storage, seed, toggler):
        """Adds and removes are idempotent and leave at most one edge."""
        alice = seed.user("alice")
        article = seed.article(alice, "resource-x")

        first = await toggler.add(favorite(alice, "resource-x"))
        second = await toggler.add(favorite(alice, "resource-x"))

        assert first.exists and second.exists
        assert first.object == article
        assert len(memory_storage.rows("article_favorites")) == 1

        removed = await toggler.remove(favorite(alice, "resource-x"))
        assert removed.exists is False
        assert memory_storage.rows("article_favorites") == []

        again = await toggler.remove(favorite(alice, "resource-x"))
        assert again.exists is False

    @pytest.mark.asyncio
    async def test_concurrent_adds_leave_one_edge(self, memory_storage, seed, toggler):
        alice = seed.user("alice")
        seed.article(alice, "popular")

        states = await asyncio.gather(*(toggler.add(favorite(alice, "popular")) for _ in range(20)))

        assert all(state.exists for state in states)
        assert len(memory_storage.rows("article_favorites")) == 1

    @pytest.mark.asyncio
    async def test_interleaved_add_remove_last_wins(self, memory_storage, seed, toggler):
        alice = seed.user("alice")
        seed.article(alice, "flip")

        await asyncio.gather(
            toggler.add(favorite(alice, "flip")),
            toggler.remove(favorite(alice, "flip")),
            toggler.add(favorite(alice, "flip")),
        )

        assert len(memory_storage.rows("article_favorites")) == 1

    @pytest.mark.asyncio
    async def test_cancelled_add_leaves_no_edge(self, memory_storage, seed, toggler, monkeypatch):
        alice = seed.user("alice")
        seed.article(alice, "abandoned")
        inserted = asyncio.Event()
        insert_edge = InMemoryTransaction.insert_edge

        async def insert_then_stall(self, edge):
            await insert_edge(self, edge)
            inserted.set()
            await asyncio.Event().wait()

        monkeypatch.setattr(InMemoryTransaction, "insert_edge", insert_then_stall)
        task = asyncio.create_task(toggler.add(favorite(alice, "abandoned")))
        await inserted.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert memory_storage.rows("article_favorites") == []

    @pytest.mark.asyncio
    async def test_missing_article(self, memory_storage, seed, toggler):
        alice = seed.user("alice")

        with pytest.raises(NotFoundError):
            await toggler.add(favorite(alice, "nope"))
        with pytest.raises(NotFoundError):
            await toggler.remove(favorite(alice, "nope"))


class TestFollows:
    @pytest.mark.asyncio
    async def test_follow_and_unfollow(self, memory_storage, seed, toggler):
        alice = seed.user("alice")
        bob = seed.user("bob")

        state = await toggler.add(follow(alice, "bob"))

        assert state.object == bob
        assert memory_storage.rows("follows", following_user_id=alice, followed_user_id=bob)

        await toggler.remove(follow(alice, "bob"))
        assert memory_storage.rows("follows") == []

    @pytest.mark.asyncio
    async def test_self_follow_forbidden(self, memory_storage, seed, toggler):
        alice = seed.user("alice")

        with pytest.raises(ForbiddenError):
            await toggler.add(follow(alice, "alice"))

        assert memory_storage.rows("follows") == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, memory_storage, seed, toggler):
        alice = seed.user("alice")

        with pytest.raises(NotFoundError):
            await toggler.add(follow(alice, "nobody"))

    @pytest.mark.asyncio
    async def test_unknown_subject_is_not_found(self, memory_storage, seed, toggler):
        """A follower that no longer exists trips the foreign key."""
        seed.user("bob")

        with pytest.raises(NotFoundError):
            await toggler.add(follow(uuid.uuid4(), "bob"))
