"""
Pytest fixtures for Conduit tests.

Every test gets its own SQLite database file, so the app, the fixtures and
concurrent sessions all see the same data without leaking between tests.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator, Awaitable, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Configure before anything imports conduit.config
_tmp_dir = tempfile.mkdtemp(prefix="conduit-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_dir, 'default.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["ALLOW_WEAK_PASSWORD_HASHES"] = "true"
os.environ["ENVIRONMENT"] = "test"

from conduit.config import get_settings

get_settings.cache_clear()

from conduit.database import build_engine, get_db
from conduit.kernel.identity.jwt import Principal, TokenAuthenticator
from conduit.kernel.identity.password import hash_password
from conduit.kernel.models import Base, User
from conduit.kernel.storage import InMemoryStorage

TEST_PASSWORD = "correct horse battery staple"


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite database with the full schema."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'conduit.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """A session for arranging and inspecting test data."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def user_password() -> str:
    """Plain-text password of every user built by make_user."""
    return TEST_PASSWORD


@pytest_asyncio.fixture
async def make_user(session_maker: async_sessionmaker) -> Callable[..., Awaitable[User]]:
    """Factory committing a user whose password is TEST_PASSWORD."""
    password_hash = await hash_password(TEST_PASSWORD)

    async def _make_user(username: str, email: str = None) -> User:
        async with session_maker() as session:
            user = User(
                id=uuid.uuid4(),
                username=username,
                email=email or f"{username}@example.com",
                password_hash=password_hash,
                bio="",
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
def authenticator() -> TokenAuthenticator:
    return TokenAuthenticator()


@pytest.fixture
def token_headers(authenticator: TokenAuthenticator) -> Callable[[User], Dict[str, str]]:
    """Build an Authorization header for a user."""

    def _headers(user: User) -> Dict[str, str]:
        token = authenticator.issue(Principal(user_id=user.id))
        return {"Authorization": f"Token {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(session_maker: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async client for the app, bound to the per-test database."""
    from conduit.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


def self_follow_allowed(row) -> bool:
    return row["following_user_id"] != row["followed_user_id"]


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    """In-memory engine with the same keys and constraints as the SQL schema."""
    return InMemoryStorage.from_metadata(
        Base.metadata,
        checks={"user_cannot_follow_self": ("follows", self_follow_allowed)},
    )


class MemorySeeder:
    """Inserts rows straight into an InMemoryStorage."""

    def __init__(self, storage: InMemoryStorage):
        self.storage = storage

    def user(self, username: str) -> uuid.UUID:
        user_id = uuid.uuid4()
        self.storage.insert("users", {
            "id": user_id,
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": "x",
            "bio": "",
        })
        return user_id

    def article(self, author_id: uuid.UUID, slug: str) -> uuid.UUID:
        article_id = uuid.uuid4()
        self.storage.insert("articles", {
            "id": article_id,
            "author_id": author_id,
            "slug": slug,
            "title": slug.replace("-", " "),
            "description": "",
            "body": "",
        })
        return article_id

    def comment(self, comment_id: int, article_id: uuid.UUID, author_id: uuid.UUID) -> int:
        self.storage.insert("comments", {
            "id": comment_id,
            "article_id": article_id,
            "author_id": author_id,
            "body": "hi",
        })
        return comment_id


@pytest.fixture
def seed(memory_storage: InMemoryStorage) -> MemorySeeder:
    return MemorySeeder(memory_storage)
