"""
Test infrastructure for the Newsdesk API.

Strategy
--------
- SQLite in-memory via aiosqlite replaces Postgres; ``newsdesk.store``
  speaks the same ``ON CONFLICT`` dialect to both.
- StaticPool makes every session share the one in-memory connection (an
  in-memory SQLite database is connection-scoped).
- The app's get_db dependency is overridden so every request uses the
  test session factory.
- Tables are created before and dropped after each test.
- Each test gets a fresh MemoryBackend, so cache state never leaks between
  tests and every test exercises the real read-through path.
- bcrypt runs at its minimum cost factor.
"""
import itertools

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from newsdesk.cache import MemoryBackend, cache
from newsdesk.config import settings
from newsdesk.database import Base, get_db
from newsdesk.main import app
from newsdesk.middleware import install_query_counter
from newsdesk.models import Article, MediaItem, User
from newsdesk.security import hash_password

settings.BCRYPT_ROUNDS = 4

# Shared by every user make_user creates.
PASSWORD = "Sup3r$ecret"

# ---------------------------------------------------------------------------
# Test database engine, SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(autouse=True)
async def memory_cache():
    """A fresh process-local cache for every test."""
    backend = MemoryBackend()
    cache.use_backend(backend)
    yield backend
    cache.use_backend(None)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for seeding rows and asserting store state directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """
    Factory inserting a user with the given role straight into the store.

    Returns the new user's id.  Every user's password is ``PASSWORD``.
    """
    counter = itertools.count(1)
    hashed = hash_password(PASSWORD)

    async def _make(role: str = "user", username: str | None = None, email: str | None = None) -> int:
        n = next(counter)
        user = User(
            username=username or f"{role}{n}",
            email=email or f"{role}{n}@example.com",
            password=hashed,
            country="Portugal",
            firstname="Test",
            lastname=f"User{n}",
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        return user.id

    return _make


@pytest_asyncio.fixture
async def make_article(db_session: AsyncSession):
    """Factory inserting an article straight into the store; returns its id."""

    async def _make(**fields) -> int:
        values = {
            "headline_title": "Harbour reopens",
            "short_desc": "The harbour is open again.",
            "article_content": "After three weeks of repairs the harbour reopened.",
            "author": "editor1",
            "category": "local",
            "city": "Lisbon",
            "likes": 0,
        }
        values.update(fields)
        article = Article(**values)
        db_session.add(article)
        await db_session.commit()
        return article.article_id

    return _make


@pytest_asyncio.fixture
async def make_media(db_session: AsyncSession):
    async def _make(article_id: int, **fields) -> int:
        values = {
            "name": "cover",
            "description": "Cover photo",
            "file_type": "image",
            "css_class": "media-image",
            "filepath": f"/media/{article_id:03d}/cover.jpg",
        }
        values.update(fields)
        item = MediaItem(article_id=article_id, **values)
        db_session.add(item)
        await db_session.commit()
        return item.id

    return _make
