"""
Pytest configuration and fixtures for content service tests

Every test gets its own file-backed SQLite database so that concurrent
sessions see one shared store, the way they would against PostgreSQL.
"""

import os
from collections.abc import AsyncGenerator
from datetime import timedelta

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from content_service import models  # noqa: E402, F401
from content_service.auth import create_access_token  # noqa: E402
from content_service.database import Base, build_engine, get_db  # noqa: E402
from content_service.main import app  # noqa: E402
from content_service.schemas.content import ContentCreate, MetadataIn  # noqa: E402
from content_service.services import content_service  # noqa: E402

TEST_USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a fresh database for each test function"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'content_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_content(test_db):
    """Factory creating content (and its version 1) through the content service"""

    async def _make(
        title: str = "Original Title",
        body: str | None = "Original Body",
        content_type: str = "article",
        tags: list[str] | None = None,
        metadata: dict | None = None,
        author_id: str = TEST_USER_ID,
        **fields,
    ):
        data = ContentCreate(
            title=title,
            body=body,
            content_type=content_type,
            tags=tags or [],
            metadata=MetadataIn(**metadata) if metadata is not None else None,
            **fields,
        )
        return await content_service.create_content(data, author_id, test_db)

    return _make


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with get_db pointed at the test database"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Generate authentication headers for the test user"""
    access_token = create_access_token(data={"sub": TEST_USER_ID}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {access_token}"}
