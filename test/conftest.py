"""
Pytest configuration and fixtures for OrgCMS tests

Every test gets its own in-memory SQLite database (aiosqlite, StaticPool) so
that sessions opened by the app and by the test share one connection.
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from orgcms.constants.roles import RoleName
from orgcms.database import Base, get_db
from orgcms.middleware.rate_limit import limiter
from orgcms.models import Organization, Page, Post, Product, User
from utils.mock_utils import (
    create_test_organization,
    create_test_page,
    create_test_post,
    create_test_product,
    create_test_user,
    make_auth_headers,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Fresh schema per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session used by the test body"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with get_db pointed at the test database"""
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Organizations ────────────────────────────────────────────────────


@pytest.fixture
async def organization(test_db: AsyncSession) -> Organization:
    return await create_test_organization(test_db, "Acme", "acme")


@pytest.fixture
async def other_organization(test_db: AsyncSession) -> Organization:
    return await create_test_organization(test_db, "Globex", "globex")


# ── Users ────────────────────────────────────────────────────────────


@pytest.fixture
async def super_admin(test_db, organization) -> User:
    return await create_test_user(test_db, "root@acme.test", RoleName.SUPER_ADMIN, organization.id)


@pytest.fixture
async def admin_user(test_db, organization) -> User:
    return await create_test_user(test_db, "admin@acme.test", RoleName.ADMIN, organization.id)


@pytest.fixture
async def editor_user(test_db, organization) -> User:
    return await create_test_user(test_db, "editor@acme.test", RoleName.EDITOR, organization.id)


@pytest.fixture
async def author_user(test_db, organization) -> User:
    return await create_test_user(test_db, "author@acme.test", RoleName.AUTHOR, organization.id)


@pytest.fixture
async def viewer_user(test_db, organization) -> User:
    return await create_test_user(test_db, "viewer@acme.test", RoleName.USER, organization.id)


@pytest.fixture
async def orphan_user(test_db) -> User:
    """Editor without an active organization"""
    return await create_test_user(test_db, "orphan@nowhere.test", RoleName.EDITOR, None)


@pytest.fixture
async def other_editor(test_db, other_organization) -> User:
    return await create_test_user(test_db, "editor@globex.test", RoleName.EDITOR, other_organization.id)


@pytest.fixture
def editor_headers(editor_user) -> dict:
    return make_auth_headers(editor_user)


@pytest.fixture
def author_headers(author_user) -> dict:
    return make_auth_headers(author_user)


@pytest.fixture
def viewer_headers(viewer_user) -> dict:
    return make_auth_headers(viewer_user)


# ── Content ──────────────────────────────────────────────────────────


@pytest.fixture
async def draft_post(test_db, organization, editor_user) -> Post:
    return await create_test_post(test_db, organization.id, author_id=editor_user.id)


@pytest.fixture
async def draft_page(test_db, organization) -> Page:
    return await create_test_page(test_db, organization.id)


@pytest.fixture
async def draft_product(test_db, organization) -> Product:
    return await create_test_product(test_db, organization.id)
