import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.builder import Builder
from app.models.review import Review, ReviewImage  # noqa: F401
from app.models.review_field import ReviewField  # noqa: F401
from app.models.user import ROLE_ADMIN, ROLE_BUILDER, ROLE_HOMEOWNER, User
from app.services.bootstrap import RATING_CATEGORIES, ensure_default_fields

TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test.db")


@pytest_asyncio.fixture
async def db():
    eng = create_async_engine(TEST_DB_URL, echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        await ensure_default_fields(session)
        yield session

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def client(db):
    async def _override_db():
        yield db

    app.dependency_overrides[get_db] = _override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token = create_access_token(str(user.id))
    return {"Authorization": f"Bearer {token}"}


def all_ratings(value) -> dict:
    """Same value for every default rating category."""
    return {name: value for name, _ in RATING_CATEGORIES}


async def _make_user(db: AsyncSession, email: str, role: str, full_name: str) -> User:
    user = User(id=uuid.uuid4(), email=email, role=role, full_name=full_name)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def homeowner(db: AsyncSession):
    return await _make_user(db, "owner@example.com", ROLE_HOMEOWNER, "Test Homeowner")


@pytest_asyncio.fixture
async def other_homeowner(db: AsyncSession):
    return await _make_user(db, "neighbour@example.com", ROLE_HOMEOWNER, "Other Homeowner")


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession):
    return await _make_user(db, "admin@example.com", ROLE_ADMIN, "Test Admin")


@pytest_asyncio.fixture
async def builder_account(db: AsyncSession):
    return await _make_user(db, "builder@example.com", ROLE_BUILDER, "Builder Account")


@pytest_asyncio.fixture
async def builder(db: AsyncSession):
    b = Builder(
        id=uuid.uuid4(),
        name="Oakridge Homes",
        location="Austin, TX",
        logo="/uploads/logo/oakridge.png",
        is_verified=True,
    )
    db.add(b)
    await db.commit()
    await db.refresh(b)
    return b


@pytest_asyncio.fixture
async def unpublished_builder(db: AsyncSession):
    b = Builder(id=uuid.uuid4(), name="Hidden Builders", location="Dallas, TX", is_published=False)
    db.add(b)
    await db.commit()
    await db.refresh(b)
    return b
