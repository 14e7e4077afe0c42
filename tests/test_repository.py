"""Tests for the UserRepository."""

import bcrypt
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from otp_auth.database.repository import UserRepository
from otp_auth.models.base import Base
from otp_auth.models.user import User
from otp_auth.services.passwords import hash_password

# ── In-memory test database ─────────────────────────────
_test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
_test_session_factory = async_sessionmaker(_test_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session():
    """Create tables in a fresh in-memory DB and yield a session."""
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with _test_session_factory() as session:
        # Seed test data
        session.add_all(
            [
                User(email="test@example.com", password_hash="x", is_verified=False),
                User(email="done@example.com", password_hash="x", is_verified=True),
            ]
        )
        await session.commit()
        yield session

    # Tear down
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await _test_engine.dispose()


# ── Tests ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_find_by_email_match(db_session: AsyncSession):
    repo = UserRepository(db_session)
    user = await repo.find_by_email("test@example.com")
    assert user is not None
    assert user.is_verified is False


@pytest.mark.asyncio
async def test_find_by_email_no_match(db_session: AsyncSession):
    repo = UserRepository(db_session)
    assert await repo.find_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_create_user(db_session: AsyncSession):
    repo = UserRepository(db_session)
    user = await repo.create("new@example.com", hash_password("s3cret-pass"))
    await db_session.commit()

    assert user.id is not None
    found = await repo.find_by_email("new@example.com")
    assert found is not None
    assert found.is_verified is False
    assert bcrypt.checkpw(b"s3cret-pass", found.password_hash.encode())
    assert not bcrypt.checkpw(b"wrong-pass", found.password_hash.encode())


@pytest.mark.asyncio
async def test_mark_verified(db_session: AsyncSession):
    repo = UserRepository(db_session)
    assert await repo.mark_verified("test@example.com") is True
    await db_session.commit()

    db_session.expire_all()
    user = await repo.find_by_email("test@example.com")
    assert user.is_verified is True


@pytest.mark.asyncio
async def test_mark_verified_unknown_email(db_session: AsyncSession):
    repo = UserRepository(db_session)
    assert await repo.mark_verified("nobody@example.com") is False
