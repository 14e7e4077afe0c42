"""Database engine and async session factory."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from otp_auth.config import Settings, settings
from otp_auth.models.base import Base

# Register every table on Base.metadata before create_all runs
from otp_auth.models import otp as _otp_models  # noqa: F401
from otp_auth.models import user as _user_models  # noqa: F401


def _begin_immediate(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock up front.

    With the driver's deferred ``BEGIN`` two connections can both hold a
    read lock while trying to upgrade, and SQLite fails one of them with
    "database is locked" without waiting. ``BEGIN IMMEDIATE`` makes the
    second writer queue on the busy timeout instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_from_settings(config: Settings) -> AsyncEngine:
    """Build an async engine for ``config.database_url``."""
    new_engine = create_async_engine(config.database_url, echo=config.debug)
    if new_engine.dialect.name == "sqlite":
        _begin_immediate(new_engine)
    return new_engine


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False)


engine = create_engine_from_settings(settings)

async_session_factory = create_session_factory(engine)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables that don't yet exist."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
