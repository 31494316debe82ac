"""
Database connection and session management.

Nothing here is a process-wide handle: the application builds one engine and
session factory in ``create_app`` and stores them on ``app.state``. Services
receive a session (or the factory) from the request dependencies below.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import structlog
from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings

log = structlog.get_logger()

SERVER_ROOT = Path(__file__).resolve().parents[2]


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency returning the application's session factory."""
    return request.app.state.session_factory


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def run_migrations(database_url: str) -> None:
    """Apply pending Alembic migrations (``alembic upgrade head``).

    Blocking; call through ``asyncio.to_thread`` from async code.
    """
    from alembic import command
    from alembic.config import Config

    config = Config(str(SERVER_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(SERVER_ROOT / "alembic"))
    # ConfigParser interpolates '%', which URL-encoded passwords may contain.
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    log.info("migrations.upgrade_started")
    command.upgrade(config, "head")
    log.info("migrations.upgrade_finished")


def is_unique_violation(exc: IntegrityError, constraint: str, columns: str) -> bool:
    """True if ``exc`` was raised by the named unique constraint/index.

    PostgreSQL reports the constraint name; SQLite reports the column list,
    e.g. ``UNIQUE constraint failed: rooms.block, rooms.room_number``.
    """
    message = str(exc.orig)
    return constraint in message or f"UNIQUE constraint failed: {columns}" in message
