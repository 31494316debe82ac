"""
Shared fixtures: a throwaway SQLite database per test.

The engine turns on foreign keys and opens every transaction with
``BEGIN IMMEDIATE`` so that savepoints work and concurrent writers queue up
instead of failing, the same guarantees the service relies on from
PostgreSQL. The partial unique index on requests is created for SQLite too.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.config import Settings
from app.core.database import make_session_factory
from app.main import create_app


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'roomdesk.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        log_format="console",
        log_level="warning",
        request_timeout_seconds=5.0,
    )


@pytest.fixture
async def client(settings, session_factory):
    application = create_app(settings=settings, session_factory=session_factory)
    async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as ac:
        yield ac
