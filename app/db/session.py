# app/db/session.py

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import sqlalchemy as sa
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import Settings
from app.core.logging import get_logger

logger = get_logger(__name__)


# Declarative Base: all models inherit from this
class Base(DeclarativeBase):
    pass


def _pool_options(settings: Settings) -> dict[str, Any]:
    url = make_url(settings.async_db_uri)
    if url.get_backend_name() == "sqlite":
        return {}

    options: dict[str, Any] = {
        "pool_size": settings.DB_POOL_MIN,
        "max_overflow": max(settings.DB_POOL_MAX - settings.DB_POOL_MIN, 0),
        "pool_recycle": settings.DB_POOL_IDLE_TIMEOUT,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
    }
    if settings.DB_SSL and url.get_backend_name() == "postgresql":
        options["connect_args"] = {"ssl": "require"}
    return options


class Database:
    """
    Owns the engine (and its connection pool) for the lifetime of the app.

    Created at startup, disposed at shutdown; request handlers acquire
    short-lived sessions through `session()`.
    """

    def __init__(self, url: str, *, slow_query_ms: int = 100, **engine_kwargs: Any):
        self.url = url
        self.slow_query_ms = slow_query_ms
        self.engine: AsyncEngine = create_async_engine(
            url,
            pool_pre_ping=True,   # avoids stale connection errors
            **engine_kwargs,
        )
        self.sessionmaker = async_sessionmaker(
            self.engine,
            expire_on_commit=False,  # keep objects usable after commit
            class_=AsyncSession,
        )
        self._install_listeners()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.async_db_uri,
            slow_query_ms=settings.SLOW_QUERY_THRESHOLD_MS,
            **_pool_options(settings),
        )

    def _install_listeners(self) -> None:
        sync_engine = self.engine.sync_engine

        @sa.event.listens_for(sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            logger.info("db_connection_opened", backend=sync_engine.dialect.name)

        @sa.event.listens_for(sync_engine, "before_cursor_execute")
        def _before_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start", []).append(time.perf_counter())

        @sa.event.listens_for(sync_engine, "after_cursor_execute")
        def _after_execute(conn, cursor, statement, parameters, context, executemany):
            started = conn.info["query_start"].pop()
            elapsed_ms = (time.perf_counter() - started) * 1000
            if elapsed_ms > self.slow_query_ms:
                logger.warning("slow_query", duration_ms=round(elapsed_ms, 1),
                               statement=" ".join(statement.split())[:200])

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; it is closed (and its connection released) on every exit path."""
        async with self.sessionmaker() as session:
            yield session

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(sa.text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("db_pool_disposed")
