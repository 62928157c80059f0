# app/api/deps.py
"""
FastAPI dependencies for resources created at startup.

Tests swap these out through `app.dependency_overrides`.
"""
from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings as _get_settings
from app.db.session import Database
from app.services.notifications import BookingNotifier


def get_settings() -> Settings:
    return _get_settings()


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_notifier(request: Request) -> BookingNotifier:
    return request.app.state.notifier


async def get_session(database: Database = Depends(get_database)) -> AsyncIterator[AsyncSession]:
    """Yields a session and releases its connection on every exit path."""
    async with database.session() as session:
        yield session
