"""
Database dependencies.
"""

from typing import AsyncGenerator
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.container import Container


def get_container(request: Request) -> Container:
    """The application's container."""
    return request.app.state.container


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request.

    Commits when the handler returns and rolls back on any exception, so
    every write a request makes lands or fails as a unit.
    """
    session_factory = get_container(request).session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
