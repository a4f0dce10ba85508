"""Database session and engine management."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from agriinsight.db.base import Base

logger = logging.getLogger(__name__)


def _is_memory_url(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


class Database:
    """Connection pool handle with an explicit connect/dispose lifecycle.

    One instance is built per application and handed to request handlers
    through a dependency. The pool is bounded to ``pool_size`` connections;
    callers beyond that wait up to ``pool_timeout`` seconds for a free one.
    """

    def __init__(self, url: str, *, pool_size: int = 10, pool_timeout: float = 30.0, echo: bool = False) -> None:
        self.url = url
        engine_kwargs: dict[str, Any] = {}
        if not _is_memory_url(url):
            engine_kwargs.update(pool_size=pool_size, max_overflow=0, pool_timeout=pool_timeout)
        self.engine = create_async_engine(url, future=True, echo=echo, **engine_kwargs)
        self._session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    async def connect(self) -> None:
        """Open the pool and make sure the schema exists."""

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized (%s)", self.engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a session scoped to a single unit of work."""

        async with self._session_factory() as session:
            try:
                yield session
            finally:
                await session.close()
