"""Async SQLAlchemy engine lifecycle and session factory.

One Database object is created at import time and connected once in
the app lifespan. get_db() only hands out sessions while the object is
ready; a process that skipped or lost the connection gets one
ensure_ready() round (probe, rebuild, probe) before the first session.
"""

from typing import AsyncIterator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bizdir.config import settings

logger = structlog.get_logger()


class Database:
    """Owns the engine and session factory for the whole process."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: AsyncEngine = self._build_engine()
        self.session_factory = self._build_session_factory()
        self.is_ready = False

    def _build_engine(self) -> AsyncEngine:
        kwargs: dict = {"echo": self.echo, "pool_pre_ping": True}
        # SQLite (tests, local dev) uses a static/singleton pool
        if not self.url.startswith("sqlite"):
            kwargs.update(pool_size=5, max_overflow=10)
        return create_async_engine(self.url, **kwargs)

    def _build_session_factory(self) -> async_sessionmaker[AsyncSession]:
        return async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("database.ping_failed", error=str(e))
            return False

    async def connect(self) -> None:
        """Establish the pool at startup. Raises if the database is unreachable."""
        self.is_ready = await self.ping()
        if not self.is_ready:
            raise ConnectionError(f"Database unreachable: {self._safe_url()}")
        logger.info("database.connected", url=self._safe_url())

    async def ensure_ready(self) -> bool:
        """Re-probe; on failure rebuild the engine once and probe again."""
        if await self.ping():
            self.is_ready = True
            return True

        logger.warning("database.reconnecting", url=self._safe_url())
        await self.engine.dispose()
        self.engine = self._build_engine()
        self.session_factory = self._build_session_factory()
        self.is_ready = await self.ping()
        return self.is_ready

    async def dispose(self) -> None:
        await self.engine.dispose()
        self.is_ready = False

    def session(self) -> AsyncSession:
        return self.session_factory()

    def _safe_url(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)


database = Database(settings.database_url, echo=settings.debug)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: yields a session per request, auto-closes."""
    if not database.is_ready and not await database.ensure_ready():
        raise ConnectionError("Database unavailable")
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
