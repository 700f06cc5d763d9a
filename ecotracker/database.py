"""Database connection and session management.

A single Database object is opened at process start (see the lifespan
handler in main.py), stored on ``app.state`` and disposed on shutdown.
Request handlers reach it through the ``get_db`` dependency.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from ecotracker.config import Settings
from ecotracker.logging_config import get_logger

logger = get_logger(__name__)


class Database:
    """Owns the async engine and session maker for one process."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        echo: bool = False,
        testing: bool = False,
    ) -> "Database":
        """Create the engine for ``url``.

        In-memory SQLite shares one connection (StaticPool) so that every
        session sees the same tables. When testing=True, uses NullPool to
        avoid event loop issues with pooled connections.
        """
        if url.startswith("sqlite"):
            engine = create_async_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        elif testing:
            engine = create_async_engine(url, echo=echo, poolclass=NullPool)
        else:
            engine = create_async_engine(
                url,
                echo=echo,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,
            )
        return cls(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls.from_url(
            settings.database_url,
            echo=settings.database_echo,
            testing=settings.testing,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for a standalone session (background jobs)."""
        async with self.session_maker() as session:
            try:
                yield session
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create every table from model metadata (tests and local dev)."""
        from ecotracker.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def check_connection(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.warning("Database connectivity check failed", error=str(e))
            return False

    async def close(self) -> None:
        """Dispose the engine and all pooled connections."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the process-wide Database."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
