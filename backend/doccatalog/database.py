"""
Document Catalog — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and the per-request session
       dependency.
Why:   Every request handler works against its own short-lived session that
       is released on every exit path, success or failure.
How:   `Database` is built from an explicit `Settings` instance by the app
       factory and stored on `app.state.database`. `get_db_session` pulls it
       from the request and yields a session that commits on success and
       rolls back on error.

Connection settings:
    PostgreSQL (asyncpg):  pooled engine, `timeout` connect argument bounds
                           connection establishment.
    SQLite (aiosqlite):    single shared connection (StaticPool) so an
                           in-memory database survives across sessions; used
                           by the test suite.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from doccatalog.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all catalog models (and Alembic metadata)."""
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured backend."""
    echo = settings.log_level == "DEBUG"

    if settings.is_sqlite:
        return create_async_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        connect_args={"timeout": settings.db_connect_timeout},
        echo=echo,
    )


class Database:
    """
    Owns the engine and session factory for one application instance.

    Attributes:
        engine:           AsyncEngine built from the settings
        session_factory:  async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.engine = build_engine(settings)
        # expire_on_commit=False: response models are built from ORM objects
        # after the dependency has committed.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Scoped session: commit on success, roll back on error, always close.

        Raises:
            Whatever the body raised, after rollback.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ping(self) -> None:
        """Run `SELECT 1`; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Create all catalog tables (tests and local development only)."""
        # Registers the mapped classes on Base.metadata
        from doccatalog.models import category, document  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection; called on application shutdown."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one database session per request.

    Example:
        @router.get("/documents/{document_id}")
        async def get_document(document_id: str, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
