"""
BookClub Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transactions:
    One session per request means one transaction per request. A profile
    update or account deletion either lands completely or not at all: any
    exception raised by the handler (including domain errors) rolls back
    everything the request flushed.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool tuning for server databases; SQLite picks its own pool class."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response schemas are built from ORM objects after
# the commit, without triggering lazy loads outside the session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for migrations and
    `create_all()` uses when AUTO_CREATE_TABLES is set.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (and to get_current_member,
           which shares the same cached dependency within a request)
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Raises:
        Any exception raised by the handler is re-raised after rollback so
        the global error handlers can respond.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables() -> None:
    """Create every mapped table that does not exist yet (development only)."""
    # Model modules register their tables on Base.metadata when imported.
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
