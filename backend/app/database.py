"""
Snapbook Backend - Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       per-request session dependency.
How:   One engine per process; every request gets its own AsyncSession that
       commits when the handler returns and rolls back when it raises.

Transaction scope:
    Everything a single request does (e.g. renumbering all N memories after a
    move) happens in one transaction, so partial writes never reach the
    database.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


# ── Engine Configuration ──────────────────────────────────────────────────
# One pool per process. Total connections per worker stay at or below
# db_pool_size + db_max_overflow (20 by default), well under PostgreSQL's
# default max_connections of 100.
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,          # persistent connections
    max_overflow=settings.db_max_overflow,     # extra connections for bursts
    pool_pre_ping=settings.db_pool_pre_ping,  # drop connections the server closed
    pool_recycle=3600,                         # recycle hourly
    # SQL echo only at DEBUG
    echo=settings.log_level == "DEBUG",
)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response models read attributes after commit;
# expired attributes would trigger a lazy load outside the session
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by every ORM model (and by Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Flow:
        1. Open a session from the factory
        2. Yield it to the route handler
        3. Commit on success, roll back on any exception (then re-raise)
        4. Close the session, returning its connection to the pool

    Example:
        @router.get("/scrapbooks")
        async def list_scrapbooks(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            # Handler finished cleanly: persist everything it flushed
            await session.commit()
        except Exception:
            # Any failure, DB or not, discards the whole request's writes
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Closes every pooled connection. Called from the lifespan shutdown."""
    await engine.dispose()
