"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.
"""

from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from workout_tracker.config import get_settings

settings = get_settings()


def engine_options(database_url: str, statement_timeout: float) -> Dict[str, Any]:
    """
    Keyword arguments for create_async_engine on the given backend.

    On PostgreSQL the statement timeout is also handed to asyncpg, so the
    server side stops a statement that the store has already given up on.
    """
    if database_url.startswith("sqlite"):
        # NullPool: every session gets its own connection, avoiding
        # "cannot commit transaction - SQL statements in progress".
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }

    # PostgreSQL with connection pooling
    return {
        "connect_args": {"command_timeout": statement_timeout},
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
    }


def build_engine(
    database_url: str,
    echo: bool = False,
    statement_timeout: Optional[float] = None,
) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite connections get foreign keys switched on; without that pragma the
    ON DELETE CASCADE rules of the schema are silently ignored.
    """
    if statement_timeout is None:
        statement_timeout = settings.db_statement_timeout_seconds
    engine = create_async_engine(
        database_url,
        echo=echo,
        **engine_options(database_url, statement_timeout),
    )

    if database_url.startswith("sqlite"):

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable WAL mode + foreign keys on every new SQLite connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.database_url, echo=settings.debug)
async_session_maker = build_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that yields a pooled session for one request.

    The session is committed on success, rolled back on any error and
    always returned to the pool.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
