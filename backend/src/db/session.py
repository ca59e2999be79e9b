"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings


def engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    """Pool options for the given backend. SQLite manages its own pool."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
    }


def configure_sqlite(engine: Engine) -> None:
    """
    Turn on foreign key enforcement and explicit transactions for SQLite.

    Cascading deletes rely on ON DELETE CASCADE, which SQLite ignores unless
    the pragma is set per connection. The driver's implicit BEGIN handling is
    disabled so SAVEPOINTs (begin_nested) nest inside a real transaction.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=False,
    **engine_options(settings.database_url, settings.db_pool_size, settings.db_max_overflow),
)

if settings.database_url.startswith("sqlite"):
    configure_sqlite(engine.sync_engine)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Uses unit-of-work pattern: services use flush() for refreshing objects,
    commit happens once here at request end. This ensures atomic transactions
    per request - if anything fails, all changes are rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
