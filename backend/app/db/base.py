"""Shared SQLAlchemy base, engine lifecycle and session factory."""

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

# Seconds a SQLite writer waits on a locked database before failing
_SQLITE_BUSY_TIMEOUT = 30


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_url(db_url: str, echo: bool = False) -> AsyncEngine:
    """Build an async engine for PostgreSQL (asyncpg) or SQLite (aiosqlite).

    SQLite gets a busy timeout, so concurrent conditional updates queue up
    instead of failing, and has foreign keys switched on.
    """
    if make_url(db_url).get_backend_name() == "sqlite":
        engine = create_async_engine(db_url, echo=echo, connect_args={"timeout": _SQLITE_BUSY_TIMEOUT})
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(db_url, echo=echo, pool_pre_ping=True)


async def create_tables(engine: AsyncEngine) -> None:
    """Create the events and participants tables if missing."""
    # Import all models so metadata is populated before create_all
    import app.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(url: str | None = None) -> None:
    """Initialize the async database engine and session factory.

    No-op if already initialized.
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    _engine = create_engine_for_url(url or settings.database_url, echo=settings.debug)
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    await create_tables(_engine)


async def close_db() -> None:
    """Dispose of the engine and release all connections."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the configured session factory.

    Raises RuntimeError if init_db() has not been called.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
