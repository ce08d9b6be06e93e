from __future__ import annotations

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import DeclarativeBase

try:
    # Prefer importing centralized settings (which loads .env)
    from ..core.config import settings  # type: ignore
    from .functions import register_sqlite_functions  # type: ignore
except Exception:  # pragma: no cover
    from core.config import settings  # type: ignore
    from db.functions import register_sqlite_functions  # type: ignore

DATABASE_URL = settings.database_url


class Base(DeclarativeBase):
    pass


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite connections get the text-matching functions bound on connect."""
    engine_kwargs: Dict[str, Any] = {"echo": echo}
    is_sqlite = url.startswith("sqlite")
    in_memory = is_sqlite and (
        url.rstrip("/").endswith(":") or ":memory:" in url or "mode=memory" in url
    )
    if is_sqlite:
        # Allow cross-thread usage and enable SQLite URI mode when using file: URLs.
        connect_args: Dict[str, Any] = {"check_same_thread": False}
        if "file:" in url or "uri=true" in url:
            connect_args["uri"] = True
        engine_kwargs["connect_args"] = connect_args
        # In-memory databases must be shared by every session (tests)
        if in_memory:
            engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            register_sqlite_functions(dbapi_connection)
            if not in_memory:
                # We emit BEGIN ourselves (see _on_begin) so reads run in a real transaction
                dbapi_connection.isolation_level = None
                # WAL: readers never block the writer and the writer never blocks readers
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.close()

    if is_sqlite and not in_memory:
        @event.listens_for(engine.sync_engine, "begin")
        def _on_begin(conn):
            # Deferred: locks follow the statements, so listings never take the write lock
            conn.exec_driver_sql("BEGIN")

    return engine


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, expire_on_commit=False, class_=AsyncSession)


engine = build_engine(DATABASE_URL, echo=settings.database_echo)
async_session = build_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
