"""Database initialization and session management."""
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy import text
import structlog

from mentesegura.models import Base
from mentesegura.config import get_config

log = structlog.get_logger()

_engine = None
_session_factory = None


async def init_database(db_url: Optional[str] = None):
    """Initialize the database engine and create tables."""
    global _engine, _session_factory

    cfg = get_config()
    if db_url is None:
        db_path = cfg.database.sqlite_path
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        db_url = f"sqlite+aiosqlite:///{db_path}"

    _engine = create_async_engine(
        db_url,
        echo=cfg.app.env == "development",
        pool_pre_ping=True,
    )

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        if cfg.database.wal_mode and db_url.startswith("sqlite") and ":memory:" not in db_url:
            await conn.execute(text("PRAGMA journal_mode=WAL"))
            await conn.execute(text(f"PRAGMA busy_timeout={cfg.database.busy_timeout_ms}"))
            await conn.execute(text("PRAGMA synchronous=NORMAL"))

    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    log.info("database_initialized", url=db_url.split("///")[0])


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session."""
    if _session_factory is None:
        await init_database()
    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_database():
    """Gracefully close the database engine."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
