"""
Async database engine, session factory and request-scoped sessions.

The engine is built on first use from settings.DATABASE_URL so that tests
and the seed command can point it elsewhere before anything connects.
"""
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from school_eval.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
    """DATABASE_URL with plain postgresql:// mapped to the asyncpg driver"""
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return db_url


def get_engine() -> AsyncEngine:
    """
    Shared engine for the process.

    SQLite (the default store and the test store) gets NullPool so each
    session opens its own aiosqlite connection; PostgreSQL keeps the default
    pool with pre-ping.
    """
    global _engine
    if _engine is None:
        db_url = get_database_url()
        if db_url.startswith("sqlite"):
            _engine = create_async_engine(
                db_url,
                echo=settings.DB_ECHO,
                connect_args={"check_same_thread": False},
                poolclass=NullPool,
            )
        else:
            _engine = create_async_engine(db_url, echo=settings.DB_ECHO, pool_pre_ping=True)
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine"""
    global _session_factory
    if _session_factory is None:
        # Objects stay readable after commit so endpoints can serialize them
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


def AsyncSessionLocal() -> AsyncSession:
    """Standalone session for the seed command and health checks"""
    return get_session_local()()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Endpoints and services commit their own writes (evidence attach/detach
    must commit before responding). Anything still pending when the handler
    returns, such as a recomputed indicator that was only flushed, is
    committed here; an exception rolls the request back.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create all tables for the registered models"""
    import school_eval.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Dispose the engine; the next get_engine() call builds a fresh one"""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
