"""Database layer with SQLAlchemy and async session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from dochub.db.base import Base
from dochub.lib.config import get_settings

settings = get_settings()

# SQLite connections are bound to the event loop that opened them
_engine_kwargs: dict[str, Any] = (
    {"poolclass": NullPool} if settings.database_url.startswith("sqlite") else {"pool_pre_ping": True}
)
engine = create_async_engine(settings.database_url, echo=settings.debug, **_engine_kwargs)

SessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Register mappers before touching metadata
    import dochub.db.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = ["Base", "SessionLocal", "get_db", "engine", "init_models"]
