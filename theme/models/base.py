"""Database base and session setup."""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

import config


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# In-memory SQLite must keep its single connection; file databases open one per session
_engine_kwargs = {}
if config.DATABASE_URL.startswith("sqlite") and ":memory:" not in config.DATABASE_URL:
    _engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(
    config.DATABASE_URL,
    echo=config.DATABASE_ECHO,
    **_engine_kwargs,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
