"""Database wiring: engine, per-request sessions and the declarative base.

The engine and session factory are module-level and built from ``settings``;
the application lifespan disposes the engine on shutdown.
"""

import uuid
from collections.abc import AsyncIterator
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from stayfinder.config import settings


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``url``.

    SQLite (aiosqlite) gets the driver's default pool; server databases get
    a sized, pre-pinged pool from settings.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


engine = build_engine(settings.async_database_url, echo=settings.debug)

# Objects stay readable after commit; services commit inside their guards.
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())


class UUIDPrimaryKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request, committed after the handler returns.

    Any exception rolls the request back. Booking and review creation commit
    earlier themselves, while still holding the property guard; the final
    commit here is then a no-op for their rows.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
