"""
SkillHub – the relational store: async engine, sessions, declarative base.

Profiles, skills and their join rows all live here. Locally that is a
SQLite file; in production ``DATABASE_URL`` points at hosted Postgres.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def _engine_options(url: str) -> dict:
    """Driver-specific engine arguments for ``url``."""
    options = {"echo": settings.DEBUG and settings.ENVIRONMENT != "production"}
    if url.startswith("postgresql"):
        # PgBouncer in transaction mode cannot reuse prepared statements
        options["connect_args"] = {"statement_cache_size": 0}
    elif url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for the directory tables."""
    pass


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create any missing directory tables on ``bind``."""
    from app import models  # noqa: F401  (register tables on Base.metadata)

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Dependency for FastAPI routes ──
async def get_db() -> AsyncSession:  # type: ignore[misc]
    """One session per request; committed on success, rolled back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
