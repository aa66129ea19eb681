"""Async database engine and session factory (SQLAlchemy 2.0 + asyncpg)."""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all models."""

    pass


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Build the async engine for the remote store (same URL as Alembic)."""
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        future=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; one session per store call."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
