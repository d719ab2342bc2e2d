"""Async SQLAlchemy engine, session factory and declarative base."""

import json
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def json_serializer(value) -> str:
    """JSON columns keep non-ASCII text as-is so LIKE filters can match it."""
    return json.dumps(value, ensure_ascii=False)


engine = create_async_engine(
    settings.DATABASE_URL, pool_pre_ping=True, echo=False, json_serializer=json_serializer
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


def enum_values(enum_cls) -> list[str]:
    """Persist str-enums by value ("closed_won") rather than by member name."""
    return [member.value for member in enum_cls]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request; roll back anything left uncommitted."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
