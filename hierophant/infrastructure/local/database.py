"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models for the durable conversation
store and the database initialization helpers.
"""

from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from hierophant.core.config import get_settings
from hierophant.utils.time import utc_now


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ConversationORM(Base):
    """Conversation ORM model."""

    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, index=True)


class MessageORM(Base):
    """Message ORM model."""

    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False, default="")
    model = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=utc_now, index=True)


class ProfileORM(Base):
    """Profile ORM model."""

    __tablename__ = "profiles"

    id = Column(String(255), primary_key=True)
    email = Column(String(320), nullable=True)
    full_name = Column(String(200), nullable=True)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory():
    """Get async session factory."""
    return sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Initialize database tables."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
