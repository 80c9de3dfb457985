"""
SQLite implementation of the conversation repository.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hierophant.core.config import get_settings
from hierophant.core.exceptions import NotFoundError, PersistenceError
from hierophant.infrastructure.local.database import (
    ConversationORM,
    MessageORM,
    ProfileORM,
    get_session_factory,
)
from hierophant.interfaces.conversation_repository import IConversationRepository
from hierophant.models.conversation import Conversation, ConversationId, Message
from hierophant.models.enums import MessageRole
from hierophant.models.identity import Profile
from hierophant.utils.time import utc_now


def _next_timestamp(previous: Optional[datetime]) -> datetime:
    # updated_at must strictly increase even when two writes share a clock tick
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class SqliteConversationRepository(IConversationRepository):
    """SQLite implementation of conversation repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()
        self._default_title = get_settings().DEFAULT_CONVERSATION_TITLE

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error: {e}") from e

    def _conversation_orm_to_model(self, orm: ConversationORM) -> Conversation:
        """Convert conversation ORM object to Pydantic model."""
        return Conversation(
            id=ConversationId.persisted(orm.id),
            title=orm.title or self._default_title,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    def _message_orm_to_model(self, orm: MessageORM) -> Message:
        """Convert message ORM object to Pydantic model."""
        return Message(
            id=orm.id,
            role=MessageRole(orm.role),
            content=orm.content or "",
            timestamp=orm.created_at,
            model=orm.model,
            conversation_id=ConversationId.persisted(orm.conversation_id),
        )

    async def _get_conversation_orm(
        self,
        session: AsyncSession,
        conversation_id: str,
    ) -> ConversationORM:
        orm = await session.get(ConversationORM, conversation_id)
        if orm is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return orm

    async def create_conversation(
        self,
        user_id: str,
        title: Optional[str] = None,
    ) -> Conversation:
        """Create an empty conversation row."""
        async with self._session() as session:
            now = utc_now()
            orm = ConversationORM(
                user_id=user_id,
                title=title,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._conversation_orm_to_model(orm)

    async def get_conversation(
        self,
        user_id: str,
        conversation_id: str,
    ) -> Optional[Conversation]:
        """Get a conversation owned by a user."""
        async with self._session() as session:
            result = await session.execute(
                select(ConversationORM).where(
                    and_(
                        ConversationORM.id == conversation_id,
                        ConversationORM.user_id == user_id,
                    )
                )
            )
            orm = result.scalar_one_or_none()
            return self._conversation_orm_to_model(orm) if orm else None

    async def list_conversations(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Conversation]:
        """List conversations for a user."""
        async with self._session() as session:
            query = (
                select(ConversationORM)
                .where(ConversationORM.user_id == user_id)
                .order_by(ConversationORM.updated_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            return [self._conversation_orm_to_model(orm) for orm in result.scalars().all()]

    async def add_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        model: Optional[str] = None,
    ) -> Message:
        """Add a message to a conversation."""
        async with self._session() as session:
            conversation_orm = await self._get_conversation_orm(session, conversation_id)
            created_at = _next_timestamp(conversation_orm.updated_at)
            conversation_orm.updated_at = created_at

            message_orm = MessageORM(
                conversation_id=conversation_id,
                role=role.value,
                content=content or "",
                model=model,
                created_at=created_at,
            )
            session.add(message_orm)

            await session.commit()
            await session.refresh(message_orm)
            return self._message_orm_to_model(message_orm)

    async def list_messages(
        self,
        conversation_id: str,
        limit: int = 500,
        offset: int = 0,
    ) -> list[Message]:
        """List messages for a conversation."""
        async with self._session() as session:
            query = (
                select(MessageORM)
                .where(MessageORM.conversation_id == conversation_id)
                .order_by(MessageORM.created_at.asc(), MessageORM.id.asc())
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            return [self._message_orm_to_model(orm) for orm in result.scalars().all()]

    async def touch_conversation(
        self,
        conversation_id: str,
        title: Optional[str] = None,
    ) -> Conversation:
        """Advance updated_at and set the title once."""
        async with self._session() as session:
            orm = await self._get_conversation_orm(session, conversation_id)
            orm.updated_at = _next_timestamp(orm.updated_at)
            if title and orm.title is None:
                orm.title = title

            await session.commit()
            await session.refresh(orm)
            return self._conversation_orm_to_model(orm)

    async def upsert_profile(self, profile: Profile) -> Profile:
        """Create or update a profile row."""
        async with self._session() as session:
            orm = await session.get(ProfileORM, profile.id)
            if orm:
                orm.email = profile.email
                orm.full_name = profile.full_name
            else:
                orm = ProfileORM(
                    id=profile.id,
                    email=profile.email,
                    full_name=profile.full_name,
                )
                session.add(orm)

            await session.commit()
            return Profile(id=orm.id, email=orm.email, full_name=orm.full_name)
