"""
Conversation repository interface.

Defines the contract for the durable (relational) conversation store.
Only authenticated users have rows here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from hierophant.models.conversation import Conversation, Message
from hierophant.models.enums import MessageRole
from hierophant.models.identity import Profile


class IConversationRepository(ABC):
    """Abstract interface for durable conversation persistence."""

    @abstractmethod
    async def create_conversation(
        self,
        user_id: str,
        title: Optional[str] = None,
    ) -> Conversation:
        """
        Create an empty conversation row.

        Args:
            user_id: Owner user ID
            title: Initial title (defaults to the placeholder title)

        Returns:
            Conversation with a persisted id
        """
        pass

    @abstractmethod
    async def get_conversation(
        self,
        user_id: str,
        conversation_id: str,
    ) -> Optional[Conversation]:
        """
        Get a conversation owned by a user.

        Args:
            user_id: Owner user ID
            conversation_id: Durable conversation row id

        Returns:
            Conversation or None if not found
        """
        pass

    @abstractmethod
    async def list_conversations(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Conversation]:
        """
        List conversations for a user, most recently updated first.

        Args:
            user_id: Owner user ID
            limit: Max conversations
            offset: Pagination offset

        Returns:
            List of conversations
        """
        pass

    @abstractmethod
    async def add_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        model: Optional[str] = None,
    ) -> Message:
        """
        Append a message and advance the conversation's updated_at.

        Args:
            conversation_id: Durable conversation row id
            role: Message role
            content: Message content
            model: Model id that produced the message (assistant only)

        Returns:
            Stored message with its durable id
        """
        pass

    @abstractmethod
    async def list_messages(
        self,
        conversation_id: str,
        limit: int = 500,
        offset: int = 0,
    ) -> list[Message]:
        """
        List messages for a conversation in creation order.

        Args:
            conversation_id: Durable conversation row id
            limit: Max messages
            offset: Pagination offset

        Returns:
            List of messages
        """
        pass

    @abstractmethod
    async def touch_conversation(
        self,
        conversation_id: str,
        title: Optional[str] = None,
    ) -> Conversation:
        """
        Advance updated_at and set the title if it has never been set.

        Args:
            conversation_id: Durable conversation row id
            title: Title derived from the first user message

        Returns:
            Updated conversation
        """
        pass

    @abstractmethod
    async def upsert_profile(self, profile: Profile) -> Profile:
        """
        Create or update a user's profile row.

        Args:
            profile: Profile data

        Returns:
            Stored profile
        """
        pass
