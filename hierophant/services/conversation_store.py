"""
Conversation store.

One contract over two backends: ephemeral conversations live only in the chat
controller's memory, persisted ones in the durable repository. The id's tag
decides which backend owns a conversation.
"""

from typing import Awaitable, Optional, TypeVar

from hierophant.core.exceptions import HierophantError, PersistenceError
from hierophant.core.logger import setup_logger
from hierophant.interfaces.conversation_repository import IConversationRepository
from hierophant.models.conversation import Conversation, ConversationId, Message
from hierophant.models.identity import Identity, Profile

logger = setup_logger(__name__)

T = TypeVar("T")


def _uses_durable(conversation_id: ConversationId, identity: Identity) -> bool:
    return conversation_id.is_persisted and identity.authenticated


async def _durable_write(write: Awaitable[T]) -> T:
    """Await a repository write, reporting every failure as PersistenceError."""
    try:
        return await write
    except PersistenceError:
        raise
    except HierophantError as e:
        raise PersistenceError(e.message, details=e.details) from e


class ConversationStore:
    """Routes conversation reads and writes to the backend that owns them."""

    def __init__(self, repository: IConversationRepository):
        self._repo = repository

    async def ensure_conversation(self, identity: Identity) -> ConversationId:
        """
        Get an id for a new conversation.

        Authenticated users get a durable row; anonymous users get a fresh
        ephemeral id with nothing behind it.

        Raises:
            PersistenceError: The durable row could not be created
        """
        if not identity.authenticated:
            return ConversationId.ephemeral()

        conversation = await _durable_write(self._repo.create_conversation(identity.user_id))
        logger.info(f"Created conversation {conversation.id} for user {identity.user_id}")
        return conversation.id

    async def list_conversations(self, identity: Identity) -> list[Conversation]:
        """List the user's durable conversations, most recently updated first."""
        if not identity.authenticated:
            return []
        return await self._repo.list_conversations(identity.user_id)

    async def load_messages(self, conversation_id: ConversationId) -> list[Message]:
        """
        Load a persisted conversation's messages in creation order.

        Ephemeral conversations have no reload path and yield an empty list.
        """
        if conversation_id.is_ephemeral:
            return []
        return await self._repo.list_messages(conversation_id.value)

    async def append_message(
        self,
        conversation_id: ConversationId,
        message: Message,
        identity: Identity,
    ) -> Optional[Message]:
        """
        Persist a message.

        No-op (returns None) for ephemeral ids or anonymous identities.

        Raises:
            PersistenceError: The durable write failed
        """
        if not _uses_durable(conversation_id, identity):
            return None
        return await _durable_write(
            self._repo.add_message(
                conversation_id.value,
                role=message.role,
                content=message.content,
                model=message.model,
            )
        )

    async def touch_conversation(
        self,
        conversation_id: ConversationId,
        identity: Identity,
        title_if_first_message: Optional[str] = None,
    ) -> Optional[Conversation]:
        """
        Advance updated_at, and set the title if it was never set.

        No-op (returns None) for ephemeral ids or anonymous identities.

        Raises:
            PersistenceError: The durable write failed
        """
        if not _uses_durable(conversation_id, identity):
            return None
        return await _durable_write(
            self._repo.touch_conversation(conversation_id.value, title=title_if_first_message)
        )

    async def upsert_profile(self, identity: Identity) -> Optional[Profile]:
        """Make sure a profile row exists for an authenticated identity."""
        if not identity.authenticated:
            return None
        return await _durable_write(
            self._repo.upsert_profile(
                Profile(id=identity.user_id, email=identity.email, full_name=identity.full_name)
            )
        )
