"""
Conversation and message models.

Messages are immutable once created. A conversation's identifier carries its
storage mode, so the owning backend is known from the id alone.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from hierophant.models.enums import MessageRole, StorageMode
from hierophant.utils.time import utc_now


class ConversationId(BaseModel):
    """Tagged conversation identifier: ``Ephemeral(local_id) | Persisted(remote_id)``."""

    model_config = ConfigDict(frozen=True)

    mode: StorageMode
    value: str = Field(..., min_length=1, max_length=100)

    @classmethod
    def ephemeral(cls) -> "ConversationId":
        """Mint a fresh in-memory conversation id."""
        return cls(mode=StorageMode.EPHEMERAL, value=uuid4().hex)

    @classmethod
    def persisted(cls, remote_id: str) -> "ConversationId":
        """Wrap the id of a durable conversation row."""
        return cls(mode=StorageMode.PERSISTED, value=str(remote_id))

    @property
    def is_ephemeral(self) -> bool:
        return self.mode == StorageMode.EPHEMERAL

    @property
    def is_persisted(self) -> bool:
        return self.mode == StorageMode.PERSISTED

    def __str__(self) -> str:
        return f"{self.mode.value}:{self.value}"


class Message(BaseModel):
    """A single chat message. Never edited in place."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(None, description="Durable row id, set once persisted")
    role: MessageRole
    content: str = ""
    timestamp: datetime = Field(default_factory=utc_now)
    model: Optional[str] = Field(None, description="Model that produced the reply")
    conversation_id: ConversationId


class Conversation(BaseModel):
    """Conversation metadata as shown in the conversation list."""

    id: ConversationId
    title: str = Field("New Inquiry", max_length=200)
    created_at: datetime
    updated_at: datetime

    @property
    def storage_mode(self) -> StorageMode:
        return self.id.mode


def derive_title(content: str, max_length: int = 30) -> str:
    """Title for a conversation, taken from its first user message."""
    return content[:max_length] + "..."
