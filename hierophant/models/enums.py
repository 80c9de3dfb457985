"""
Enum definitions for the application.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class StorageMode(str, Enum):
    """
    Where a conversation's history lives.

    Fixed when the conversation is created and never migrates.
    """

    EPHEMERAL = "ephemeral"
    PERSISTED = "persisted"


class TurnState(str, Enum):
    """Chat controller turn state."""

    IDLE = "idle"
    SENDING = "sending"
    AWAITING_PROVIDER = "awaiting_provider"
    APPENDING = "appending"
    FAILED = "failed"
