"""Pydantic models."""

from hierophant.models.chat import (
    ChatMessageIn,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    ModelInfo,
    ModelListResponse,
    ProviderMessage,
)
from hierophant.models.conversation import Conversation, ConversationId, Message
from hierophant.models.enums import MessageRole, StorageMode, TurnState
from hierophant.models.identity import Identity, Profile

__all__ = [
    "ChatMessageIn",
    "ChatRequest",
    "ChatResponse",
    "Conversation",
    "ConversationId",
    "ErrorResponse",
    "Identity",
    "Message",
    "MessageRole",
    "ModelInfo",
    "ModelListResponse",
    "Profile",
    "ProviderMessage",
    "StorageMode",
    "TurnState",
]
