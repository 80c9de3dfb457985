"""Abstract interfaces for infrastructure abstraction."""

from hierophant.interfaces.conversation_repository import IConversationRepository
from hierophant.interfaces.identity_provider import IIdentityProvider
from hierophant.interfaces.llm_provider import GenerationConfig, ILLMProvider

__all__ = [
    "GenerationConfig",
    "IConversationRepository",
    "IIdentityProvider",
    "ILLMProvider",
]
