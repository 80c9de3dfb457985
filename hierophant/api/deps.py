"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that build the infrastructure
implementations from the environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from hierophant.core.config import get_settings
from hierophant.interfaces.conversation_repository import IConversationRepository
from hierophant.interfaces.llm_provider import GenerationConfig, ILLMProvider
from hierophant.services.conversation_store import ConversationStore
from hierophant.services.provider_gateway import ProviderGateway


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_conversation_repository() -> IConversationRepository:
    """Get conversation repository instance."""
    from hierophant.infrastructure.local.conversation_repository import SqliteConversationRepository

    return SqliteConversationRepository()


@lru_cache()
def get_conversation_store() -> ConversationStore:
    """Get conversation store instance."""
    return ConversationStore(get_conversation_repository())


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_providers() -> tuple[ILLMProvider, ...]:
    """
    Get upstream backend adapters in routing order.

    ``gpt*`` models go to OpenAI, ``claude*`` models to Anthropic.
    """
    from hierophant.infrastructure.local.anthropic_provider import AnthropicMessagesProvider
    from hierophant.infrastructure.local.openai_provider import OpenAIChatProvider

    settings = get_settings()
    return (
        OpenAIChatProvider(
            api_key=settings.OPENAI_API_KEY,
            api_base=settings.OPENAI_API_BASE,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            models=settings.available_models,
        ),
        AnthropicMessagesProvider(
            api_key=settings.ANTHROPIC_API_KEY,
            api_base=settings.ANTHROPIC_API_BASE,
            api_version=settings.ANTHROPIC_VERSION,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            models=settings.available_models,
        ),
    )


@lru_cache()
def get_provider_gateway() -> ProviderGateway:
    """Get provider gateway with the configured generation parameters."""
    settings = get_settings()
    config = GenerationConfig(
        max_tokens=settings.LLM_MAX_TOKENS,
        temperature=settings.LLM_TEMPERATURE,
        system=settings.LLM_STEERING_DIRECTIVE or None,
    )
    return ProviderGateway(get_llm_providers(), config=config)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

Gateway = Annotated[ProviderGateway, Depends(get_provider_gateway)]
