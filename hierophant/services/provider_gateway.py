"""
Provider gateway.

Routes a message list to the backend that serves the selected model and returns
the normalized reply text. Stateless; no retries.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from hierophant.core.exceptions import UnsupportedModelError
from hierophant.core.logger import setup_logger
from hierophant.interfaces.llm_provider import GenerationConfig, ILLMProvider
from hierophant.models.chat import ProviderMessage

logger = setup_logger(__name__)

MessageLike = Union[ProviderMessage, Mapping[str, Any], Any]


def to_provider_messages(messages: Iterable[MessageLike]) -> list[ProviderMessage]:
    """
    Strip everything but role and content, keeping order.

    Accepts dicts (as posted by the UI), pydantic models or any object with
    ``role``/``content`` attributes.
    """
    result: list[ProviderMessage] = []
    for message in messages:
        if isinstance(message, ProviderMessage):
            result.append(message)
            continue
        if isinstance(message, Mapping):
            role, content = message["role"], message.get("content")
        else:
            role, content = message.role, message.content
        result.append(ProviderMessage(role=role, content=content or ""))
    return result


class ProviderGateway:
    """Normalizes several upstream LLM backends behind one send() call."""

    def __init__(
        self,
        providers: Sequence[ILLMProvider],
        config: Optional[GenerationConfig] = None,
    ):
        """
        Initialize the gateway.

        Args:
            providers: Backend adapters, consulted in order; first match wins
            config: Fixed generation parameters and steering directive
        """
        self._providers = list(providers)
        self._config = config or GenerationConfig()

    @property
    def config(self) -> GenerationConfig:
        return self._config

    def resolve(self, model_id: str) -> ILLMProvider:
        """
        Pick the backend for a model id.

        Raises:
            UnsupportedModelError: No backend serves the model
        """
        for provider in self._providers:
            if provider.matches(model_id):
                return provider
        raise UnsupportedModelError(model_id)

    async def send(self, messages: Iterable[MessageLike], model_id: str) -> str:
        """
        Send the conversation to the backend serving ``model_id``.

        Args:
            messages: Conversation history; extra fields are dropped
            model_id: Selected model identifier

        Returns:
            Reply text

        Raises:
            UnsupportedModelError: Unknown model prefix (no request is made)
            ProviderAuthError / UpstreamError / NetworkError: Backend failure
        """
        provider = self.resolve(model_id)
        provider_messages = to_provider_messages(messages)
        logger.debug(
            f"Sending {len(provider_messages)} messages to {provider.get_model_name()} ({model_id})"
        )
        return await provider.send(provider_messages, model_id, self._config)

    def available_models(self) -> list[tuple[str, str]]:
        """List ``(model_id, backend_name)`` pairs for model selection."""
        models: list[tuple[str, str]] = []
        for provider in self._providers:
            for model_id in provider.get_available_models():
                models.append((model_id, provider.get_model_name()))
        return models
