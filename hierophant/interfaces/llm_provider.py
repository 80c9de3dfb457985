"""
LLM provider interface.

Defines the contract every upstream backend adapter implements.
Implementations: OpenAI chat completions, Anthropic messages.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from hierophant.models.chat import ProviderMessage


@dataclass(frozen=True)
class GenerationConfig:
    """Fixed generation parameters applied to every upstream request."""

    max_tokens: int = 1000
    temperature: float = 0.7
    # Steering directive; each backend decides where it goes in the request.
    system: Optional[str] = None


class ILLMProvider(ABC):
    """Abstract interface for LLM backend adapters."""

    @abstractmethod
    def matches(self, model_id: str) -> bool:
        """
        Check whether this backend serves the given model id.

        Args:
            model_id: Model identifier selected by the user

        Returns:
            True if requests for this model should be routed here
        """
        pass

    @abstractmethod
    async def send(
        self,
        messages: Sequence[ProviderMessage],
        model_id: str,
        config: GenerationConfig,
    ) -> str:
        """
        Send a message list upstream and return the normalized reply text.

        Args:
            messages: Role/content pairs in conversation order
            model_id: Model identifier forwarded upstream
            config: Generation parameters and steering directive

        Returns:
            Reply text (empty string when the backend returned no content)

        Raises:
            ProviderAuthError: Missing or rejected credentials
            UpstreamError: Non-success response
            NetworkError: No response reached us
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable backend name.

        Returns:
            Backend name for logging/display
        """
        pass

    @abstractmethod
    def get_available_models(self) -> list[str]:
        """
        Get list of model identifiers this backend offers for selection.

        Returns:
            List of model identifier strings
        """
        pass
