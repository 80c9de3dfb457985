"""
OpenAI chat-completions adapter.

The steering directive travels as a leading ``system`` message.
"""

from typing import Any, Sequence

from hierophant.interfaces.llm_provider import GenerationConfig
from hierophant.infrastructure.local.http_provider import HttpLLMProvider
from hierophant.models.chat import ProviderMessage


class OpenAIChatProvider(HttpLLMProvider):
    """Adapter for OpenAI-shaped backends (model ids starting with ``gpt``)."""

    model_prefix = "gpt"
    generic_error = "OpenAI API error"

    def get_model_name(self) -> str:
        return "OpenAI"

    def build_request(
        self,
        messages: Sequence[ProviderMessage],
        model_id: str,
        config: GenerationConfig,
    ) -> dict[str, Any]:
        """Build the chat-completions request body."""
        wire_messages = [m.to_wire() for m in messages]
        if config.system:
            wire_messages.insert(0, {"role": "system", "content": config.system})
        return {
            "model": model_id,
            "messages": wire_messages,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }

    @staticmethod
    def extract_text(data: dict[str, Any]) -> str:
        """Read ``choices[0].message.content``, defaulting to an empty string."""
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    async def send(
        self,
        messages: Sequence[ProviderMessage],
        model_id: str,
        config: GenerationConfig,
    ) -> str:
        api_key = self._require_api_key()
        data = await self._post_json(
            "/v1/chat/completions",
            headers={"Authorization": f"Bearer {api_key}"},
            body=self.build_request(messages, model_id, config),
        )
        return self.extract_text(data)
