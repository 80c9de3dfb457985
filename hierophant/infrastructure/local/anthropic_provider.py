"""
Anthropic messages adapter.

The steering directive goes in the dedicated ``system`` field.
"""

from typing import Any, Optional, Sequence

import httpx

from hierophant.interfaces.llm_provider import GenerationConfig
from hierophant.infrastructure.local.http_provider import HttpLLMProvider
from hierophant.models.chat import ProviderMessage


class AnthropicMessagesProvider(HttpLLMProvider):
    """Adapter for Anthropic-shaped backends (model ids starting with ``claude``)."""

    model_prefix = "claude"
    generic_error = "Anthropic API error"

    def __init__(
        self,
        api_key: str,
        api_base: str,
        api_version: str = "2023-06-01",
        timeout: float = 60.0,
        models: Optional[list[str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, api_base, timeout=timeout, models=models, client=client)
        self._api_version = api_version

    def get_model_name(self) -> str:
        return "Anthropic"

    def build_request(
        self,
        messages: Sequence[ProviderMessage],
        model_id: str,
        config: GenerationConfig,
    ) -> dict[str, Any]:
        """Build the messages request body."""
        body: dict[str, Any] = {
            "model": model_id,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }
        if config.system:
            body["system"] = config.system
        body["messages"] = [m.to_wire() for m in messages]
        return body

    @staticmethod
    def extract_text(data: dict[str, Any]) -> str:
        """Read ``content[0].text``, defaulting to an empty string."""
        content = data.get("content") or []
        if not content or not isinstance(content[0], dict):
            return ""
        return content[0].get("text") or ""

    async def send(
        self,
        messages: Sequence[ProviderMessage],
        model_id: str,
        config: GenerationConfig,
    ) -> str:
        api_key = self._require_api_key()
        data = await self._post_json(
            "/v1/messages",
            headers={
                "x-api-key": api_key,
                "anthropic-version": self._api_version,
            },
            body=self.build_request(messages, model_id, config),
        )
        return self.extract_text(data)
