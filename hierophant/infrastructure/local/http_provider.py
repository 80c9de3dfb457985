"""
Shared HTTP plumbing for upstream LLM adapters.

Posts a JSON body with httpx and classifies failures:
no response -> NetworkError, 401/403 -> ProviderAuthError,
any other non-success status -> UpstreamError.
"""

from typing import Any, Optional

import httpx

from hierophant.core.exceptions import NetworkError, ProviderAuthError, UpstreamError
from hierophant.core.logger import setup_logger
from hierophant.interfaces.llm_provider import ILLMProvider

logger = setup_logger(__name__)


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull ``error.message`` out of an upstream failure body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return None


class HttpLLMProvider(ILLMProvider):
    """Base class for adapters that talk JSON over HTTPS."""

    # Prefix routed to this backend; set by subclasses.
    model_prefix: str = ""
    # Used when a failure body carries no message.
    generic_error: str = "Upstream API error"

    def __init__(
        self,
        api_key: str,
        api_base: str,
        timeout: float = 60.0,
        models: Optional[list[str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the adapter.

        Args:
            api_key: Backend API key
            api_base: Backend base URL (without the /v1 suffix)
            timeout: Request timeout in seconds
            models: Selectable model ids served by this backend
            client: Shared client (tests pass one with a mock transport)
        """
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._models = models or []
        self._client = client

    def matches(self, model_id: str) -> bool:
        return bool(self.model_prefix) and model_id.startswith(self.model_prefix)

    def get_available_models(self) -> list[str]:
        return [m for m in self._models if self.matches(m)]

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise ProviderAuthError(f"{self.get_model_name()} API key is not configured")
        return self._api_key

    async def _post_json(
        self,
        path: str,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> dict[str, Any]:
        """POST a JSON body and return the decoded success envelope."""
        url = f"{self._api_base}{path}"
        headers = {"Content-Type": "application/json", **headers}

        try:
            if self._client is not None:
                response = await self._client.post(url, headers=headers, json=body, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, headers=headers, json=body)
        except httpx.TransportError as e:
            logger.error(f"{self.get_model_name()} request failed without response: {e}")
            raise NetworkError(f"Could not reach {self.get_model_name()}: {e}") from e

        if not response.is_success:
            detail = _error_message(response) or self.generic_error
            logger.error(
                f"{self.get_model_name()} returned {response.status_code}: {detail}"
            )
            error_cls = ProviderAuthError if response.status_code in (401, 403) else UpstreamError
            raise error_cls(detail, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{self.get_model_name()} returned a non-JSON body",
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise UpstreamError(
                f"{self.get_model_name()} returned an unexpected body",
                status_code=response.status_code,
            )
        return data
