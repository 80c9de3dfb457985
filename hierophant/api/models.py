"""
Available models endpoint.

Returns the selectable models and the backend each one routes to.
"""

from fastapi import APIRouter

from hierophant.api.deps import Gateway
from hierophant.core.config import get_settings
from hierophant.models.chat import ModelInfo, ModelListResponse

router = APIRouter()

_DISPLAY_NAMES = {
    "gpt-4o": "GPT-4o",
    "gpt-4o-mini": "GPT-4o Mini",
    "claude-3-5-sonnet-20241022": "Claude 3.5 Sonnet",
    "claude-3-5-haiku-20241022": "Claude 3.5 Haiku",
}


@router.get("", response_model=ModelListResponse)
async def list_available_models(gateway: Gateway):
    """List available AI models for model selection."""
    settings = get_settings()
    models = [
        ModelInfo(id=model_id, name=_DISPLAY_NAMES.get(model_id, model_id), provider=backend)
        for model_id, backend in gateway.available_models()
    ]
    return ModelListResponse(default_model_id=settings.DEFAULT_MODEL, models=models)
