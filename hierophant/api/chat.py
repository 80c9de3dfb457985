"""
Chat API endpoint.

Forwards the posted conversation to the backend serving the selected model
and returns the reply as ``{"content": ...}``.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from hierophant.api.deps import Gateway
from hierophant.core.exceptions import HierophantError, UnsupportedModelError
from hierophant.core.logger import setup_logger
from hierophant.models.chat import ChatRequest, ChatResponse, ErrorResponse

logger = setup_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ChatResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def chat(request: ChatRequest, gateway: Gateway):
    """
    Get one assistant reply for a conversation.

    Args:
        request: Message history and selected model id
        gateway: Provider gateway

    Returns:
        Assistant reply, or an error body
    """
    try:
        content = await gateway.send(request.messages, request.model)
    except UnsupportedModelError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(message="Unsupported model").model_dump(exclude_none=True),
        )
    except HierophantError as e:
        logger.error(f"Chat request for model {request.model} failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(message="Error processing request", error=e.message).model_dump(),
        )

    return ChatResponse(content=content)
