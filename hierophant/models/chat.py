"""
Chat model definitions.

Request/response bodies for the chat endpoint and the role/content pair
forwarded to upstream backends.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hierophant.models.enums import MessageRole


class ProviderMessage(BaseModel):
    """The only message fields an upstream backend ever sees."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str = ""

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ChatMessageIn(BaseModel):
    """Message as posted by the UI. Extra fields (id, timestamp, ...) are accepted and dropped."""

    model_config = ConfigDict(extra="allow")

    role: MessageRole
    content: str = Field("", max_length=100000)


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""

    messages: list[ChatMessageIn] = Field(..., description="Ordered conversation history")
    model: str = Field(..., max_length=100, description="Model id, routed by prefix")


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""

    content: str = Field("", description="Assistant reply text")


class ErrorResponse(BaseModel):
    """Error body returned by the chat endpoint."""

    message: str
    error: Optional[str] = None


class ModelInfo(BaseModel):
    """A selectable model."""

    id: str
    name: str
    provider: str


class ModelListResponse(BaseModel):
    """Response model for the model list endpoint."""

    default_model_id: str
    models: list[ModelInfo] = Field(default_factory=list)
