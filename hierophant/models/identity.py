"""
Identity and profile models.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """Who is using the chat right now. Anonymous unless the identity provider says otherwise."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = None
    full_name: Optional[str] = None
    authenticated: bool = False

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def for_user(
        cls,
        user_id: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> "Identity":
        return cls(user_id=user_id, email=email, full_name=full_name, authenticated=True)


class Profile(BaseModel):
    """Profile row upserted once per authenticated session."""

    id: str = Field(..., max_length=255)
    email: Optional[str] = None
    full_name: Optional[str] = None
