"""
Application configuration using Pydantic Settings.

Provider credentials and generation parameters are read from the environment
(or a local .env file) once per process.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = False

    # ===========================================
    # Database (durable conversation store)
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./hierophant.db"

    # ===========================================
    # Upstream LLM backends
    # ===========================================
    OPENAI_API_KEY: str = ""
    OPENAI_API_BASE: str = "https://api.openai.com"

    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_API_BASE: str = "https://api.anthropic.com"
    ANTHROPIC_VERSION: str = "2023-06-01"

    # Fixed generation parameters applied to every request
    LLM_MAX_TOKENS: int = 1000
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_SECONDS: float = 60.0

    # Instruction prepended ahead of the user's messages. Empty disables it.
    LLM_STEERING_DIRECTIVE: str = (
        "You are the Hierophant, a guide to knowledge. "
        "Answer clearly and concisely, using plain prose unless a list is asked for."
    )

    # Model selection
    DEFAULT_MODEL: str = "gpt-4o"
    # Comma separated list of selectable model ids
    AVAILABLE_MODELS: str = (
        "gpt-4o,gpt-4o-mini,claude-3-5-sonnet-20241022,claude-3-5-haiku-20241022"
    )

    # ===========================================
    # Conversations
    # ===========================================
    DEFAULT_CONVERSATION_TITLE: str = "New Inquiry"
    TITLE_MAX_LENGTH: int = 30

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"]
    )

    @property
    def available_models(self) -> list[str]:
        """Parse AVAILABLE_MODELS into a list of model ids."""
        return [m.strip() for m in self.AVAILABLE_MODELS.split(",") if m.strip()]

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
