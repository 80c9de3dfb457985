"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class HierophantError(Exception):
    """Base exception for hierophant."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class UnsupportedModelError(HierophantError):
    """Model id does not match any configured backend."""

    def __init__(self, model_id: str):
        super().__init__("Unsupported model", details={"model": model_id})
        self.model_id = model_id


class LLMError(HierophantError):
    """LLM-related error."""

    pass


class UpstreamError(LLMError):
    """Upstream backend answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class ProviderAuthError(UpstreamError):
    """Upstream rejected (or we lack) the credentials for a backend."""

    pass


class NetworkError(LLMError):
    """No response reached us from the upstream backend."""

    pass


class InfrastructureError(HierophantError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class PersistenceError(InfrastructureError):
    """Durable store read or write failed."""

    pass


class NotFoundError(HierophantError):
    """Resource not found."""

    pass
