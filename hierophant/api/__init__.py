"""API routers."""

from hierophant.api import chat, models

__all__ = ["chat", "models"]
