"""
In-memory identity provider for local development and tests.

Stands in for the hosted identity service: ``complete_sign_in`` plays the part
of the user clicking the emailed sign-in link.
"""

from typing import Optional

from hierophant.core.logger import setup_logger
from hierophant.interfaces.identity_provider import (
    IdentityListener,
    IIdentityProvider,
    Unsubscribe,
)
from hierophant.models.identity import Identity

logger = setup_logger(__name__)


class InMemoryIdentityProvider(IIdentityProvider):
    """Identity provider that keeps the current session in process memory."""

    def __init__(self, identity: Optional[Identity] = None):
        """
        Initialize the provider.

        Args:
            identity: Identity to start signed in as (None = anonymous)
        """
        self._identity = identity
        self._listeners: list[IdentityListener] = []

    async def get_current_identity(self) -> Optional[Identity]:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def complete_sign_in(
        self,
        user_id: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> Identity:
        """Finish the passwordless flow for a user and notify listeners."""
        self._identity = Identity.for_user(user_id, email=email, full_name=full_name)
        logger.info(f"Signed in user {user_id}")
        await self._notify()
        return self._identity

    async def sign_out(self) -> None:
        if self._identity is None:
            return
        logger.info(f"Signed out user {self._identity.user_id}")
        self._identity = None
        await self._notify()

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self._identity)
