"""
Identity provider interface.

The identity provider owns sign-in (a passwordless email-link flow that lives
outside this backend). We only read the current identity, listen for changes
and ask it to sign out.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from hierophant.models.identity import Identity

# Receives the new identity, or None once signed out.
IdentityListener = Callable[[Optional[Identity]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class IIdentityProvider(ABC):
    """Abstract interface for identity providers."""

    @abstractmethod
    async def get_current_identity(self) -> Optional[Identity]:
        """
        Get the identity of the current session.

        Returns:
            Authenticated identity, or None when nobody is signed in
        """
        pass

    @abstractmethod
    def subscribe(self, listener: IdentityListener) -> Unsubscribe:
        """
        Register a coroutine called on every identity change.

        Args:
            listener: Coroutine function receiving the new identity or None

        Returns:
            Callable that removes the listener
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session and notify listeners."""
        pass
