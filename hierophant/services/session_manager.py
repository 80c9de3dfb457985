"""
Session manager.

Single owner of the current identity and of the view state that depends on it:
the conversation list, the active conversation and the in-memory message
histories shown to the user. Reacts to identity-provider notifications.
"""

from __future__ import annotations

from typing import Callable, Optional

from hierophant.core.config import get_settings
from hierophant.core.exceptions import HierophantError
from hierophant.core.logger import setup_logger
from hierophant.interfaces.identity_provider import IIdentityProvider, Unsubscribe
from hierophant.models.conversation import Conversation, ConversationId, Message
from hierophant.models.identity import Identity
from hierophant.services.conversation_store import ConversationStore
from hierophant.utils.time import utc_now

logger = setup_logger(__name__)

SessionListener = Callable[["SessionManager"], None]


class SessionManager:
    """Identity plus identity-scoped view state."""

    def __init__(self, identity_provider: IIdentityProvider, store: ConversationStore):
        self._identity_provider = identity_provider
        self._store = store
        self._identity = Identity.anonymous()
        self._conversations: list[Conversation] = []
        self._histories: dict[ConversationId, list[Message]] = {}
        self._active_id: Optional[ConversationId] = None
        self._listeners: list[SessionListener] = []
        self._unsubscribe: Optional[Unsubscribe] = None
        # Bumped on every identity transition; loads started under an older
        # generation are discarded when they finish.
        self._generation = 0
        self._default_title = get_settings().DEFAULT_CONVERSATION_TITLE

    # -------------------------
    # Lifecycle
    # -------------------------
    async def start(self) -> None:
        """Subscribe to identity changes (once) and adopt the current identity."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._identity_provider.subscribe(self.handle_identity_change)
        await self.handle_identity_change(await self._identity_provider.get_current_identity())

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def sign_out(self) -> None:
        """Ask the identity provider to end the session; the notification clears local state."""
        await self._identity_provider.sign_out()

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register a callback run after every view-state change."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    # -------------------------
    # Read-only view
    # -------------------------
    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def generation(self) -> int:
        """Changes on every identity transition that resets the view."""
        return self._generation

    @property
    def conversations(self) -> list[Conversation]:
        return list(self._conversations)

    @property
    def active_conversation_id(self) -> Optional[ConversationId]:
        return self._active_id

    @property
    def active_conversation(self) -> Optional[Conversation]:
        if self._active_id is None:
            return None
        return self._find(self._active_id)

    @property
    def messages(self) -> list[Message]:
        """Messages of the active conversation."""
        if self._active_id is None:
            return []
        return self.history(self._active_id)

    def history(self, conversation_id: ConversationId) -> list[Message]:
        return list(self._histories.get(conversation_id, []))

    # -------------------------
    # Identity transitions
    # -------------------------
    async def handle_identity_change(self, identity: Optional[Identity]) -> None:
        """Identity-provider callback. ``None`` means signed out."""
        new_identity = identity if identity and identity.authenticated else Identity.anonymous()
        old_identity = self._identity

        if new_identity.user_id == old_identity.user_id and new_identity.authenticated == old_identity.authenticated:
            # Same session (e.g. a token refresh); only profile fields may differ.
            self._identity = new_identity
            return

        self._generation += 1
        generation = self._generation
        self._identity = new_identity
        self._reset_view()

        if not new_identity.authenticated:
            logger.info("Signed out; conversation view cleared")
            self._notify()
            return

        logger.info(f"Signed in as {new_identity.user_id}; loading conversations")
        self._notify()
        await self._load_for(new_identity, generation)

    async def _load_for(self, identity: Identity, generation: int) -> None:
        try:
            await self._store.upsert_profile(identity)
        except HierophantError as e:
            logger.warning(f"Profile upsert failed for {identity.user_id}: {e}")

        try:
            conversations = await self._store.list_conversations(identity)
        except HierophantError as e:
            logger.error(f"Could not load conversations for {identity.user_id}: {e}")
            return
        if generation != self._generation:
            return

        self._conversations = conversations
        if not conversations:
            self._notify()
            return

        latest = conversations[0]
        try:
            messages = await self._store.load_messages(latest.id)
        except HierophantError as e:
            logger.error(f"Could not load messages for {latest.id}: {e}")
            self._notify()
            return
        if generation != self._generation:
            return

        self._histories[latest.id] = messages
        self._active_id = latest.id
        self._notify()

    def _reset_view(self) -> None:
        self._conversations = []
        self._histories = {}
        self._active_id = None

    # -------------------------
    # Active conversation
    # -------------------------
    def new_conversation(self) -> None:
        """Deselect; the next submission creates a conversation."""
        self._active_id = None
        self._notify()

    async def select_conversation(self, conversation_id: ConversationId) -> bool:
        """
        Make a known conversation active, loading its messages if needed.

        Other conversations are left untouched.

        Returns:
            False if the conversation is not in the list or its messages
            could not be loaded; the active conversation is then unchanged
        """
        if self._find(conversation_id) is None:
            return False
        if conversation_id not in self._histories:
            generation = self._generation
            try:
                messages = await self._store.load_messages(conversation_id)
            except HierophantError as e:
                logger.error(f"Could not load messages for {conversation_id}: {e}")
                return False
            if generation != self._generation or self._find(conversation_id) is None:
                return False
            self._histories.setdefault(conversation_id, messages)
        self._active_id = conversation_id
        self._notify()
        return True

    def activate(self, conversation_id: ConversationId) -> None:
        """Register a freshly created conversation and make it active."""
        if self._find(conversation_id) is None:
            now = utc_now()
            self._conversations.insert(
                0,
                Conversation(
                    id=conversation_id,
                    title=self._default_title,
                    created_at=now,
                    updated_at=now,
                ),
            )
        self._histories.setdefault(conversation_id, [])
        self._active_id = conversation_id
        self._notify()

    # -------------------------
    # In-memory writes (used by the chat controller)
    # -------------------------
    def append_local(self, conversation_id: ConversationId, message: Message) -> bool:
        """
        Append a message to a conversation's in-memory history.

        Returns False (and drops the message) when the conversation is no
        longer part of the view, e.g. after a sign-out mid-turn.
        """
        history = self._histories.get(conversation_id)
        if history is None:
            return False
        history.append(message)
        self._touch_local(conversation_id, message.timestamp)
        self._notify()
        return True

    def set_local_title(self, conversation_id: ConversationId, title: str) -> None:
        """Set a conversation's title in the list if it still has the placeholder."""
        conversation = self._find(conversation_id)
        if conversation is None or conversation.title != self._default_title:
            return
        self._replace(conversation.model_copy(update={"title": title}))
        self._notify()

    def reconcile(self, conversation: Conversation) -> None:
        """Adopt the durable store's view of a conversation's metadata."""
        if self._find(conversation.id) is None:
            return
        self._replace(conversation)
        self._sort()
        self._notify()

    def _touch_local(self, conversation_id: ConversationId, when) -> None:
        conversation = self._find(conversation_id)
        if conversation is None:
            return
        updated_at = max(when, conversation.updated_at)
        self._replace(conversation.model_copy(update={"updated_at": updated_at}))
        self._sort()

    # -------------------------
    # Internals
    # -------------------------
    def _find(self, conversation_id: ConversationId) -> Optional[Conversation]:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def _replace(self, conversation: Conversation) -> None:
        self._conversations = [
            conversation if c.id == conversation.id else c for c in self._conversations
        ]

    def _sort(self) -> None:
        self._conversations.sort(key=lambda c: c.updated_at, reverse=True)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener failed")
