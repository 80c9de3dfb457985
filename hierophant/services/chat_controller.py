"""
Chat controller.

Runs one user turn at a time:

    IDLE -> SENDING -> AWAITING_PROVIDER -> APPENDING -> IDLE
                   \\_____________________ FAILED ____/

Phase 1 (in-memory history) is what the user sees and never waits on
phase 2 (durable writes), which runs in background tasks and only logs its
failures.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from hierophant.core.config import get_settings
from hierophant.core.exceptions import HierophantError, LLMError, PersistenceError, UnsupportedModelError
from hierophant.core.logger import setup_logger
from hierophant.models.conversation import ConversationId, Message, derive_title
from hierophant.models.enums import MessageRole, TurnState
from hierophant.models.identity import Identity
from hierophant.services.conversation_store import ConversationStore
from hierophant.services.provider_gateway import ProviderGateway
from hierophant.services.session_manager import SessionManager

logger = setup_logger(__name__)

APOLOGY_MESSAGE = (
    "I apologize, but I encountered an error processing your inquiry. Please try again."
)


@dataclass
class TurnResult:
    """Outcome of one submitted turn."""

    conversation_id: ConversationId
    user_message: Message
    assistant_message: Message
    failed: bool = False
    error: Optional[HierophantError] = None


class ChatController:
    """Orchestrates optimistic append, provider call and best-effort persistence."""

    def __init__(
        self,
        gateway: ProviderGateway,
        store: ConversationStore,
        session: SessionManager,
        selected_model: Optional[str] = None,
    ):
        settings = get_settings()
        self._gateway = gateway
        self._store = store
        self._session = session
        self._title_length = settings.TITLE_MAX_LENGTH
        self.selected_model = selected_model or settings.DEFAULT_MODEL
        self._state = TurnState.IDLE
        self._sending = False
        # Last scheduled durable write per conversation; writes chain on it so
        # they reach the store in turn order.
        self._write_chain: dict[ConversationId, asyncio.Task] = {}
        self._background: set[asyncio.Task] = set()

    @property
    def gateway(self) -> ProviderGateway:
        return self._gateway

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def is_sending(self) -> bool:
        return self._sending

    @property
    def messages(self) -> list[Message]:
        """The active conversation's in-memory history."""
        return self._session.messages

    # -------------------------
    # Turn
    # -------------------------
    async def submit(self, text: str) -> Optional[TurnResult]:
        """
        Run one turn for the active conversation.

        Returns None without side effects for empty input or while another
        turn is in flight.
        """
        content = (text or "").strip()
        if not content or self._sending:
            return None

        # Checked and set with no await in between.
        self._sending = True
        self._state = TurnState.SENDING
        identity = self._session.identity
        model_id = self.selected_model

        try:
            conversation_id = await self._resolve_conversation(identity)
            prior = self._session.history(conversation_id)
            user_message = self._append_user_message(conversation_id, identity, content, prior)

            self._state = TurnState.AWAITING_PROVIDER
            try:
                reply = await self._gateway.send(prior + [user_message], model_id)
            except (LLMError, UnsupportedModelError) as e:
                return self._fail(conversation_id, user_message, model_id, e)

            self._state = TurnState.APPENDING
            assistant_message = Message(
                role=MessageRole.ASSISTANT,
                content=reply,
                model=model_id,
                conversation_id=conversation_id,
            )
            self._session.append_local(conversation_id, assistant_message)
            self._schedule_persist(conversation_id, identity, assistant_message)

            return TurnResult(
                conversation_id=conversation_id,
                user_message=user_message,
                assistant_message=assistant_message,
            )
        finally:
            self._state = TurnState.IDLE
            self._sending = False

    async def _resolve_conversation(self, identity: Identity) -> ConversationId:
        conversation_id = self._session.active_conversation_id
        if conversation_id is None:
            generation = self._session.generation
            try:
                conversation_id = await self._store.ensure_conversation(identity)
            except PersistenceError as e:
                # Durable storage is a convenience; keep the turn going locally.
                logger.warning(f"Could not create durable conversation, using ephemeral one: {e}")
                conversation_id = ConversationId.ephemeral()
            if generation != self._session.generation:
                # Identity changed while creating; the new view must not see it.
                logger.info(f"Identity changed during turn; {conversation_id} kept out of the view")
                return conversation_id
            self._session.activate(conversation_id)
        return conversation_id

    def _append_user_message(
        self,
        conversation_id: ConversationId,
        identity: Identity,
        content: str,
        prior: list[Message],
    ) -> Message:
        is_first = not any(m.role == MessageRole.USER for m in prior)

        user_message = Message(
            role=MessageRole.USER,
            content=content,
            conversation_id=conversation_id,
        )
        self._session.append_local(conversation_id, user_message)

        title = None
        if is_first:
            title = derive_title(content, self._title_length)
            self._session.set_local_title(conversation_id, title)

        self._schedule_persist(conversation_id, identity, user_message, title)
        return user_message

    def _fail(
        self,
        conversation_id: ConversationId,
        user_message: Message,
        model_id: str,
        error: HierophantError,
    ) -> TurnResult:
        self._state = TurnState.FAILED
        logger.error(f"Turn failed for {conversation_id} with model {model_id}: {error}")
        apology = Message(
            role=MessageRole.ASSISTANT,
            content=APOLOGY_MESSAGE,
            conversation_id=conversation_id,
        )
        self._session.append_local(conversation_id, apology)
        return TurnResult(
            conversation_id=conversation_id,
            user_message=user_message,
            assistant_message=apology,
            failed=True,
            error=error,
        )

    # -------------------------
    # Best-effort persistence
    # -------------------------
    def _schedule_persist(
        self,
        conversation_id: ConversationId,
        identity: Identity,
        message: Message,
        title: Optional[str] = None,
    ) -> None:
        if not (conversation_id.is_persisted and identity.authenticated):
            return
        previous = self._write_chain.get(conversation_id)
        task = asyncio.create_task(
            self._persist(previous, conversation_id, identity, message, title)
        )
        self._write_chain[conversation_id] = task
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _persist(
        self,
        previous: Optional[asyncio.Task],
        conversation_id: ConversationId,
        identity: Identity,
        message: Message,
        title: Optional[str],
    ) -> None:
        if previous is not None:
            # The previous write handles and logs its own failures.
            await asyncio.gather(previous, return_exceptions=True)

        try:
            await self._store.append_message(conversation_id, message, identity)
            conversation = await self._store.touch_conversation(
                conversation_id,
                identity,
                title_if_first_message=title,
            )
        except PersistenceError as e:
            logger.warning(f"Durable write for {conversation_id} failed: {e}")
            return
        finally:
            if self._write_chain.get(conversation_id) is asyncio.current_task():
                del self._write_chain[conversation_id]

        if conversation is not None:
            self._session.reconcile(conversation)

    async def drain(self) -> None:
        """Wait for every scheduled durable write to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
