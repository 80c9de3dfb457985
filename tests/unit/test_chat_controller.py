"""
Unit tests for ChatController turns.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from hierophant.core.exceptions import NetworkError, PersistenceError, UpstreamError
from hierophant.models.conversation import ConversationId
from hierophant.models.enums import MessageRole, TurnState
from hierophant.services.chat_controller import APOLOGY_MESSAGE, ChatController
from hierophant.services.conversation_store import ConversationStore


class TestAnonymousTurn:
    """Turns without a signed-in user stay in memory."""

    @pytest.mark.asyncio
    async def test_first_message(self, controller, session, openai_stub):
        result = await controller.submit("Hello")

        assert not result.failed
        assert result.conversation_id.is_ephemeral
        assert [(m.role, m.content) for m in controller.messages] == [
            (MessageRole.USER, "Hello"),
            (MessageRole.ASSISTANT, "Hi there"),
        ]
        assert controller.messages[1].model == "gpt-4o"
        assert session.active_conversation.title == "Hello..."

        forwarded, model_id, _ = openai_stub.calls[0]
        assert [m.to_wire() for m in forwarded] == [{"role": "user", "content": "Hello"}]
        assert model_id == "gpt-4o"

    @pytest.mark.asyncio
    async def test_history_is_sent_on_second_turn(self, controller, openai_stub):
        await controller.submit("Hello")
        await controller.submit("Tell me more")

        forwarded, _, _ = openai_stub.calls[1]
        assert [m.to_wire() for m in forwarded] == [
            {"role": "user", "content": "Hello"},
            {"role": "assistant", "content": "Hi there"},
            {"role": "user", "content": "Tell me more"},
        ]
        assert len(controller.messages) == 4

    @pytest.mark.asyncio
    async def test_no_durable_calls(self, gateway, session):
        repo = AsyncMock()
        anonymous_controller = ChatController(gateway, ConversationStore(repo), session)

        await anonymous_controller.submit("Hello")
        await anonymous_controller.drain()

        repo.create_conversation.assert_not_called()
        repo.add_message.assert_not_called()
        repo.touch_conversation.assert_not_called()

    @pytest.mark.asyncio
    async def test_title_is_set_once(self, controller, session):
        await controller.submit("What is the meaning of the Tower card in a reading?")
        await controller.submit("And reversed?")

        assert session.active_conversation.title == "What is the meaning of the Tow..."


class TestRejectedSubmissions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_input_is_ignored(self, controller, openai_stub, text):
        assert await controller.submit(text) is None
        assert controller.messages == []
        assert openai_stub.calls == []

    @pytest.mark.asyncio
    async def test_second_submit_while_in_flight_is_ignored(self, controller, openai_stub):
        openai_stub.gate = asyncio.Event()

        first = asyncio.create_task(controller.submit("Hello"))
        while not openai_stub.calls:
            await asyncio.sleep(0)

        assert controller.is_sending
        assert controller.state == TurnState.AWAITING_PROVIDER
        assert await controller.submit("Again") is None

        openai_stub.gate.set()
        result = await first

        assert not result.failed
        assert len(openai_stub.calls) == 1
        assert [m.content for m in controller.messages] == ["Hello", "Hi there"]
        assert controller.state == TurnState.IDLE
        assert not controller.is_sending


class TestFailedTurn:
    @pytest.mark.asyncio
    async def test_upstream_error_appends_apology(self, controller, openai_stub):
        openai_stub.error = UpstreamError("invalid_api_key", status_code=401)

        result = await controller.submit("Hello")

        assert result.failed
        assert result.error.message == "invalid_api_key"
        assert [(m.role, m.content) for m in controller.messages] == [
            (MessageRole.USER, "Hello"),
            (MessageRole.ASSISTANT, APOLOGY_MESSAGE),
        ]
        assert controller.state == TurnState.IDLE
        assert not controller.is_sending

    @pytest.mark.asyncio
    async def test_network_error_appends_apology(self, controller, openai_stub):
        openai_stub.error = NetworkError("connection refused")

        result = await controller.submit("Hello")

        assert result.failed
        assert controller.messages[-1].content == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    async def test_unsupported_model_appends_apology(self, controller, openai_stub, anthropic_stub):
        controller.selected_model = "bogus-model"

        result = await controller.submit("Hello")

        assert result.failed
        assert controller.messages[-1].content == APOLOGY_MESSAGE
        assert openai_stub.calls == [] and anthropic_stub.calls == []

    @pytest.mark.asyncio
    async def test_next_turn_works_after_failure(self, controller, openai_stub):
        openai_stub.error = UpstreamError("Rate limit reached", status_code=429)
        await controller.submit("Hello")

        openai_stub.error = None
        result = await controller.submit("Hello again")

        assert not result.failed
        assert len(controller.messages) == 4


class TestAuthenticatedTurn:
    """Turns for a signed-in user also write to the durable store."""

    @pytest.mark.asyncio
    async def test_messages_are_persisted(
        self, controller, identity_provider, conversation_repo, test_user_id
    ):
        await identity_provider.complete_sign_in(test_user_id)

        result = await controller.submit("Hello")
        await controller.drain()

        assert result.conversation_id.is_persisted
        stored = await conversation_repo.list_messages(result.conversation_id.value)
        assert [(m.role, m.content, m.model) for m in stored] == [
            (MessageRole.USER, "Hello", None),
            (MessageRole.ASSISTANT, "Hi there", "gpt-4o"),
        ]
        conversation = await conversation_repo.get_conversation(
            test_user_id, result.conversation_id.value
        )
        assert conversation.title == "Hello..."

    @pytest.mark.asyncio
    async def test_apology_is_not_persisted(
        self, controller, identity_provider, conversation_repo, openai_stub, test_user_id
    ):
        await identity_provider.complete_sign_in(test_user_id)
        openai_stub.error = UpstreamError("boom", status_code=500)

        result = await controller.submit("Hello")
        await controller.drain()

        stored = await conversation_repo.list_messages(result.conversation_id.value)
        assert [m.content for m in stored] == ["Hello"]
        assert controller.messages[-1].content == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    async def test_persistence_failure_is_silent(self, gateway, session, identity_provider, test_user_id):
        repo = AsyncMock()
        repo.list_conversations.return_value = []
        store = ConversationStore(repo)
        failing_controller = ChatController(gateway, store, session)
        await identity_provider.complete_sign_in(test_user_id)

        repo.create_conversation.return_value = SimpleNamespace(id=ConversationId.persisted("row-1"))
        repo.add_message.side_effect = PersistenceError("disk full")

        result = await failing_controller.submit("Hello")
        await failing_controller.drain()

        assert not result.failed
        assert [m.content for m in failing_controller.messages] == ["Hello", "Hi there"]
        assert failing_controller.state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_failed_conversation_create_falls_back_to_ephemeral(
        self, gateway, session, identity_provider, test_user_id
    ):
        repo = AsyncMock()
        repo.list_conversations.return_value = []
        failing_controller = ChatController(gateway, ConversationStore(repo), session)
        await identity_provider.complete_sign_in(test_user_id)
        repo.create_conversation.side_effect = PersistenceError("database is locked")

        result = await failing_controller.submit("Hello")
        await failing_controller.drain()

        assert result.conversation_id.is_ephemeral
        assert len(failing_controller.messages) == 2
        repo.add_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_switching_mid_turn_writes_to_original_conversation(
        self, controller, session, identity_provider, conversation_repo, openai_stub, test_user_id
    ):
        other = await conversation_repo.create_conversation(test_user_id)
        await identity_provider.complete_sign_in(test_user_id)
        session.new_conversation()
        openai_stub.gate = asyncio.Event()

        turn = asyncio.create_task(controller.submit("Hello"))
        while not openai_stub.calls:
            await asyncio.sleep(0)
        assert await session.select_conversation(other.id)

        openai_stub.gate.set()
        result = await turn
        await controller.drain()

        assert result.conversation_id != other.id
        assert session.messages == []
        assert [m.content for m in session.history(result.conversation_id)] == ["Hello", "Hi there"]
        stored = await conversation_repo.list_messages(result.conversation_id.value)
        assert [m.content for m in stored] == ["Hello", "Hi there"]
        assert await conversation_repo.list_messages(other.id.value) == []

    @pytest.mark.asyncio
    async def test_sign_out_mid_turn_drops_reply_from_view(
        self, controller, session, identity_provider, conversation_repo, openai_stub, test_user_id
    ):
        await identity_provider.complete_sign_in(test_user_id)
        openai_stub.gate = asyncio.Event()

        turn = asyncio.create_task(controller.submit("Hello"))
        while not openai_stub.calls:
            await asyncio.sleep(0)
        await session.sign_out()

        openai_stub.gate.set()
        result = await turn
        await controller.drain()

        assert session.conversations == []
        assert session.messages == []
        # The turn's writes were made for the user who sent it.
        stored = await conversation_repo.list_messages(result.conversation_id.value)
        assert [m.content for m in stored] == ["Hello", "Hi there"]

    @pytest.mark.asyncio
    async def test_sign_out_while_creating_conversation_keeps_view_empty(
        self, controller, session, identity_provider, conversation_repo, openai_stub, test_user_id
    ):
        await identity_provider.complete_sign_in(test_user_id)
        gate = asyncio.Event()
        creating = asyncio.Event()
        create = conversation_repo.create_conversation

        async def gated_create(user_id, title=None):
            creating.set()
            await gate.wait()
            return await create(user_id, title)

        conversation_repo.create_conversation = gated_create

        turn = asyncio.create_task(controller.submit("secret question"))
        await creating.wait()
        await session.sign_out()

        gate.set()
        result = await turn
        await controller.drain()

        assert not session.identity.authenticated
        assert session.conversations == []
        assert session.active_conversation_id is None
        assert session.messages == []
        assert session.history(result.conversation_id) == []

        # The reply is still generated from the full turn history.
        forwarded, _, _ = openai_stub.calls[0]
        assert [m.to_wire() for m in forwarded] == [{"role": "user", "content": "secret question"}]

        # Durable writes still go out for the user who sent the turn.
        stored = await conversation_repo.list_messages(result.conversation_id.value)
        assert [m.content for m in stored] == ["secret question", "Hi there"]
        conversation = await conversation_repo.get_conversation(
            test_user_id, result.conversation_id.value
        )
        assert conversation.title == "secret question..."


class TestLongReplies:
    @pytest.mark.asyncio
    async def test_very_long_reply_is_appended(self, controller, openai_stub):
        openai_stub.reply = "x" * 200_000

        result = await controller.submit("Hello")

        assert not result.failed
        assert len(controller.messages) == 2
        assert len(controller.messages[1].content) == 200_000
        assert controller.state == TurnState.IDLE
