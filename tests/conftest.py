"""
Shared pytest fixtures.
"""

import asyncio
from typing import Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from hierophant.infrastructure.local.conversation_repository import SqliteConversationRepository
from hierophant.infrastructure.local.database import Base
from hierophant.infrastructure.local.mock_identity import InMemoryIdentityProvider
from hierophant.interfaces.llm_provider import GenerationConfig, ILLMProvider
from hierophant.models.chat import ProviderMessage
from hierophant.services.chat_controller import ChatController
from hierophant.services.conversation_store import ConversationStore
from hierophant.services.provider_gateway import ProviderGateway
from hierophant.services.session_manager import SessionManager


class StubProvider(ILLMProvider):
    """Backend adapter that records calls instead of talking HTTP."""

    def __init__(self, prefix: str, name: str, reply: str = "Hi there"):
        self.prefix = prefix
        self.name = name
        self.reply = reply
        self.error: Optional[Exception] = None
        # When set, send() waits for it before answering.
        self.gate: Optional[asyncio.Event] = None
        self.calls: list[tuple[list[ProviderMessage], str, GenerationConfig]] = []

    def matches(self, model_id: str) -> bool:
        return model_id.startswith(self.prefix)

    async def send(
        self,
        messages: Sequence[ProviderMessage],
        model_id: str,
        config: GenerationConfig,
    ) -> str:
        self.calls.append((list(messages), model_id, config))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply

    def get_model_name(self) -> str:
        return self.name

    def get_available_models(self) -> list[str]:
        return [f"{self.prefix}-test"]


@pytest.fixture
async def session_factory():
    """Session factory over a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def test_user_id() -> str:
    return "seeker@hierophant.ai"


@pytest.fixture
def conversation_repo(session_factory) -> SqliteConversationRepository:
    return SqliteConversationRepository(session_factory=session_factory)


@pytest.fixture
def store(conversation_repo) -> ConversationStore:
    return ConversationStore(conversation_repo)


@pytest.fixture
def openai_stub() -> StubProvider:
    return StubProvider("gpt", "OpenAI")


@pytest.fixture
def anthropic_stub() -> StubProvider:
    return StubProvider("claude", "Anthropic", reply="Greetings")


@pytest.fixture
def gateway(openai_stub, anthropic_stub) -> ProviderGateway:
    return ProviderGateway(
        [openai_stub, anthropic_stub],
        config=GenerationConfig(max_tokens=1000, temperature=0.7, system="Be wise."),
    )


@pytest.fixture
def identity_provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
async def session(identity_provider, store) -> SessionManager:
    manager = SessionManager(identity_provider, store)
    await manager.start()
    yield manager
    manager.stop()


@pytest.fixture
def controller(gateway, store, session) -> ChatController:
    return ChatController(gateway, store, session, selected_model="gpt-4o")
