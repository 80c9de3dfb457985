"""
Terminal chat client.

Runs the session manager and chat controller in-process, so the whole
optimistic-append / best-effort-persist cycle can be used without a browser.

Commands:
    /login <email> [full name]   sign in (stands in for the emailed link)
    /logout                      sign out
    /new                         start a new conversation
    /list                        list conversations
    /switch <n>                  make conversation n active
    /model <id>                  select a model
    /models                      list selectable models
    /quit                        exit
"""

import argparse
import asyncio
import logging
from typing import Optional

from hierophant.api.deps import get_conversation_store, get_provider_gateway
from hierophant.core.config import get_settings
from hierophant.infrastructure.local.database import get_engine, init_db
from hierophant.infrastructure.local.mock_identity import InMemoryIdentityProvider
from hierophant.models.enums import MessageRole
from hierophant.services.chat_controller import ChatController
from hierophant.services.session_manager import SessionManager


def _user_id_for(email: str) -> str:
    return email.strip().lower()


class ChatShell:
    """Line-oriented front end over the chat controller."""

    def __init__(
        self,
        controller: ChatController,
        session: SessionManager,
        identity_provider: InMemoryIdentityProvider,
    ):
        self.controller = controller
        self.session = session
        self.identity_provider = identity_provider

    def _print_history(self) -> None:
        for message in self.session.messages:
            speaker = "you" if message.role == MessageRole.USER else "hierophant"
            print(f"[{speaker}] {message.content}")

    async def handle_command(self, line: str) -> bool:
        """Run a slash command. Returns False when the shell should exit."""
        parts = line[1:].split(maxsplit=2)
        command = parts[0].lower() if parts else ""
        args = parts[1:]

        if command == "quit":
            return False
        if command == "login" and args:
            full_name: Optional[str] = args[1] if len(args) > 1 else None
            await self.identity_provider.complete_sign_in(
                _user_id_for(args[0]), email=args[0], full_name=full_name
            )
            print(f"Signed in as {args[0]}.")
            self._print_history()
        elif command == "logout":
            await self.session.sign_out()
            print("Signed out.")
        elif command == "new":
            self.session.new_conversation()
            print("New inquiry.")
        elif command == "list":
            active = self.session.active_conversation_id
            for index, conversation in enumerate(self.session.conversations, start=1):
                marker = "*" if conversation.id == active else " "
                print(f"{marker} {index}. {conversation.title}")
        elif command == "switch" and args and args[0].isdigit():
            conversations = self.session.conversations
            index = int(args[0]) - 1
            if 0 <= index < len(conversations):
                if await self.session.select_conversation(conversations[index].id):
                    self._print_history()
                else:
                    print("Could not open that conversation.")
            else:
                print("No such conversation.")
        elif command == "model" and args:
            self.controller.selected_model = args[0]
            print(f"Model set to {args[0]}.")
        elif command == "models":
            for model_id, backend in self.controller.gateway.available_models():
                print(f"  {model_id} ({backend})")
        else:
            print("Unknown command.")
        return True

    async def run(self) -> None:
        await self.session.start()
        print(f"Hierophant AI ({self.controller.selected_model}). Type /quit to exit.")
        while True:
            line = (await asyncio.to_thread(input, "> ")).strip()
            if not line:
                continue
            if line.startswith("/"):
                if not await self.handle_command(line):
                    break
                continue

            result = await self.controller.submit(line)
            if result is not None:
                print(f"[hierophant] {result.assistant_message.content}")

        await self.controller.drain()
        self.session.stop()


async def run_shell(model: Optional[str] = None) -> None:
    await init_db()
    store = get_conversation_store()
    identity_provider = InMemoryIdentityProvider()
    session = SessionManager(identity_provider, store)
    controller = ChatController(get_provider_gateway(), store, session, selected_model=model)
    try:
        await ChatShell(controller, session, identity_provider).run()
    finally:
        await get_engine().dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with Hierophant AI from the terminal.")
    parser.add_argument(
        "--model",
        default=None,
        help=f"Model id to start with (default: {get_settings().DEFAULT_MODEL}).",
    )
    args = parser.parse_args()
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    try:
        asyncio.run(run_shell(args.model))
    except (EOFError, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
