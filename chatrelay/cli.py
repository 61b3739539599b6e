#!/usr/bin/env python3
"""
chatrelay CLI - terminal chat client for a running relay server.

Commands inside the chat:
    /regen     regenerate the last assistant reply
    /suggest   list prompt suggestions
    /use N     put suggestion N into the input
    /good      thumbs up the last reply
    /bad       thumbs down the last reply
    /quit      exit
"""
import argparse
import asyncio
import sys
from typing import Optional

import dotenv

from .client.conversation import PREDEFINED_SUGGESTIONS, ChatStatus, Conversation, ConversationObserver
from .client.stream_consumer import StreamConsumer, create_http_client
from .domain.message import Message
from .infrastructure.config import ClientConfig
from .infrastructure.logging import setup_logging


class TerminalPrinter(ConversationObserver):
    """Prints assistant text as it grows."""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self._printed: dict[str, int] = {}

    def message_updated(self, message: Message) -> None:
        if not message.is_assistant_message:
            return
        key = str(message.id)
        if key not in self._printed:
            self._printed[key] = 0
            self.out.write("assistant> ")
            if message.reasoning:
                self.out.write(f"({message.reasoning})\n")
        seen = self._printed[key]
        self.out.write(message.content[seen:])
        self._printed[key] = len(message.content)
        self.out.flush()

    def messages_removed(self, messages: list[Message]) -> None:
        for message in messages:
            self._printed.pop(str(message.id), None)
        self.out.write(f"[discarded {len(messages)} message(s)]\n")

    def status_changed(self, status: ChatStatus) -> None:
        if status == ChatStatus.LOADING:
            self.out.write("...\n")
        elif status == ChatStatus.IDLE:
            self.out.write("\n")
        self.out.flush()


def _last_assistant(conversation: Conversation) -> Optional[Message]:
    for message in reversed(conversation.messages):
        if message.is_assistant_message:
            return message
    return None


async def handle_command(conversation: Conversation, line: str, out=None) -> bool:
    """Handle one input line. Returns False when the user wants to quit."""
    out = out or sys.stdout
    command, _, argument = line.strip().partition(" ")

    if command == "/quit":
        return False
    if command == "/suggest":
        for number, suggestion in enumerate(PREDEFINED_SUGGESTIONS, start=1):
            out.write(f"  {number}. {suggestion}\n")
        return True
    if command == "/use":
        try:
            number = int(argument)
        except ValueError:
            number = 0
        if not 1 <= number <= len(PREDEFINED_SUGGESTIONS):
            out.write(f"No suggestion {argument!r}\n")
            return True
        conversation.select_suggestion(PREDEFINED_SUGGESTIONS[number - 1])
        out.write(f"input: {conversation.input_text}\n")
        return True
    if command in ("/regen", "/good", "/bad"):
        last = _last_assistant(conversation)
        if last is None:
            out.write("No assistant reply yet\n")
        elif command == "/regen":
            if not await conversation.regenerate(last.id):
                out.write("Cannot regenerate right now\n")
        else:
            conversation.record_feedback(last.id, positive=command == "/good")
        return True

    if command.startswith("/"):
        out.write(f"Unknown command {command}. Try /suggest, /regen, /good, /bad or /quit\n")
        return True

    if line.strip():
        conversation.set_input(line)
    await conversation.submit()
    return True


async def run_chat(config: ClientConfig) -> int:
    async with create_http_client(config) as http:
        conversation = Conversation(StreamConsumer(http, chat_path=config.chat_path))
        conversation.subscribe(TerminalPrinter())
        print(f"Connected to {config.server_url}. Type /suggest for ideas, /quit to exit.")

        while True:
            try:
                line = await asyncio.to_thread(input, "you> ")
            except (EOFError, KeyboardInterrupt):
                break
            if not await handle_command(conversation, line):
                break
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    dotenv.load_dotenv()

    parser = argparse.ArgumentParser(description="Chat with a chatrelay server")
    parser.add_argument("--server", help="Relay base URL (default: CHATRELAY_SERVER_URL)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)

    config = ClientConfig.from_env()
    if args.server:
        config = config.with_overrides(server_url=args.server)

    return asyncio.run(run_chat(config))


if __name__ == "__main__":
    sys.exit(main())
