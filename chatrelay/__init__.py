"""
chatrelay - streaming chat relay and client.

The relay turns an upstream model token stream into ``data:`` lines ending
in ``data: [DONE]``; the client reads those lines back into a growing
assistant message while tracking idle/loading/streaming status.
"""

from chatrelay.chat_server import create_chat_app
from chatrelay.client import ChatStatus, Conversation, ConversationObserver, StreamConsumer
from chatrelay.infrastructure import ClientConfig, RelayConfig
from chatrelay.relay import RelayEncoder
from chatrelay.server import create_app, serve

__version__ = "0.1.0"
__all__ = [
    "create_chat_app",
    "create_app",
    "serve",
    "ChatStatus",
    "Conversation",
    "ConversationObserver",
    "StreamConsumer",
    "ClientConfig",
    "RelayConfig",
    "RelayEncoder",
]
