"""
Chat client: stream consumer and conversation state machine.
"""

from .conversation import PREDEFINED_SUGGESTIONS, ChatStatus, Conversation, ConversationObserver
from .jokes import JokeLookup, JokeResult, detect_joke_topic
from .stream_consumer import (
    READ_ERROR_MESSAGE,
    StreamConsumer,
    StreamSession,
    create_http_client,
)

__all__ = [
    "PREDEFINED_SUGGESTIONS",
    "ChatStatus",
    "Conversation",
    "ConversationObserver",
    "JokeLookup",
    "JokeResult",
    "detect_joke_topic",
    "READ_ERROR_MESSAGE",
    "StreamConsumer",
    "StreamSession",
    "create_http_client",
]
