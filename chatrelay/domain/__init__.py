"""
Domain Layer - conversation messages and the ordered log that owns them.
"""

from .conversation_log import ConversationLog
from .message import Message, MessageRole, ToolInvocation
from .message_id import MessageId

__all__ = [
    "ConversationLog",
    "Message",
    "MessageRole",
    "ToolInvocation",
    "MessageId",
]
