"""Message entity and tool-invocation records."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal, Optional

from .message_id import MessageId

ToolState = Literal["input-streaming", "input-available", "output-available", "output-error"]


class MessageRole(Enum):
    """Role of the message sender."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call shown alongside an assistant message."""

    type: str
    name: str
    state: ToolState
    input: Optional[Any] = None
    output: Optional[Any] = None


@dataclass
class Message:
    """
    Entity representing a single message in a conversation.

    Content only grows while the message is the conversation's active
    streaming target; the ConversationLog enforces that.

    Attributes:
        id: Creation-ordered identity
        role: Who sent the message
        content: The message text
        created_at: When the message was created
        reasoning: Optional reasoning note shown with the reply
        tools: Tool invocations attached to the reply
    """

    role: MessageRole
    content: str = ""
    id: MessageId = field(default_factory=MessageId.generate)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    reasoning: Optional[str] = None
    tools: list[ToolInvocation] = field(default_factory=list)

    @property
    def is_user_message(self) -> bool:
        return self.role == MessageRole.USER

    @property
    def is_assistant_message(self) -> bool:
        return self.role == MessageRole.ASSISTANT

    def to_turn(self) -> dict[str, str]:
        """The {role, content} pair sent to the relay."""
        return {"role": self.role.value, "content": self.content}

    def snapshot(self) -> "Message":
        """A detached copy for observers."""
        return replace(self, tools=list(self.tools))

    def __repr__(self) -> str:
        text_preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Message(id={self.id}, role={self.role.value}, text={text_preview!r})"

    # Factory methods

    @classmethod
    def user(cls, text: str) -> "Message":
        """Create a user message from text."""
        return cls(role=MessageRole.USER, content=text)

    @classmethod
    def assistant(
        cls,
        text: str = "",
        reasoning: Optional[str] = None,
        tools: Optional[list[ToolInvocation]] = None,
    ) -> "Message":
        """Create an assistant message."""
        return cls(
            role=MessageRole.ASSISTANT,
            content=text,
            reasoning=reasoning,
            tools=list(tools or []),
        )
