"""Conversation log aggregate root."""

from typing import Optional

from ..exceptions import InvalidStateTransition, MessageNotFound
from .message import Message, ToolInvocation
from .message_id import MessageId


class ConversationLog:
    """
    Aggregate root for the ordered message log.

    The log protects these invariants:
    - Messages stay in creation order
    - At most one message is active (receiving streamed content), and it is
      the most recently appended assistant message
    - Only the active message's content can change
    - The tail can be truncated only while nothing is streaming

    Callers receive copies of messages; all mutation goes through the log by
    message id.
    """

    def __init__(self, messages: Optional[list[Message]] = None) -> None:
        self._messages: list[Message] = list(messages) if messages else []
        self._active_id: Optional[MessageId] = None

    # Properties

    @property
    def messages(self) -> list[Message]:
        """Copies of the messages, in order."""
        return [m.snapshot() for m in self._messages]

    @property
    def active_id(self) -> Optional[MessageId]:
        return self._active_id

    @property
    def has_active(self) -> bool:
        return self._active_id is not None

    def __len__(self) -> int:
        return len(self._messages)

    # Queries

    def index_of(self, message_id: MessageId | str) -> int:
        """
        Position of a message in the log.

        Raises:
            MessageNotFound: If no message has this id
        """
        for index, message in enumerate(self._messages):
            if message.id == message_id or str(message.id) == str(message_id):
                return index
        raise MessageNotFound(str(message_id))

    def get(self, message_id: MessageId | str) -> Message:
        return self._messages[self.index_of(message_id)].snapshot()

    def history(self) -> list[dict[str, str]]:
        """The log as {role, content} pairs for the relay."""
        return [m.to_turn() for m in self._messages]

    # Commands

    def add_user_message(self, text: str) -> Message:
        message = Message.user(text)
        self._messages.append(message)
        return message.snapshot()

    def add_assistant_message(
        self,
        text: str,
        reasoning: Optional[str] = None,
        tools: Optional[list[ToolInvocation]] = None,
    ) -> Message:
        """Append a complete (non-streaming) assistant message."""
        message = Message.assistant(text, reasoning=reasoning, tools=tools)
        self._messages.append(message)
        return message.snapshot()

    def begin_assistant_message(self) -> Message:
        """
        Append an empty assistant placeholder and make it the active message.

        Raises:
            InvalidStateTransition: If another message is still active
        """
        if self._active_id is not None:
            raise InvalidStateTransition(
                "Cannot start a new assistant message while another is streaming",
                current_state="streaming",
                attempted_state="streaming",
            )
        message = Message.assistant()
        self._messages.append(message)
        self._active_id = message.id
        return message.snapshot()

    def append_content(self, message_id: MessageId, text: str) -> Message:
        """
        Grow the active message by one fragment.

        Raises:
            InvalidStateTransition: If ``message_id`` is not the active message
        """
        message = self._require_active(message_id)
        message.content += text
        return message.snapshot()

    def replace_content(self, message_id: MessageId, text: str) -> Message:
        """Overwrite the active message's content."""
        message = self._require_active(message_id)
        message.content = text
        return message.snapshot()

    def finish(self, message_id: Optional[MessageId] = None) -> None:
        """Freeze the active message. A stale ``message_id`` is ignored."""
        if message_id is None or message_id == self._active_id:
            self._active_id = None

    def truncate_from(self, message_id: MessageId | str) -> list[Message]:
        """
        Drop a message and everything after it.

        Returns:
            The removed messages

        Raises:
            MessageNotFound: If no message has this id
            InvalidStateTransition: If a message is still streaming
        """
        if self._active_id is not None:
            raise InvalidStateTransition(
                "Cannot truncate the conversation while a message is streaming",
                current_state="streaming",
                attempted_state="idle",
            )
        index = self.index_of(message_id)
        removed = self._messages[index:]
        del self._messages[index:]
        return removed

    # Private methods

    def _require_active(self, message_id: MessageId) -> Message:
        if self._active_id is None or message_id != self._active_id:
            raise InvalidStateTransition(
                f"Message {message_id} is not the active streaming message",
                current_state="idle" if self._active_id is None else "streaming",
                attempted_state="streaming",
            )
        return self._messages[self.index_of(message_id)]

    def __repr__(self) -> str:
        return f"ConversationLog(messages={len(self._messages)}, active={self._active_id})"
