"""
Conversation state machine.

Owns the message log and the idle/loading/streaming status, and routes both
submit and regenerate through the same streaming pipeline.

States:
    IDLE      - accepts new input
    LOADING   - request sent, no content yet
    STREAMING - content arriving

Example:
    async with create_http_client(ClientConfig.from_env()) as http:
        conversation = Conversation(StreamConsumer(http))
        conversation.subscribe(my_observer)
        await conversation.submit("Explain quantum computing")
"""

import logging
from enum import Enum
from typing import Optional

from ..domain.conversation_log import ConversationLog
from ..domain.message import Message
from ..domain.message_id import MessageId
from ..exceptions import MessageNotFound
from .jokes import JokeLookup, JokeResult, detect_joke_topic, joke_reply
from .stream_consumer import StreamConsumer, StreamSession

logger = logging.getLogger(__name__)

PREDEFINED_SUGGESTIONS = [
    "Tell me a programming joke",
    "Tell me an animal joke",
    "Tell me a general joke",
    "Explain quantum computing",
    "Write a Python function",
    "Help me debug this code",
]


class ChatStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    STREAMING = "streaming"


class ConversationObserver:
    """
    Presentation-side hooks. Subclass and override what you need.

    Observers only ever receive copies of messages.
    """

    def message_updated(self, message: Message) -> None:
        pass

    def messages_removed(self, messages: list[Message]) -> None:
        pass

    def status_changed(self, status: ChatStatus) -> None:
        pass


class Conversation:
    """
    Single-conversation state machine.

    Submit and regenerate are admitted only in IDLE; the check and the move
    to LOADING happen before the first suspension point, so a second call
    made while a turn is in flight is rejected without side effects.
    """

    def __init__(
        self,
        consumer: StreamConsumer,
        joke_lookup: Optional[JokeLookup] = None,
        log: Optional[ConversationLog] = None,
    ) -> None:
        self._consumer = consumer
        self._joke_lookup = joke_lookup
        self._log = log if log is not None else ConversationLog()
        self._status = ChatStatus.IDLE
        self._input = ""
        self._observers: list[ConversationObserver] = []

    # Properties

    @property
    def status(self) -> ChatStatus:
        return self._status

    @property
    def is_idle(self) -> bool:
        return self._status == ChatStatus.IDLE

    @property
    def messages(self) -> list[Message]:
        return self._log.messages

    @property
    def input_text(self) -> str:
        return self._input

    # Input

    def set_input(self, text: str) -> None:
        self._input = text

    def select_suggestion(self, suggestion: str) -> None:
        self._input = suggestion

    def subscribe(self, observer: ConversationObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: ConversationObserver) -> None:
        self._observers.remove(observer)

    # Commands

    async def submit(self, text: Optional[str] = None) -> bool:
        """
        Send a user message, defaulting to the current input draft.

        Returns:
            False if the conversation is busy or the text is blank
        """
        text = self._input if text is None else text
        if not self.is_idle or not text.strip():
            return False

        self._publish(self._log.add_user_message(text))
        self._input = ""
        self._set_status(ChatStatus.LOADING)

        topic = detect_joke_topic(text) if self._joke_lookup is not None else None
        if topic is not None and await self._answer_joke(topic):
            return True

        await self._run_pipeline()
        return True

    async def regenerate(self, message_id: MessageId | str) -> bool:
        """
        Discard an assistant reply and everything after it, then ask again.

        Returns:
            False if busy, or if the message is unknown, not an assistant
            reply, or the first message in the log
        """
        if not self.is_idle:
            return False

        try:
            index = self._log.index_of(message_id)
        except MessageNotFound:
            logger.warning("Cannot regenerate unknown message %s", message_id)
            return False

        if index == 0 or not self._log.get(message_id).is_assistant_message:
            return False

        removed = self._log.truncate_from(message_id)
        for observer in self._observers:
            observer.messages_removed([m.snapshot() for m in removed])
        self._set_status(ChatStatus.LOADING)

        await self._run_pipeline()
        return True

    def record_feedback(self, message_id: MessageId | str, positive: bool) -> None:
        """Thumbs up/down on a message. Only logged."""
        self._log.index_of(message_id)
        logger.info("Thumbs %s for message: %s", "up" if positive else "down", message_id)

    # StreamListener

    def on_first_content(self, session: StreamSession) -> None:
        self._set_status(ChatStatus.STREAMING)

    def on_message_updated(self, message: Message) -> None:
        self._publish(message)

    def on_stream_complete(self, session: StreamSession) -> None:
        self._set_status(ChatStatus.IDLE)

    # Private methods

    async def _run_pipeline(self) -> StreamSession:
        return await self._consumer.consume(self._log, self._log.history(), self)

    async def _answer_joke(self, topic: str) -> bool:
        try:
            result = await self._joke_lookup(topic)
            if not isinstance(result, JokeResult):
                result = JokeResult.model_validate(result)
        except Exception as e:
            logger.error("Error generating joke, falling back to chat: %s", e, exc_info=True)
            return False

        try:
            content, reasoning, tool = joke_reply(topic, result)
            self._publish(self._log.add_assistant_message(content, reasoning=reasoning, tools=[tool]))
        finally:
            self._set_status(ChatStatus.IDLE)
        return True

    def _publish(self, message: Message) -> None:
        for observer in self._observers:
            observer.message_updated(message)

    def _set_status(self, status: ChatStatus) -> None:
        if status == self._status:
            return
        logger.debug("Conversation status %s -> %s", self._status.value, status.value)
        self._status = status
        for observer in self._observers:
            observer.status_changed(status)
