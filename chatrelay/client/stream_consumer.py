"""
Client stream consumer.

Posts the conversation history to the relay, reads the line-framed reply as
it arrives and grows the active assistant message one fragment at a time.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..domain.conversation_log import ConversationLog
from ..domain.message import Message
from ..domain.message_id import MessageId
from ..exceptions import ParseError, ReadError
from ..infrastructure.config import ClientConfig
from ..infrastructure.logging import LoggerAdapter
from ..schemas.events import ContentEvent, DoneEvent, parse_wire_line

logger = logging.getLogger(__name__)

READ_ERROR_MESSAGE = "Sorry, I encountered an error while processing your request."


@dataclass
class StreamSession:
    """
    State of one send or regenerate round trip.

    Attributes:
        message_id: The assistant message receiving fragments, once the relay accepted the request
        completed: The read loop has ended
        errored: The read loop ended because of a failure
        received_content: At least one fragment was appended
        saw_done: The terminal sentinel was observed
        fragments: Number of fragments appended
    """

    message_id: Optional[MessageId] = None
    completed: bool = False
    errored: bool = False
    received_content: bool = False
    saw_done: bool = False
    fragments: int = 0


class StreamListener(Protocol):
    """Receives progress from StreamConsumer.consume()."""

    def on_first_content(self, session: StreamSession) -> None: ...

    def on_message_updated(self, message: Message) -> None: ...

    def on_stream_complete(self, session: StreamSession) -> None: ...


def create_http_client(config: ClientConfig) -> httpx.AsyncClient:
    """
    Build the HTTP client used to reach the relay.

    Reads have no timeout of their own; the relay bounds the response duration.
    """
    # trust_env=False to avoid proxy issues with local relays
    return httpx.AsyncClient(
        base_url=config.server_url,
        timeout=httpx.Timeout(timeout=None, connect=config.connect_timeout),
        trust_env=False,
    )


class StreamConsumer:
    """
    Reads relay streams into a ConversationLog.

    Example:
        async with create_http_client(ClientConfig.from_env()) as http:
            consumer = StreamConsumer(http)
            session = await consumer.consume(log, log.history(), listener)
    """

    def __init__(self, http_client: httpx.AsyncClient, chat_path: str = "/api/chat"):
        self._http = http_client
        self._chat_path = chat_path

    async def consume(
        self,
        log: ConversationLog,
        history: List[Dict[str, Any]],
        listener: StreamListener,
    ) -> StreamSession:
        """
        Run one request/response round trip.

        The listener's ``on_stream_complete`` is called exactly once, on every
        exit path, after the active message has been frozen.
        """
        session = StreamSession()
        try:
            async with self._http.stream(
                "POST", self._chat_path, json={"messages": history}
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise ReadError(
                        f"Relay returned {response.status_code}: {_error_details(response)}"
                    )

                placeholder = log.begin_assistant_message()
                session.message_id = placeholder.id
                listener.on_message_updated(placeholder)

                session_log = LoggerAdapter(logger, {"message_id": str(placeholder.id)})
                async for line in response.aiter_lines():
                    self._handle_line(line, session, log, listener, session_log)

                if not session.saw_done:
                    session_log.warning("Relay stream ended without a terminal sentinel")
        except (httpx.HTTPError, ReadError) as e:
            logger.error("Error reading relay stream: %s", e)
            session.errored = True
            self._surface_error(session, log, listener)
        finally:
            if session.message_id is not None:
                log.finish(session.message_id)
            session.completed = True
            listener.on_stream_complete(session)

        logger.info(
            "Stream session finished: %d fragments, errored=%s",
            session.fragments,
            session.errored,
        )
        return session

    def _handle_line(
        self,
        line: str,
        session: StreamSession,
        log: ConversationLog,
        listener: StreamListener,
        session_log: logging.LoggerAdapter,
    ) -> None:
        try:
            event = parse_wire_line(line)
        except ParseError as e:
            session_log.debug("Ignoring malformed wire line: %s", e.line)
            return

        if isinstance(event, DoneEvent):
            session.saw_done = True
        elif isinstance(event, ContentEvent):
            updated = log.append_content(session.message_id, event.content)
            session.fragments += 1
            if not session.received_content:
                session.received_content = True
                listener.on_first_content(session)
            listener.on_message_updated(updated)

    def _surface_error(
        self, session: StreamSession, log: ConversationLog, listener: StreamListener
    ) -> None:
        """Make the failure visible as an assistant message."""
        if session.message_id is None:
            listener.on_message_updated(log.add_assistant_message(READ_ERROR_MESSAGE))
            return

        if not log.get(session.message_id).content:
            listener.on_message_updated(log.replace_content(session.message_id, READ_ERROR_MESSAGE))
            return

        # Partial output stays as it is
        log.finish(session.message_id)
        listener.on_message_updated(log.add_assistant_message(READ_ERROR_MESSAGE))


def _error_details(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("details") or body.get("error") or body)
    return str(body)
