# Wire events for the line-framed relay stream

import json
from typing import Optional, Union

from pydantic import BaseModel

from ..exceptions import ParseError

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DONE_LINE = f"{DATA_PREFIX}{DONE_SENTINEL}\n\n".encode("utf-8")


class ContentEvent(BaseModel):
    """Streaming text fragment from the model"""
    content: str

    def encode(self) -> bytes:
        return f"{DATA_PREFIX}{self.model_dump_json()}\n\n".encode("utf-8")


class DoneEvent(BaseModel):
    """Terminal sentinel, no further events follow"""

    def encode(self) -> bytes:
        return DONE_LINE


WireEvent = Union[ContentEvent, DoneEvent]


def parse_wire_line(line: str) -> Optional[WireEvent]:
    """
    Decode one line of the relay stream.

    Returns None for blank lines and lines without the ``data: `` prefix, and
    for JSON payloads that carry no ``content`` string.

    Raises:
        ParseError: If the payload after the prefix is not valid JSON
    """
    line = line.strip("\r")
    if not line.strip() or not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX):]
    if payload == DONE_SENTINEL:
        return DoneEvent()

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(line, str(e)) from e

    if not isinstance(parsed, dict):
        return None
    content = parsed.get("content")
    if not isinstance(content, str) or not content:
        return None
    return ContentEvent(content=content)
