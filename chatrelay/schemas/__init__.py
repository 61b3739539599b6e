from .events import DONE_LINE, DONE_SENTINEL, ContentEvent, DoneEvent, WireEvent, parse_wire_line
from .messages import ChatRequest, ChatTurn, ErrorResponse

__all__ = [
    "DONE_LINE",
    "DONE_SENTINEL",
    "ContentEvent",
    "DoneEvent",
    "WireEvent",
    "parse_wire_line",
    "ChatRequest",
    "ChatTurn",
    "ErrorResponse",
]
