"""Error types shared by the relay server and the chat client."""


class ChatRelayError(Exception):
    """Base exception for all chatrelay errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ChatRelayError):
    """Raised when a chat request body is malformed."""

    def __init__(self, message: str, status_code: int = 400, details: dict | None = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class UpstreamError(ChatRelayError):
    """
    Raised when the model provider stream fails.

    ``kind`` is one of ``network``, ``authentication``, ``framing``,
    ``timeout`` or ``unknown``.
    """

    def __init__(self, message: str, kind: str = "unknown"):
        super().__init__(message, details={"kind": kind})
        self.kind = kind


class TransportError(ChatRelayError):
    """Raised when the relay cannot be set up before streaming begins."""


class ParseError(ChatRelayError):
    """Raised for a wire line that cannot be decoded."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Cannot parse wire line: {reason}", details={"line": line})
        self.line = line


class ReadError(ChatRelayError):
    """Raised when the client cannot read the relay stream."""


class InvalidStateTransition(ChatRelayError):
    """Raised when the conversation log is mutated out of order."""

    def __init__(
        self, message: str, current_state: str | None = None, attempted_state: str | None = None
    ):
        super().__init__(
            message,
            details={
                "current_state": current_state,
                "attempted_state": attempted_state,
            },
        )
        self.current_state = current_state
        self.attempted_state = attempted_state


class MessageNotFound(ChatRelayError):
    """Raised when a message id is not present in the conversation log."""

    def __init__(self, message_id: str):
        super().__init__(f"Message not found: {message_id}", details={"message_id": message_id})
        self.message_id = message_id
