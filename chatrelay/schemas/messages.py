from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict


class ChatTurn(BaseModel):
    """One entry of the conversation history sent to the relay."""

    role: Literal["user", "assistant"]
    content: str

    model_config = ConfigDict(extra="ignore")


class ChatRequest(BaseModel):
    messages: List[ChatTurn]

    def history(self) -> List[Dict[str, Any]]:
        return [turn.model_dump() for turn in self.messages]


class ErrorResponse(BaseModel):
    error: str
    details: str
