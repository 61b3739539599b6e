from typing import Any, Callable, Dict, Optional
import json
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError as PydanticValidationError

from .exceptions import TransportError, ValidationError
from .infrastructure.config import RelayConfig
from .llm.base import CompletionClient
from .llm.openai_client import create_completion_client
from .relay.encoder import RelayEncoder
from .schemas.messages import ChatRequest, ErrorResponse

logger = logging.getLogger(__name__)

CompletionClientFactory = Callable[[RelayConfig], CompletionClient]

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def error_response(status_code: int, error: str, details: str) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def parse_chat_request(raw_body: Any) -> ChatRequest:
    """
    Validate a decoded request body.

    Raises:
        ValidationError: 400 when ``messages`` is missing, not a list or empty;
            422 when an element is not a valid chat turn
    """
    if not isinstance(raw_body, dict) or "messages" not in raw_body:
        raise ValidationError("'messages' field missing from request body")

    messages = raw_body["messages"]
    if not isinstance(messages, list):
        raise ValidationError("'messages' must be a list")
    if not messages:
        raise ValidationError("'messages' must contain at least one message")

    try:
        return ChatRequest.model_validate({"messages": messages})
    except PydanticValidationError as ve:
        raise ValidationError(str(ve), status_code=422) from ve


def create_chat_app(
    config: Optional[RelayConfig] = None,
    client_factory: Optional[CompletionClientFactory] = None,
) -> FastAPI:
    config = config or RelayConfig.from_env()
    client_factory = client_factory or create_completion_client

    app = FastAPI(title="Chat Relay Service", version="0.1.0")

    # ----- health check ------------------------------------------------------
    @app.get("/health", tags=["system"])
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    def _open_stream(chat_request: ChatRequest) -> StreamingResponse:
        """Build the upstream client and encoder; any failure here is a TransportError."""
        try:
            client = client_factory(config)
            encoder = RelayEncoder(max_duration=config.max_duration)
            body = encoder.encode(client.stream(chat_request.history()))
        except Exception as e:
            raise TransportError(str(e)) from e

        return StreamingResponse(
            body,
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    # ----- /api/chat endpoint ------------------------------------------------
    @app.post("/api/chat", tags=["chat"])
    async def chat(request: Request):
        """
        Streaming chat endpoint.

        Relays the model reply as ``data: {"content": ...}`` lines followed
        by ``data: [DONE]``.
        """
        try:
            raw_body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Rejected chat request with invalid JSON: %s", e)
            return error_response(400, "Invalid request body", "Request body must be valid JSON")

        logger.debug("Chat Request Body: %s", raw_body)

        try:
            chat_request = parse_chat_request(raw_body)
        except ValidationError as ve:
            logger.warning("Rejected chat request: %s", ve.message)
            return error_response(ve.status_code, "Invalid request body", ve.message)

        logger.info("Relaying chat request with %d messages", len(chat_request.messages))

        try:
            return _open_stream(chat_request)
        except TransportError as e:
            cause = e.__cause__ or e
            traceback_error = ''.join(traceback.format_exception(type(cause), cause, cause.__traceback__))
            logger.error("Error in chat API:\n%s", traceback_error)
            return error_response(500, "Failed to process chat request", e.message)

    return app
