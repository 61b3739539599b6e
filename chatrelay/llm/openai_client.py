"""
Upstream completion client for OpenAI-compatible providers.

The default configuration targets OpenRouter, which speaks the OpenAI chat
completions protocol and wants attribution headers on every request.
"""

import logging
import time
from typing import Any, AsyncIterator, Dict, List

import httpx
import openai
from openai import AsyncOpenAI

from ..exceptions import UpstreamError
from ..infrastructure.config import RelayConfig

logger = logging.getLogger(__name__)


def _error_kind(error: openai.OpenAIError) -> str:
    """Classify a provider error for logging and UpstreamError.kind."""
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return "authentication"
    if isinstance(error, openai.APITimeoutError):
        return "timeout"
    if isinstance(error, openai.APIConnectionError):
        return "network"
    if isinstance(error, openai.APIResponseValidationError):
        return "framing"
    return "unknown"


class OpenAICompletionClient:
    """
    Streams chat completions from an OpenAI-compatible API.

    A fresh AsyncOpenAI client is opened for each stream and closed when the
    stream is exhausted, fails, or is closed by the consumer.
    """

    def __init__(self, config: RelayConfig):
        if not config.model:
            raise ValueError("A model identifier is required")
        if not config.base_url:
            raise ValueError("A provider base URL is required")
        self._config = config

    @property
    def model(self) -> str:
        return self._config.model

    def _build_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            base_url=self._config.base_url,
            api_key=self._config.api_key,
            default_headers=self._config.default_headers,
            **self._config.extra,
        )

    async def stream(self, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
        if not messages:
            raise ValueError("Conversation history must not be empty")

        # Missing credentials surface per request, never at startup
        if not self._config.api_key:
            raise UpstreamError("Provider API key is not configured", kind="authentication")

        payload = [{"role": m["role"], "content": m["content"]} for m in messages]
        logger.info("Opening completion stream with model %s (%d messages)", self.model, len(payload))
        start = time.time()
        fragments = 0

        try:
            async with self._build_client() as client:
                completion = await client.chat.completions.create(
                    model=self.model,
                    messages=payload,
                    stream=True,
                )
                async for chunk in completion:
                    if not chunk.choices:
                        continue
                    delta = chunk.choices[0].delta
                    content = delta.content if delta is not None else None
                    fragments += 1
                    yield content or ""
        except openai.OpenAIError as e:
            kind = _error_kind(e)
            logger.error("Upstream %s error after %d fragments: %s", kind, fragments, e)
            raise UpstreamError(str(e), kind=kind) from e
        except httpx.HTTPError as e:
            logger.error("Upstream connection failed after %d fragments: %s", fragments, e)
            raise UpstreamError(str(e), kind="network") from e
        except ValueError as e:
            # Malformed JSON in the provider's event stream
            logger.error("Malformed upstream chunk after %d fragments: %s", fragments, e)
            raise UpstreamError(str(e), kind="framing") from e

        logger.info(
            "Completion stream finished in %.2f seconds (%d fragments)",
            time.time() - start,
            fragments,
        )


def create_completion_client(config: RelayConfig) -> OpenAICompletionClient:
    """Default client factory used by the relay endpoint."""
    return OpenAICompletionClient(config)
