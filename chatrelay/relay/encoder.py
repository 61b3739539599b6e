"""
Relay encoder: upstream fragments in, line-framed wire events out.

Every call to ``RelayEncoder.encode`` yields zero or more content events and
then exactly one ``data: [DONE]`` line, whether the upstream stream finished,
produced nothing, failed midway, or ran past the configured deadline.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from ..exceptions import UpstreamError
from ..schemas.events import DONE_LINE, ContentEvent

logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "No response from AI model. Please try again."
STREAM_ERROR_MESSAGE = "Error in streaming response."


class RelayEncoder:
    """
    Normalizes an upstream fragment stream into the relay wire protocol.

    Args:
        max_duration: Seconds after which the upstream stream is abandoned and
            treated as failed. None disables the ceiling.
    """

    def __init__(self, max_duration: Optional[float] = None):
        self.max_duration = max_duration

    async def encode(self, fragments: AsyncIterator[str]) -> AsyncIterator[bytes]:
        async for chunk in self._content_events(fragments):
            yield chunk
        yield DONE_LINE

    async def _content_events(self, fragments: AsyncIterator[str]) -> AsyncIterator[bytes]:
        """Yield content events; upstream failures end in one error event instead of raising."""
        has_content = False
        bounded = self._bounded(fragments)
        try:
            async for text in bounded:
                if text:
                    has_content = True
                    yield ContentEvent(content=text).encode()

            if not has_content:
                logger.warning("No content received from AI model")
                yield ContentEvent(content=NO_RESPONSE_MESSAGE).encode()
        except UpstreamError as e:
            logger.error("Stream error (%s): %s", e.kind, e.message)
            yield ContentEvent(content=STREAM_ERROR_MESSAGE).encode()
        except Exception as e:
            logger.error("Unexpected stream error: %s", str(e), exc_info=True)
            yield ContentEvent(content=STREAM_ERROR_MESSAGE).encode()
        finally:
            await bounded.aclose()
            aclose = getattr(fragments, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _bounded(self, fragments: AsyncIterator[str]) -> AsyncIterator[str]:
        """Re-yield fragments, raising UpstreamError once the deadline passes."""
        iterator = aiter(fragments)
        if self.max_duration is None:
            async for text in iterator:
                yield text
            return

        deadline = asyncio.get_running_loop().time() + self.max_duration
        while True:
            try:
                async with asyncio.timeout_at(deadline):
                    text = await anext(iterator)
            except StopAsyncIteration:
                return
            except TimeoutError as e:
                raise UpstreamError(
                    f"Response exceeded maximum duration of {self.max_duration} seconds",
                    kind="timeout",
                ) from e
            yield text
