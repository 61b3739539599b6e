"""Tests for the relay encoder (chatrelay.relay.encoder)."""

import asyncio

import pytest

from chatrelay.exceptions import UpstreamError
from chatrelay.relay.encoder import NO_RESPONSE_MESSAGE, STREAM_ERROR_MESSAGE, RelayEncoder
from chatrelay.schemas.events import DONE_LINE, ContentEvent

# =============================================================================
# Helpers
# =============================================================================


class ScriptedFragments:
    """Async iterator over fixed fragments that can fail or stall and records closing."""

    def __init__(self, *fragments, error=None, stall_after=None):
        self.fragments = list(fragments)
        self.error = error
        self.stall_after = stall_after
        self.closed = False
        self._gen = self._run()

    async def _run(self):
        try:
            for index, fragment in enumerate(self.fragments):
                if self.stall_after is not None and index >= self.stall_after:
                    await asyncio.sleep(10)
                yield fragment
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True

    def __aiter__(self):
        return self

    async def __anext__(self):
        return await self._gen.__anext__()

    async def aclose(self):
        await self._gen.aclose()


async def collect(encoder: RelayEncoder, source) -> list[bytes]:
    return [chunk async for chunk in encoder.encode(source)]


def content(text: str) -> bytes:
    return ContentEvent(content=text).encode()


# =============================================================================
# Normal streaming
# =============================================================================


class TestNormalStream:
    @pytest.mark.asyncio
    async def test_fragments_become_content_events_then_done(self):
        chunks = await collect(RelayEncoder(), ScriptedFragments("Hel", "lo!"))

        assert chunks == [
            b'data: {"content":"Hel"}\n\n',
            b'data: {"content":"lo!"}\n\n',
            b"data: [DONE]\n\n",
        ]

    @pytest.mark.asyncio
    async def test_empty_fragments_are_skipped(self):
        chunks = await collect(RelayEncoder(), ScriptedFragments("", "Hi", "", "!"))
        assert chunks == [content("Hi"), content("!"), DONE_LINE]

    @pytest.mark.asyncio
    async def test_upstream_is_closed_when_finished(self):
        source = ScriptedFragments("a", "b")
        await collect(RelayEncoder(), source)
        assert source.closed


# =============================================================================
# Recovery paths
# =============================================================================


class TestRecovery:
    @pytest.mark.asyncio
    async def test_no_fragments_emits_fallback(self):
        chunks = await collect(RelayEncoder(), ScriptedFragments())
        assert chunks == [content(NO_RESPONSE_MESSAGE), DONE_LINE]

    @pytest.mark.asyncio
    async def test_only_empty_fragments_emits_fallback(self):
        chunks = await collect(RelayEncoder(), ScriptedFragments("", ""))
        assert chunks == [content(NO_RESPONSE_MESSAGE), DONE_LINE]

    @pytest.mark.asyncio
    async def test_midstream_upstream_error_keeps_partial_output(self):
        source = ScriptedFragments("Hel", error=UpstreamError("reset", kind="network"))
        chunks = await collect(RelayEncoder(), source)
        assert chunks == [content("Hel"), content(STREAM_ERROR_MESSAGE), DONE_LINE]

    @pytest.mark.asyncio
    async def test_immediate_upstream_error_emits_error_not_fallback(self):
        source = ScriptedFragments(error=UpstreamError("bad key", kind="authentication"))
        chunks = await collect(RelayEncoder(), source)
        assert chunks == [content(STREAM_ERROR_MESSAGE), DONE_LINE]

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_recovered(self):
        source = ScriptedFragments("x", error=RuntimeError("bug"))
        chunks = await collect(RelayEncoder(), source)
        assert chunks == [content("x"), content(STREAM_ERROR_MESSAGE), DONE_LINE]

    @pytest.mark.asyncio
    async def test_max_duration_ends_stream_with_error(self):
        source = ScriptedFragments("Hel", "lo", stall_after=1)
        chunks = await collect(RelayEncoder(max_duration=0.05), source)

        assert chunks == [content("Hel"), content(STREAM_ERROR_MESSAGE), DONE_LINE]
        assert source.closed


# =============================================================================
# Terminal sentinel
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "source",
    [
        lambda: ScriptedFragments(),
        lambda: ScriptedFragments("one"),
        lambda: ScriptedFragments(*["w"] * 50),
        lambda: ScriptedFragments("a", error=UpstreamError("boom")),
        lambda: ScriptedFragments(error=ValueError("bad chunk")),
    ],
)
async def test_done_is_emitted_exactly_once_and_last(source):
    chunks = await collect(RelayEncoder(max_duration=5), source())
    assert chunks.count(DONE_LINE) == 1
    assert chunks[-1] == DONE_LINE
