"""CompletionClient port - interface for upstream model providers."""

from typing import Any, AsyncIterator, Dict, List, Protocol, runtime_checkable


@runtime_checkable
class CompletionClient(Protocol):
    """
    Outbound port for streaming completion providers.

    Implementations:
        - OpenAICompletionClient: OpenAI-compatible APIs (OpenRouter by default)
        - FakeCompletionClient: Scripted fragments for tests

    Example:
        class EchoClient(CompletionClient):
            async def stream(self, messages):
                yield messages[-1]["content"]
    """

    def stream(self, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
        """
        Stream a completion for the conversation history.

        The returned iterator is lazy, finite and non-restartable. Each item
        is a possibly empty slice of the reply; concatenating the items in
        order reconstructs the full reply.

        Args:
            messages: Ordered, non-empty list of {"role", "content"} dicts

        Raises:
            UpstreamError: At any point after zero or more fragments
        """
        ...
