from .base import CompletionClient
from .openai_client import OpenAICompletionClient, create_completion_client

__all__ = ["CompletionClient", "OpenAICompletionClient", "create_completion_client"]
