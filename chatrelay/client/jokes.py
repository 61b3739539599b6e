"""
Joke-request short circuit.

The joke lookup itself is an injected collaborator; this module only detects
joke requests and turns a lookup result into a finished assistant reply.
"""

from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from ..domain.message import ToolInvocation


class JokeResult(BaseModel):
    topic: str
    joke: str


JokeLookup = Callable[[str], Awaitable[JokeResult]]


def detect_joke_topic(text: str) -> Optional[str]:
    lower = text.lower()
    if "programming joke" in lower:
        return "programming"
    if "animal joke" in lower:
        return "animals"
    if "joke" in lower:
        return "general"
    return None


def joke_reply(topic: str, result: JokeResult) -> tuple[str, str, ToolInvocation]:
    """Content, reasoning note and tool record for a joke answer."""
    content = f'Here\'s a {result.topic} joke for you:\n\n"{result.joke}"'
    reasoning = f"I detected you wanted a {topic} joke, so I used my joke tool to find one for you."
    tool = ToolInvocation(
        type="joke-generator",
        name="get-random-joke",
        state="output-available",
        input={"topic": topic},
        output=result.model_dump(),
    )
    return content, reasoning, tool
