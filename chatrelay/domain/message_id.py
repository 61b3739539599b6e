"""Strongly-typed, creation-ordered identifier for messages."""

import itertools
import uuid
from dataclasses import dataclass, field

_sequence = itertools.count(1)


@dataclass(frozen=True, order=True)
class MessageId:
    """
    Opaque message identifier.

    Ids compare by creation order within a process; ``value`` is the
    opaque token exposed to observers.
    """

    sequence: int
    value: str = field(compare=False)

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("MessageId cannot be empty")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"MessageId({self.value!r})"

    @classmethod
    def generate(cls) -> "MessageId":
        """Generate a new id, ordered after every id generated before it."""
        sequence = next(_sequence)
        return cls(sequence, f"msg-{sequence:08d}-{uuid.uuid4().hex[:8]}")
