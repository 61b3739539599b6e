"""
Testing utilities for chatrelay.

Example:
    from chatrelay.testing import FakeCompletionClient

    fake = FakeCompletionClient().will_stream("Hel", "lo!")
    app = create_chat_app(RelayConfig(api_key="test"), client_factory=fake.factory)
"""

from .fakes import FakeCompletionClient, FakeJokeLookup, RecordingObserver, wire_transport

__all__ = [
    "FakeCompletionClient",
    "FakeJokeLookup",
    "RecordingObserver",
    "wire_transport",
]
