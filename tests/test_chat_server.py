"""Tests for the /api/chat relay endpoint (chatrelay.chat_server)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chatrelay.chat_server import create_chat_app, parse_chat_request
from chatrelay.exceptions import UpstreamError, ValidationError
from chatrelay.infrastructure.config import RelayConfig
from chatrelay.relay.encoder import NO_RESPONSE_MESSAGE, STREAM_ERROR_MESSAGE
from chatrelay.testing import FakeCompletionClient

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

VALID_BODY = {"messages": [{"role": "user", "content": "hi"}]}


def make_client(fake: FakeCompletionClient, **overrides) -> TestClient:
    config = RelayConfig(api_key="test-key").with_overrides(**overrides)
    return TestClient(create_chat_app(config, client_factory=fake.factory))


@pytest.fixture
def fake() -> FakeCompletionClient:
    return FakeCompletionClient().will_stream("Hel", "lo!")


@pytest.fixture
def client(fake: FakeCompletionClient) -> TestClient:
    return make_client(fake)


# ---------------------------------------------------------------------------
# Streaming responses
# ---------------------------------------------------------------------------


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_streams_fragments_then_done(client: TestClient, fake: FakeCompletionClient):
    response = client.post("/api/chat", json=VALID_BODY)

    assert response.status_code == 200
    assert response.text == (
        'data: {"content":"Hel"}\n\n'
        'data: {"content":"lo!"}\n\n'
        "data: [DONE]\n\n"
    )
    assert fake.last_messages == [{"role": "user", "content": "hi"}]


def test_stream_framing_headers(client: TestClient):
    response = client.post("/api/chat", json=VALID_BODY)

    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["connection"] == "keep-alive"


def test_history_is_forwarded_in_order(client: TestClient, fake: FakeCompletionClient):
    history = [
        {"role": "user", "content": "one"},
        {"role": "assistant", "content": "two"},
        {"role": "user", "content": "three"},
    ]
    client.post("/api/chat", json={"messages": history})
    assert fake.last_messages == history


def test_empty_upstream_gets_fallback():
    client = make_client(FakeCompletionClient())
    response = client.post("/api/chat", json=VALID_BODY)

    assert response.status_code == 200
    assert response.text == f'data: {{"content":"{NO_RESPONSE_MESSAGE}"}}\n\ndata: [DONE]\n\n'


def test_upstream_failure_is_recovered_in_stream():
    fake = FakeCompletionClient().will_stream("Hel").will_fail(UpstreamError("reset", kind="network"))
    response = make_client(fake).post("/api/chat", json=VALID_BODY)

    assert response.status_code == 200
    lines = [line for line in response.text.split("\n") if line]
    assert lines == [
        'data: {"content":"Hel"}',
        f'data: {{"content":"{STREAM_ERROR_MESSAGE}"}}',
        "data: [DONE]",
    ]


def test_max_duration_terminates_stream():
    fake = FakeCompletionClient().will_stream("a", "b").with_delay(0.5)
    response = make_client(fake, max_duration=0.05).post("/api/chat", json=VALID_BODY)

    assert response.status_code == 200
    assert STREAM_ERROR_MESSAGE in response.text
    assert response.text.endswith("data: [DONE]\n\n")
    assert response.text.count("[DONE]") == 1


def test_missing_api_key_is_an_upstream_failure_not_a_startup_failure():
    app = create_chat_app(RelayConfig(api_key=None))
    response = TestClient(app).post("/api/chat", json=VALID_BODY)

    assert response.status_code == 200
    assert response.text == f'data: {{"content":"{STREAM_ERROR_MESSAGE}"}}\n\ndata: [DONE]\n\n'


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


def test_missing_messages_field(client: TestClient, fake: FakeCompletionClient):
    response = client.post("/api/chat", json={"foo": "bar"})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Invalid request body",
        "details": "'messages' field missing from request body",
    }
    assert "[DONE]" not in response.text
    assert fake.stream_count == 0


@pytest.mark.parametrize("messages", ["hello", {"role": "user"}, None, []])
def test_messages_must_be_a_non_empty_list(client: TestClient, messages):
    response = client.post("/api/chat", json={"messages": messages})

    assert response.status_code == 400
    assert set(response.json()) == {"error", "details"}


def test_invalid_role_is_unprocessable(client: TestClient):
    response = client.post("/api/chat", json={"messages": [{"role": "system", "content": "x"}]})

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Invalid request body"
    assert "role" in body["details"]


def test_invalid_json_body(client: TestClient):
    response = client.post(
        "/api/chat", content=b"not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["details"] == "Request body must be valid JSON"


# ---------------------------------------------------------------------------
# Pre-stream failures
# ---------------------------------------------------------------------------


def test_client_construction_failure_returns_structured_500():
    def broken_factory(config):
        raise RuntimeError("boom")

    app = create_chat_app(RelayConfig(api_key="k"), client_factory=broken_factory)
    response = TestClient(app).post("/api/chat", json=VALID_BODY)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process chat request", "details": "boom"}


def test_invalid_provider_config_returns_structured_500():
    app = create_chat_app(RelayConfig(api_key="k", model=""))
    response = TestClient(app).post("/api/chat", json=VALID_BODY)

    assert response.status_code == 500
    assert response.json()["details"] == "A model identifier is required"


# ---------------------------------------------------------------------------
# parse_chat_request
# ---------------------------------------------------------------------------


class TestParseChatRequest:
    def test_extra_fields_are_dropped(self):
        request = parse_chat_request(
            {"messages": [{"role": "user", "content": "hi", "id": "1", "timestamp": "now"}]}
        )
        assert request.history() == [{"role": "user", "content": "hi"}]

    def test_non_object_body(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_chat_request(["not", "an", "object"])
        assert exc_info.value.status_code == 400

    def test_bad_element_is_422(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_chat_request({"messages": [{"role": "user"}]})
        assert exc_info.value.status_code == 422
