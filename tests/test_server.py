"""Tests for app assembly (chatrelay.server)."""

from fastapi import APIRouter
from fastapi.testclient import TestClient

from chatrelay.infrastructure.config import RelayConfig
from chatrelay.server import create_app
from chatrelay.testing import FakeCompletionClient


def test_create_app_includes_additional_routers():
    router = APIRouter()

    @router.get("/api/models")
    async def models():
        return {"models": ["moonshotai/kimi-k2:free"]}

    app = create_app(RelayConfig(api_key="k"), additional_routers=[router])
    client = TestClient(app)

    assert client.get("/api/models").json() == {"models": ["moonshotai/kimi-k2:free"]}
    assert client.get("/health").status_code == 200


def test_create_app_uses_client_factory():
    fake = FakeCompletionClient().will_stream("ok")
    client = TestClient(create_app(RelayConfig(api_key="k"), client_factory=fake.factory))

    response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.text == 'data: {"content":"ok"}\n\ndata: [DONE]\n\n'
    assert fake.stream_count == 1
