"""
Server utilities for running the chat relay.

Example:
    from chatrelay.infrastructure import RelayConfig
    from chatrelay.server import serve

    serve(RelayConfig.from_env().with_overrides(port=8000))

Example - With custom routes:
    from fastapi import APIRouter
    from chatrelay.server import create_app

    router = APIRouter()

    @router.get("/api/models")
    async def models():
        return {"models": ["moonshotai/kimi-k2:free"]}

    app = create_app(additional_routers=[router])
"""

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from .infrastructure.config import RelayConfig
from .infrastructure.logging import setup_logging

if TYPE_CHECKING:
    from fastapi import APIRouter, FastAPI

    from .chat_server import CompletionClientFactory

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[RelayConfig] = None,
    client_factory: Optional["CompletionClientFactory"] = None,
    additional_routers: Sequence["APIRouter"] | None = None,
) -> "FastAPI":
    """
    Create the FastAPI application without starting the server.

    Args:
        config: Relay configuration (defaults to RelayConfig.from_env())
        client_factory: Builds the upstream completion client per request
        additional_routers: Optional APIRouter instances to include

    Returns:
        FastAPI application instance
    """
    from .chat_server import create_chat_app

    app = create_chat_app(config=config, client_factory=client_factory)

    if additional_routers:
        for router in additional_routers:
            app.include_router(router)

    return app


def serve(
    config: Optional[RelayConfig] = None,
    reload: bool = False,
    log_level: str = "info",
    additional_routers: Sequence["APIRouter"] | None = None,
) -> None:
    """
    Start the relay server.

    Endpoints:
        GET  /health    - Health check
        POST /api/chat  - Streaming chat (text/event-stream)

    Note:
        This function blocks until the server is stopped (Ctrl+C).
        For programmatic control, use create_app() instead.
    """
    import uvicorn

    config = config or RelayConfig.from_env()
    setup_logging(level=log_level)

    app = create_app(config=config, additional_routers=additional_routers)

    logger.info(f"Starting chat relay at http://{config.host}:{config.port}")
    logger.info(f"  GET  http://{config.host}:{config.port}/health")
    logger.info(f"  POST http://{config.host}:{config.port}/api/chat")
    logger.info(f"  Model: {config.model} via {config.base_url}")
    if not config.api_key:
        logger.warning("No provider API key configured; requests will fail upstream")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        reload=reload,
        log_level=log_level,
    )
