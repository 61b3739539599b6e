"""
Configuration management for chatrelay.

Provider settings and client settings are driven by environment variables
rather than hardcoded per request.

Example .env file:
    OPENROUTER_API_KEY=sk-or-...
    CHATRELAY_MODEL=moonshotai/kimi-k2:free
    CHATRELAY_MAX_DURATION=30

Example usage:
    from chatrelay.infrastructure import RelayConfig

    config = RelayConfig.from_env()
    app = create_chat_app(config=config)
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "moonshotai/kimi-k2:free"
DEFAULT_APP_URL = "http://localhost:3000"
DEFAULT_APP_TITLE = "AI Chat App"
DEFAULT_MAX_DURATION = 30.0
DEFAULT_SERVER_URL = "http://localhost:8000"


class EnvVars:
    """Environment variable names used by chatrelay."""

    # Provider
    API_KEY = "OPENROUTER_API_KEY"
    BASE_URL = "CHATRELAY_BASE_URL"
    MODEL = "CHATRELAY_MODEL"
    APP_URL = "CHATRELAY_APP_URL"
    APP_TITLE = "CHATRELAY_APP_TITLE"

    # Relay
    MAX_DURATION = "CHATRELAY_MAX_DURATION"
    HOST = "HOST"
    PORT = "PORT"

    # Client
    SERVER_URL = "CHATRELAY_SERVER_URL"
    CONNECT_TIMEOUT = "CHATRELAY_CONNECT_TIMEOUT"

    # Logging
    LOG_LEVEL = "LOG_LEVEL"
    LOG_FORMAT = "LOG_FORMAT"


def get_env(key: str, default: Any = None, cast: type = str) -> Any:
    """
    Read one chatrelay setting from the environment.

    Surrounding whitespace is stripped and a blank value counts as unset, so an
    empty `OPENROUTER_API_KEY=` line in a .env file leaves the key missing.
    Numbers that fail to parse are logged and replaced by ``default``.
    """
    raw = os.getenv(key)
    value = raw.strip() if raw is not None else ""
    if not value:
        return default

    if cast is bool:
        return value.lower() in ("true", "1", "yes", "on")
    if cast not in (int, float):
        return value

    try:
        return cast(value)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a valid %s, using %r", key, raw, cast.__name__, default)
        return default


@dataclass(frozen=True)
class RelayConfig:
    """
    Configuration for the relay server and its upstream provider.

    Attributes:
        api_key: Provider credential; may be None until a request is made
        base_url: OpenAI-compatible provider endpoint
        model: Model identifier sent with every completion request
        app_url: Value of the HTTP-Referer attribution header
        app_title: Value of the X-Title attribution header
        max_duration: Ceiling in seconds for a single streamed response
        host: Bind address for the server
        port: Bind port for the server
        extra: Additional keyword arguments for the provider client
    """

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    app_url: str = DEFAULT_APP_URL
    app_title: str = DEFAULT_APP_TITLE
    max_duration: float = DEFAULT_MAX_DURATION
    host: str = "0.0.0.0"
    port: int = 8000
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def default_headers(self) -> dict[str, str]:
        return {"HTTP-Referer": self.app_url, "X-Title": self.app_title}

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Load relay configuration from environment variables."""
        return cls(
            api_key=get_env(EnvVars.API_KEY),
            base_url=get_env(EnvVars.BASE_URL, DEFAULT_BASE_URL),
            model=get_env(EnvVars.MODEL, DEFAULT_MODEL),
            app_url=get_env(EnvVars.APP_URL, DEFAULT_APP_URL),
            app_title=get_env(EnvVars.APP_TITLE, DEFAULT_APP_TITLE),
            max_duration=get_env(EnvVars.MAX_DURATION, DEFAULT_MAX_DURATION, cast=float),
            host=get_env(EnvVars.HOST, "0.0.0.0"),
            port=get_env(EnvVars.PORT, 8000, cast=int),
        )

    def with_overrides(self, **kwargs: Any) -> "RelayConfig":
        """
        Create a new config with overrides.

        Args:
            **kwargs: Values to override

        Returns:
            New RelayConfig with overrides applied
        """
        extra = {**self.extra, **kwargs.pop("extra", {})}
        return replace(self, extra=extra, **kwargs)


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the chat client talking to a relay server."""

    server_url: str = DEFAULT_SERVER_URL
    chat_path: str = "/api/chat"
    connect_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load client configuration from environment variables."""
        return cls(
            server_url=get_env(EnvVars.SERVER_URL, DEFAULT_SERVER_URL),
            connect_timeout=get_env(EnvVars.CONNECT_TIMEOUT, 10.0, cast=float),
        )

    def with_overrides(self, **kwargs: Any) -> "ClientConfig":
        return replace(self, **kwargs)
