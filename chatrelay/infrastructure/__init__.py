"""
Infrastructure Layer - Cross-cutting Concerns.

This layer contains infrastructure code that supports the application:
    - Configuration management
    - Logging setup
"""

from .config import ClientConfig, EnvVars, RelayConfig, get_env
from .logging import JsonFormatter, LoggerAdapter, setup_logging

__all__ = [
    "ClientConfig",
    "EnvVars",
    "RelayConfig",
    "get_env",
    "LoggerAdapter",
    "JsonFormatter",
    "setup_logging",
]
