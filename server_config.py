"""
Server configuration.

Values come from environment variables (a ``.env`` file is loaded first when
present), validated by a pydantic model. Keyword overrides win over the
environment, which is how the CLI flags are applied.
"""
import json
import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from mcp_server.http_app import HTTPConfig
from mcp_server.streamable_http import StreamableHTTPConfig

TRANSPORTS = ("stdio", "http", "streamable")

ENV_VARS = {
    "transport": "MCP_TRANSPORT",
    "host": "MCP_HOST",
    "port": "MCP_PORT",
    "cors_enabled": "MCP_CORS_ENABLED",
    "cors_origins": "MCP_CORS_ORIGINS",
    "read_timeout": "MCP_READ_TIMEOUT",
    "write_timeout": "MCP_WRITE_TIMEOUT",
    "idle_timeout": "MCP_IDLE_TIMEOUT",
    "session_timeout": "MCP_SESSION_TIMEOUT",
    "max_connections": "MCP_MAX_CONNECTIONS",
    "shutdown_timeout": "MCP_SHUTDOWN_TIMEOUT",
    "log_level": "LOG_LEVEL",
    "environment": "ENV",
    "otlp_endpoint": "OTEL_EXPORTER_OTLP_ENDPOINT",
    "enable_tracing": "ENABLE_TRACING",
}


class ConfigError(ValueError):
    """Raised when the configuration is invalid."""


class ServerConfig(BaseModel):
    transport: str = "stdio"
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    cors_enabled: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    read_timeout: float = Field(default=30.0, gt=0)
    write_timeout: float = Field(default=30.0, gt=0)
    idle_timeout: float = Field(default=120.0, gt=0)
    session_timeout: float = Field(default=300.0, gt=0)
    max_connections: int = Field(default=100, gt=0)
    shutdown_timeout: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"
    environment: str = "development"
    otlp_endpoint: Optional[str] = None
    enable_tracing: bool = False

    @field_validator("transport")
    @classmethod
    def _known_transport(cls, value: str) -> str:
        value = value.lower()
        if value not in TRANSPORTS:
            raise ValueError(f"unknown transport '{value}', expected one of: {', '.join(TRANSPORTS)}")
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level '{value}'")
        return value

    def to_http_config(self) -> HTTPConfig:
        return HTTPConfig(
            host=self.host,
            port=self.port,
            cors_enabled=self.cors_enabled,
            cors_origins=list(self.cors_origins),
            read_timeout=self.read_timeout,
            write_timeout=self.write_timeout,
            idle_timeout=self.idle_timeout,
            max_connections=self.max_connections,
        )

    def to_streamable_config(self) -> StreamableHTTPConfig:
        return StreamableHTTPConfig(
            host=self.host,
            port=self.port,
            session_timeout=self.session_timeout,
            max_connections=self.max_connections,
            cors_enabled=self.cors_enabled,
            cors_origins=list(self.cors_origins),
            idle_timeout=self.idle_timeout,
        )


def get_env_or_default(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable or return default."""
    value = os.environ.get(key)
    return value if value not in (None, "") else default


def load_config(env_file: Optional[str] = None, **overrides: Any) -> ServerConfig:
    """
    Build a validated ``ServerConfig``.

    Args:
        env_file: Optional path to a dotenv file (defaults to ``.env`` lookup)
        **overrides: Field values taking precedence over the environment;
            ``None`` values are ignored

    Raises:
        ConfigError: If any value fails validation
    """
    load_dotenv(env_file)

    values: Dict[str, Any] = {}
    for field_name, env_var in ENV_VARS.items():
        value = get_env_or_default(env_var)
        if value is not None:
            values[field_name] = value
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ServerConfig(**values)
    except (ValidationError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
