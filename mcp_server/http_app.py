"""
MCP HTTP Application Factory

Creates the plain (non-streaming) HTTP transport: a single JSON-RPC endpoint
plus convenience endpoints for monitoring.

Routes:
- POST /mcp     -> one JSON-RPC request, one JSON-RPC response
- GET  /health  -> liveness with timestamp and version
- GET  /tools   -> shortcut for ``tools/list``
- GET  /metrics -> server metadata and request counters
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from error_handling import (
    BadRequestError,
    ErrorHandlingConfig,
    MethodNotAllowedError,
    setup_app,
    status_for_error,
    trace_function,
)
from .cors import CORSMiddleware
from .protocol import MCPServer
from .runner import UvicornTransport
from .types import MCPRequest, MCPResponse, parse_request

logger = logging.getLogger("mcp_server.http")

HTTP_VERSION = "1.1.0"
HTTP_ALLOWED_HEADERS = ("Content-Type", "Authorization")


@dataclass
class HTTPConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    cors_enabled: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    read_timeout: float = 30.0
    write_timeout: float = 30.0
    idle_timeout: float = 120.0
    max_connections: Optional[int] = None


class RequestMetrics:
    """Counters for POST /mcp outcomes."""

    def __init__(self):
        self._lock = threading.Lock()
        self.total = 0
        self.success = 0
        self.errors = 0

    def record(self, ok: bool) -> None:
        with self._lock:
            self.total += 1
            if ok:
                self.success += 1
            else:
                self.errors += 1

    def to_dict(self) -> dict:
        with self._lock:
            return {"total": self.total, "success": self.success, "errors": self.errors}


def _uptime(started: float) -> str:
    return str(timedelta(seconds=int(time.monotonic() - started)))


def mcp_json_response(response: MCPResponse, status_code: Optional[int] = None, headers: Optional[dict] = None) -> JSONResponse:
    """Serialize a JSON-RPC response, mapping its error code to an HTTP status."""
    if status_code is None:
        status_code = status_for_error(response.error.code if response.error else None)
    return JSONResponse(content=response.to_dict(), status_code=status_code, headers=headers)


def create_http_app(
    server: MCPServer,
    config: Optional[HTTPConfig] = None,
    error_config: Optional[ErrorHandlingConfig] = None,
) -> FastAPI:
    """
    Build the plain HTTP transport application.

    Args:
        server: The dispatch engine handling every JSON-RPC request
        config: Listener and CORS configuration

    Returns:
        FastAPI application wrapped in the CORS middleware.
    """
    config = config or HTTPConfig()
    started = time.monotonic()
    start_time = datetime.now(timezone.utc)
    metrics = RequestMetrics()

    app = FastAPI(title="Calculator MCP Server (HTTP)", version=HTTP_VERSION)
    app.state.mcp_server = server
    app.state.metrics = metrics
    setup_app(app, error_config)

    @app.api_route("/mcp", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"])
    async def handle_mcp(request: Request):
        """Handle one JSON-RPC request."""
        if request.method != "POST":
            raise MethodNotAllowedError(request.method)

        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise BadRequestError("Content-Type must be application/json")

        body = await request.body()
        mcp_request, error_response = parse_request(body)
        if mcp_request is None:
            metrics.record(False)
            return mcp_json_response(error_response, status.HTTP_400_BAD_REQUEST)

        response = server.handle_request(mcp_request)
        metrics.record(response.error is None)
        return mcp_json_response(response)

    @app.get("/health")
    @trace_function(attributes={"component": "health"})
    async def health():
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "version": HTTP_VERSION,
            "uptime": _uptime(started),
        }

    @app.get("/tools")
    async def list_tools():
        """Convenience shortcut for tools/list."""
        response = server.handle_request(MCPRequest(id="tools-list", method="tools/list"))
        status_code = status.HTTP_200_OK if response.error is None else status.HTTP_500_INTERNAL_SERVER_ERROR
        return mcp_json_response(response, status_code)

    @app.get("/metrics")
    @trace_function(attributes={"component": "metrics"})
    async def get_metrics():
        """Server metadata and request counters."""
        return {
            "server": {
                "uptime": _uptime(started),
                "version": HTTP_VERSION,
                "transport": "http",
                "start_time": start_time.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "read_timeout": config.read_timeout,
                "write_timeout": config.write_timeout,
            },
            "requests": metrics.to_dict(),
        }

    app.add_middleware(
        CORSMiddleware,
        allowed_origins=config.cors_origins,
        allowed_headers=HTTP_ALLOWED_HEADERS,
        enabled=config.cors_enabled,
    )

    logger.info(f"Created MCP HTTP app with {len(server.registry)} tools")
    return app


class HTTPTransport(UvicornTransport):
    """Plain HTTP transport served by uvicorn."""

    name = "http"

    def __init__(self, server: MCPServer, config: Optional[HTTPConfig] = None,
                 error_config: Optional[ErrorHandlingConfig] = None):
        self.config = config or HTTPConfig()
        self.server = server
        super().__init__(
            create_http_app(server, self.config, error_config),
            host=self.config.host,
            port=self.config.port,
            idle_timeout=self.config.idle_timeout,
            max_connections=self.config.max_connections,
        )
