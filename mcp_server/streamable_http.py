"""
MCP Streamable HTTP transport.

A single ``/mcp`` endpoint serving both verbs:

- POST: one JSON-RPC request. The response is plain JSON, or a single SSE
  ``message`` event when the client accepts ``text/event-stream`` and the
  request is a ``tools/call``.
- GET: opens a long-lived SSE stream. A session is created when the client
  does not present one; the stream then carries a ``connection`` event and a
  ``heartbeat`` every ``heartbeat_interval`` seconds until the client goes
  away or the transport shuts down.

Every request must carry ``MCP-Protocol-Version``. A presented
``Mcp-Session-Id`` must name a live session.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import StreamingResponse

from error_handling import (
    BadRequestError,
    ErrorHandlingConfig,
    MethodNotAllowedError,
    UnauthorizedError,
    setup_app,
)
from .cors import CORSMiddleware
from .http_app import mcp_json_response
from .protocol import MCPServer
from .runner import UvicornTransport
from .sessions import DEFAULT_REAP_INTERVAL, DEFAULT_SESSION_TIMEOUT, SessionReaper, SessionStore
from .sse import SSE_HEADERS, SSE_MEDIA_TYPE, format_event
from .types import MCPRequest, MCPResponse, parse_request

logger = logging.getLogger("mcp_server.streamable_http")

PROTOCOL_VERSION_HEADER = "MCP-Protocol-Version"
SESSION_ID_HEADER = "Mcp-Session-Id"
JSON_MEDIA_TYPE = "application/json"

STREAMABLE_ALLOWED_HEADERS = ("Content-Type", "Accept", PROTOCOL_VERSION_HEADER, SESSION_ID_HEADER)
HEARTBEAT_INTERVAL = 30.0


@dataclass
class StreamableHTTPConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    session_timeout: float = DEFAULT_SESSION_TIMEOUT
    max_connections: Optional[int] = 100
    cors_enabled: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    idle_timeout: float = 120.0
    heartbeat_interval: float = HEARTBEAT_INTERVAL
    reap_interval: float = DEFAULT_REAP_INTERVAL


def should_stream(request: MCPRequest) -> bool:
    """Only tool calls are delivered over SSE."""
    return request.method == "tools/call"


class StreamableHTTPTransport(UvicornTransport):
    """MCP-compliant streamable HTTP transport with session management."""

    name = "streamable-http"

    def __init__(
        self,
        server: MCPServer,
        config: Optional[StreamableHTTPConfig] = None,
        error_config: Optional[ErrorHandlingConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.server = server
        self.config = config or StreamableHTTPConfig()
        store_kwargs = {"clock": clock} if clock is not None else {}
        self.sessions = SessionStore(self.config.session_timeout, **store_kwargs)
        self.reaper = SessionReaper(self.sessions, self.config.reap_interval)
        self._closing = asyncio.Event()
        super().__init__(
            self._create_app(error_config),
            host=self.config.host,
            port=self.config.port,
            idle_timeout=self.config.idle_timeout,
            max_connections=self.config.max_connections,
        )

    def _create_app(self, error_config: Optional[ErrorHandlingConfig]) -> FastAPI:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Run the session reaper for the lifetime of the application."""
            await self.reaper.start()
            yield
            self.begin_shutdown()
            await self.reaper.stop()

        app = FastAPI(title="Calculator MCP Server (Streamable HTTP)", lifespan=lifespan)
        app.state.transport = self
        setup_app(app, error_config)

        app.add_api_route(
            "/mcp",
            self.handle_mcp,
            methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
        )

        app.add_middleware(
            CORSMiddleware,
            allowed_origins=self.config.cors_origins,
            allowed_headers=STREAMABLE_ALLOWED_HEADERS,
            enabled=self.config.cors_enabled,
        )
        return app

    @property
    def closing(self) -> bool:
        return self._closing.is_set()

    def begin_shutdown(self) -> None:
        """Ask every open SSE stream to finish."""
        if not self._closing.is_set():
            logger.info("Closing open SSE streams")
            self._closing.set()

    async def handle_mcp(self, request: Request):
        """Handle MCP requests according to the streamable HTTP rules."""
        if not request.headers.get(PROTOCOL_VERSION_HEADER):
            raise BadRequestError(f"{PROTOCOL_VERSION_HEADER} header required")

        session_id = request.headers.get(SESSION_ID_HEADER, "")
        if session_id and not self.sessions.validate(session_id):
            raise UnauthorizedError("Invalid or expired session")

        if request.method == "POST":
            return await self._handle_post(request, session_id)
        if request.method == "GET":
            return await self._handle_get(request, session_id)
        raise MethodNotAllowedError(request.method)

    async def _handle_post(self, request: Request, session_id: str):
        accept = request.headers.get("accept", "")
        if JSON_MEDIA_TYPE not in accept and SSE_MEDIA_TYPE not in accept:
            raise BadRequestError(
                f"Accept header must include {JSON_MEDIA_TYPE} or {SSE_MEDIA_TYPE}"
            )

        body = await request.body()
        mcp_request, error_response = parse_request(body)
        if mcp_request is None:
            return mcp_json_response(error_response)

        response = self.server.handle_request(mcp_request)

        if SSE_MEDIA_TYPE in accept and should_stream(mcp_request):
            return self._sse_response(response, session_id)
        return mcp_json_response(response)

    async def _handle_get(self, request: Request, session_id: str):
        accept = request.headers.get("accept", "")
        if SSE_MEDIA_TYPE not in accept:
            raise BadRequestError(
                f"Accept header must include {SSE_MEDIA_TYPE} for GET requests"
            )

        if not session_id:
            session_id = self.sessions.create()

        headers = {**SSE_HEADERS, SESSION_ID_HEADER: session_id}
        return StreamingResponse(
            self.event_stream(session_id, request.is_disconnected),
            media_type=SSE_MEDIA_TYPE,
            headers=headers,
        )

    def _sse_response(self, response: MCPResponse, session_id: str) -> StreamingResponse:
        headers = dict(SSE_HEADERS)
        if session_id:
            headers[SESSION_ID_HEADER] = session_id

        async def single_event() -> AsyncIterator[str]:
            yield format_event("message", response.to_json())

        return StreamingResponse(single_event(), media_type=SSE_MEDIA_TYPE, headers=headers)

    async def event_stream(
        self,
        session_id: str,
        is_disconnected: Optional[Callable] = None,
    ) -> AsyncIterator[str]:
        """
        The GET stream: a connection event, then heartbeats until cancelled.

        Waits on either the next heartbeat tick or the transport's shutdown
        event; a client disconnect is checked before every heartbeat and also
        surfaces as a send failure that closes this generator.
        """
        logger.debug(f"SSE stream opened for session {session_id}")
        try:
            yield format_event("connection", {"type": "connected", "session_id": session_id})

            while not self._closing.is_set():
                try:
                    await asyncio.wait_for(self._closing.wait(), timeout=self.config.heartbeat_interval)
                except asyncio.TimeoutError:
                    pass
                else:
                    break

                if is_disconnected is not None and await is_disconnected():
                    break
                yield format_event("heartbeat", {"type": "ping"})
        finally:
            logger.debug(f"SSE stream closed for session {session_id}")
