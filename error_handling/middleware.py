"""
Error handling middleware for FastAPI applications.

Transport errors are rendered as plain-text responses with their HTTP status,
outside the JSON-RPC envelope. The request ID middleware is pure ASGI so it
never buffers long-lived SSE responses.
"""
import logging
import uuid
from fastapi import Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from . import TransportError, log_error

logger = logging.getLogger("mcp_server.error_handling")


class RequestIDMiddleware:
    """Echo the caller's ``X-Request-ID`` or assign a fresh one."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get("x-request-id") or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
            await send(message)

        await self.app(scope, receive, send_with_request_id)


def _request_id(request: Request) -> str:
    return request.scope.get("state", {}).get("request_id", "")


def setup_error_handling(app) -> None:
    """Register exception handlers on a FastAPI application."""

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError) -> PlainTextResponse:
        """Handle TransportError exceptions."""
        log_error(
            exc,
            logger,
            request_id=_request_id(request),
            level=logging.WARNING,
            extra={
                "path": request.url.path,
                "method": request.method,
            }
        )
        return PlainTextResponse(
            exc.message + "\n",
            status_code=exc.status_code,
            headers={"Cache-Control": "no-store"},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=exc,
            extra={
                "request_id": _request_id(request),
                "path": request.url.path,
                "method": request.method,
            }
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "message": "An unexpected error occurred",
                    "exception_type": exc.__class__.__name__,
                }
            },
            headers={"Cache-Control": "no-store"},
        )
