"""
CORS middleware shared by the HTTP transports.

Reflects the request ``Origin`` when it matches the allow-list (or the list
contains ``*``) and answers every ``OPTIONS`` request with an empty 200.
Written as a pure ASGI app so SSE responses stream through unbuffered.
"""
from typing import Iterable, Sequence

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

ALLOWED_METHODS = "GET, POST, OPTIONS"
MAX_AGE = "86400"


class CORSMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        allowed_origins: Iterable[str] = ("*",),
        allowed_headers: Sequence[str] = ("Content-Type", "Authorization"),
        enabled: bool = True,
    ):
        self.app = app
        self.allowed_origins = list(allowed_origins)
        self.allowed_headers = ", ".join(allowed_headers)
        self.enabled = enabled

    def is_origin_allowed(self, origin: str) -> bool:
        return any(allowed == "*" or allowed == origin for allowed in self.allowed_origins)

    def cors_headers(self, origin: str) -> dict:
        headers = {
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": self.allowed_headers,
            "Access-Control-Max-Age": MAX_AGE,
        }
        if origin and self.is_origin_allowed(origin):
            headers["Access-Control-Allow-Origin"] = origin
        return headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.enabled:
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin", "")
        cors_headers = self.cors_headers(origin)

        if scope["method"] == "OPTIONS":
            await send({
                "type": "http.response.start",
                "status": 200,
                "headers": [
                    (name.lower().encode("latin-1"), value.encode("latin-1"))
                    for name, value in cors_headers.items()
                ] + [(b"content-length", b"0")],
            })
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in cors_headers.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)
