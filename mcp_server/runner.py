"""
uvicorn lifecycle shared by the HTTP transports.

``serve()`` runs until the server exits; ``shutdown(timeout)`` stops accepting
connections, lets in-flight requests drain, and force-closes whatever is left
once the deadline passes.
"""
import asyncio
import logging
from typing import Callable, Optional

import uvicorn

from error_handling import ShutdownError

logger = logging.getLogger("mcp_server.runner")


class _Server(uvicorn.Server):
    """uvicorn server that notifies its transport before exiting on a signal."""

    def __init__(self, config: uvicorn.Config, on_exit: Callable[[], None]):
        super().__init__(config)
        self._on_exit = on_exit

    def handle_exit(self, sig, frame) -> None:
        self._on_exit()
        super().handle_exit(sig, frame)


class UvicornTransport:
    """Base class for transports served by uvicorn."""

    name = "http"

    def __init__(self, app, host: str, port: int, idle_timeout: float = 120.0,
                 max_connections: Optional[int] = None):
        self.app = app
        self.host = host
        self.port = port
        self._uvicorn_config = uvicorn.Config(
            app,
            host=host,
            port=port,
            lifespan="on",
            timeout_keep_alive=int(idle_timeout),
            limit_concurrency=max_connections,
            log_config=None,
        )
        self._server: Optional[_Server] = None
        self._serve_task: Optional[asyncio.Task] = None

    @property
    def addr(self) -> str:
        return f"{self.host}:{self.port}"

    def begin_shutdown(self) -> None:
        """Hook for subclasses to release long-lived requests before draining."""

    async def serve(self) -> None:
        logger.info(f"Starting MCP {self.name} server on {self.addr}")
        self._server = _Server(self._uvicorn_config, on_exit=self.begin_shutdown)
        self._serve_task = asyncio.current_task()
        await self._server.serve()

    async def start(self) -> asyncio.Task:
        """Run ``serve()`` in the background and wait until it is listening."""
        task = asyncio.create_task(self.serve())
        while not (self._server and self._server.started):
            if task.done():
                task.result()
            await asyncio.sleep(0.05)
        self._serve_task = task
        return task

    async def shutdown(self, timeout: float = 10.0) -> None:
        """
        Gracefully stop the server.

        Raises:
            ShutdownError: If in-flight requests are still open after ``timeout``.
        """
        if self._server is None:
            return
        logger.info(f"Shutting down MCP {self.name} server...")
        self.begin_shutdown()
        self._server.should_exit = True

        task = self._serve_task
        if task is None or task is asyncio.current_task():
            return

        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            self._server.force_exit = True
            await task
            raise ShutdownError(self.name, timeout)
        task.result()
        logger.info(f"MCP {self.name} server stopped")
