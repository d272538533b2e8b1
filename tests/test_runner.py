"""Lifecycle tests against a real uvicorn listener on an ephemeral port."""
import asyncio

import httpx
import pytest
from fastapi import FastAPI

from error_handling import ShutdownError
from mcp_server import HTTPConfig, HTTPTransport, StreamableHTTPConfig, StreamableHTTPTransport
from mcp_server.runner import UvicornTransport


@pytest.mark.asyncio
async def test_streamable_start_and_shutdown(mcp_server, error_config):
    transport = StreamableHTTPTransport(
        mcp_server,
        StreamableHTTPConfig(port=0, heartbeat_interval=0.05, reap_interval=0.05),
        error_config,
    )

    task = await transport.start()
    assert transport.reaper.running
    assert not transport.closing

    await transport.shutdown(timeout=5.0)

    assert task.done()
    assert transport.closing
    assert not transport.reaper.running


@pytest.mark.asyncio
async def test_http_start_and_shutdown(mcp_server, error_config):
    transport = HTTPTransport(mcp_server, HTTPConfig(host="127.0.0.1", port=0), error_config)

    task = await transport.start()
    await transport.shutdown(timeout=5.0)

    assert task.done()


@pytest.mark.asyncio
async def test_shutdown_before_start_is_noop(mcp_server, error_config):
    transport = HTTPTransport(mcp_server, HTTPConfig(port=0), error_config)
    await transport.shutdown(timeout=1.0)


@pytest.mark.asyncio
async def test_shutdown_deadline_exceeded():
    entered = asyncio.Event()
    release = asyncio.Event()
    app = FastAPI()

    @app.get("/slow")
    async def slow():
        entered.set()
        await release.wait()
        return {"done": True}

    transport = UvicornTransport(app, host="127.0.0.1", port=0)
    task = await transport.start()
    port = transport._server.servers[0].sockets[0].getsockname()[1]

    client = httpx.AsyncClient()
    in_flight = asyncio.create_task(client.get(f"http://127.0.0.1:{port}/slow", timeout=10.0))
    try:
        await asyncio.wait_for(entered.wait(), timeout=5.0)

        with pytest.raises(ShutdownError) as exc_info:
            await transport.shutdown(timeout=0.2)

        assert exc_info.value.timeout == 0.2
        assert task.done()
    finally:
        release.set()
        in_flight.cancel()
        try:
            await in_flight
        except (asyncio.CancelledError, httpx.HTTPError):
            pass
        await client.aclose()
