"""
Pytest configuration and fixtures for the calculator MCP server tests.

Provides fixtures to:
1. Build a dispatch engine with the calculator tools registered
2. Create test clients for the plain and streamable HTTP apps
3. Drive session expiry with a controllable clock
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from calculator_tools import register_calculator_tools
from error_handling import ErrorHandlingConfig
from mcp_server import MCPServer, HTTPConfig, StreamableHTTPConfig, StreamableHTTPTransport, create_http_app


PROTOCOL_HEADERS = {"MCP-Protocol-Version": "2024-11-05"}


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def error_config():
    """Error handling without tracing exporters."""
    return ErrorHandlingConfig(enable_tracing=False, log_level="DEBUG")


@pytest.fixture
def mcp_server():
    """Dispatch engine with the calculator tools registered."""
    server = MCPServer()
    register_calculator_tools(server)
    return server


@pytest.fixture
def http_client(mcp_server, error_config):
    """Test client for the plain HTTP transport."""
    app = create_http_app(mcp_server, HTTPConfig(cors_origins=["*"]), error_config)
    return TestClient(app)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def streamable_transport(mcp_server, error_config, clock):
    """Streamable transport with a short heartbeat and a fake session clock."""
    config = StreamableHTTPConfig(session_timeout=300.0, heartbeat_interval=0.05, cors_origins=["*"])
    return StreamableHTTPTransport(mcp_server, config, error_config, clock=clock)


@pytest.fixture
def streamable_client(streamable_transport):
    """Test client for the streamable HTTP transport."""
    return TestClient(streamable_transport.app)


def tool_call(name, arguments=None, request_id=1):
    """Build a tools/call JSON-RPC request body."""
    params = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}
