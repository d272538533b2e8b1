"""
MCP Server Module

JSON-RPC dispatch engine for the Model Context Protocol and the transports
that expose it:

- stdio: newline-delimited JSON-RPC over standard input/output
- HTTP: single request/response endpoint plus health, tools and metrics
- Streamable HTTP: sessions and Server-Sent Events on a single endpoint
"""

from mcp_server.protocol import MCPServer, PROTOCOL_VERSION
from mcp_server.registry import ToolRegistry
from mcp_server.stdio import StdioTransport
from mcp_server.http_app import HTTPConfig, HTTPTransport, create_http_app
from mcp_server.streamable_http import StreamableHTTPConfig, StreamableHTTPTransport
from mcp_server.sessions import SessionStore, SessionReaper

__all__ = [
    "MCPServer",
    "PROTOCOL_VERSION",
    "ToolRegistry",
    "StdioTransport",
    "HTTPConfig",
    "HTTPTransport",
    "create_http_app",
    "StreamableHTTPConfig",
    "StreamableHTTPTransport",
    "SessionStore",
    "SessionReaper",
]
