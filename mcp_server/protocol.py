"""
MCP Dispatch Engine

Resolves the JSON-RPC ``method`` of each request to one of ``initialize``,
``tools/list`` or ``tools/call`` and produces a response. Every failure is
converted to a structured JSON-RPC error; nothing raised by a tool handler
escapes ``handle_request``.
"""
import copy
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from error_handling import ErrorCode, get_tracer
from .registry import ToolRegistry
from .types import (
    CallToolParams,
    CallToolResult,
    ContentBlock,
    ListToolsResult,
    MCPRequest,
    MCPResponse,
    ToolHandler,
    canonical_json,
)

logger = logging.getLogger("mcp_server.protocol")

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "calculator-server"
SERVER_VERSION = "1.0.0"

_CAPABILITIES: Dict[str, Any] = {
    "protocolVersion": PROTOCOL_VERSION,
    "capabilities": {
        "tools": {},
    },
    "serverInfo": {
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
    },
}


class MCPServer:
    """
    JSON-RPC dispatcher over a tool registry.

    The server is stateless across requests; the registry is populated before
    any transport starts serving.
    """

    def __init__(self, registry: Optional[ToolRegistry] = None):
        self.registry = registry if registry is not None else ToolRegistry()

    def register_tool(
        self,
        name: str,
        description: str,
        input_schema: Optional[Dict[str, Any]],
        handler: ToolHandler,
    ) -> None:
        self.registry.register(name, description, input_schema, handler)
        logger.info(f"Registered tool: {name}")

    def handle_request(self, request: MCPRequest) -> MCPResponse:
        method = request.method

        if method == "initialize":
            return MCPResponse(id=request.id, result=copy.deepcopy(_CAPABILITIES))

        if method == "tools/list":
            listing = ListToolsResult(tools=self.registry.list())
            return MCPResponse(id=request.id, result=listing.to_dict())

        if method == "tools/call":
            return self._call_tool(request)

        logger.debug(f"Unknown method requested: {method!r}")
        return MCPResponse.failure(request.id, ErrorCode.METHOD_NOT_FOUND, "Method not found", method)

    def _call_tool(self, request: MCPRequest) -> MCPResponse:
        try:
            params = CallToolParams.model_validate(request.params)
        except ValidationError as e:
            return MCPResponse.failure(request.id, ErrorCode.INVALID_PARAMS, "Invalid parameters", str(e))

        handler = self.registry.get(params.name)
        if handler is None:
            return MCPResponse.failure(request.id, ErrorCode.METHOD_NOT_FOUND, "Tool not found", params.name)

        arguments = params.arguments or {}

        tracer = get_tracer(__name__)
        with tracer.start_as_current_span(f"mcp.tool.{params.name}") as span:
            span.set_attribute("mcp.tool.name", params.name)
            span.set_attribute("mcp.tool.arguments", str(arguments))

            try:
                result = handler(arguments)
            except Exception as e:
                span.set_attribute("mcp.tool.status", "error")
                span.set_attribute("mcp.tool.error", str(e))
                logger.warning(f"Tool call failed: {params.name}: {e}")
                return MCPResponse.failure(request.id, ErrorCode.INTERNAL_ERROR, "Tool execution failed", str(e))

            try:
                text = canonical_json(result)
            except (TypeError, ValueError) as e:
                span.set_attribute("mcp.tool.status", "error")
                span.set_attribute("mcp.tool.error", str(e))
                logger.warning(f"Tool result not serializable: {params.name}: {e}")
                return MCPResponse.failure(request.id, ErrorCode.INTERNAL_ERROR, "Tool execution failed", str(e))

            span.set_attribute("mcp.tool.status", "success")

        content = CallToolResult(content=[ContentBlock(type="text", text=text)])
        return MCPResponse(id=request.id, result=content.to_dict())
