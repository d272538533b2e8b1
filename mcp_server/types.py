"""
MCP protocol types.

JSON-RPC 2.0 envelopes and the tool metadata shapes exchanged over every
transport.
"""
import json
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from error_handling import ErrorCode

JSONRPC_VERSION = "2.0"

ToolHandler = Callable[[Dict[str, Any]], Any]


class MCPRequest(BaseModel):
    """A JSON-RPC request. ``id`` is echoed back verbatim and never interpreted."""
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    method: str = ""
    params: Any = None


class MCPError(BaseModel):
    code: ErrorCode
    message: str
    data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        error = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class MCPResponse(BaseModel):
    """A JSON-RPC response. Exactly one of ``result``/``error`` is set."""
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: Optional[MCPError] = None

    @classmethod
    def failure(cls, id: Any, code: ErrorCode, message: str, data: Any = None) -> "MCPResponse":
        return cls(id=id, error=MCPError(code=code, message=message, data=data))

    def to_dict(self) -> Dict[str, Any]:
        response = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            response["error"] = self.error.to_dict()
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str)


class Tool(BaseModel):
    """Static tool metadata. The input schema is documentation only."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ListToolsResult(BaseModel):
    tools: List[Tool]

    def to_dict(self) -> Dict[str, Any]:
        return {"tools": [tool.to_dict() for tool in self.tools]}


class CallToolParams(BaseModel):
    name: str = ""
    arguments: Optional[Dict[str, Any]] = None


class ContentBlock(BaseModel):
    type: str = "text"
    text: str


class CallToolResult(BaseModel):
    content: List[ContentBlock]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def _normalize_numbers(value: Any) -> Any:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _normalize_numbers(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_numbers(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """
    Compact, key-sorted JSON with integral floats written as integers.

    Raises:
        TypeError: If the value has keys that cannot be sorted together
        ValueError: On circular references or non-finite numbers
    """
    try:
        normalized = _normalize_numbers(value)
    except RecursionError:
        raise ValueError("Circular reference detected") from None
    return json.dumps(
        normalized,
        separators=(",", ":"),
        sort_keys=True,
        allow_nan=False,
        default=str,
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def strict_loads(raw: Any) -> Any:
    """``json.loads`` refusing ``NaN``, ``Infinity`` and overflowing numbers."""
    return json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)


def recover_request_id(raw: Any) -> Any:
    """Best-effort extraction of ``id`` from a payload that failed to parse."""
    try:
        payload = strict_loads(raw)
    except (TypeError, ValueError):
        return None
    if isinstance(payload, dict):
        return payload.get("id")
    return None


def parse_request(raw: Any, message: str = "Invalid JSON-RPC request") -> Tuple[Optional[MCPRequest], Optional[MCPResponse]]:
    """
    Decode raw bytes into an ``MCPRequest``.

    Returns ``(request, None)`` on success, or ``(None, error_response)`` with an
    ``INVALID_REQUEST`` error whose ``id`` is recovered from the raw payload
    when possible.
    """
    try:
        return MCPRequest.model_validate(strict_loads(raw)), None
    except (ValidationError, TypeError, ValueError) as e:
        error_response = MCPResponse.failure(
            recover_request_id(raw),
            ErrorCode.INVALID_REQUEST,
            message,
            str(e),
        )
        return None, error_response
