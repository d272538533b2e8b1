"""Tool registry: tool name to handler plus static metadata."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .types import Tool, ToolHandler

logger = logging.getLogger("mcp_server.registry")


@dataclass(frozen=True)
class RegisteredTool:
    tool: Tool
    handler: ToolHandler


class ToolRegistry:
    """
    Mapping from tool name to handler and metadata.

    Registration is expected to finish before the server starts handling
    traffic. Registering a name twice replaces the earlier entry.
    """

    def __init__(self):
        self._tools: Dict[str, RegisteredTool] = {}

    def register(
        self,
        name: str,
        description: str,
        input_schema: Optional[Dict[str, Any]],
        handler: ToolHandler,
    ) -> None:
        if name in self._tools:
            logger.debug(f"Replacing registered tool: {name}")
        tool = Tool(name=name, description=description, input_schema=input_schema or {})
        self._tools[name] = RegisteredTool(tool=tool, handler=handler)

    def get(self, name: str) -> Optional[ToolHandler]:
        entry = self._tools.get(name)
        return entry.handler if entry else None

    def list(self) -> List[Tool]:
        return [entry.tool for entry in self._tools.values()]

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
