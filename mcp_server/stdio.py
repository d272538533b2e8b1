"""
MCP over standard input/output.

One JSON-RPC request per input line, one response per output line, strictly
in input order.
"""
import logging
import sys
from typing import Optional, TextIO

from .protocol import MCPServer
from .types import parse_request

logger = logging.getLogger("mcp_server.stdio")


class StdioTransport:
    """Sequential newline-delimited JSON-RPC loop."""

    def __init__(
        self,
        server: MCPServer,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
    ):
        self.server = server
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output_stream = output_stream if output_stream is not None else sys.stdout

    def run(self) -> None:
        """
        Serve until end of input.

        Returns cleanly on EOF. Errors raised while reading the input stream
        propagate to the caller.
        """
        logger.info("Serving MCP over stdio")
        handled = 0
        for line in self.input_stream:
            if not line.strip():
                continue

            request, response = parse_request(line, message="Parse error")
            if request is not None:
                response = self.server.handle_request(request)
            else:
                logger.warning(f"Discarding malformed request line: {response.error.data}")

            self._write(response.to_json())
            handled += 1

        logger.info(f"Input stream closed after {handled} requests")

    def _write(self, payload: str) -> None:
        self.output_stream.write(payload + "\n")
        self.output_stream.flush()
