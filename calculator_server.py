"""
Calculator MCP Server entry point.

Runs the calculator tools over one of three transports:
  1) stdio       ->  `python calculator_server.py --transport stdio`
  2) HTTP        ->  `python calculator_server.py --transport http --port 8080`
  3) streamable  ->  `python calculator_server.py --transport streamable`

Settings not given on the command line come from the environment
(see server_config.py); a `.env` file is honoured.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from calculator_tools import register_calculator_tools
from error_handling import ErrorHandlingConfig, ShutdownError
from error_handling.utils import LOG_FORMAT
from mcp_server import HTTPTransport, MCPServer, StdioTransport, StreamableHTTPTransport
from server_config import ConfigError, ServerConfig, TRANSPORTS, load_config

SERVICE_NAME = "calculator-server"

logger = logging.getLogger(SERVICE_NAME)


def configure_logging(config: ServerConfig) -> None:
    """Logs go to stderr so stdout stays reserved for protocol frames in stdio mode."""
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def build_server() -> MCPServer:
    server = MCPServer()
    register_calculator_tools(server)
    return server


def error_config_for(config: ServerConfig) -> ErrorHandlingConfig:
    return ErrorHandlingConfig(
        service_name=SERVICE_NAME,
        environment=config.environment,
        otlp_endpoint=config.otlp_endpoint,
        enable_tracing=config.enable_tracing,
        log_level=config.log_level,
    )


async def serve_http(transport, shutdown_timeout: float) -> None:
    """Serve until uvicorn exits, bounding the drain on cancellation."""
    try:
        await transport.serve()
    except asyncio.CancelledError:
        await transport.shutdown(shutdown_timeout)
        raise


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Calculator MCP server (stdio, HTTP or streamable HTTP).")
    p.add_argument("--transport", choices=TRANSPORTS, default=None,
                   help="Transport to serve (default: MCP_TRANSPORT or stdio).")
    p.add_argument("--host", default=None, help="HTTP host (HTTP transports only).")
    p.add_argument("--port", type=int, default=None, help="HTTP port (HTTP transports only).")
    p.add_argument("--env-file", default=None, help="Path to a dotenv file.")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.env_file, transport=args.transport, host=args.host, port=args.port)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    configure_logging(config)
    logger.info(f"Starting {SERVICE_NAME} with transport={config.transport}")

    server = build_server()

    if config.transport == "stdio":
        StdioTransport(server).run()
        return 0

    if config.transport == "http":
        transport = HTTPTransport(server, config.to_http_config(), error_config_for(config))
    else:
        transport = StreamableHTTPTransport(server, config.to_streamable_config(), error_config_for(config))

    try:
        asyncio.run(serve_http(transport, config.shutdown_timeout))
    except ShutdownError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
