"""
Error handling module for the calculator MCP server.

This module provides a structured way to handle and report errors across the
protocol engine and its transports. Two families of errors exist:

- JSON-RPC errors, identified by a fixed numeric ``ErrorCode`` and carried
  inside the response envelope.
- Transport errors (bad headers, wrong verb, invalid session), reported with a
  raw HTTP status outside the envelope.
"""
from enum import IntEnum
from typing import Optional, Dict, Any
import logging
from fastapi import status

# Re-export all error-related classes and functions
__all__ = [
    # Error codes
    'ErrorCode',
    'HTTP_STATUS_BY_ERROR_CODE',
    'status_for_error',

    # Transport errors
    'TransportError',
    'BadRequestError',
    'UnauthorizedError',
    'MethodNotAllowedError',
    'ShutdownError',

    # Utility functions
    'log_error',
    'setup_error_handling',
    'RequestIDMiddleware',

    # Tracing
    'setup_tracing',
    'get_tracer',
    'instrument_fastapi',

    # Utils
    'ErrorHandlingConfig',
    'setup_app',
    'trace_function',
]


class ErrorCode(IntEnum):
    """JSON-RPC error codes used on the wire. These values must not change."""
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


HTTP_STATUS_BY_ERROR_CODE: Dict[int, int] = {
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.METHOD_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_PARAMS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for_error(code: Optional[int]) -> int:
    """Map a JSON-RPC error code to an HTTP status. ``None`` means success."""
    if code is None:
        return status.HTTP_200_OK
    return HTTP_STATUS_BY_ERROR_CODE.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)


class TransportError(Exception):
    """Base exception for failures reported as a bare HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


# Common transport error types for easy reuse
class BadRequestError(TransportError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class UnauthorizedError(TransportError):
    def __init__(self, message: str = "Invalid or expired session"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class MethodNotAllowedError(TransportError):
    def __init__(self, method: str):
        super().__init__("Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED, {"method": method})


class ShutdownError(Exception):
    """Raised when a transport does not drain within its shutdown deadline."""

    def __init__(self, transport: str, timeout: float):
        self.transport = transport
        self.timeout = timeout
        super().__init__(f"{transport} transport did not shut down within {timeout:.1f}s")


def log_error(
    error: Exception,
    logger: logging.Logger,
    request_id: str = "",
    level: int = logging.ERROR,
    extra: Optional[Dict[str, Any]] = None
) -> None:
    """
    Helper function to log errors with structured context.

    Args:
        error: The exception to log
        logger: Logger instance to use
        request_id: Optional request ID for correlation
        level: Log level (default: ERROR)
        extra: Additional context to include in the log
    """
    extra = extra or {}
    if request_id:
        extra["request_id"] = request_id

    if isinstance(error, TransportError):
        extra.update({
            "status_code": error.status_code,
            **error.details
        })
    else:
        extra.update({
            "error_type": error.__class__.__name__,
            "error_message": str(error)
        })

    logger.log(level, str(error), extra=extra, exc_info=level >= logging.ERROR)


# Submodules import the names above, so they are loaded last
from .tracing import setup_tracing, get_tracer, instrument_fastapi  # noqa: E402
from .middleware import setup_error_handling, RequestIDMiddleware  # noqa: E402
from .utils import ErrorHandlingConfig, setup_app, trace_function  # noqa: E402
