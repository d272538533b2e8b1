"""
Base Calculator Tool Utilities

Provides shared functionality for all calculator tools including:
- The error type tools raise on bad input
- Argument coercion helpers
"""

import logging
import math
from numbers import Real
from typing import Any, Dict, List, Optional

logger = logging.getLogger("calculator_tools")


class ToolError(ValueError):
    """Raised by a tool when its arguments are invalid or it cannot compute a result."""


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def require_str(arguments: Dict[str, Any], key: str, choices: Optional[List[str]] = None) -> str:
    """Get a required string argument, optionally restricted to ``choices``."""
    value = arguments.get(key)
    if not isinstance(value, str) or not value:
        raise ToolError(f"'{key}' is required and must be a string")
    if choices is not None and value not in choices:
        raise ToolError(f"unsupported {key} '{value}', expected one of: {', '.join(choices)}")
    return value


def require_number(arguments: Dict[str, Any], key: str) -> float:
    """Get a required finite numeric argument."""
    value = arguments.get(key)
    if not _is_number(value) or not math.isfinite(value):
        raise ToolError(f"'{key}' is required and must be a number")
    return float(value)


def optional_number(arguments: Dict[str, Any], key: str, default: float, minimum: Optional[float] = None) -> float:
    """Get an optional finite numeric argument, at least ``minimum`` when given."""
    if arguments.get(key) is None:
        return float(default)
    value = require_number(arguments, key)
    if minimum is not None and value < minimum:
        raise ToolError(f"'{key}' must be at least {minimum:g}")
    return value


def require_numbers(arguments: Dict[str, Any], key: str, min_items: int = 1) -> List[float]:
    """Get a required list of finite numbers with at least ``min_items`` entries."""
    values = arguments.get(key)
    if not isinstance(values, list):
        raise ToolError(f"'{key}' is required and must be an array of numbers")
    if len(values) < min_items:
        raise ToolError(f"'{key}' must contain at least {min_items} numbers")
    if not all(_is_number(v) and math.isfinite(v) for v in values):
        raise ToolError(f"'{key}' must contain only numbers")
    return [float(v) for v in values]


def optional_int(arguments: Dict[str, Any], key: str, default: int, minimum: int, maximum: int) -> int:
    """Get an optional integer argument within ``[minimum, maximum]``."""
    value = arguments.get(key, default)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ToolError(f"'{key}' must be an integer")
    if not minimum <= value <= maximum:
        raise ToolError(f"'{key}' must be between {minimum} and {maximum}")
    return value
