"""Basic arithmetic tool."""
from functools import reduce
from typing import Any, Dict

from .base import ToolError, optional_int, require_numbers, require_str

BASIC_OPERATIONS = ["add", "subtract", "multiply", "divide"]

BASIC_MATH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "operation": {
            "type": "string",
            "enum": BASIC_OPERATIONS,
        },
        "operands": {
            "type": "array",
            "items": {"type": "number"},
            "minItems": 2,
        },
        "precision": {
            "type": "integer",
            "minimum": 0,
            "maximum": 15,
            "default": 2,
        },
    },
    "required": ["operation", "operands"],
}


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise ToolError("division by zero")
    return left / right


_OPERATIONS = {
    "add": lambda left, right: left + right,
    "subtract": lambda left, right: left - right,
    "multiply": lambda left, right: left * right,
    "divide": _divide,
}


def basic_math(arguments: Dict[str, Any]) -> float:
    """Fold the operands left to right with the requested operation."""
    operation = require_str(arguments, "operation", BASIC_OPERATIONS)
    operands = require_numbers(arguments, "operands", min_items=2)
    precision = optional_int(arguments, "precision", default=2, minimum=0, maximum=15)

    result = reduce(_OPERATIONS[operation], operands)
    return round(result, precision)
