"""Descriptive statistics tool."""
import math
import statistics
from typing import Any, Dict, List

from .base import ToolError, require_number, require_numbers, require_str

STATISTICS_OPERATIONS = ["mean", "median", "mode", "std_dev", "variance", "percentile"]

STATISTICS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "data": {
            "type": "array",
            "items": {"type": "number"},
            "minItems": 1,
        },
        "operation": {
            "type": "string",
            "enum": STATISTICS_OPERATIONS,
        },
        "percentile": {
            "type": "number",
            "minimum": 0,
            "maximum": 100,
        },
    },
    "required": ["data", "operation"],
}


def percentile(data: List[float], rank: float) -> float:
    """Linear interpolation between closest ranks."""
    ordered = sorted(data)
    if len(ordered) == 1:
        return ordered[0]
    position = (rank / 100) * (len(ordered) - 1)
    lower = math.floor(position)
    upper = math.ceil(position)
    weight = position - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * weight


def compute(data: List[float], operation: str, arguments: Dict[str, Any]) -> Any:
    if operation == "mean":
        return statistics.fmean(data)
    if operation == "median":
        return statistics.median(data)
    if operation == "mode":
        # every value tied for the highest frequency, ascending
        return sorted(statistics.multimode(data))
    if operation == "std_dev":
        return statistics.pstdev(data)
    if operation == "variance":
        return statistics.pvariance(data)

    rank = require_number(arguments, "percentile")
    if not 0 <= rank <= 100:
        raise ToolError("'percentile' must be between 0 and 100")
    return percentile(data, rank)


def statistics_tool(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Run one statistical operation over ``data``."""
    data = require_numbers(arguments, "data", min_items=1)
    operation = require_str(arguments, "operation", STATISTICS_OPERATIONS)
    return {"result": compute(data, operation, arguments), "count": len(data)}
