"""
Calculator Tools Module

Pure tool handlers exposed by the calculator MCP server:

- basic_math: add, subtract, multiply, divide
- statistics: mean, median, mode, std_dev, variance, percentile
- unit_conversion: length, weight, temperature, volume, area
- financial: interest, loan payments, ROI, present and future value
"""

from calculator_tools.base import ToolError
from calculator_tools.finance_tools import FINANCIAL_SCHEMA, financial
from calculator_tools.math_tools import BASIC_MATH_SCHEMA, basic_math
from calculator_tools.stats_tools import STATISTICS_SCHEMA, statistics_tool
from calculator_tools.unit_tools import UNIT_CONVERSION_SCHEMA, unit_conversion

__all__ = [
    "ToolError",
    "basic_math",
    "statistics_tool",
    "unit_conversion",
    "financial",
    "register_calculator_tools",
]


def register_calculator_tools(server) -> None:
    """Register every calculator tool on an ``MCPServer``."""
    server.register_tool(
        "basic_math",
        "Perform basic mathematical operations (add, subtract, multiply, divide)",
        BASIC_MATH_SCHEMA,
        basic_math,
    )
    server.register_tool(
        "statistics",
        "Perform statistical analysis on data sets",
        STATISTICS_SCHEMA,
        statistics_tool,
    )
    server.register_tool(
        "unit_conversion",
        "Convert between different units of measurement",
        UNIT_CONVERSION_SCHEMA,
        unit_conversion,
    )
    server.register_tool(
        "financial",
        "Perform financial calculations (interest, loans, ROI)",
        FINANCIAL_SCHEMA,
        financial,
    )
