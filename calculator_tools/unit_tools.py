"""Unit conversion tool."""
from typing import Any, Callable, Dict, Tuple

from .base import ToolError, require_number, require_str

UNIT_CATEGORIES = ["length", "weight", "temperature", "volume", "area"]

UNIT_CONVERSION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "value": {"type": "number"},
        "fromUnit": {"type": "string"},
        "toUnit": {"type": "string"},
        "category": {
            "type": "string",
            "enum": UNIT_CATEGORIES,
        },
    },
    "required": ["value", "fromUnit", "toUnit", "category"],
}

# Size of one unit expressed in the category's base unit (m, kg, l, m2)
LINEAR_UNITS: Dict[str, Dict[str, float]] = {
    "length": {
        "mm": 0.001,
        "cm": 0.01,
        "m": 1.0,
        "km": 1000.0,
        "in": 0.0254,
        "ft": 0.3048,
        "yd": 0.9144,
        "mi": 1609.344,
    },
    "weight": {
        "mg": 1e-6,
        "g": 0.001,
        "kg": 1.0,
        "t": 1000.0,
        "oz": 0.028349523125,
        "lb": 0.45359237,
    },
    "volume": {
        "ml": 0.001,
        "l": 1.0,
        "m3": 1000.0,
        "fl_oz": 0.0295735295625,
        "cup": 0.2365882365,
        "pt": 0.473176473,
        "qt": 0.946352946,
        "gal": 3.785411784,
    },
    "area": {
        "mm2": 1e-6,
        "cm2": 1e-4,
        "m2": 1.0,
        "ha": 1e4,
        "km2": 1e6,
        "in2": 0.00064516,
        "ft2": 0.09290304,
        "yd2": 0.83612736,
        "acre": 4046.8564224,
    },
}

# (to kelvin, from kelvin)
TEMPERATURE_UNITS: Dict[str, Tuple[Callable[[float], float], Callable[[float], float]]] = {
    "c": (lambda v: v + 273.15, lambda k: k - 273.15),
    "f": (lambda v: (v - 32) * 5 / 9 + 273.15, lambda k: (k - 273.15) * 9 / 5 + 32),
    "k": (lambda v: v, lambda k: k),
}

UNIT_ALIASES = {
    "meter": "m", "meters": "m", "kilometer": "km", "kilometers": "km",
    "centimeter": "cm", "centimeters": "cm", "millimeter": "mm", "millimeters": "mm",
    "inch": "in", "inches": "in", "foot": "ft", "feet": "ft",
    "yard": "yd", "yards": "yd", "mile": "mi", "miles": "mi",
    "gram": "g", "grams": "g", "kilogram": "kg", "kilograms": "kg",
    "milligram": "mg", "milligrams": "mg", "tonne": "t", "tonnes": "t",
    "ounce": "oz", "ounces": "oz", "pound": "lb", "pounds": "lb", "lbs": "lb",
    "liter": "l", "liters": "l", "litre": "l", "litres": "l",
    "milliliter": "ml", "milliliters": "ml", "gallon": "gal", "gallons": "gal",
    "quart": "qt", "quarts": "qt", "pint": "pt", "pints": "pt", "cups": "cup",
    "hectare": "ha", "hectares": "ha", "acres": "acre",
    "celsius": "c", "fahrenheit": "f", "kelvin": "k",
}


def _unit_key(unit: str) -> str:
    key = unit.strip().lower()
    return UNIT_ALIASES.get(key, key)


def _lookup(table: Dict[str, Any], category: str, unit: str) -> Any:
    try:
        return table[_unit_key(unit)]
    except KeyError:
        raise ToolError(f"unknown {category} unit '{unit}'") from None


def convert(value: float, from_unit: str, to_unit: str, category: str) -> float:
    if category == "temperature":
        to_kelvin, _ = _lookup(TEMPERATURE_UNITS, category, from_unit)
        _, from_kelvin = _lookup(TEMPERATURE_UNITS, category, to_unit)
        kelvin = to_kelvin(value)
        if kelvin < 0:
            raise ToolError("temperature below absolute zero")
        return from_kelvin(kelvin)

    units = LINEAR_UNITS[category]
    return value * _lookup(units, category, from_unit) / _lookup(units, category, to_unit)


def unit_conversion(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Convert ``value`` between two units of the same category."""
    value = require_number(arguments, "value")
    from_unit = require_str(arguments, "fromUnit")
    to_unit = require_str(arguments, "toUnit")
    category = require_str(arguments, "category", UNIT_CATEGORIES)

    result = convert(value, from_unit, to_unit, category)
    return {"result": round(result, 10), "unit": to_unit}
