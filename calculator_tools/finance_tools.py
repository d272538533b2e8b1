"""
Financial calculations tool.

Rates are annual percentages (``5`` means 5%), ``time`` is in years and
``periods`` is the number of compounding (or payment) periods per year.
Monetary results are rounded to cents.
"""
from typing import Any, Dict

from .base import ToolError, optional_int, optional_number, require_str

FINANCIAL_OPERATIONS = [
    "compound_interest",
    "simple_interest",
    "loan_payment",
    "roi",
    "present_value",
    "future_value",
]

FINANCIAL_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "operation": {
            "type": "string",
            "enum": FINANCIAL_OPERATIONS,
        },
        "principal": {"type": "number", "minimum": 0},
        "rate": {"type": "number", "minimum": 0},
        "time": {"type": "number", "minimum": 0},
        "periods": {"type": "integer", "minimum": 1},
        "futureValue": {"type": "number", "minimum": 0},
    },
    "required": ["operation"],
}

MAX_PERIODS = 100_000


def _money(value: float) -> float:
    return round(value, 2)


def _growth(rate: float, time: float, periods: int) -> float:
    return (1 + rate / 100 / periods) ** (periods * time)


def _result(value: float, description: str, **breakdown: float) -> Dict[str, Any]:
    result = {"result": _money(value), "description": description}
    if breakdown:
        result["breakdown"] = {key: _money(item) for key, item in breakdown.items()}
    return result


def simple_interest(principal: float, rate: float, time: float) -> Dict[str, Any]:
    interest = principal * rate / 100 * time
    return _result(
        interest,
        f"Simple interest on {principal:g} at {rate:g}% for {time:g} years",
        principal=principal, interest=interest, total=principal + interest,
    )


def compound_interest(principal: float, rate: float, time: float, periods: int) -> Dict[str, Any]:
    total = principal * _growth(rate, time, periods)
    return _result(
        total - principal,
        f"Compound interest on {principal:g} at {rate:g}% compounded {periods} times a year for {time:g} years",
        principal=principal, interest=total - principal, total=total,
    )


def loan_payment(principal: float, rate: float, time: float, periods: int) -> Dict[str, Any]:
    payments = periods * time
    if payments <= 0:
        raise ToolError("'time' must be greater than 0 for loan_payment")

    period_rate = rate / 100 / periods
    if period_rate == 0:
        payment = principal / payments
    else:
        payment = principal * period_rate / (1 - (1 + period_rate) ** -payments)

    total_paid = payment * payments
    return _result(
        payment,
        f"Payment per period for {principal:g} at {rate:g}% over {time:g} years ({payments:g} payments)",
        total_paid=total_paid, total_interest=total_paid - principal,
    )


def roi(principal: float, future_value: float) -> Dict[str, Any]:
    if principal <= 0:
        raise ToolError("'principal' must be greater than 0 for roi")
    gain = future_value - principal
    return _result(
        gain / principal * 100,
        f"Return on investment of {principal:g} growing to {future_value:g}, in percent",
        gain=gain,
    )


def present_value(future_value: float, rate: float, time: float, periods: int) -> Dict[str, Any]:
    value = future_value / _growth(rate, time, periods)
    return _result(
        value,
        f"Present value of {future_value:g} discounted at {rate:g}% for {time:g} years",
        discount=future_value - value,
    )


def future_value(principal: float, rate: float, time: float, periods: int) -> Dict[str, Any]:
    return _result(
        principal * _growth(rate, time, periods),
        f"Future value of {principal:g} at {rate:g}% for {time:g} years",
    )


def financial(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Run one financial formula; see the module docstring for units."""
    operation = require_str(arguments, "operation", FINANCIAL_OPERATIONS)
    principal = optional_number(arguments, "principal", 0, minimum=0)
    rate = optional_number(arguments, "rate", 0, minimum=0)
    time = optional_number(arguments, "time", 0, minimum=0)
    target = optional_number(arguments, "futureValue", 0, minimum=0)

    try:
        if operation == "simple_interest":
            return simple_interest(principal, rate, time)
        if operation == "roi":
            return roi(principal, target)

        default_periods = 12 if operation == "loan_payment" else 1
        periods = optional_int(arguments, "periods", default_periods, minimum=1, maximum=MAX_PERIODS)

        if operation == "compound_interest":
            return compound_interest(principal, rate, time, periods)
        if operation == "loan_payment":
            return loan_payment(principal, rate, time, periods)
        if operation == "present_value":
            return present_value(target, rate, time, periods)
        return future_value(principal, rate, time, periods)
    except OverflowError:
        raise ToolError("result out of range") from None
