"""Tests for the calculator tool handlers."""
import pytest

from calculator_tools import ToolError, basic_math, financial, statistics_tool, unit_conversion
from calculator_tools.stats_tools import percentile


class TestBasicMath:

    @pytest.mark.parametrize("operation,operands,expected", [
        ("add", [5, 3], 8),
        ("add", [1.5, 2.25, 0.25], 4),
        ("subtract", [10, 3, 2], 5),
        ("multiply", [2, 3, 4], 24),
        ("divide", [10, 4], 2.5),
        ("divide", [100, 2, 5], 10),
    ])
    def test_operations(self, operation, operands, expected):
        assert basic_math({"operation": operation, "operands": operands}) == expected

    def test_default_precision_is_two(self):
        assert basic_math({"operation": "divide", "operands": [2, 3]}) == 0.67

    def test_custom_precision(self):
        assert basic_math({"operation": "divide", "operands": [1, 3], "precision": 4}) == 0.3333
        assert basic_math({"operation": "divide", "operands": [1, 3], "precision": 0}) == 0

    def test_division_by_zero(self):
        with pytest.raises(ToolError, match="division by zero"):
            basic_math({"operation": "divide", "operands": [1, 2, 0]})

    @pytest.mark.parametrize("arguments", [
        {},
        {"operation": "add"},
        {"operation": "add", "operands": [1]},
        {"operation": "add", "operands": "1,2"},
        {"operation": "add", "operands": [1, "2"]},
        {"operation": "add", "operands": [1, True]},
        {"operation": "power", "operands": [2, 3]},
        {"operation": "add", "operands": [1, 2], "precision": 16},
        {"operation": "add", "operands": [1, 2], "precision": -1},
        {"operation": "add", "operands": [1, 2], "precision": "2"},
    ])
    def test_invalid_arguments(self, arguments):
        with pytest.raises(ToolError):
            basic_math(arguments)


class TestStatistics:

    DATA = [2, 4, 4, 4, 5, 5, 7, 9]

    def test_mean(self):
        assert statistics_tool({"data": self.DATA, "operation": "mean"}) == {"result": 5, "count": 8}

    def test_median(self):
        assert statistics_tool({"data": [1, 2, 3, 4], "operation": "median"})["result"] == 2.5
        assert statistics_tool({"data": [3, 1, 2], "operation": "median"})["result"] == 2

    def test_mode(self):
        assert statistics_tool({"data": self.DATA, "operation": "mode"})["result"] == [4]

    def test_mode_returns_every_tie_sorted(self):
        assert statistics_tool({"data": [3, 1, 3, 1, 2], "operation": "mode"})["result"] == [1, 3]

    def test_population_std_dev_and_variance(self):
        assert statistics_tool({"data": self.DATA, "operation": "std_dev"})["result"] == pytest.approx(2.0)
        assert statistics_tool({"data": self.DATA, "operation": "variance"})["result"] == pytest.approx(4.0)

    def test_single_value(self):
        assert statistics_tool({"data": [7], "operation": "variance"}) == {"result": 0, "count": 1}
        assert statistics_tool({"data": [7], "operation": "percentile", "percentile": 90})["result"] == 7

    @pytest.mark.parametrize("rank,expected", [(0, 1), (25, 2), (50, 3), (90, 4.6), (100, 5)])
    def test_percentile(self, rank, expected):
        result = statistics_tool({"data": [5, 1, 4, 2, 3], "operation": "percentile", "percentile": rank})
        assert result["result"] == pytest.approx(expected)

    def test_percentile_helper_interpolates(self):
        assert percentile([10, 20], 50) == 15

    @pytest.mark.parametrize("arguments", [
        {"data": [], "operation": "mean"},
        {"data": [1, 2], "operation": "range"},
        {"data": [1, "x"], "operation": "mean"},
        {"data": [1, 2], "operation": "percentile"},
        {"data": [1, 2], "operation": "percentile", "percentile": 101},
        {"data": [1, 2], "operation": "percentile", "percentile": -5},
        {"operation": "mean"},
    ])
    def test_invalid_arguments(self, arguments):
        with pytest.raises(ToolError):
            statistics_tool(arguments)


class TestUnitConversion:

    @pytest.mark.parametrize("value,from_unit,to_unit,category,expected", [
        (1, "km", "m", "length", 1000),
        (12, "in", "ft", "length", 1),
        (1, "mi", "km", "length", 1.609344),
        (2, "Meters", "cm", "length", 200),
        (1, "lb", "kg", "weight", 0.45359237),
        (1, "gal", "l", "volume", 3.785411784),
        (1, "ha", "m2", "area", 10000),
        (100, "C", "F", "temperature", 212),
        (32, "fahrenheit", "celsius", "temperature", 0),
        (0, "c", "k", "temperature", 273.15),
    ])
    def test_conversions(self, value, from_unit, to_unit, category, expected):
        result = unit_conversion({"value": value, "fromUnit": from_unit, "toUnit": to_unit, "category": category})

        assert result["result"] == pytest.approx(expected)
        assert result["unit"] == to_unit

    @pytest.mark.parametrize("arguments", [
        {"value": 1, "fromUnit": "parsec", "toUnit": "m", "category": "length"},
        {"value": 1, "fromUnit": "kg", "toUnit": "m", "category": "length"},
        {"value": 1, "fromUnit": "m", "toUnit": "s", "category": "time"},
        {"value": -300, "fromUnit": "c", "toUnit": "k", "category": "temperature"},
        {"fromUnit": "m", "toUnit": "km", "category": "length"},
    ])
    def test_invalid_arguments(self, arguments):
        with pytest.raises(ToolError):
            unit_conversion(arguments)


class TestFinancial:

    def test_simple_interest(self):
        result = financial({"operation": "simple_interest", "principal": 1000, "rate": 5, "time": 2})

        assert result["result"] == 100
        assert result["breakdown"] == {"principal": 1000, "interest": 100, "total": 1100}
        assert result["description"]

    def test_compound_interest(self):
        result = financial({"operation": "compound_interest", "principal": 1000, "rate": 10, "time": 2})

        assert result["result"] == 210
        assert result["breakdown"]["total"] == 1210

    def test_future_and_present_value(self):
        future = financial({"operation": "future_value", "principal": 1000, "rate": 10, "time": 2})
        present = financial({"operation": "present_value", "futureValue": 1210, "rate": 10, "time": 2})

        assert future["result"] == 1210
        assert present["result"] == 1000

    def test_roi(self):
        assert financial({"operation": "roi", "principal": 1000, "futureValue": 1500})["result"] == 50

    def test_loan_payment(self):
        result = financial({"operation": "loan_payment", "principal": 100000, "rate": 6, "time": 30})
        assert result["result"] == 599.55

    def test_interest_free_loan(self):
        result = financial({"operation": "loan_payment", "principal": 1200, "rate": 0, "time": 1})

        assert result["result"] == 100
        assert result["breakdown"]["total_interest"] == 0

    @pytest.mark.parametrize("arguments", [
        {"operation": "roi", "principal": 0, "futureValue": 10},
        {"operation": "loan_payment", "principal": 1000, "rate": 5, "time": 0},
        {"operation": "simple_interest", "principal": 1000, "rate": -5, "time": 1},
        {"operation": "compound_interest", "principal": 1000, "rate": 5, "time": 1, "periods": 0},
        {"operation": "future_value", "principal": 1, "rate": 100, "time": 100000, "periods": 1},
        {"operation": "depreciation"},
    ])
    def test_invalid_arguments(self, arguments):
        with pytest.raises(ToolError):
            financial(arguments)
