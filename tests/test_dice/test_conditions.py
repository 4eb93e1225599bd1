"""Tests for super condition evaluation."""

import pytest

from rollsheet.dice.conditions import evaluate_super_condition


class TestEvaluateSuperCondition:
    """Tests for evaluate_super_condition."""

    def test_natural_max(self):
        """Test a roll at its maximum is super."""
        assert evaluate_super_condition("{result} >= {maximum}", 20, 1, 20) is True

    def test_below_max(self):
        """Test one below the maximum is not super."""
        assert evaluate_super_condition("{result}>={maximum}", 19, 1, 20) is False

    def test_fumble(self):
        """Test == against the minimum."""
        assert evaluate_super_condition("{result} == {minimum}", 1, 1, 20) is True

    def test_arithmetic_on_either_side(self):
        """Test sides may hold arithmetic."""
        assert evaluate_super_condition("{result} >= {maximum} - 1", 19, 1, 20) is True
        assert evaluate_super_condition("({result} + 1) * 2 > 40", 19, 1, 20) is False

    def test_placeholders_case_insensitive(self):
        """Test {RESULT} works like {result}."""
        assert evaluate_super_condition("{RESULT} >= {Maximum}", 20, 1, 20) is True

    @pytest.mark.parametrize(
        "condition,total,expected",
        [
            ("{result} > 10", 11, True),
            ("{result} > 10", 10, False),
            ("{result} < 5", 4, True),
            ("{result} <= 5", 5, True),
            ("{result} == 7", 8, False),
        ],
    )
    def test_operators(self, condition, total, expected):
        """Test each comparison operator."""
        assert evaluate_super_condition(condition, total, 1, 20) is expected

    def test_fractional_total(self):
        """Test fractional totals compare numerically."""
        assert evaluate_super_condition("{result} > 2", 2.5, 1, 5) is True

    def test_no_operator_is_false(self):
        """Test a condition without a comparison is never super."""
        assert evaluate_super_condition("{result}", 20, 1, 20) is False

    def test_unresolved_placeholder_is_false(self):
        """Test leftover text makes the condition false."""
        assert evaluate_super_condition("{result} >= {str}", 20, 1, 20) is False

    def test_code_injection_is_false(self):
        """Test non-arithmetic text is rejected rather than evaluated."""
        assert evaluate_super_condition("__import__('os') == 1", 20, 1, 20) is False

    def test_empty_side_is_false(self):
        """Test a missing operand is false."""
        assert evaluate_super_condition(">= {maximum}", 20, 1, 20) is False

    def test_malformed_arithmetic_is_false(self):
        """Test arithmetic that fails to parse is false."""
        assert evaluate_super_condition("{result} + >= 3", 20, 1, 20) is False
