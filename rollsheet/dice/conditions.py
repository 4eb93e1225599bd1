"""Super condition evaluation.

A super condition flags an exceptional roll, e.g. "{result} >= {maximum}"
for a natural max or "{result} == {minimum}" for a fumble.
"""

import re

from rollsheet.dice.arithmetic import evaluate_arithmetic, format_number
from rollsheet.dice.exceptions import ArithmeticExpressionError
from rollsheet.dice.types import Number

# Two-character operators first so ">=" is never split as ">"
COMPARISON_OPERATORS = (">=", "<=", "==", ">", "<")

_SAFE_SIDE_RE = re.compile(r"^[\d\s+\-*/().]+$")

_PLACEHOLDER_RES = {
    "result": re.compile(r"\{result\}", re.IGNORECASE),
    "maximum": re.compile(r"\{maximum\}", re.IGNORECASE),
    "minimum": re.compile(r"\{minimum\}", re.IGNORECASE),
}


def _compare(left: Number, operator: str, right: Number) -> bool:
    if operator == ">=":
        return left >= right
    if operator == "<=":
        return left <= right
    if operator == "==":
        return left == right
    if operator == ">":
        return left > right
    if operator == "<":
        return left < right
    raise ValueError(f"Unknown comparison operator: {operator!r}")


def evaluate_super_condition(
    condition: str,
    total: Number,
    minimum: Number,
    maximum: Number,
) -> bool:
    """Check whether a roll meets its super condition.

    Args:
        condition: Comparison with {result}, {minimum} and {maximum}
            placeholders, e.g. "{result} >= {maximum} - 1".
        total: The roll's total.
        minimum: Lowest value the formula can produce.
        maximum: Highest value the formula can produce.

    Returns:
        The comparison's outcome; False when the condition has no
        comparison operator or either side is not valid arithmetic.

    Examples:
        >>> evaluate_super_condition("{result} >= {maximum}", 20, 1, 20)
        True
        >>> evaluate_super_condition("{result}>={maximum}", 19, 1, 20)
        False
    """
    expression = condition
    expression = _PLACEHOLDER_RES["result"].sub(format_number(total), expression)
    expression = _PLACEHOLDER_RES["maximum"].sub(format_number(maximum), expression)
    expression = _PLACEHOLDER_RES["minimum"].sub(format_number(minimum), expression)

    for operator in COMPARISON_OPERATORS:
        if operator in expression:
            left_text, right_text = expression.split(operator, 1)
            break
    else:
        return False

    if not _SAFE_SIDE_RE.match(left_text) or not _SAFE_SIDE_RE.match(right_text):
        return False

    try:
        left = evaluate_arithmetic(left_text)
        right = evaluate_arithmetic(right_text)
    except ArithmeticExpressionError:
        return False

    return _compare(left, operator, right)
