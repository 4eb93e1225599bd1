"""Dice formula exception definitions.

Custom exception hierarchy for formula parsing, evaluation and rolling.
Every engine error derives from FormulaError so hosts can catch one type
and relay the message to the requesting client.
"""


class FormulaError(ValueError):
    """Base exception for dice formula operations."""

    pass


class DiceNotationError(FormulaError):
    """Dice notation is malformed (e.g. zero or missing sides)."""

    pass


class UnknownAttributeError(FormulaError):
    """A formula references an attribute code that has no value.

    Attributes:
        code: The unresolved attribute code, without the leading '@'.
    """

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(message or f"Unknown attribute: @{code}")
        self.code = code


class ArithmeticExpressionError(FormulaError):
    """The restricted arithmetic evaluator rejected or failed an expression."""

    pass


class FormulaEvaluationError(FormulaError):
    """A roll formula's total could not be computed.

    Attributes:
        expression: The numeric expression that failed to evaluate.
    """

    def __init__(self, expression: str, reason: str = "") -> None:
        message = f"Could not evaluate formula: {expression!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.expression = expression


class InvalidFormulaIndexError(FormulaError):
    """The requested formula variant does not exist on the roll template."""

    def __init__(self, index: int, available: int) -> None:
        super().__init__(
            f"Invalid formula index: {index} (template has {available} variant(s))"
        )
        self.index = index
        self.available = available


class RandomSourceExhaustedError(FormulaError):
    """A scripted random source has no more values to hand out."""

    def __init__(self, message: str = "Random source exhausted") -> None:
        super().__init__(message)
