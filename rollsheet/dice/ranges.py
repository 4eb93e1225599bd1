"""Theoretical min/max of a formula, computed without rolling."""

from collections.abc import Mapping, Sequence

from rollsheet.dice.arithmetic import evaluate_arithmetic, format_number
from rollsheet.dice.exceptions import ArithmeticExpressionError
from rollsheet.dice.types import (
    AttributeRefToken,
    DiceModifier,
    DiceToken,
    FormulaRange,
    LParenToken,
    ModifierKind,
    Number,
    NumberToken,
    OperatorToken,
    RParenToken,
    Token,
)


def kept_dice_count(count: int, modifiers: Sequence[DiceModifier]) -> int:
    """How many dice a group keeps once its modifiers are applied.

    Examples:
        >>> kept_dice_count(4, [DiceModifier(ModifierKind.DROP_LOWEST, 1)])
        3
        >>> kept_dice_count(2, [DiceModifier(ModifierKind.KEEP_HIGHEST, 1)])
        1
    """
    kept = count
    for modifier in modifiers:
        if modifier.kind in (ModifierKind.DROP_LOWEST, ModifierKind.DROP_HIGHEST):
            kept = max(0, kept - modifier.count)
        elif modifier.kind in (ModifierKind.KEEP_LOWEST, ModifierKind.KEEP_HIGHEST):
            kept = min(kept, modifier.count)
        else:
            raise TypeError(f"Unknown modifier kind: {modifier.kind!r}")
    return kept


def calculate_formula_range(
    tokens: Sequence[Token],
    attribute_map: Mapping[str, Number],
) -> FormulaRange:
    """Compute the lowest and highest value a formula can produce.

    Each dice group contributes 1 per kept die to the minimum and its
    sides per kept die to the maximum. Unknown attributes count as 0 and
    a bound whose arithmetic fails is reported as 0.

    Args:
        tokens: Tokens from tokenize() or parse_formula().
        attribute_map: Resolved attribute values.

    Returns:
        FormulaRange with both bounds.
    """
    low: list[str] = []
    high: list[str] = []

    for token in tokens:
        if isinstance(token, NumberToken):
            low.append(str(token.value))
            high.append(str(token.value))
        elif isinstance(token, DiceToken):
            kept = kept_dice_count(token.count, token.modifiers)
            low.append(str(kept))
            high.append(str(kept * token.sides))
        elif isinstance(token, AttributeRefToken):
            value = format_number(attribute_map.get(token.code, 0))
            low.append(value)
            high.append(value)
        elif isinstance(token, OperatorToken):
            low.append(token.op.value)
            high.append(token.op.value)
        elif isinstance(token, LParenToken):
            low.append("(")
            high.append("(")
        elif isinstance(token, RParenToken):
            low.append(")")
            high.append(")")
        else:
            raise TypeError(f"Unknown token type: {type(token).__name__}")

    return FormulaRange(minimum=_evaluate_bound(low), maximum=_evaluate_bound(high))


def _evaluate_bound(parts: list[str]) -> Number:
    try:
        return evaluate_arithmetic("".join(parts))
    except ArithmeticExpressionError:
        return 0
