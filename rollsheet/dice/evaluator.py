"""Formula evaluation.

Walks a token sequence left to right, rolling dice as they appear and
substituting attribute values, then evaluates the resulting arithmetic.
"""

from collections.abc import Mapping, Sequence

from rollsheet.dice.arithmetic import evaluate_arithmetic, format_number, round_total
from rollsheet.dice.exceptions import ArithmeticExpressionError, FormulaEvaluationError, UnknownAttributeError
from rollsheet.dice.roller import RandomSource, roll_dice_group
from rollsheet.dice.types import (
    AttributeRefToken,
    DiceResult,
    DiceToken,
    FormulaEvaluation,
    LParenToken,
    Number,
    NumberToken,
    OperatorToken,
    RParenToken,
    Token,
)


def format_dice_rolls(result: DiceResult) -> str:
    """Render a dice group's rolls like [5,~2~,4]; dropped dice are wrapped in ~."""
    parts = [str(r) if k else f"~{r}~" for r, k in zip(result.rolls, result.kept)]
    return "[" + ",".join(parts) + "]"


def evaluate_formula(
    tokens: Sequence[Token],
    attribute_map: Mapping[str, Number],
    rng: RandomSource | None = None,
) -> FormulaEvaluation:
    """Roll and evaluate a tokenized formula.

    Args:
        tokens: Tokens from tokenize() or parse_formula().
        attribute_map: Resolved attribute values.
        rng: Random source for the dice; the process-wide source when omitted.

    Returns:
        FormulaEvaluation with the dice results in roll order, the total
        (rounded to 0.001) and the expanded formula.

    Raises:
        UnknownAttributeError: If a token references a code missing from
            attribute_map.
        FormulaEvaluationError: If the resulting arithmetic is malformed
            (e.g. a dangling operator) or not finite.

    Examples:
        >>> from rollsheet.dice.roller import ScriptedRandomSource
        >>> from rollsheet.dice.tokenizer import tokenize
        >>> result = evaluate_formula(tokenize("1d20+@str"), {"str": 3}, ScriptedRandomSource([7]))
        >>> result.total, result.expanded_formula
        (10, '[7] + 3')
    """
    dice_results: list[DiceResult] = []
    expanded: list[str] = []
    expression: list[str] = []

    for token in tokens:
        if isinstance(token, NumberToken):
            expanded.append(str(token.value))
            expression.append(str(token.value))
        elif isinstance(token, DiceToken):
            result = roll_dice_group(token.count, token.sides, token.modifiers, rng)
            dice_results.append(result)
            expanded.append(format_dice_rolls(result))
            expression.append(str(result.sum))
        elif isinstance(token, AttributeRefToken):
            if token.code not in attribute_map:
                raise UnknownAttributeError(token.code)
            value = format_number(attribute_map[token.code])
            expanded.append(value)
            expression.append(value)
        elif isinstance(token, OperatorToken):
            expanded.append(f" {token.op.value} ")
            expression.append(token.op.value)
        elif isinstance(token, LParenToken):
            expanded.append("(")
            expression.append("(")
        elif isinstance(token, RParenToken):
            expanded.append(")")
            expression.append(")")
        else:
            raise TypeError(f"Unknown token type: {type(token).__name__}")

    expression_text = "".join(expression)
    try:
        total = evaluate_arithmetic(expression_text)
    except ArithmeticExpressionError as e:
        raise FormulaEvaluationError(expression_text, str(e)) from e

    return FormulaEvaluation(
        dice_results=tuple(dice_results),
        total=round_total(total),
        expanded_formula="".join(expanded),
    )
