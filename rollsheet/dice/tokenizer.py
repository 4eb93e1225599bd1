"""Dice formula tokenizer.

Turns formula text like "2d20kh1 + @str - 1" into a token sequence.
Supported pieces: integers, dice groups (XdY, dY) with keep/drop suffixes
(kh, kl, dh, dl), @code attribute references, + - * / and parentheses.
Whitespace is insignificant and any other character is ignored.
"""

import re

from rollsheet.dice.exceptions import DiceNotationError
from rollsheet.dice.types import (
    AttributeRefToken,
    DiceModifier,
    DiceToken,
    LParenToken,
    ModifierKind,
    NumberToken,
    Operator,
    OperatorToken,
    RParenToken,
    Token,
)

# Digits, optionally followed by d and the sides: 12, 3d6, 3d (invalid)
_NUMBER_OR_DICE_RE = re.compile(r"(?P<count>[0-9]+)(?:(?P<d>[dD])(?P<sides>[0-9]*))?")

# A die without a leading count: d20
_BARE_DICE_RE = re.compile(r"[dD](?P<sides>[0-9]+)")

# Keep/drop suffix directly after a dice group: kh, kh2, DL1
_MODIFIER_RE = re.compile(r"(?P<kind>kh|kl|dh|dl)(?P<count>[0-9]*)", re.IGNORECASE)

_ATTRIBUTE_RE = re.compile(r"@(?P<code>[a-zA-Z_]*)")

_WHITESPACE_RE = re.compile(r"\s+")

_OPERATORS = {op.value: op for op in Operator}


def tokenize(formula: str) -> list[Token]:
    """Tokenize a dice formula.

    Args:
        formula: Formula text, e.g. "4d6dl1+@str".

    Returns:
        Tokens in source order.

    Raises:
        DiceNotationError: If a dice group has zero or missing sides.

    Examples:
        >>> tokenize("3d6+2")
        [DiceToken(count=3, sides=6, modifiers=()), OperatorToken(op=<Operator.ADD: '+'>), NumberToken(value=2)]
    """
    text = _WHITESPACE_RE.sub("", formula)
    tokens: list[Token] = []
    pos = 0

    while pos < len(text):
        char = text[pos]

        if char in _OPERATORS:
            tokens.append(OperatorToken(_OPERATORS[char]))
            pos += 1
            continue

        if char == "(":
            tokens.append(LParenToken())
            pos += 1
            continue

        if char == ")":
            tokens.append(RParenToken())
            pos += 1
            continue

        if char == "@":
            match = _ATTRIBUTE_RE.match(text, pos)
            code = match.group("code")
            if code:
                tokens.append(AttributeRefToken(code.lower()))
            pos = match.end()
            continue

        match = _NUMBER_OR_DICE_RE.match(text, pos)
        if match:
            pos = match.end()
            if match.group("d") is None:
                tokens.append(NumberToken(int(match.group("count"))))
                continue
            # A zero count falls back to a single die
            count = int(match.group("count")) or 1
            sides = _parse_sides(match.group(0), match.group("sides"))
            modifiers, pos = _read_modifiers(text, pos)
            tokens.append(DiceToken(count=count, sides=sides, modifiers=modifiers))
            continue

        match = _BARE_DICE_RE.match(text, pos)
        if match:
            sides = _parse_sides(match.group(0), match.group("sides"))
            modifiers, pos = _read_modifiers(text, match.end())
            tokens.append(DiceToken(count=1, sides=sides, modifiers=modifiers))
            continue

        # Unrecognized character
        pos += 1

    return tokens


def _parse_sides(notation: str, sides_text: str) -> int:
    sides = int(sides_text) if sides_text else 0
    if sides <= 0:
        raise DiceNotationError(f"Invalid dice notation: {notation}")
    return sides


def _read_modifiers(text: str, pos: int) -> tuple[tuple[DiceModifier, ...], int]:
    """Consume keep/drop suffixes starting at pos."""
    modifiers: list[DiceModifier] = []
    while True:
        match = _MODIFIER_RE.match(text, pos)
        if not match:
            break
        count_text = match.group("count")
        modifiers.append(
            DiceModifier(
                kind=ModifierKind(match.group("kind").lower()),
                count=int(count_text) if count_text else 1,
            )
        )
        pos = match.end()
    return tuple(modifiers), pos
