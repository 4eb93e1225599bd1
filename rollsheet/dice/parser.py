"""Formula parser and bracket-group splitter.

A roll formula may hold several independent sub-formulas wrapped in
brackets, e.g. "[1d20+@str][1d8+@str]" for an attack and its damage.
"""

import re

from rollsheet.dice.tokenizer import tokenize
from rollsheet.dice.types import AttributeRefToken, ParsedFormula

# Non-nested [...] groups
GROUP_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def parse_formula(formula: str) -> ParsedFormula:
    """Tokenize a formula and collect the attribute codes it references.

    Args:
        formula: Formula text (a single group, without brackets).

    Returns:
        ParsedFormula with the tokens and the referenced codes in
        first-occurrence order, without duplicates.

    Raises:
        DiceNotationError: If the formula contains malformed dice notation.

    Examples:
        >>> parse_formula("@str + 1d20 + @str").attribute_refs
        ('str',)
    """
    tokens = tokenize(formula)
    refs: list[str] = []
    for token in tokens:
        if isinstance(token, AttributeRefToken) and token.code not in refs:
            refs.append(token.code)
    return ParsedFormula(tokens=tuple(tokens), attribute_refs=tuple(refs))


def split_formula_groups(formula: str) -> list[str]:
    """Split a formula into its bracketed sub-formulas.

    Args:
        formula: Formula text, optionally containing [...] groups.

    Returns:
        The contents of each bracket group in order, or the whole formula
        as a single group when it has no brackets.

    Examples:
        >>> split_formula_groups("[1d20+@str][1d6]")
        ['1d20+@str', '1d6']
        >>> split_formula_groups("1d20")
        ['1d20']
    """
    groups = GROUP_PATTERN.findall(formula)
    if not groups:
        return [formula]
    return groups
