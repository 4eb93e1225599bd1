"""Restricted arithmetic evaluator.

A small recursive-descent parser for the numeric expressions produced by
attribute substitution and dice rolling. It understands numeric literals,
+ - * /, unary signs, parentheses and the ceil()/floor() functions, and
nothing else.

Grammar:
    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary)*
    unary      := ("+" | "-") unary | primary
    primary    := NUMBER | FUNCTION "(" expression ")" | "(" expression ")"
"""

import math
import re
from dataclasses import dataclass
from typing import Callable

from rollsheet.dice.exceptions import ArithmeticExpressionError
from rollsheet.dice.types import Number

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<number>(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)
    | (?P<function>[A-Za-z_]+)
    | (?P<symbol>[-+*/()])
    """,
    re.VERBOSE,
)

FUNCTIONS: dict[str, Callable[[float], int]] = {
    "ceil": math.ceil,
    "floor": math.floor,
}

# Deepest chain of parentheses, function calls and unary signs accepted
MAX_NESTING = 100


@dataclass(frozen=True)
class _Lexeme:
    kind: str
    text: str


def _lex(expression: str) -> list[_Lexeme]:
    lexemes: list[_Lexeme] = []
    pos = 0
    while pos < len(expression):
        match = _TOKEN_RE.match(expression, pos)
        if not match:
            raise ArithmeticExpressionError(
                f"Invalid character {expression[pos]!r} in expression: {expression!r}"
            )
        kind = match.lastgroup
        text = match.group(0)
        pos = match.end()
        if kind == "space":
            continue
        if kind == "function" and text.lower() not in FUNCTIONS:
            raise ArithmeticExpressionError(f"Unknown function {text!r} in expression: {expression!r}")
        lexemes.append(_Lexeme(kind, text.lower() if kind == "function" else text))
    return lexemes


class _Parser:
    """Evaluates while parsing; one instance per expression."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.lexemes = _lex(expression)
        self.pos = 0
        self.depth = 0

    def _peek(self) -> _Lexeme | None:
        if self.pos < len(self.lexemes):
            return self.lexemes[self.pos]
        return None

    def _advance(self) -> _Lexeme:
        lexeme = self._peek()
        if lexeme is None:
            raise ArithmeticExpressionError(f"Unexpected end of expression: {self.expression!r}")
        self.pos += 1
        return lexeme

    def _expect(self, symbol: str) -> None:
        lexeme = self._advance()
        if lexeme.kind != "symbol" or lexeme.text != symbol:
            raise ArithmeticExpressionError(
                f"Expected {symbol!r} but found {lexeme.text!r} in expression: {self.expression!r}"
            )

    def _descend(self) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise ArithmeticExpressionError(f"Expression nested too deeply: {self.expression!r}")

    def _at_symbol(self, *symbols: str) -> bool:
        lexeme = self._peek()
        return lexeme is not None and lexeme.kind == "symbol" and lexeme.text in symbols

    def parse(self) -> Number:
        if not self.lexemes:
            raise ArithmeticExpressionError("Empty expression")
        value = self._expression()
        if self._peek() is not None:
            raise ArithmeticExpressionError(
                f"Unexpected {self._peek().text!r} in expression: {self.expression!r}"
            )
        return value

    def _expression(self) -> Number:
        value = self._term()
        while self._at_symbol("+", "-"):
            op = self._advance().text
            right = self._term()
            value = value + right if op == "+" else value - right
        return value

    def _term(self) -> Number:
        value = self._unary()
        while self._at_symbol("*", "/"):
            op = self._advance().text
            right = self._unary()
            if op == "*":
                value = value * right
            elif right == 0:
                raise ArithmeticExpressionError(f"Division by zero in expression: {self.expression!r}")
            else:
                value = value / right
        return value

    def _unary(self) -> Number:
        if self._at_symbol("+", "-"):
            op = self._advance().text
            self._descend()
            value = self._unary()
            self.depth -= 1
            return -value if op == "-" else value
        return self._primary()

    def _primary(self) -> Number:
        lexeme = self._advance()
        if lexeme.kind == "number":
            return _parse_number(lexeme.text)
        if lexeme.kind == "function":
            self._expect("(")
            self._descend()
            argument = self._expression()
            self._expect(")")
            self.depth -= 1
            if isinstance(argument, float) and not math.isfinite(argument):
                raise ArithmeticExpressionError(f"Expression is not finite: {self.expression!r}")
            return FUNCTIONS[lexeme.text](argument)
        if lexeme.kind == "symbol" and lexeme.text == "(":
            self._descend()
            value = self._expression()
            self._expect(")")
            self.depth -= 1
            return value
        raise ArithmeticExpressionError(
            f"Unexpected {lexeme.text!r} in expression: {self.expression!r}"
        )


def _parse_number(text: str) -> Number:
    if text.isdigit():
        return int(text)
    value = float(text)
    if not math.isfinite(value):
        raise ArithmeticExpressionError(f"Number out of range: {text!r}")
    return value


def evaluate_arithmetic(expression: str) -> Number:
    """Evaluate a restricted arithmetic expression.

    Args:
        expression: Text such as "floor((3 + 14) / 2) * 2".

    Returns:
        The numeric result, as an int when it is integral.

    Raises:
        ArithmeticExpressionError: On any character, name or construct
            outside the grammar, on division by zero, on nesting deeper
            than MAX_NESTING, or on a non-finite result.

    Examples:
        >>> evaluate_arithmetic("ceil(7/2) + 1")
        5
        >>> evaluate_arithmetic("5--3")
        8
    """
    try:
        value = _Parser(expression).parse()
    except OverflowError as e:
        raise ArithmeticExpressionError(f"Number out of range in expression: {expression!r}") from e
    if isinstance(value, float) and not math.isfinite(value):
        raise ArithmeticExpressionError(f"Expression is not finite: {expression!r}")
    return normalize_number(value)


def normalize_number(value: Number) -> Number:
    """Collapse integral floats to int so 3.0 renders as 3."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def round_total(value: Number) -> Number:
    """Round half-up to the nearest 0.001."""
    if isinstance(value, int):
        return value
    return normalize_number(math.floor(value * 1000 + 0.5) / 1000)


def format_number(value: Number) -> str:
    """Render a number for substitution into formulas or display text."""
    return str(normalize_number(value))
