"""Dice engine type definitions.

Immutable dataclasses for formula tokens, dice results and roll outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

Number = Union[int, float]


class ModifierKind(str, Enum):
    """Keep/drop rule applied to a dice group.

    Suffix notation follows the kind's value, e.g. 4d6dl1 or 2d20kh1.
    """

    KEEP_HIGHEST = "kh"
    KEEP_LOWEST = "kl"
    DROP_HIGHEST = "dh"
    DROP_LOWEST = "dl"


class Operator(str, Enum):
    """Arithmetic operator allowed between formula terms."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


@dataclass(frozen=True)
class DiceModifier:
    """A keep/drop modifier like kh1 or dl2.

    Attributes:
        kind: Which dice the modifier keeps or drops.
        count: How many dice it keeps or drops.
    """

    kind: ModifierKind
    count: int = 1

    @property
    def notation(self) -> str:
        return f"{self.kind.value}{self.count}"


# =============================================================================
# Tokens
# =============================================================================


@dataclass(frozen=True)
class NumberToken:
    """A literal integer in a formula."""

    value: int


@dataclass(frozen=True)
class DiceToken:
    """A dice group like 4d6dl1.

    Attributes:
        count: Number of dice to roll.
        sides: Sides per die (always > 0).
        modifiers: Keep/drop modifiers, applied in order.
    """

    count: int
    sides: int
    modifiers: tuple[DiceModifier, ...] = field(default_factory=tuple)

    @property
    def notation(self) -> str:
        return f"{self.count}d{self.sides}" + "".join(m.notation for m in self.modifiers)


@dataclass(frozen=True)
class AttributeRefToken:
    """An @code reference to a sheet attribute (code is lower-cased)."""

    code: str


@dataclass(frozen=True)
class OperatorToken:
    """One of + - * /."""

    op: Operator


@dataclass(frozen=True)
class LParenToken:
    """Opening parenthesis."""


@dataclass(frozen=True)
class RParenToken:
    """Closing parenthesis."""


Token = Union[NumberToken, DiceToken, AttributeRefToken, OperatorToken, LParenToken, RParenToken]


@dataclass(frozen=True)
class ParsedFormula:
    """Tokenized formula plus the attribute codes it references.

    Attributes:
        tokens: Token sequence in source order.
        attribute_refs: Referenced codes, deduplicated, in first-occurrence order.
    """

    tokens: tuple[Token, ...]
    attribute_refs: tuple[str, ...]


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class DiceResult:
    """Result of rolling one dice group.

    Attributes:
        notation: Canonical notation of the group, e.g. "4d6dl1".
        rolls: Every die rolled, in roll order.
        kept: Parallel to rolls; False for dice dropped by modifiers.
        sum: Sum of the kept dice.
    """

    notation: str
    rolls: tuple[int, ...]
    kept: tuple[bool, ...]
    sum: int

    @property
    def dropped_rolls(self) -> tuple[int, ...]:
        """Values of the dice removed by modifiers."""
        return tuple(r for r, k in zip(self.rolls, self.kept) if not k)


@dataclass(frozen=True)
class FormulaEvaluation:
    """Outcome of evaluating a token sequence."""

    dice_results: tuple[DiceResult, ...]
    total: Number
    expanded_formula: str


@dataclass(frozen=True)
class FormulaRange:
    """Theoretical bounds of a formula, computed without rolling."""

    minimum: Number
    maximum: Number


@dataclass(frozen=True)
class AttributeUsage:
    """An attribute a roll read, with the value it had at roll time."""

    code: str
    name: str
    value: Number | str


@dataclass(frozen=True)
class ResultGroup:
    """Outcome of one bracketed sub-formula.

    Attributes:
        formula: The sub-formula text as written.
        expanded_formula: Human-readable expansion with dice values substituted.
        dice_results: One entry per dice group, in roll order.
        attributes_used: Attributes the sub-formula referenced.
        total: Numeric result, rounded to 0.001.
        error: Set only by ad-hoc rolls when the sub-formula failed.
    """

    formula: str
    expanded_formula: str
    dice_results: tuple[DiceResult, ...]
    attributes_used: tuple[AttributeUsage, ...]
    total: Number
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class RollOutcome:
    """Full record of a structured roll.

    The primary fields mirror the first result group; result_groups is only
    populated when the formula has more than one bracket group.
    """

    template_name: str
    character_name: str
    display_text: str
    formula: str
    expanded_formula: str
    dice_results: tuple[DiceResult, ...]
    attributes_used: tuple[AttributeUsage, ...]
    total: Number
    result_groups: tuple[ResultGroup, ...] | None = None
    is_super: bool = False

    @property
    def totals(self) -> tuple[Number, ...]:
        """Totals of every group, in order."""
        if self.result_groups is None:
            return (self.total,)
        return tuple(g.total for g in self.result_groups)


@dataclass(frozen=True)
class AdhocRollOutcome:
    """Result of rolling every [formula] embedded in a free-text message."""

    message: str
    character_name: str
    display_text: str
    result_groups: tuple[ResultGroup, ...]

    @property
    def has_errors(self) -> bool:
        return any(g.failed for g in self.result_groups)
