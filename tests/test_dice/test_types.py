"""Tests for dice engine types and exceptions."""

import dataclasses

import pytest

from rollsheet.dice.exceptions import (
    FormulaError,
    FormulaEvaluationError,
    InvalidFormulaIndexError,
    UnknownAttributeError,
)
from rollsheet.dice.types import (
    AdhocRollOutcome,
    DiceModifier,
    DiceResult,
    DiceToken,
    ModifierKind,
    ResultGroup,
    RollOutcome,
)


def group(total, error=None):
    return ResultGroup(
        formula="1d6",
        expanded_formula="",
        dice_results=(),
        attributes_used=(),
        total=total,
        error=error,
    )


class TestModifierTypes:
    """Tests for ModifierKind and DiceModifier."""

    def test_kind_values(self):
        """Kinds should use the suffix letters."""
        assert [k.value for k in ModifierKind] == ["kh", "kl", "dh", "dl"]

    def test_default_count(self):
        """A modifier counts 1 by default."""
        assert DiceModifier(ModifierKind.DROP_LOWEST).count == 1

    def test_notation(self):
        """Notation always includes the count."""
        assert DiceModifier(ModifierKind.KEEP_HIGHEST, 2).notation == "kh2"


class TestDiceTypes:
    """Tests for tokens and dice results."""

    def test_dice_token_notation(self):
        """DiceToken renders canonical notation."""
        token = DiceToken(count=2, sides=20, modifiers=(DiceModifier(ModifierKind.KEEP_HIGHEST, 1),))
        assert token.notation == "2d20kh1"

    def test_tokens_are_frozen(self):
        """Tokens are immutable."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            DiceToken(count=1, sides=6).sides = 8

    def test_dropped_rolls(self):
        """dropped_rolls lists only dice removed by modifiers."""
        result = DiceResult(notation="4d6dl1", rolls=(4, 1, 6, 1), kept=(True, False, True, True), sum=12)
        assert result.dropped_rolls == (1,)


class TestOutcomeTypes:
    """Tests for roll outcome containers."""

    def test_totals_single_group(self):
        """A single-group roll reports its own total."""
        outcome = RollOutcome(
            template_name="Attack",
            character_name="Mira",
            display_text="",
            formula="1d20",
            expanded_formula="[12]",
            dice_results=(),
            attributes_used=(),
            total=12,
        )
        assert outcome.totals == (12,)
        assert outcome.is_super is False

    def test_totals_multi_group(self):
        """A multi-group roll reports every group's total."""
        outcome = RollOutcome(
            template_name="Sword",
            character_name="Mira",
            display_text="",
            formula="1d20",
            expanded_formula="[12]",
            dice_results=(),
            attributes_used=(),
            total=12,
            result_groups=(group(12), group(5)),
        )
        assert outcome.totals == (12, 5)

    def test_has_errors(self):
        """An ad-hoc outcome has errors when any group failed."""
        ok = AdhocRollOutcome("m", "Mira", "m", (group(3),))
        bad = AdhocRollOutcome("m", "Mira", "m", (group(3), group(0, "Unknown attribute: @x")))
        assert ok.has_errors is False
        assert bad.has_errors is True


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_all_derive_from_formula_error(self):
        """Every engine error is a FormulaError and a ValueError."""
        for error in (
            UnknownAttributeError("str"),
            FormulaEvaluationError("1+"),
            InvalidFormulaIndexError(3, 1),
        ):
            assert isinstance(error, FormulaError)
            assert isinstance(error, ValueError)

    def test_unknown_attribute_message(self):
        """The message names the code with its @ prefix."""
        error = UnknownAttributeError("dex")
        assert str(error) == "Unknown attribute: @dex"
        assert error.code == "dex"

    def test_evaluation_error_reason(self):
        """The reason is appended when given."""
        error = FormulaEvaluationError("3+", "Unexpected end")
        assert str(error) == "Could not evaluate formula: '3+' (Unexpected end)"
        assert error.expression == "3+"

    def test_invalid_index_fields(self):
        """The index error keeps the index and variant count."""
        error = InvalidFormulaIndexError(2, 1)
        assert error.index == 2
        assert error.available == 1
