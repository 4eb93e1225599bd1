"""Tests for dice roller."""

import random
from unittest.mock import patch

import pytest

from rollsheet.dice.exceptions import RandomSourceExhaustedError
from rollsheet.dice.roller import (
    RandomSource,
    ScriptedRandomSource,
    SystemRandomSource,
    apply_modifiers,
    default_random_source,
    roll_dice,
    roll_dice_group,
)
from rollsheet.dice.types import DiceModifier, DiceResult, ModifierKind


def kh(n: int) -> DiceModifier:
    return DiceModifier(ModifierKind.KEEP_HIGHEST, n)


def kl(n: int) -> DiceModifier:
    return DiceModifier(ModifierKind.KEEP_LOWEST, n)


def dh(n: int) -> DiceModifier:
    return DiceModifier(ModifierKind.DROP_HIGHEST, n)


def dl(n: int) -> DiceModifier:
    return DiceModifier(ModifierKind.DROP_LOWEST, n)


class TestRandomSources:
    """Tests for the random source implementations."""

    def test_scripted_source_replays_values(self):
        """Test scripted values come back in order."""
        source = ScriptedRandomSource([4, 2, 6])
        assert [source.next_roll(6) for _ in range(3)] == [4, 2, 6]
        assert source.consumed == 3
        assert source.remaining == 0

    def test_scripted_source_exhausted(self):
        """Test running out of values raises."""
        source = ScriptedRandomSource([1])
        source.next_roll(6)
        with pytest.raises(RandomSourceExhaustedError):
            source.next_roll(6)

    def test_seeded_system_source_is_reproducible(self):
        """Test two sources with the same seed agree."""
        a = SystemRandomSource(random.Random(42))
        b = SystemRandomSource(random.Random(42))
        assert [a.next_roll(20) for _ in range(10)] == [b.next_roll(20) for _ in range(10)]

    def test_sources_satisfy_protocol(self):
        """Test both sources implement RandomSource."""
        assert isinstance(ScriptedRandomSource([]), RandomSource)
        assert isinstance(default_random_source(), RandomSource)

    @patch("rollsheet.dice.roller.random.randint")
    def test_default_source_uses_random(self, mock_randint):
        """Test the default source draws from random.randint."""
        mock_randint.return_value = 15
        assert roll_dice(1, 20) == [15]
        mock_randint.assert_called_with(1, 20)


class TestRollDice:
    """Tests for roll_dice."""

    def test_correct_count(self):
        """Test we get one value per die."""
        assert len(roll_dice(4, 6)) == 4

    def test_values_in_range(self):
        """Test rolled values are within die range."""
        for sides in (1, 2, 6, 20, 100):
            for value in roll_dice(20, sides):
                assert 1 <= value <= sides

    def test_zero_dice(self):
        """Test rolling no dice gives an empty list."""
        assert roll_dice(0, 6) == []

    def test_uses_injected_source(self):
        """Test the given source supplies the values."""
        assert roll_dice(3, 6, ScriptedRandomSource([3, 4, 5])) == [3, 4, 5]


class TestApplyModifiers:
    """Tests for keep/drop modifiers."""

    def test_no_modifiers_keeps_all(self):
        """Test every die is kept without modifiers."""
        assert apply_modifiers([5, 3, 1], []) == [True, True, True]

    def test_drop_lowest_one(self):
        """Test dl1 drops exactly the die showing 1."""
        assert apply_modifiers([5, 3, 3, 1], [dl(1)]) == [True, True, True, False]

    def test_keep_highest_two_prefers_earlier_tie(self):
        """Test kh2 keeps the 5 and the earlier of the two 3s."""
        assert apply_modifiers([5, 3, 3, 1], [kh(2)]) == [True, True, False, False]

    def test_drop_highest(self):
        """Test dh1 drops the highest die."""
        assert apply_modifiers([2, 6, 4], [dh(1)]) == [True, False, True]

    def test_keep_lowest(self):
        """Test kl1 keeps only the lowest die."""
        assert apply_modifiers([4, 2, 6], [kl(1)]) == [False, True, False]

    def test_drop_lowest_tie_drops_earlier(self):
        """Test ties resolve to the earlier die."""
        assert apply_modifiers([2, 2], [dl(1)]) == [False, True]

    def test_count_clamped(self):
        """Test dropping more dice than exist drops them all."""
        assert apply_modifiers([3, 4], [dl(5)]) == [False, False]

    def test_keep_more_than_rolled_keeps_all(self):
        """Test kh5 on two dice keeps both."""
        assert apply_modifiers([3, 4], [kh(5)]) == [True, True]

    def test_chain_only_sees_kept_dice(self):
        """Test a later modifier ignores dice dropped earlier."""
        # dl1 drops the 1; dl1 again drops the 2
        assert apply_modifiers([1, 2, 3, 4], [dl(1), dl(1)]) == [False, False, True, True]

    def test_drop_then_keep(self):
        """Test dh1 then kl1 on the remaining dice."""
        assert apply_modifiers([6, 1, 4, 3], [dh(1), kl(1)]) == [False, True, False, False]

    def test_modifier_after_everything_dropped(self):
        """Test a modifier with nothing kept is a no-op."""
        assert apply_modifiers([3, 4], [dl(2), kh(1)]) == [False, False]

    def test_kh_zero_drops_all(self):
        """Test kh0 keeps nothing."""
        assert apply_modifiers([3, 4], [kh(0)]) == [False, False]


class TestRollDiceGroup:
    """Tests for roll_dice_group."""

    def test_returns_dice_result(self):
        """Test the result type and shape."""
        result = roll_dice_group(3, 6, (), ScriptedRandomSource([2, 4, 6]))
        assert isinstance(result, DiceResult)
        assert result.rolls == (2, 4, 6)
        assert result.kept == (True, True, True)
        assert result.sum == 12

    def test_sum_only_counts_kept(self):
        """Test dropped dice do not count."""
        result = roll_dice_group(4, 6, (dl(1),), ScriptedRandomSource([5, 2, 4, 6]))
        assert result.sum == 15
        assert result.dropped_rolls == (2,)

    def test_notation(self):
        """Test notation includes every modifier with its count."""
        result = roll_dice_group(4, 6, (dl(1),), ScriptedRandomSource([1, 1, 1, 1]))
        assert result.notation == "4d6dl1"

    def test_notation_without_modifiers(self):
        """Test plain groups render as XdY."""
        result = roll_dice_group(2, 20, (), ScriptedRandomSource([1, 1]))
        assert result.notation == "2d20"
