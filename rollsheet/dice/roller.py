"""Core dice rolling engine.

Rolls dice groups and applies keep/drop modifiers. Randomness comes from
an injectable RandomSource so callers can replay fixed sequences; the
default source draws from the process-wide random module.
"""

import random
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from rollsheet.dice.exceptions import RandomSourceExhaustedError
from rollsheet.dice.types import DiceModifier, DiceResult, ModifierKind


@runtime_checkable
class RandomSource(Protocol):
    """Provider of die results."""

    def next_roll(self, sides: int) -> int:
        """Return a uniform integer in [1, sides]."""
        ...


class SystemRandomSource:
    """Draws from a random.Random instance (the global generator by default).

    Args:
        rng: Generator to draw from. Pass random.Random(seed) for
            reproducible rolls.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    def next_roll(self, sides: int) -> int:
        if self._rng is None:
            return random.randint(1, sides)
        return self._rng.randint(1, sides)


class ScriptedRandomSource:
    """Replays a fixed sequence of die results.

    Values are handed out in order regardless of the die size requested.

    Args:
        values: The die results to return.
    """

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self._pos

    @property
    def consumed(self) -> int:
        return self._pos

    def next_roll(self, sides: int) -> int:
        if self._pos >= len(self._values):
            raise RandomSourceExhaustedError(
                f"Random source exhausted after {self._pos} roll(s)"
            )
        value = self._values[self._pos]
        self._pos += 1
        return value


_DEFAULT_SOURCE = SystemRandomSource()


def default_random_source() -> RandomSource:
    """Get the process-wide random source."""
    return _DEFAULT_SOURCE


def roll_dice(count: int, sides: int, rng: RandomSource | None = None) -> list[int]:
    """Roll count independent dice with the given number of sides.

    Args:
        count: Number of dice.
        sides: Sides per die.
        rng: Random source; the process-wide source when omitted.

    Returns:
        Each die's result, in roll order.

    Examples:
        >>> len(roll_dice(4, 6))
        4
    """
    source = rng if rng is not None else default_random_source()
    return [source.next_roll(sides) for _ in range(count)]


def apply_modifiers(rolls: Sequence[int], modifiers: Sequence[DiceModifier]) -> list[bool]:
    """Work out which dice survive a chain of keep/drop modifiers.

    Each modifier only sees the dice kept by the ones before it. Ties are
    broken by roll order: among equal values the earlier die is picked
    first, whether the modifier is looking for the lowest or the highest.

    Args:
        rolls: Die results.
        modifiers: Modifiers to apply, in order.

    Returns:
        Mask parallel to rolls; True for dice that count toward the sum.

    Examples:
        >>> apply_modifiers([5, 3, 3, 1], [DiceModifier(ModifierKind.KEEP_HIGHEST, 2)])
        [True, True, False, False]
    """
    kept = [True] * len(rolls)

    for modifier in modifiers:
        kept_indices = [i for i in range(len(rolls)) if kept[i]]
        if not kept_indices:
            continue

        # sorted() is stable, which fixes tie-breaking
        lowest_first = sorted(kept_indices, key=lambda i: rolls[i])
        highest_first = sorted(kept_indices, key=lambda i: -rolls[i])
        n = min(modifier.count, len(kept_indices))

        if modifier.kind == ModifierKind.DROP_LOWEST:
            dropped = lowest_first[:n]
        elif modifier.kind == ModifierKind.DROP_HIGHEST:
            dropped = highest_first[:n]
        elif modifier.kind == ModifierKind.KEEP_LOWEST:
            dropped = lowest_first[n:]
        elif modifier.kind == ModifierKind.KEEP_HIGHEST:
            dropped = highest_first[n:]
        else:
            raise TypeError(f"Unknown modifier kind: {modifier.kind!r}")

        for i in dropped:
            kept[i] = False

    return kept


def format_notation(count: int, sides: int, modifiers: Sequence[DiceModifier]) -> str:
    """Render canonical notation like 4d6dl1."""
    return f"{count}d{sides}" + "".join(m.notation for m in modifiers)


def roll_dice_group(
    count: int,
    sides: int,
    modifiers: Sequence[DiceModifier] = (),
    rng: RandomSource | None = None,
) -> DiceResult:
    """Roll a dice group and apply its modifiers.

    Args:
        count: Number of dice.
        sides: Sides per die.
        modifiers: Keep/drop modifiers, applied in order.
        rng: Random source; the process-wide source when omitted.

    Returns:
        DiceResult with every roll, the kept mask and the kept sum.
    """
    rolls = roll_dice(count, sides, rng)
    kept = apply_modifiers(rolls, modifiers)
    total = sum(r for r, k in zip(rolls, kept) if k)

    return DiceResult(
        notation=format_notation(count, sides, modifiers),
        rolls=tuple(rolls),
        kept=tuple(kept),
        sum=total,
    )
