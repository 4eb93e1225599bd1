"""Roll execution.

Composes tokenizing, attribute resolution, dice rolling, display text and
super conditions into a single roll against a sheet snapshot.

Two entry points with deliberately different error handling:
- execute_roll() runs a roll template and raises on the first error.
  Every group's references are checked before any die is rolled, so a
  failed roll never consumes randomness.
- execute_adhoc_roll() rolls every [formula] in a free-text message and
  contains failures to the bracket that caused them.
"""

import logging
import re
from collections.abc import Mapping

from rollsheet.config import get_settings
from rollsheet.dice.arithmetic import format_number
from rollsheet.dice.attributes import build_attribute_map
from rollsheet.dice.conditions import evaluate_super_condition
from rollsheet.dice.display import resolve_display_format
from rollsheet.dice.evaluator import evaluate_formula
from rollsheet.dice.exceptions import FormulaError, InvalidFormulaIndexError, UnknownAttributeError
from rollsheet.dice.parser import GROUP_PATTERN, parse_formula, split_formula_groups
from rollsheet.dice.ranges import calculate_formula_range
from rollsheet.dice.roller import RandomSource
from rollsheet.dice.types import (
    AdhocRollOutcome,
    AttributeUsage,
    Number,
    ParsedFormula,
    ResultGroup,
    RollOutcome,
)
from rollsheet.sheet.models import (
    CharacterSheet,
    DerivedAttribute,
    IntegerAttribute,
    RollTemplate,
)

logger = logging.getLogger(__name__)


def _check_references(parsed: ParsedFormula, attribute_map: Mapping[str, Number]) -> None:
    for code in parsed.attribute_refs:
        if code not in attribute_map:
            raise UnknownAttributeError(code)


def _attributes_used(
    sheet: CharacterSheet,
    parsed: ParsedFormula,
    attribute_map: Mapping[str, Number],
) -> tuple[AttributeUsage, ...]:
    used: list[AttributeUsage] = []
    for code in parsed.attribute_refs:
        attribute = sheet.find_attribute(code)
        if isinstance(attribute, IntegerAttribute):
            used.append(AttributeUsage(code=code, name=attribute.name, value=attribute.value))
        elif isinstance(attribute, DerivedAttribute):
            used.append(AttributeUsage(code=code, name=attribute.name, value=attribute_map.get(code, 0)))
    return tuple(used)


def _evaluate_group(
    formula: str,
    parsed: ParsedFormula,
    sheet: CharacterSheet,
    attribute_map: Mapping[str, Number],
    rng: RandomSource | None,
) -> ResultGroup:
    evaluation = evaluate_formula(parsed.tokens, attribute_map, rng)
    return ResultGroup(
        formula=formula,
        expanded_formula=evaluation.expanded_formula,
        dice_results=evaluation.dice_results,
        attributes_used=_attributes_used(sheet, parsed, attribute_map),
        total=evaluation.total,
    )


def execute_roll(
    sheet: CharacterSheet,
    template: RollTemplate,
    formula_index: int = 0,
    rng: RandomSource | None = None,
) -> RollOutcome:
    """Execute a roll template against a sheet.

    Args:
        sheet: Sheet snapshot supplying attributes and the character name.
        template: The roll template to execute.
        formula_index: Which formula variant to roll.
        rng: Random source; the process-wide source when omitted.

    Returns:
        RollOutcome whose primary fields describe the first bracket group.
        result_groups lists every group when there is more than one.

    Raises:
        InvalidFormulaIndexError: If formula_index is out of range.
        DiceNotationError: If any group has malformed dice notation.
        UnknownAttributeError: If any group references a missing attribute.
            Raised before any dice are rolled.
        FormulaEvaluationError: If a group's arithmetic is malformed.
    """
    if not 0 <= formula_index < len(template.formulas):
        raise InvalidFormulaIndexError(formula_index, len(template.formulas))

    variant = template.formulas[formula_index]
    attribute_map = build_attribute_map(sheet.attributes)

    group_formulas = split_formula_groups(variant.formula)
    parsed_groups = [parse_formula(formula) for formula in group_formulas]
    for parsed in parsed_groups:
        _check_references(parsed, attribute_map)

    groups = [
        _evaluate_group(formula, parsed, sheet, attribute_map, rng)
        for formula, parsed in zip(group_formulas, parsed_groups)
    ]
    primary = groups[0]
    totals = [group.total for group in groups]

    display_format = template.display_format
    if not display_format or not display_format.strip():
        display_format = get_settings().default_display_format.replace("{template}", template.name)
    display_text = resolve_display_format(
        display_format,
        sheet.attributes,
        totals,
        sheet.name,
        variant.title,
    )

    is_super = False
    if template.super_condition and template.super_condition.strip():
        bounds = calculate_formula_range(parsed_groups[0].tokens, attribute_map)
        is_super = evaluate_super_condition(
            template.super_condition,
            primary.total,
            bounds.minimum,
            bounds.maximum,
        )

    template_name = template.name
    if len(template.formulas) > 1:
        template_name += f" ({variant.title})"

    logger.debug(
        f"Rolled {template_name!r} for {sheet.name!r}: {display_text} "
        f"(groups={len(groups)}, super={is_super})"
    )

    return RollOutcome(
        template_name=template_name,
        character_name=sheet.name,
        display_text=display_text,
        formula=primary.formula,
        expanded_formula=primary.expanded_formula,
        dice_results=primary.dice_results,
        attributes_used=primary.attributes_used,
        total=primary.total,
        result_groups=tuple(groups) if len(groups) > 1 else None,
        is_super=is_super,
    )


def execute_adhoc_roll(
    sheet: CharacterSheet,
    message: str,
    rng: RandomSource | None = None,
) -> AdhocRollOutcome:
    """Roll every [formula] embedded in a free-text message.

    A bracket that fails (bad notation, unknown attribute, malformed
    arithmetic) yields a group with total 0 and its error message, and is
    shown as the configured error placeholder; the other brackets still
    roll.

    Args:
        sheet: Sheet snapshot supplying attributes and the character name.
        message: Text such as "I swing [1d20+@str] for [1d8+@str] damage".
        rng: Random source; the process-wide source when omitted.

    Returns:
        AdhocRollOutcome with the message's brackets replaced by their totals.
    """
    attribute_map = build_attribute_map(sheet.attributes)
    placeholder = get_settings().adhoc_error_placeholder
    groups: list[ResultGroup] = []

    def substitute(match: re.Match) -> str:
        formula = match.group(1)
        try:
            parsed = parse_formula(formula)
            _check_references(parsed, attribute_map)
            group = _evaluate_group(formula, parsed, sheet, attribute_map, rng)
        except FormulaError as e:
            logger.debug(f"Ad-hoc group [{formula}] failed: {e}")
            groups.append(
                ResultGroup(
                    formula=formula,
                    expanded_formula="",
                    dice_results=(),
                    attributes_used=(),
                    total=0,
                    error=str(e),
                )
            )
            return placeholder
        groups.append(group)
        return format_number(group.total)

    display_text = GROUP_PATTERN.sub(substitute, message)

    return AdhocRollOutcome(
        message=message,
        character_name=sheet.name,
        display_text=display_text,
        result_groups=tuple(groups),
    )
