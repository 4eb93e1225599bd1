"""Roll commands."""

import random
from pathlib import Path
from typing import Optional

import typer

from rollsheet.cli.display import (
    display_adhoc_outcome,
    display_error,
    display_formula_check,
    display_info,
    display_roll_outcome,
)
from rollsheet.config import get_settings
from rollsheet.dice.exceptions import FormulaError
from rollsheet.dice.parser import parse_formula, split_formula_groups
from rollsheet.dice.ranges import calculate_formula_range
from rollsheet.dice.rolls import execute_adhoc_roll, execute_roll
from rollsheet.dice.roller import RandomSource, SystemRandomSource, default_random_source
from rollsheet.sheet.loader import SheetValidationError, load_sheet


def make_random_source(seed: int | None) -> RandomSource:
    """Seeded source when a seed is given or configured, else the global one."""
    if seed is None:
        seed = get_settings().random_seed
    if seed is None:
        return default_random_source()
    return SystemRandomSource(random.Random(seed))


def roll(
    sheet_path: Path = typer.Argument(..., help="Sheet JSON file"),
    template_name: str = typer.Argument(..., help="Roll template name"),
    variant: int = typer.Option(0, "--variant", "-v", help="Formula variant index"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible rolls"),
) -> None:
    """Execute a roll template from a sheet."""
    try:
        sheet = load_sheet(sheet_path)
        template = sheet.find_template(template_name)
        if template is None:
            display_error(f"No roll template named '{template_name}' on {sheet.name}")
            display_info("Use 'rollsheet templates' to list them")
            raise typer.Exit(1)
        outcome = execute_roll(sheet, template, variant, rng=make_random_source(seed))
    except (FormulaError, SheetValidationError) as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_roll_outcome(outcome)


def say(
    sheet_path: Path = typer.Argument(..., help="Sheet JSON file"),
    message: str = typer.Argument(..., help="Message with [formula] rolls embedded"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible rolls"),
) -> None:
    """Roll every [formula] embedded in a message."""
    try:
        sheet = load_sheet(sheet_path)
    except SheetValidationError as e:
        display_error(str(e))
        raise typer.Exit(1)

    outcome = execute_adhoc_roll(sheet, message, rng=make_random_source(seed))
    display_adhoc_outcome(outcome)


def check(
    formula: str = typer.Argument(..., help="Formula to inspect"),
) -> None:
    """Show how a formula parses and its possible range, without rolling."""
    try:
        groups = []
        for group in split_formula_groups(formula):
            parsed = parse_formula(group)
            groups.append((parsed, calculate_formula_range(parsed.tokens, {})))
    except FormulaError as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_formula_check(formula, groups)
    if any(parsed.attribute_refs for parsed, _ in groups):
        display_info("Attribute references count as 0 in the range")
