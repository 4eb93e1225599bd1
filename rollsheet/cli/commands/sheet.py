"""Sheet inspection commands."""

from pathlib import Path

import typer

from rollsheet.cli.display import display_attributes, display_error, display_templates
from rollsheet.dice.attributes import build_attribute_map
from rollsheet.sheet.loader import SheetValidationError, load_sheet


def templates(
    sheet_path: Path = typer.Argument(..., help="Sheet JSON file"),
) -> None:
    """List a sheet's roll templates and formula variants."""
    try:
        sheet = load_sheet(sheet_path)
    except SheetValidationError as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_templates(sheet)


def attributes(
    sheet_path: Path = typer.Argument(..., help="Sheet JSON file"),
) -> None:
    """List a sheet's attributes with their resolved values."""
    try:
        sheet = load_sheet(sheet_path)
    except SheetValidationError as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_attributes(sheet, build_attribute_map(sheet.attributes))
