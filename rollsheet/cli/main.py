"""Main CLI application for rollsheet."""

import logging

import typer
from rich.logging import RichHandler

from rollsheet.cli.commands import roll, sheet
from rollsheet.config import get_settings

# Create main app
app = typer.Typer(
    name="rollsheet",
    help="Roll dice formulas against character sheet attributes",
    add_completion=True,
)

app.command("roll")(roll.roll)
app.command("say")(roll.say)
app.command("check")(roll.check)
app.command("templates")(sheet.templates)
app.command("attributes")(sheet.attributes)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich at the configured level."""
    level = logging.DEBUG if verbose else get_settings().effective_log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """rollsheet - dice formulas with attributes, keep/drop and super rolls.

    Use 'rollsheet templates SHEET' to see what a sheet can roll, then
    'rollsheet roll SHEET TEMPLATE' to roll it.
    """
    configure_logging(verbose)


if __name__ == "__main__":
    app()
