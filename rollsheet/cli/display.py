"""Rich display helpers for CLI output."""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rollsheet.dice.arithmetic import format_number
from rollsheet.dice.evaluator import format_dice_rolls
from rollsheet.dice.types import (
    AdhocRollOutcome,
    AttributeRefToken,
    DiceResult,
    DiceToken,
    FormulaRange,
    LParenToken,
    NumberToken,
    OperatorToken,
    ParsedFormula,
    ResultGroup,
    RollOutcome,
    RParenToken,
    Token,
)
from rollsheet.sheet.models import (
    CharacterSheet,
    DerivedAttribute,
    HeadingAttribute,
    IntegerAttribute,
    RollTemplate,
    RollTemplateHeading,
    StringAttribute,
)

# Shared console instance
console = Console()


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def display_info(message: str) -> None:
    """Display info message.

    Args:
        message: Info message.
    """
    console.print(f"[dim]{escape(message)}[/dim]")


def _dice_breakdown(results: tuple[DiceResult, ...]) -> str:
    """Render dice like '4d6dl1: [5,~2~,4,6] = 15'."""
    return "  ".join(f"{r.notation}: {format_dice_rolls(r)} = {r.sum}" for r in results)


def _group_lines(group: ResultGroup, label: str | None = None) -> list[str]:
    prefix = f"[bold]{escape(label)}[/bold] " if label else ""
    if group.failed:
        return [f"{prefix}[red]{escape(group.formula)} → {escape(group.error or '')}[/red]"]
    lines = [
        f"{prefix}[cyan]{escape(group.formula)}[/cyan] → "
        f"{escape(group.expanded_formula)} = [bold]{format_number(group.total)}[/bold]"
    ]
    if group.dice_results:
        lines.append(f"  [dim]{escape(_dice_breakdown(group.dice_results))}[/dim]")
    if group.attributes_used:
        used = ", ".join(f"{a.code}: {a.value}" for a in group.attributes_used)
        lines.append(f"  [dim]{escape(used)}[/dim]")
    return lines


def display_roll_outcome(outcome: RollOutcome) -> None:
    """Display a structured roll with its breakdown.

    Args:
        outcome: The roll to show.
    """
    groups = outcome.result_groups or (
        ResultGroup(
            formula=outcome.formula,
            expanded_formula=outcome.expanded_formula,
            dice_results=outcome.dice_results,
            attributes_used=outcome.attributes_used,
            total=outcome.total,
        ),
    )
    lines = [f"[bold]{escape(outcome.display_text)}[/bold]"]
    if outcome.is_super:
        lines[0] += "  [bold yellow]★ SUPER[/bold yellow]"
    lines.append("")
    for i, group in enumerate(groups, start=1):
        label = f"#{i}" if len(groups) > 1 else None
        lines.extend(_group_lines(group, label))

    title = f"{escape(outcome.character_name)} · {escape(outcome.template_name)}"
    border = "yellow" if outcome.is_super else "cyan"
    console.print(Panel("\n".join(lines), title=title, border_style=border, padding=(1, 2)))


def display_adhoc_outcome(outcome: AdhocRollOutcome) -> None:
    """Display an ad-hoc message roll.

    Args:
        outcome: The roll to show.
    """
    lines = [f"[bold]{escape(outcome.display_text)}[/bold]"]
    if outcome.result_groups:
        lines.append("")
        for i, group in enumerate(outcome.result_groups, start=1):
            lines.extend(_group_lines(group, f"#{i}"))
    border = "red" if outcome.has_errors else "cyan"
    console.print(
        Panel("\n".join(lines), title=escape(outcome.character_name), border_style=border, padding=(1, 2))
    )


def display_attributes(sheet: CharacterSheet, resolved: dict) -> None:
    """Display a sheet's attributes with their resolved values.

    Args:
        sheet: The sheet.
        resolved: Map of code to resolved numeric value.
    """
    table = Table(title=f"{escape(sheet.name)} · Attributes", box=box.ROUNDED)
    table.add_column("Code", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Type", style="dim")
    table.add_column("Value", justify="right", style="yellow")

    for attribute in sheet.attributes:
        if isinstance(attribute, HeadingAttribute):
            table.add_row("", f"[bold]{escape(attribute.name)}[/bold]", "", "")
        elif isinstance(attribute, StringAttribute):
            table.add_row(attribute.code, escape(attribute.name), "string", escape(attribute.value))
        elif isinstance(attribute, IntegerAttribute):
            table.add_row(attribute.code, escape(attribute.name), "integer", str(attribute.value))
        elif isinstance(attribute, DerivedAttribute):
            if attribute.code in resolved:
                value = format_number(resolved[attribute.code])
            else:
                value = "[red]unresolved[/red]"
            table.add_row(
                attribute.code,
                escape(attribute.name),
                f"= {escape(attribute.formula)}",
                value,
            )

    console.print(table)


def display_templates(sheet: CharacterSheet) -> None:
    """Display a sheet's roll templates and their formula variants.

    Args:
        sheet: The sheet.
    """
    table = Table(title=f"{escape(sheet.name)} · Roll Templates", box=box.ROUNDED)
    table.add_column("Template", style="white")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Variant", style="green")
    table.add_column("Formula", style="cyan")
    table.add_column("Super", style="yellow")

    for template in sheet.roll_templates:
        if isinstance(template, RollTemplateHeading):
            table.add_row(f"[bold]{escape(template.name)}[/bold]", "", "", "", "")
        elif isinstance(template, RollTemplate):
            for i, variant in enumerate(template.formulas):
                table.add_row(
                    escape(template.name) if i == 0 else "",
                    str(i),
                    escape(variant.title),
                    escape(variant.formula),
                    escape(template.super_condition or "") if i == 0 else "",
                )

    console.print(table)


def display_formula_check(formula: str, groups: list[tuple[ParsedFormula, FormulaRange]]) -> None:
    """Display the parsed structure of a formula without rolling it.

    Args:
        formula: The formula text as given.
        groups: Parsed form and range of each bracket group.
    """
    table = Table(title=escape(formula), box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Tokens", style="cyan")
    table.add_column("References", style="green")
    table.add_column("Min", justify="right", style="yellow")
    table.add_column("Max", justify="right", style="yellow")

    for i, (parsed, bounds) in enumerate(groups, start=1):
        table.add_row(
            str(i),
            escape(" ".join(_describe_token(t) for t in parsed.tokens)),
            ", ".join(f"@{code}" for code in parsed.attribute_refs),
            format_number(bounds.minimum),
            format_number(bounds.maximum),
        )

    console.print(table)


def _describe_token(token: Token) -> str:
    if isinstance(token, DiceToken):
        return token.notation
    if isinstance(token, AttributeRefToken):
        return f"@{token.code}"
    if isinstance(token, OperatorToken):
        return token.op.value
    if isinstance(token, NumberToken):
        return str(token.value)
    if isinstance(token, LParenToken):
        return "("
    if isinstance(token, RParenToken):
        return ")"
    raise TypeError(f"Unknown token type: {type(token).__name__}")
