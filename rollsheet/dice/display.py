"""Display text resolution for roll results."""

import re
from collections.abc import Sequence

from rollsheet.dice.arithmetic import format_number
from rollsheet.dice.attributes import build_attribute_map
from rollsheet.dice.types import Number
from rollsheet.sheet.models import (
    Attribute,
    DerivedAttribute,
    HeadingAttribute,
    IntegerAttribute,
    StringAttribute,
)

_PLACEHOLDER_RE = re.compile(r"\{([a-z_]+)(\d*)\}", re.IGNORECASE)


def resolve_display_format(
    display_format: str,
    attributes: Sequence[Attribute],
    totals: Sequence[Number],
    sheet_name: str,
    variant_title: str | None = None,
) -> str:
    """Fill in a roll template's display format.

    Placeholders, filled in a single left-to-right pass:
        {result} / {resultN}: total of the first / Nth group (1-based).
        {name}: the sheet's name.
        {variant}: the chosen formula variant's title ("" if none).
        {code}: any attribute's value; derived attributes are evaluated.
    Placeholders that cannot be resolved are left as written. Substituted
    text is never scanned again, so a name or variant title containing
    braces appears verbatim.

    Args:
        display_format: Template text, e.g. "{name} hits for {result2}".
        attributes: The sheet's attributes.
        totals: Group totals in order.
        sheet_name: Character name.
        variant_title: Title of the formula variant that was rolled.

    Returns:
        The resolved text.

    Examples:
        >>> resolve_display_format("{name} rolled {result}", [], [14], "Mira")
        'Mira rolled 14'
    """
    resolved: dict[str, Number] | None = None

    def substitute_code(code: str) -> str | None:
        nonlocal resolved
        for attribute in attributes:
            if isinstance(attribute, HeadingAttribute):
                continue
            if isinstance(attribute, (StringAttribute, IntegerAttribute, DerivedAttribute)):
                if attribute.code != code:
                    continue
                if isinstance(attribute, StringAttribute):
                    return attribute.value
                if isinstance(attribute, IntegerAttribute):
                    return format_number(attribute.value)
                if resolved is None:
                    resolved = build_attribute_map(attributes)
                if code in resolved:
                    return format_number(resolved[code])
                return None
            raise TypeError(f"Unknown attribute type: {type(attribute).__name__}")
        return None

    def substitute_placeholder(key: str, digits: str) -> str | None:
        if key == "result":
            index = int(digits) - 1 if digits else 0
            return format_number(totals[index]) if 0 <= index < len(totals) else None
        if digits:
            return None
        if key == "name":
            return sheet_name
        if key == "variant":
            return variant_title or ""
        return substitute_code(key)

    def substitute(match: re.Match) -> str:
        value = substitute_placeholder(match.group(1).lower(), match.group(2))
        return match.group(0) if value is None else value

    return _PLACEHOLDER_RE.sub(substitute, display_format)
