"""Character sheet domain model.

Immutable dataclasses for attributes, roll templates and the sheet that
holds them. The dice engine reads these as a snapshot and never mutates
them.
"""

import re
from dataclasses import dataclass, field
from typing import Union

# Codes used structurally by display and condition templates
RESERVED_CODES = frozenset({"result", "maximum", "minimum", "name"})

CODE_PATTERN = re.compile(r"^[a-z_]+$")


def is_valid_code(code: str) -> bool:
    """Check that a code uses only [a-z_] and is not reserved."""
    return bool(CODE_PATTERN.match(code)) and code not in RESERVED_CODES


# =============================================================================
# Attributes
# =============================================================================


@dataclass(frozen=True)
class StringAttribute:
    """Free text such as a class or background."""

    code: str
    value: str
    name: str = ""


@dataclass(frozen=True)
class IntegerAttribute:
    """A plain number such as a stat or level."""

    code: str
    value: int
    name: str = ""


@dataclass(frozen=True)
class DerivedAttribute:
    """A value computed from other attributes, e.g. "floor((@str - 10) / 2)"."""

    code: str
    formula: str
    name: str = ""


@dataclass(frozen=True)
class HeadingAttribute:
    """A code-less separator grouping attributes on the sheet."""

    name: str
    collapsed: bool = False


Attribute = Union[StringAttribute, IntegerAttribute, DerivedAttribute, HeadingAttribute]

CodedAttribute = Union[StringAttribute, IntegerAttribute, DerivedAttribute]


def attribute_code(attribute: Attribute) -> str | None:
    """Get an attribute's code, or None for headings."""
    if isinstance(attribute, (StringAttribute, IntegerAttribute, DerivedAttribute)):
        return attribute.code
    if isinstance(attribute, HeadingAttribute):
        return None
    raise TypeError(f"Unknown attribute type: {type(attribute).__name__}")


# =============================================================================
# Roll templates
# =============================================================================


@dataclass(frozen=True)
class RollFormulaVariant:
    """One of the alternative formulas a template offers.

    Attributes:
        title: Label shown for the variant, e.g. "Advantage".
        formula: Dice formula, optionally with [..] groups.
    """

    title: str
    formula: str


@dataclass(frozen=True)
class RollTemplate:
    """A named roll on the sheet.

    Attributes:
        name: Template name, e.g. "Longsword".
        formulas: Formula variants; the first is the default.
        display_format: Text with {result}, {resultN}, {name}, {variant}
            and {code} placeholders. Blank means "<name>: {result}".
        super_condition: Optional comparison like "{result} >= {maximum}"
            flagging exceptional rolls.
    """

    name: str
    formulas: tuple[RollFormulaVariant, ...]
    display_format: str = ""
    super_condition: str | None = None


@dataclass(frozen=True)
class RollTemplateHeading:
    """A separator grouping roll templates on the sheet."""

    name: str
    collapsed: bool = False


TemplateEntry = Union[RollTemplate, RollTemplateHeading]


# =============================================================================
# Sheet
# =============================================================================


@dataclass(frozen=True)
class CharacterSheet:
    """A read-only snapshot of a character sheet.

    Attributes:
        name: Character name, substituted for {name} in display text.
        attributes: Attributes in sheet order. Order matters for derived
            attributes, which can only read values defined before them.
        roll_templates: Roll templates and headings in sheet order.
        id: Host-assigned identifier, if any.
        initials: Optional one or two character badge.
    """

    name: str
    attributes: tuple[Attribute, ...] = field(default_factory=tuple)
    roll_templates: tuple[TemplateEntry, ...] = field(default_factory=tuple)
    id: str | None = None
    initials: str | None = None

    @property
    def rollable_templates(self) -> tuple[RollTemplate, ...]:
        return tuple(t for t in self.roll_templates if isinstance(t, RollTemplate))

    def find_template(self, name: str) -> RollTemplate | None:
        """Find a rollable template by name (case-insensitive)."""
        wanted = name.strip().lower()
        for template in self.rollable_templates:
            if template.name.lower() == wanted:
                return template
        return None

    def find_attribute(self, code: str) -> CodedAttribute | None:
        """Find an attribute by code (case-insensitive)."""
        wanted = code.lower()
        for attribute in self.attributes:
            if attribute_code(attribute) == wanted:
                return attribute
        return None
