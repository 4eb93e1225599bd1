"""Character sheet model and JSON import/export."""

from rollsheet.sheet.models import (
    RESERVED_CODES,
    Attribute,
    CharacterSheet,
    DerivedAttribute,
    HeadingAttribute,
    IntegerAttribute,
    RollFormulaVariant,
    RollTemplate,
    RollTemplateHeading,
    StringAttribute,
)
from rollsheet.sheet.loader import SheetValidationError, export_sheet, load_sheet, parse_sheet

__all__ = [
    "RESERVED_CODES",
    "Attribute",
    "CharacterSheet",
    "DerivedAttribute",
    "HeadingAttribute",
    "IntegerAttribute",
    "RollFormulaVariant",
    "RollTemplate",
    "RollTemplateHeading",
    "StringAttribute",
    "SheetValidationError",
    "export_sheet",
    "load_sheet",
    "parse_sheet",
]
