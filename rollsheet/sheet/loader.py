"""Sheet import/export.

Reads and writes the JSON sheet document:

    {
      "name": "Mira",
      "initials": "MI",
      "attributes": [
        {"type": "integer", "name": "Strength", "code": "str", "value": 14},
        {"type": "derived", "name": "Str Mod", "code": "str_mod",
         "formula": "floor((@str - 10) / 2)"}
      ],
      "rollTemplates": [
        {"type": "roll", "name": "Attack",
         "formulas": [{"title": "Normal", "formula": "1d20+@str_mod"}],
         "displayFormat": "{name} attacks: {result}",
         "superCondition": "{result} >= {maximum}"}
      ]
    }

Documents are validated with pydantic and converted to the immutable
dataclasses in rollsheet.sheet.models.
"""

import json
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from rollsheet.config import get_settings
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
    TemplateEntry,
    is_valid_code,
)


class SheetValidationError(ValueError):
    """A sheet document is missing, unreadable or invalid."""

    pass


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Attribute schemas
# =============================================================================


class _CodedAttributeSchema(_Schema):
    name: str = ""
    code: str

    @field_validator("code")
    @classmethod
    def validate_code(cls, code: str) -> str:
        if not is_valid_code(code):
            if code in RESERVED_CODES:
                raise ValueError(f"code {code!r} is reserved")
            raise ValueError(f"code {code!r} must use only lowercase letters and underscores")
        return code


class StringAttributeSchema(_CodedAttributeSchema):
    type: Literal["string"]
    value: str = ""

    def to_model(self) -> StringAttribute:
        return StringAttribute(code=self.code, value=self.value, name=self.name)


class IntegerAttributeSchema(_CodedAttributeSchema):
    type: Literal["integer"]
    value: int = 0

    def to_model(self) -> IntegerAttribute:
        return IntegerAttribute(code=self.code, value=self.value, name=self.name)


class DerivedAttributeSchema(_CodedAttributeSchema):
    type: Literal["derived"]
    formula: str = ""

    def to_model(self) -> DerivedAttribute:
        return DerivedAttribute(code=self.code, formula=self.formula, name=self.name)


class HeadingAttributeSchema(_Schema):
    type: Literal["heading"]
    name: str = ""
    collapsed: bool = False

    def to_model(self) -> HeadingAttribute:
        return HeadingAttribute(name=self.name, collapsed=self.collapsed)


AttributeSchema = Annotated[
    Union[StringAttributeSchema, IntegerAttributeSchema, DerivedAttributeSchema, HeadingAttributeSchema],
    Field(discriminator="type"),
]


# =============================================================================
# Roll template schemas
# =============================================================================


class RollFormulaSchema(_Schema):
    title: str = ""
    formula: str

    def to_model(self) -> RollFormulaVariant:
        return RollFormulaVariant(title=self.title, formula=self.formula)


class RollTemplateSchema(_Schema):
    type: Literal["roll"]
    name: str
    formulas: list[RollFormulaSchema] = Field(min_length=1)
    display_format: str = Field("", alias="displayFormat")
    super_condition: str | None = Field(None, alias="superCondition")

    def to_model(self) -> RollTemplate:
        return RollTemplate(
            name=self.name,
            formulas=tuple(f.to_model() for f in self.formulas),
            display_format=self.display_format,
            super_condition=self.super_condition or None,
        )


class RollTemplateHeadingSchema(_Schema):
    type: Literal["heading"]
    name: str = ""
    collapsed: bool = False

    def to_model(self) -> RollTemplateHeading:
        return RollTemplateHeading(name=self.name, collapsed=self.collapsed)


TemplateSchema = Annotated[
    Union[RollTemplateSchema, RollTemplateHeadingSchema],
    Field(discriminator="type"),
]


# =============================================================================
# Sheet schema
# =============================================================================


class SheetSchema(_Schema):
    """The exported sheet document."""

    name: str = Field(min_length=1)
    initials: str | None = Field(None, max_length=2)
    attributes: list[AttributeSchema] = Field(default_factory=list)
    roll_templates: list[TemplateSchema] = Field(default_factory=list, alias="rollTemplates")

    @model_validator(mode="after")
    def validate_unique_codes(self) -> "SheetSchema":
        seen: set[str] = set()
        for attribute in self.attributes:
            code = getattr(attribute, "code", None)
            if code is None:
                continue
            if code in seen:
                raise ValueError(f"duplicate attribute code {code!r}")
            seen.add(code)
        return self

    def to_model(self) -> CharacterSheet:
        return CharacterSheet(
            name=self.name,
            initials=self.initials or None,
            attributes=tuple(a.to_model() for a in self.attributes),
            roll_templates=tuple(t.to_model() for t in self.roll_templates),
        )


# =============================================================================
# Public API
# =============================================================================


def parse_sheet(data: dict[str, Any]) -> CharacterSheet:
    """Validate a sheet document and build the sheet.

    Args:
        data: Decoded JSON document.

    Returns:
        The CharacterSheet it describes.

    Raises:
        SheetValidationError: If the document is invalid.
    """
    try:
        schema = SheetSchema.model_validate(data)
    except ValidationError as e:
        raise SheetValidationError(f"Invalid sheet: {e}") from e
    return schema.to_model()


def load_sheet(path: str | Path) -> CharacterSheet:
    """Load a sheet from a JSON file.

    Raises:
        SheetValidationError: If the file cannot be read, is not JSON, or
            is not a valid sheet.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=get_settings().sheet_encoding)
    except OSError as e:
        raise SheetValidationError(f"Cannot read sheet file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SheetValidationError(f"Sheet file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SheetValidationError(f"Sheet file {path} must contain a JSON object")
    return parse_sheet(data)


def _export_attribute(attribute: Attribute) -> dict[str, Any]:
    if isinstance(attribute, StringAttribute):
        return {"type": "string", "name": attribute.name, "code": attribute.code, "value": attribute.value}
    if isinstance(attribute, IntegerAttribute):
        return {"type": "integer", "name": attribute.name, "code": attribute.code, "value": attribute.value}
    if isinstance(attribute, DerivedAttribute):
        return {"type": "derived", "name": attribute.name, "code": attribute.code, "formula": attribute.formula}
    if isinstance(attribute, HeadingAttribute):
        return {"type": "heading", "name": attribute.name, "collapsed": attribute.collapsed}
    raise TypeError(f"Unknown attribute type: {type(attribute).__name__}")


def _export_template(template: TemplateEntry) -> dict[str, Any]:
    if isinstance(template, RollTemplate):
        data: dict[str, Any] = {
            "type": "roll",
            "name": template.name,
            "formulas": [{"title": f.title, "formula": f.formula} for f in template.formulas],
            "displayFormat": template.display_format,
        }
        if template.super_condition:
            data["superCondition"] = template.super_condition
        return data
    if isinstance(template, RollTemplateHeading):
        return {"type": "heading", "name": template.name, "collapsed": template.collapsed}
    raise TypeError(f"Unknown roll template type: {type(template).__name__}")


def export_sheet(sheet: CharacterSheet) -> dict[str, Any]:
    """Render a sheet as a JSON-ready document (the format parse_sheet reads)."""
    data: dict[str, Any] = {"name": sheet.name}
    if sheet.initials:
        data["initials"] = sheet.initials
    data["attributes"] = [_export_attribute(a) for a in sheet.attributes]
    data["rollTemplates"] = [_export_template(t) for t in sheet.roll_templates]
    return data
