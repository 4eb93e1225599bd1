"""Core test fixtures for rollsheet tests."""

import json
import os

import pytest

from rollsheet.config import get_settings
from rollsheet.sheet.models import (
    CharacterSheet,
    DerivedAttribute,
    HeadingAttribute,
    IntegerAttribute,
    RollFormulaVariant,
    RollTemplate,
    RollTemplateHeading,
    StringAttribute,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep ROLLSHEET_* variables from the environment out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("ROLLSHEET_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def attack_template() -> RollTemplate:
    """Single-variant attack roll with a natural-max super condition."""
    return RollTemplate(
        name="Attack",
        formulas=(RollFormulaVariant(title="Normal", formula="1d20+@str"),),
        display_format="{name} attacks: {result}",
        super_condition="{result} >= {maximum}",
    )


@pytest.fixture
def sheet(attack_template) -> CharacterSheet:
    """A small sheet exercising every attribute type."""
    return CharacterSheet(
        name="Mira",
        attributes=(
            HeadingAttribute(name="Stats"),
            StringAttribute(code="class_name", value="Ranger", name="Class"),
            IntegerAttribute(code="str", value=3, name="Strength"),
            IntegerAttribute(code="level", value=5, name="Level"),
            DerivedAttribute(code="prof", formula="ceil(@level / 4) + 1", name="Proficiency"),
            DerivedAttribute(code="half_str", formula="floor(@str / 2)", name="Half Strength"),
        ),
        roll_templates=(
            RollTemplateHeading(name="Combat"),
            attack_template,
            RollTemplate(
                name="Sword",
                formulas=(
                    RollFormulaVariant(title="Normal", formula="[1d20+@str+@prof][1d8+@str]"),
                    RollFormulaVariant(title="Advantage", formula="[2d20kh1+@str+@prof][1d8+@str]"),
                ),
                display_format="{name} swings ({variant}): hit {result1}, damage {result2}",
            ),
            RollTemplate(
                name="Stat Roll",
                formulas=(RollFormulaVariant(title="Standard", formula="4d6dl1"),),
            ),
        ),
    )


@pytest.fixture
def sheet_document() -> dict:
    """Exported sheet document matching the JSON import format."""
    return {
        "name": "Mira",
        "initials": "MI",
        "attributes": [
            {"type": "heading", "name": "Stats", "collapsed": False},
            {"type": "string", "name": "Class", "code": "class_name", "value": "Ranger"},
            {"type": "integer", "name": "Strength", "code": "str", "value": 3},
            {"type": "derived", "name": "Half Strength", "code": "half_str", "formula": "floor(@str / 2)"},
        ],
        "rollTemplates": [
            {"type": "heading", "name": "Combat", "collapsed": False},
            {
                "type": "roll",
                "name": "Attack",
                "formulas": [
                    {"title": "Normal", "formula": "1d20+@str"},
                    {"title": "Advantage", "formula": "2d20kh1+@str"},
                ],
                "displayFormat": "{name} attacks: {result}",
                "superCondition": "{result} >= {maximum}",
            },
            {
                "type": "roll",
                "name": "Damage",
                "formulas": [{"title": "Sword", "formula": "[1d8+@str][1d6]"}],
                "displayFormat": "",
            },
        ],
    }


@pytest.fixture
def sheet_file(tmp_path, sheet_document):
    """The sheet document written to a temporary JSON file."""
    path = tmp_path / "mira.json"
    path.write_text(json.dumps(sheet_document), encoding="utf-8")
    return path
