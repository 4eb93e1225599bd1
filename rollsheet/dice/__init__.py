"""Dice formula engine.

Tokenizes dice formulas, resolves sheet attributes, rolls dice with
keep/drop modifiers and renders auditable roll results.

Usage:
    >>> from rollsheet.dice import execute_roll, tokenize, ScriptedRandomSource
    >>> tokens = tokenize("4d6dl1 + @str")
    >>> outcome = execute_roll(sheet, sheet.find_template("Attack"), rng=ScriptedRandomSource([7]))
"""

# Types
from rollsheet.dice.types import (
    AdhocRollOutcome,
    AttributeRefToken,
    AttributeUsage,
    DiceModifier,
    DiceResult,
    DiceToken,
    FormulaEvaluation,
    FormulaRange,
    LParenToken,
    ModifierKind,
    NumberToken,
    Operator,
    OperatorToken,
    ParsedFormula,
    ResultGroup,
    RollOutcome,
    RParenToken,
    Token,
)

# Exceptions
from rollsheet.dice.exceptions import (
    ArithmeticExpressionError,
    DiceNotationError,
    FormulaError,
    FormulaEvaluationError,
    InvalidFormulaIndexError,
    RandomSourceExhaustedError,
    UnknownAttributeError,
)

# Parsing
from rollsheet.dice.tokenizer import tokenize
from rollsheet.dice.parser import parse_formula, split_formula_groups
from rollsheet.dice.arithmetic import evaluate_arithmetic

# Roller
from rollsheet.dice.roller import (
    RandomSource,
    ScriptedRandomSource,
    SystemRandomSource,
    apply_modifiers,
    default_random_source,
    roll_dice,
    roll_dice_group,
)

# Evaluation
from rollsheet.dice.attributes import build_attribute_map, evaluate_derived_formula
from rollsheet.dice.evaluator import evaluate_formula
from rollsheet.dice.ranges import calculate_formula_range
from rollsheet.dice.conditions import evaluate_super_condition
from rollsheet.dice.display import resolve_display_format

# Orchestration
from rollsheet.dice.rolls import execute_adhoc_roll, execute_roll

__all__ = [
    # Types
    "AdhocRollOutcome",
    "AttributeRefToken",
    "AttributeUsage",
    "DiceModifier",
    "DiceResult",
    "DiceToken",
    "FormulaEvaluation",
    "FormulaRange",
    "LParenToken",
    "ModifierKind",
    "NumberToken",
    "Operator",
    "OperatorToken",
    "ParsedFormula",
    "ResultGroup",
    "RollOutcome",
    "RParenToken",
    "Token",
    # Exceptions
    "ArithmeticExpressionError",
    "DiceNotationError",
    "FormulaError",
    "FormulaEvaluationError",
    "InvalidFormulaIndexError",
    "RandomSourceExhaustedError",
    "UnknownAttributeError",
    # Parsing
    "tokenize",
    "parse_formula",
    "split_formula_groups",
    "evaluate_arithmetic",
    # Roller
    "RandomSource",
    "ScriptedRandomSource",
    "SystemRandomSource",
    "apply_modifiers",
    "default_random_source",
    "roll_dice",
    "roll_dice_group",
    # Evaluation
    "build_attribute_map",
    "evaluate_derived_formula",
    "evaluate_formula",
    "calculate_formula_range",
    "evaluate_super_condition",
    "resolve_display_format",
    # Orchestration
    "execute_roll",
    "execute_adhoc_roll",
]
