"""Attribute resolution.

Reduces a sheet's attribute list to a code -> number map. Integer
attributes are copied as-is; derived attributes are evaluated in list
order, so a derived attribute can only read integers and derived
attributes that appear before it. Derived attributes whose formula fails
are left out of the map rather than raising.
"""

import logging
import re
from collections.abc import Mapping, Sequence

from rollsheet.dice.arithmetic import evaluate_arithmetic, format_number
from rollsheet.dice.exceptions import FormulaError, UnknownAttributeError
from rollsheet.dice.types import Number
from rollsheet.sheet.models import (
    Attribute,
    DerivedAttribute,
    HeadingAttribute,
    IntegerAttribute,
    StringAttribute,
)

logger = logging.getLogger(__name__)

_REFERENCE_RE = re.compile(r"@([a-z_]+)", re.IGNORECASE)


def build_attribute_map(attributes: Sequence[Attribute]) -> dict[str, Number]:
    """Resolve every numeric attribute on a sheet.

    Args:
        attributes: Attributes in sheet order.

    Returns:
        Map of code to value for integer attributes and for derived
        attributes whose formula could be evaluated.

    Examples:
        >>> build_attribute_map([
        ...     IntegerAttribute(code="str", value=3),
        ...     DerivedAttribute(code="mod", formula="floor(@str/2)"),
        ... ])
        {'str': 3, 'mod': 1}
    """
    values: dict[str, Number] = {}

    for attribute in attributes:
        if isinstance(attribute, IntegerAttribute):
            values[attribute.code] = attribute.value

    for attribute in attributes:
        if isinstance(attribute, DerivedAttribute):
            try:
                values[attribute.code] = evaluate_derived_formula(attribute.formula, values)
            except FormulaError as e:
                logger.debug(f"Skipping derived attribute @{attribute.code}: {e}")
        elif not isinstance(attribute, (IntegerAttribute, StringAttribute, HeadingAttribute)):
            raise TypeError(f"Unknown attribute type: {type(attribute).__name__}")

    return values


def evaluate_derived_formula(formula: str, values: Mapping[str, Number]) -> Number:
    """Evaluate a derived attribute formula.

    Supports @code references, + - * /, parentheses, ceil() and floor().

    Args:
        formula: Formula text, e.g. "ceil(@level / 4) + 1".
        values: Already-resolved attribute values.

    Returns:
        The formula's value; 0 for a blank formula.

    Raises:
        UnknownAttributeError: If a referenced code has no value.
        ArithmeticExpressionError: If the formula contains anything
            outside the supported arithmetic or fails to evaluate.
    """
    if not formula or not formula.strip():
        return 0

    def substitute(match: re.Match) -> str:
        code = match.group(1).lower()
        if code not in values:
            raise UnknownAttributeError(code)
        return format_number(values[code])

    expression = _REFERENCE_RE.sub(substitute, formula)
    return evaluate_arithmetic(expression)
