"""
Condition evaluation for routing rules.

Pure functions: a condition is tested against an ExtractedInfo record with no
side effects. Malformed conditions never raise; they simply do not match.
"""

import math
import re
from enum import Enum

from models.rule_models import Condition, ConditionField, ConditionOperator, ExtractedInfo

DECIMAL_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def stringify(value) -> str:
    """
    Render a field or condition value for string comparison.

    Integral floats drop their fractional part so that ``100000.0`` and
    ``"100000"`` compare equal.
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value) -> float:
    """
    Coerce to float; anything non-numeric becomes NaN.

    Strings must be plain decimals (optional sign and exponent). ``inf``,
    ``nan`` and digit separators such as ``1_000`` are not numbers here.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    text = stringify(value).strip()
    if not DECIMAL_PATTERN.fullmatch(text):
        return math.nan
    return float(text)


def values_equal(left, right) -> bool:
    """Case-insensitive comparison of stringified values."""
    return stringify(left).lower() == stringify(right).lower()


def is_known_field(field) -> bool:
    try:
        ConditionField(field)
    except ValueError:
        return False
    return True


def describe_condition(condition: Condition) -> str:
    """Render as ``field operator value`` for diagnostics."""
    return f"{stringify(condition.field)} {stringify(condition.operator)} {stringify(condition.value)}"


def evaluate_condition(
    condition: Condition,
    info: ExtractedInfo,
    could_match: bool = False,
) -> bool:
    """
    Evaluate one condition against extracted info.

    Args:
        condition: The field/operator/value triple.
        info: Extracted fields for the current request.
        could_match: Treat an absent field as potentially satisfiable.

    Returns:
        True if the condition holds. An absent field never satisfies a
        condition unless ``could_match`` is set; an unknown field or
        operator never matches.
    """
    if not is_known_field(condition.field):
        return False

    field_value = info.get_field(condition.field)

    if field_value is None:
        return could_match

    operator = condition.operator

    if operator == ConditionOperator.EQUALS:
        return values_equal(field_value, condition.value)

    if operator == ConditionOperator.NOT_EQUALS:
        return not values_equal(field_value, condition.value)

    if operator == ConditionOperator.CONTAINS:
        return stringify(condition.value).lower() in stringify(field_value).lower()

    if operator == ConditionOperator.GREATER_THAN:
        # NaN compares False either way
        return to_number(field_value) > to_number(condition.value)

    if operator == ConditionOperator.LESS_THAN:
        return to_number(field_value) < to_number(condition.value)

    return False


def evaluate_rule_conditions(
    conditions: list[Condition],
    info: ExtractedInfo,
    could_match: bool = False,
) -> bool:
    """AND all conditions; an empty list always holds."""
    return all(evaluate_condition(c, info, could_match=could_match) for c in conditions)
