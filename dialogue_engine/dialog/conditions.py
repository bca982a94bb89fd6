"""
Condition evaluation for choice gates and condition nodes.
"""

from __future__ import annotations

import logging
import operator as op
from typing import Any, Callable, Mapping, Optional

from dialogue_engine.dialog.types import VariableCondition

logger = logging.getLogger(__name__)


def value_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-kind coercion: True != 1 and "1" != 1."""
    if value_kind(left) != value_kind(right):
        return False
    return left == right


_RELATIONAL: dict[str, Callable[[Any, Any], bool]] = {
    'gt': op.gt,
    'lt': op.lt,
    'gte': op.ge,
    'lte': op.le,
}


def compare(operator: str, left: Any, right: Any) -> bool:
    """
    Apply a condition operator to a variable value and a literal.

    Relational comparisons Python cannot perform (a missing variable, a
    string against a number) are False rather than errors.
    """
    if operator == 'eq':
        return strict_equals(left, right)
    if operator == 'ne':
        return not strict_equals(left, right)

    fn = _RELATIONAL.get(operator)
    if fn is None:
        return True

    try:
        return bool(fn(left, right))
    except TypeError:
        logger.debug(f"Cannot compare {left!r} {operator} {right!r}; treating as false")
        return False


def evaluate_condition(
    condition: Optional[VariableCondition],
    variables: Mapping[str, Any],
) -> bool:
    """Evaluate a condition against variables. No condition always passes."""
    if condition is None:
        return True
    return compare(condition.operator, variables.get(condition.variable), condition.value)
