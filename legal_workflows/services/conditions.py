"""
Condition evaluation for workflow triggers.

Evaluates a flat AND of (field, operator, value) clauses against an event's
data. Pure functions: no side effects, no I/O.

Absent fields evaluate to False for every operator except "!=", which
evaluates to True. Ordering operators only compare numbers with numbers or
dates with dates, where ISO-8601 strings count as dates; anything else raises ConditionEvaluationError instead of
silently failing to match.
"""

import operator as op
from datetime import date, datetime
from numbers import Real
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from legal_workflows.domain import Condition, ConditionEvaluationError, ConditionOperator


_ORDERING: Dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.GT: op.gt,
    ConditionOperator.GTE: op.ge,
    ConditionOperator.LT: op.lt,
    ConditionOperator.LTE: op.le,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _parse_iso(text: str) -> Optional[date]:
    """Parse an ISO-8601 date or datetime string, or return None."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _parse_iso(value)
    return None


def _ordering_operands(condition: Condition, actual: Any) -> Tuple[Any, Any]:
    """
    Coerce both operands of an ordering comparison to a comparable pair.

    Raises ConditionEvaluationError for non-comparable types.
    """
    expected = condition.value

    if _is_number(actual) and _is_number(expected):
        return actual, expected

    left, right = _as_date(actual), _as_date(expected)
    if left is not None and right is not None:
        # A datetime against a plain date compares calendar days
        if isinstance(left, datetime) and not isinstance(right, datetime):
            left = left.date()
        elif isinstance(right, datetime) and not isinstance(left, datetime):
            right = right.date()
        return left, right

    raise ConditionEvaluationError(
        condition,
        f"Cannot compare {condition.field!r} ({type(actual).__name__}) "
        f"{condition.operator.value} {expected!r} ({type(expected).__name__})",
    )


def evaluate_condition(condition: Condition, data: Mapping[str, Any]) -> bool:
    """
    Evaluate a single condition against a data snapshot.

    Args:
        condition: The clause to evaluate
        data: Field values keyed by field name

    Returns:
        Whether the clause holds

    Raises:
        ConditionEvaluationError: On type-incompatible ordering comparisons
    """
    operator = condition.operator

    if condition.field not in data:
        return operator == ConditionOperator.NE

    actual = data[condition.field]

    if operator == ConditionOperator.EQ:
        return actual == condition.value
    if operator == ConditionOperator.NE:
        return actual != condition.value

    if operator in _ORDERING:
        left, right = _ordering_operands(condition, actual)
        try:
            return _ORDERING[operator](left, right)
        except TypeError as e:
            # e.g. naive vs aware datetimes
            raise ConditionEvaluationError(condition, str(e)) from e

    if operator in (ConditionOperator.CONTAINS, ConditionOperator.NOT_CONTAINS):
        found = str(condition.value).lower() in str(actual).lower()
        return found if operator == ConditionOperator.CONTAINS else not found

    raise ConditionEvaluationError(condition, f"Unknown operator: {operator!r}")


def evaluate(conditions: Sequence[Condition], data: Mapping[str, Any]) -> bool:
    """
    Evaluate a flat AND of conditions.

    An empty sequence is True. Evaluation stops at the first False clause,
    so later clauses are never evaluated (and never raise).
    """
    for condition in conditions:
        if not evaluate_condition(condition, data):
            return False
    return True
