"""Evaluation of a single question condition against the referenced answer."""

from __future__ import annotations

import math
from typing import Optional

from wizard.answers import AnswerValue, Multi, is_blank
from wizard.questionnaire_utils import OPERATORS, Condition

NUMERIC_OPERATORS = ("greater-than", "greater-or-equal", "less-than", "less-or-equal")


def is_known_operator(operator: str) -> bool:
    """Return ``True`` if ``operator`` is one the evaluator understands."""

    return operator in OPERATORS


def parse_number(text: str) -> Optional[float]:
    """Return ``text`` as a finite float, or ``None`` if it is not a number."""

    try:
        number = float(text.strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _compare_numbers(operator: str, left: float, right: float) -> bool:
    if operator == "greater-than":
        return left > right
    if operator == "greater-or-equal":
        return left >= right
    if operator == "less-than":
        return left < right
    return left <= right


def evaluate(condition: Condition, current_value: Optional[AnswerValue]) -> bool:
    """Evaluate ``condition`` against the current value of its field.

    Missing or blank values fail the condition, so questions that depend on
    an unanswered prerequisite stay hidden. Malformed numbers and unknown
    operators also evaluate to ``False``; nothing here raises.
    """

    if is_blank(current_value):
        return False

    operator = condition.operator
    expected = condition.value

    if operator == "equals":
        if isinstance(current_value, Multi):
            return expected in current_value.items
        return current_value.text == expected
    if operator == "not-equals":
        if isinstance(current_value, Multi):
            return expected not in current_value.items
        return current_value.text != expected
    if operator in NUMERIC_OPERATORS:
        if isinstance(current_value, Multi):
            return False
        left = parse_number(current_value.text)
        right = parse_number(expected)
        if left is None or right is None:
            return False
        return _compare_numbers(operator, left, right)
    if operator == "contains":
        needle = expected.lower()
        if isinstance(current_value, Multi):
            return any(needle in item.lower() for item in current_value.items)
        return needle in current_value.text.lower()

    return False


__all__ = ["NUMERIC_OPERATORS", "evaluate", "is_known_operator", "parse_number"]
