"""Visibility of wizard questions derived from the current answers."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from wizard.answers import AnswerValue
from wizard.conditions import evaluate, is_known_operator
from wizard.questionnaire_utils import Question

logger = logging.getLogger(__name__)

VisibilityState = Dict[str, bool]


def _is_visible(
    question: Question,
    answer_map: Mapping[str, AnswerValue],
    reported: Optional[Set[Tuple[str, str]]] = None,
) -> bool:
    visible = True
    for condition in question.conditions:
        if not is_known_operator(condition.operator):
            marker = (question.key, condition.operator)
            if reported is None or marker not in reported:
                logger.warning(
                    "Question %r uses unsupported operator %r; condition treated as false.",
                    question.key,
                    condition.operator,
                )
                if reported is not None:
                    reported.add(marker)
            return False
        if not evaluate(condition, answer_map.get(condition.field_key)):
            visible = False
            break
    return visible


def is_visible(question: Question, answer_map: Mapping[str, AnswerValue]) -> bool:
    """Return ``True`` if every condition of ``question`` holds."""

    return _is_visible(question, answer_map)


def compute_visibility(
    questions: Sequence[Question], answer_map: Mapping[str, AnswerValue]
) -> VisibilityState:
    """Return ``question key -> visible`` for ``questions``.

    The result depends only on ``answer_map``; no earlier visibility is
    consulted, so recomputing after any answer change is always safe.
    """

    reported: Set[Tuple[str, str]] = set()
    return {question.key: _is_visible(question, answer_map, reported) for question in questions}


def visible_questions(
    questions: Sequence[Question], visibility: Mapping[str, bool]
) -> List[Question]:
    """Return the visible subset of ``questions`` in order."""

    return [question for question in questions if visibility.get(question.key, False)]


def visible_indices(questions: Sequence[Question], visibility: Mapping[str, bool]) -> List[int]:
    """Return the positions of the visible questions in the full list."""

    return [index for index, question in enumerate(questions) if visibility.get(question.key, False)]


__all__ = [
    "VisibilityState",
    "compute_visibility",
    "is_visible",
    "visible_indices",
    "visible_questions",
]
