"""Completion progress measured against the visible questions only."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence

from wizard.questionnaire_utils import Question


@dataclass(frozen=True)
class Progress:
    """Where the current question sits within the visible subset."""

    ordinal: int
    total_visible: int
    percent_complete: int


def _round_percent(ordinal: int, total: int) -> int:
    ratio = Decimal(ordinal) * 100 / Decimal(total)
    percent = int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    # Only the last visible question may read as complete.
    if ordinal < total:
        percent = min(percent, 99)
    return percent


def calculate_progress(
    questions: Sequence[Question],
    current_index: int,
    visibility: Mapping[str, bool],
) -> Progress:
    """Return the progress of ``current_index`` within the visible questions.

    ``ordinal`` is the 1-based rank of the current question among the visible
    ones. When the current question is itself hidden it counts the visible
    questions before it, so the figure never jumps ahead.
    """

    total_visible = 0
    ordinal = 0
    for index, question in enumerate(questions):
        if not visibility.get(question.key, False):
            continue
        total_visible += 1
        if index <= current_index:
            ordinal = total_visible

    if total_visible == 0:
        return Progress(ordinal=0, total_visible=0, percent_complete=0)

    return Progress(
        ordinal=ordinal,
        total_visible=total_visible,
        percent_complete=_round_percent(ordinal, total_visible),
    )


__all__ = ["Progress", "calculate_progress"]
