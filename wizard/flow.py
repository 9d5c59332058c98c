"""Forward and backward navigation over the visible wizard questions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from wizard.answers import Answer, AnswerMap, AnswerValue, is_answered
from wizard.errors import AnswerSaveError
from wizard.perf import track_transition
from wizard.progress import Progress, calculate_progress
from wizard.questionnaire_utils import Question
from wizard.visibility import VisibilityState, compute_visibility

logger = logging.getLogger(__name__)


class AnswerSink(Protocol):
    """Anything that can persist a single answer for the current session."""

    def save_answer(self, answer: Answer) -> Any:
        ...


def next_visible_index(
    questions: Sequence[Question], current_index: int, visibility: Mapping[str, bool]
) -> int:
    """Return the first visible index after ``current_index`` or ``-1``."""

    for index in range(max(current_index + 1, 0), len(questions)):
        if visibility.get(questions[index].key, False):
            return index
    return -1


def previous_visible_index(
    questions: Sequence[Question], current_index: int, visibility: Mapping[str, bool]
) -> int:
    """Return the nearest visible index before ``current_index`` or ``-1``."""

    for index in range(min(current_index, len(questions)) - 1, -1, -1):
        if visibility.get(questions[index].key, False):
            return index
    return -1


def first_visible_index(questions: Sequence[Question], visibility: Mapping[str, bool]) -> int:
    """Return the index of the first visible question or ``-1``."""

    return next_visible_index(questions, -1, visibility)


class FlowNavigator:
    """Walk a question list, only ever stopping on visible questions.

    The navigator owns the answer map it evaluates conditions against and
    replaces it (and the derived visibility) wholesale after each successful
    save. Answers reach ``store`` before the position moves; if saving fails
    nothing changes except that the answer is kept in :attr:`draft`.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        store: AnswerSink,
        *,
        answers: Optional[Mapping[str, AnswerValue]] = None,
        current_index: Optional[int] = None,
    ) -> None:
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._store = store
        self._answers: AnswerMap = dict(answers or {})
        self._visibility: VisibilityState = compute_visibility(self._questions, self._answers)
        if current_index is None:
            current_index = max(first_visible_index(self._questions, self._visibility), 0)
        self.current_index = self._clamp(current_index)
        self.draft: Optional[Answer] = None

    def _clamp(self, index: int) -> int:
        if not self._questions:
            return 0
        return max(0, min(index, len(self._questions) - 1))

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def answers(self) -> Dict[str, AnswerValue]:
        """A copy of the current answer map."""

        return dict(self._answers)

    @property
    def visibility(self) -> VisibilityState:
        """A copy of the current visibility state."""

        return dict(self._visibility)

    @property
    def current_question(self) -> Optional[Question]:
        if not self._questions:
            return None
        return self._questions[self.current_index]

    @property
    def current_is_visible(self) -> bool:
        question = self.current_question
        return question is not None and self._visibility.get(question.key, False)

    @property
    def can_go_back(self) -> bool:
        return previous_visible_index(self._questions, self.current_index, self._visibility) != -1

    @property
    def can_go_next(self) -> bool:
        """``False`` only while a required current question is unanswered."""

        question = self.current_question
        if question is None:
            return False
        if question.required:
            return is_answered(self._answers, question.key)
        return True

    @property
    def is_last_question(self) -> bool:
        return next_visible_index(self._questions, self.current_index, self._visibility) == -1

    def progress(self) -> Progress:
        return calculate_progress(self._questions, self.current_index, self._visibility)

    def go_next(self, answer: Answer) -> bool:
        """Save ``answer`` and move to the next visible question.

        Returns ``False`` when no visible question follows, meaning the flow is
        complete; the position is left unchanged in that case. Raises
        :class:`AnswerSaveError` if the store fails.
        """

        with track_transition("step_advance", from_index=self.current_index) as record:
            try:
                self._store.save_answer(answer)
            except Exception as exc:  # pylint: disable=broad-except
                self.draft = answer
                record["saved"] = False
                logger.warning("Failed to save answer for %r: %s", answer.field_key, exc)
                raise AnswerSaveError(answer.field_key, exc) from exc

            self.draft = None
            answers = dict(self._answers)
            answers[answer.field_key] = answer.value
            self._answers = answers
            self._visibility = compute_visibility(self._questions, answers)

            next_index = next_visible_index(self._questions, self.current_index, self._visibility)
            if next_index == -1:
                record["complete"] = True
                logger.info("Flow complete after %r", answer.field_key)
                return False

            record["to_index"] = next_index
            self.current_index = next_index
            return True

    def go_back(self) -> bool:
        """Move to the nearest visible question before the current one."""

        with track_transition("step_back", from_index=self.current_index) as record:
            previous_index = previous_visible_index(
                self._questions, self.current_index, self._visibility
            )
            if previous_index == -1:
                return False
            record["to_index"] = previous_index
            self.current_index = previous_index
            return True

    def realign(self) -> bool:
        """Step off the current question if it is no longer visible.

        Moves to the next visible question, or to the previous one when
        nothing visible follows. Returns ``True`` if the position changed.
        """

        if not self._questions or self.current_is_visible:
            return False
        target = next_visible_index(self._questions, self.current_index, self._visibility)
        if target == -1:
            target = previous_visible_index(self._questions, self.current_index, self._visibility)
        if target == -1:
            return False
        logger.info("Current question %r is hidden; moving to index %d", self.current_question.key, target)
        self.current_index = target
        return True


__all__ = [
    "AnswerSink",
    "FlowNavigator",
    "first_visible_index",
    "next_visible_index",
    "previous_visible_index",
]
