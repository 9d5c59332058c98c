"""Tests for navigating forward and backward over visible questions."""

from __future__ import annotations

import pytest

from wizard.answers import Answer, Scalar
from wizard.errors import AnswerSaveError
from wizard.flow import FlowNavigator, next_visible_index, previous_visible_index
from wizard.questionnaire_utils import Condition, Question


class RecordingStore:
    """Answer store that records saves and can be told to fail."""

    def __init__(self, failures: int = 0) -> None:
        self.saved = []
        self.failures = failures

    def save_answer(self, answer: Answer) -> None:
        if self.failures:
            self.failures -= 1
            raise ConnectionError("service unavailable")
        self.saved.append(answer)


def _questions():
    return [
        Question("q1", "First"),
        Question("q2", "Second", conditions=(Condition("q1", "equals", "yes"),)),
        Question("q3", "Third"),
    ]


def _answer(key: str, text: str) -> Answer:
    return Answer(field_key=key, value=Scalar(text))


def test_go_next_skips_hidden_question() -> None:
    store = RecordingStore()
    navigator = FlowNavigator(_questions(), store)

    assert navigator.go_next(_answer("q1", "no")) is True

    assert navigator.current_index == 2
    assert navigator.visibility == {"q1": True, "q2": False, "q3": True}
    assert [answer.field_key for answer in store.saved] == ["q1"]


def test_go_next_visits_revealed_question() -> None:
    navigator = FlowNavigator(_questions(), RecordingStore())

    navigator.go_next(_answer("q1", "yes"))

    assert navigator.current_index == 1


def test_go_next_on_last_visible_question_completes_flow() -> None:
    questions = [
        Question("q1", "First"),
        Question("q2", "Second"),
        Question("q3", "Third", conditions=(Condition("q2", "equals", "more"),)),
    ]
    navigator = FlowNavigator(questions, RecordingStore(), current_index=1)

    assert navigator.go_next(_answer("q2", "done")) is False

    assert navigator.current_index == 1
    assert navigator.answers["q2"] == Scalar("done")


def test_go_back_skips_hidden_questions() -> None:
    navigator = FlowNavigator(_questions(), RecordingStore())
    navigator.go_next(_answer("q1", "no"))

    assert navigator.go_back() is True
    assert navigator.current_index == 0
    assert navigator.go_back() is False
    assert navigator.current_index == 0


def test_back_then_forward_returns_to_same_question() -> None:
    navigator = FlowNavigator(_questions(), RecordingStore())
    navigator.go_next(_answer("q1", "no"))
    position = navigator.current_index

    navigator.go_back()
    navigator.go_next(_answer("q1", "no"))

    assert navigator.current_index == position


def test_save_failure_keeps_position_and_draft() -> None:
    store = RecordingStore(failures=1)
    navigator = FlowNavigator(_questions(), store)
    answer = _answer("q1", "yes")

    with pytest.raises(AnswerSaveError) as excinfo:
        navigator.go_next(answer)

    assert excinfo.value.retryable is True
    assert excinfo.value.field_key == "q1"
    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert navigator.current_index == 0
    assert navigator.draft == answer
    assert navigator.answers == {}

    assert navigator.go_next(navigator.draft) is True
    assert navigator.current_index == 1
    assert navigator.draft is None
    assert store.saved == [answer]


def test_can_go_next_blocks_unanswered_required_question() -> None:
    questions = [Question("name", "Name", required=True), Question("notes", "Notes")]
    navigator = FlowNavigator(questions, RecordingStore())

    assert navigator.can_go_next is False

    navigator.go_next(_answer("name", "Ada"))
    assert navigator.can_go_next is True
    assert navigator.can_go_back is True
    assert navigator.is_last_question is True


def test_required_question_answered_earlier_allows_advance() -> None:
    questions = [Question("name", "Name", required=True), Question("notes", "Notes")]
    navigator = FlowNavigator(questions, RecordingStore(), answers={"name": Scalar("Ada")})

    assert navigator.can_go_next is True
    assert navigator.can_go_back is False


def test_navigator_starts_on_first_visible_question() -> None:
    questions = [
        Question("hidden", "Hidden", conditions=(Condition("later", "equals", "x"),)),
        Question("later", "Later"),
    ]
    navigator = FlowNavigator(questions, RecordingStore())

    assert navigator.current_index == 1
    assert navigator.current_question.key == "later"


def test_hidden_current_question_is_not_moved_until_realign() -> None:
    """Changing an earlier answer can hide the current question."""

    navigator = FlowNavigator(_questions(), RecordingStore())
    navigator.go_next(_answer("q1", "yes"))
    navigator.go_back()
    navigator.go_next(_answer("q1", "yes"))
    assert navigator.current_index == 1

    navigator.go_back()
    navigator.go_next(_answer("q1", "no"))
    assert navigator.current_index == 2

    # Answers loaded for a resumed session may leave the stored index hidden.
    stale = FlowNavigator(_questions(), RecordingStore(), answers={"q1": Scalar("no")}, current_index=1)
    assert stale.current_is_visible is False
    assert stale.progress().ordinal == 1

    assert stale.realign() is True
    assert stale.current_index == 2
    assert stale.realign() is False


def test_empty_question_list() -> None:
    navigator = FlowNavigator([], RecordingStore())

    assert navigator.current_question is None
    assert navigator.can_go_next is False
    assert navigator.can_go_back is False
    assert navigator.progress().percent_complete == 0


def test_index_search_helpers() -> None:
    questions = _questions()
    visibility = {"q1": True, "q2": False, "q3": True}

    assert next_visible_index(questions, 0, visibility) == 2
    assert next_visible_index(questions, 2, visibility) == -1
    assert previous_visible_index(questions, 2, visibility) == 0
    assert previous_visible_index(questions, 0, visibility) == -1
