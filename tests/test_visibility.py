"""Tests for deriving question visibility from recorded answers."""

from __future__ import annotations

import logging

from wizard.answers import Scalar
from wizard.questionnaire_utils import Condition, Question
from wizard.visibility import compute_visibility, is_visible, visible_indices, visible_questions


def _questions():
    return [
        Question("q1", "First"),
        Question("q2", "Second", conditions=(Condition("q1", "equals", "yes"),)),
        Question("q3", "Third"),
    ]


def test_answer_hides_dependent_question() -> None:
    visibility = compute_visibility(_questions(), {"q1": Scalar("no")})

    assert visibility == {"q1": True, "q2": False, "q3": True}


def test_questions_without_conditions_are_always_visible() -> None:
    questions = [Question("a", "A"), Question("b", "B")]

    assert compute_visibility(questions, {}) == {"a": True, "b": True}
    assert compute_visibility(questions, {"a": Scalar("anything")}) == {"a": True, "b": True}


def test_unanswered_prerequisite_hides_dependents() -> None:
    assert compute_visibility(_questions(), {})["q2"] is False


def test_all_conditions_must_hold() -> None:
    question = Question(
        "pregnant",
        "Pregnant?",
        conditions=(
            Condition("age", "greater-or-equal", "12"),
            Condition("age", "less-or-equal", "55"),
        ),
    )

    assert is_visible(question, {"age": Scalar("30")}) is True
    assert is_visible(question, {"age": Scalar("60")}) is False
    assert is_visible(question, {"age": Scalar("8")}) is False


def test_chained_dependencies_hide_transitively() -> None:
    """A question depending on a hidden, unanswered question stays hidden."""

    questions = [
        Question("q1", "One"),
        Question("q2", "Two", conditions=(Condition("q1", "equals", "yes"),)),
        Question("q3", "Three", conditions=(Condition("q2", "equals", "x"),)),
    ]

    visibility = compute_visibility(questions, {"q1": Scalar("no")})

    assert visibility == {"q1": True, "q2": False, "q3": False}


def test_unknown_operator_hides_question_and_logs_once(caplog) -> None:
    questions = [
        Question("age", "Age"),
        Question("odd", "Odd", conditions=(Condition("age", "between", "1"),)),
    ]

    with caplog.at_level(logging.WARNING, logger="wizard.visibility"):
        visibility = compute_visibility(questions, {"age": Scalar("4")})

    assert visibility["odd"] is False
    warnings = [record for record in caplog.records if "unsupported operator" in record.getMessage()]
    assert len(warnings) == 1


def test_visible_helpers_keep_order() -> None:
    questions = _questions()
    visibility = {"q1": True, "q2": False, "q3": True}

    assert [question.key for question in visible_questions(questions, visibility)] == ["q1", "q3"]
    assert visible_indices(questions, visibility) == [0, 2]
