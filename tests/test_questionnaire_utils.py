"""Tests for questionnaire utility helpers."""

import importlib

import pytest

from wizard.errors import QuestionSetError
from wizard.questionnaire_utils import Condition, Option, Question


def test_parse_question_set_normalises_wire_aliases() -> None:
    utils = importlib.import_module("wizard.questionnaire_utils")

    payload = {
        "state": "il",
        "version": "2026.1",
        "questions": [
            {"key": "age", "label": "Age", "type": "integer", "required": True},
            {
                "key": "coverage",
                "type": "select",
                "options": [{"value": "none", "label": "No coverage"}, "medicare"],
                "conditions": [{"fieldKey": "age", "operator": "gte", "value": 18}],
            },
            {
                "key": "sources",
                "type": "multiselect",
                "helpText": "  Pick all that apply ",
                "conditions": [{"field_key": "coverage", "operator": "not_equals", "value": "none"}],
            },
            {"label": "No key here"},
        ],
    }

    question_set = utils.parse_question_set(payload)

    assert question_set.state == "IL"
    assert question_set.version == "2026.1"
    assert utils.question_keys(question_set.questions) == ["age", "coverage", "sources"]

    coverage = question_set.questions[1]
    assert coverage.type == "single-select"
    assert coverage.label == "Coverage"
    assert coverage.options == (Option("none", "No coverage"), Option("medicare", "medicare"))
    assert coverage.conditions == (Condition("age", "greater-or-equal", "18"),)

    sources = question_set.questions[2]
    assert sources.type == "multi-select"
    assert sources.help_text == "Pick all that apply"
    assert sources.conditions[0].operator == "not-equals"


def test_parse_question_set_accepts_bare_list() -> None:
    utils = importlib.import_module("wizard.questionnaire_utils")

    question_set = utils.parse_question_set([{"key": "name", "type": "string"}], state_code="tx")

    assert question_set.state == "TX"
    assert question_set.questions == (Question("name", "Name", type="text"),)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("equals", "equals"),
        ("gt", "greater-than"),
        ("lte", "less-or-equal"),
        ("includes", "contains"),
        ("greater_or_equal", "greater-or-equal"),
        ("NOT-EQUALS", "not-equals"),
        ("between", "between"),
    ],
)
def test_normalize_operator(raw, expected) -> None:
    utils = importlib.import_module("wizard.questionnaire_utils")

    assert utils.normalize_operator(raw) == expected


def test_unknown_question_type_falls_back_to_text() -> None:
    utils = importlib.import_module("wizard.questionnaire_utils")

    assert utils.normalize_question_type("signature") == "text"
    assert utils.normalize_question_type("multi_select") == "multi-select"
    assert utils.normalize_question_type(None) == "text"


def test_validate_accepts_forward_references() -> None:
    utils = importlib.import_module("wizard.questionnaire_utils")

    questions = [
        Question("intro", "Intro", conditions=(Condition("later", "equals", "x"),)),
        Question("later", "Later"),
    ]

    utils.validate_question_set(questions)


@pytest.mark.parametrize(
    "questions, message",
    [
        ([Question("a", "A"), Question("a", "Again")], "Duplicate question key 'a'."),
        (
            [Question("a", "A", conditions=(Condition("a", "equals", "x"),))],
            "Question 'a' has a condition on itself.",
        ),
        (
            [Question("a", "A", conditions=(Condition("ghost", "equals", "x"),))],
            "Question 'a' references unknown question 'ghost'.",
        ),
        (
            [
                Question("a", "A", conditions=(Condition("b", "equals", "x"),)),
                Question("b", "B", conditions=(Condition("c", "equals", "x"),)),
                Question("c", "C", conditions=(Condition("a", "equals", "x"),)),
            ],
            "Circular question conditions detected.",
        ),
    ],
)
def test_validate_rejects_unusable_sets(questions, message) -> None:
    utils = importlib.import_module("wizard.questionnaire_utils")

    with pytest.raises(QuestionSetError) as excinfo:
        utils.validate_question_set(questions)

    assert message in excinfo.value.problems
    assert isinstance(excinfo.value, ValueError)
