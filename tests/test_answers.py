"""Tests for answer values and their persisted form."""

from __future__ import annotations

from datetime import date

import pytest

from wizard.answers import (
    Answer,
    Multi,
    Scalar,
    answer_from_input,
    as_answer_value,
    build_answer_map,
    is_answered,
)


def test_multi_select_payload_is_json_array() -> None:
    answer = Answer("sources", Multi(("employment", "other")), is_pii=True)

    assert answer.to_payload() == {
        "fieldKey": "sources",
        "fieldType": "string",
        "answerValue": '["employment", "other"]',
        "isPii": True,
    }
    assert Answer.from_payload(answer.to_payload()) == answer


def test_from_payload_tolerates_api_variations() -> None:
    answer = Answer.from_payload({"fieldKey": " age ", "fieldType": "text", "answerValue": "42"})

    assert answer == Answer("age", Scalar("42"), value_kind="string")
    assert Answer.from_payload({"answerValue": "x"}) is None
    assert Answer.from_payload({"fieldKey": "note", "answerValue": "[not json"}).value == Scalar("[not json")


def test_unknown_value_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        Answer("age", Scalar("1"), value_kind="float")


@pytest.mark.parametrize(
    "question_type, raw, expected_value, expected_kind",
    [
        ("boolean", True, Scalar("true"), "boolean"),
        ("boolean", False, Scalar("false"), "boolean"),
        ("date", date(2026, 3, 1), Scalar("2026-03-01"), "date"),
        ("integer", 4.0, Scalar("4"), "integer"),
        ("currency", 1250, Scalar("1250.00"), "currency"),
        ("multi-select", ["a", "b"], Multi(("a", "b")), "string"),
        ("text", "  hello ", Scalar("hello"), "string"),
        ("single-select", "none", Scalar("none"), "string"),
    ],
)
def test_answer_from_input(question_type, raw, expected_value, expected_kind) -> None:
    answer = answer_from_input("field", question_type, raw)

    assert answer.value == expected_value
    assert answer.value_kind == expected_kind


@pytest.mark.parametrize(
    "question_type, raw",
    [("text", "   "), ("text", None), ("multi-select", []), ("date", None)],
)
def test_answer_from_input_returns_none_when_empty(question_type, raw) -> None:
    assert answer_from_input("field", question_type, raw) is None


def test_build_answer_map_keeps_latest_answer() -> None:
    answers = [
        Answer("q1", Scalar("no")),
        Answer("q2", Scalar("")),
        Answer("q1", Scalar("yes")),
    ]

    answer_map = build_answer_map(answers)

    assert answer_map == {"q1": Scalar("yes"), "q2": Scalar("")}
    assert is_answered(answer_map, "q1") is True
    assert is_answered(answer_map, "q2") is False
    assert is_answered(answer_map, "q3") is False


def test_as_answer_value() -> None:
    assert as_answer_value(None) is None
    assert as_answer_value(3) == Scalar("3")
    assert as_answer_value({"b", "a"}) == Multi(("a", "b"))
