"""Answer values recorded by the wizard and the maps built from them."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

VALUE_KINDS: Tuple[str, ...] = ("currency", "integer", "string", "boolean", "date")
DEFAULT_VALUE_KIND = "string"

_VALUE_KIND_BY_QUESTION_TYPE: Dict[str, str] = {
    "text": "string",
    "integer": "integer",
    "currency": "currency",
    "boolean": "boolean",
    "date": "date",
    "single-select": "string",
    "multi-select": "string",
}


@dataclass(frozen=True)
class Scalar:
    """A single text answer (free text, numbers, dates and single selections)."""

    text: str

    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class Multi:
    """The ordered option values picked for a multi-select question."""

    items: Tuple[str, ...]

    def is_blank(self) -> bool:
        return not self.items


AnswerValue = Union[Scalar, Multi]
AnswerMap = Dict[str, AnswerValue]


def as_answer_value(raw: Any) -> Optional[AnswerValue]:
    """Return ``raw`` wrapped in the matching answer value type.

    ``None`` stays ``None`` so callers can tell "never answered" apart from an
    empty response. Booleans are written the way the session API stores them.
    """

    if raw is None or isinstance(raw, (Scalar, Multi)):
        return raw
    if isinstance(raw, bool):
        return Scalar("true" if raw else "false")
    if isinstance(raw, (list, tuple, set, frozenset)):
        items = sorted(raw) if isinstance(raw, (set, frozenset)) else raw
        return Multi(tuple(str(item) for item in items))
    return Scalar(str(raw))


def is_blank(value: Optional[AnswerValue]) -> bool:
    """Return ``True`` when ``value`` is missing or carries no response."""

    return value is None or value.is_blank()


def value_kind_for(question_type: str) -> str:
    """Return the persistence value kind used for ``question_type``."""

    return _VALUE_KIND_BY_QUESTION_TYPE.get(question_type, DEFAULT_VALUE_KIND)


def encode_value(value: AnswerValue) -> str:
    """Serialise ``value`` into the string stored by the session API."""

    if isinstance(value, Multi):
        return json.dumps(list(value.items))
    return value.text


def decode_value(raw: Any) -> Optional[AnswerValue]:
    """Inverse of :func:`encode_value` for values read back from the API."""

    if raw is None:
        return None
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("[") and text.endswith("]"):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                return Scalar(raw)
            if isinstance(decoded, list) and all(isinstance(item, str) for item in decoded):
                return Multi(tuple(decoded))
        return Scalar(raw)
    return as_answer_value(raw)


@dataclass(frozen=True)
class Answer:
    """A persisted answer for one field key."""

    field_key: str
    value: AnswerValue
    value_kind: str = DEFAULT_VALUE_KIND
    is_pii: bool = False

    def __post_init__(self) -> None:
        if self.value_kind not in VALUE_KINDS:
            raise ValueError(f"Unsupported value kind: {self.value_kind}")

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body accepted by the answers endpoint."""

        return {
            "fieldKey": self.field_key,
            "fieldType": self.value_kind,
            "answerValue": encode_value(self.value),
            "isPii": self.is_pii,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Optional["Answer"]:
        """Build an answer from an API record, ``None`` if it has no field key."""

        field_key = payload.get("fieldKey") or payload.get("field_key")
        if not isinstance(field_key, str) or not field_key.strip():
            return None
        value = decode_value(payload.get("answerValue", payload.get("value")))
        if value is None:
            value = Scalar("")
        value_kind = payload.get("fieldType") or payload.get("value_kind") or DEFAULT_VALUE_KIND
        if value_kind not in VALUE_KINDS:
            # The API also reports "text" for free-text answers.
            value_kind = DEFAULT_VALUE_KIND
        return cls(
            field_key=field_key.strip(),
            value=value,
            value_kind=value_kind,
            is_pii=bool(payload.get("isPii", payload.get("is_pii", False))),
        )


def answer_from_input(field_key: str, question_type: str, raw: Any) -> Optional[Answer]:
    """Turn a widget value into an :class:`Answer` for a question of ``question_type``.

    Returns ``None`` when nothing was entered.
    """

    if raw is None:
        return None
    if question_type == "boolean":
        value = as_answer_value(bool(raw))
    elif question_type == "date" and hasattr(raw, "isoformat"):
        value = Scalar(raw.isoformat())
    elif question_type == "integer" and isinstance(raw, (int, float)):
        value = Scalar(str(int(raw)))
    elif question_type == "currency" and isinstance(raw, (int, float)):
        value = Scalar(f"{float(raw):.2f}")
    elif question_type == "multi-select":
        value = as_answer_value(list(raw) if isinstance(raw, (list, tuple)) else [raw])
    else:
        value = Scalar(str(raw).strip())
    if value is None or value.is_blank():
        return None
    return Answer(field_key=field_key, value=value, value_kind=value_kind_for(question_type))


def build_answer_map(answers: Iterable[Answer]) -> AnswerMap:
    """Return ``field_key -> value`` for ``answers``; later entries win."""

    answer_map: AnswerMap = {}
    for answer in answers:
        answer_map[answer.field_key] = answer.value
    return answer_map


def is_answered(answer_map: Mapping[str, AnswerValue], field_key: str) -> bool:
    """Return ``True`` if ``answer_map`` holds a non-blank value for ``field_key``."""

    return not is_blank(answer_map.get(field_key))


__all__ = [
    "Answer",
    "AnswerMap",
    "AnswerValue",
    "Multi",
    "Scalar",
    "VALUE_KINDS",
    "answer_from_input",
    "as_answer_value",
    "build_answer_map",
    "decode_value",
    "encode_value",
    "is_answered",
    "is_blank",
    "value_kind_for",
]
