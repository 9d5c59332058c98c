"""Utilities for turning question set payloads into wizard questions."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from wizard.errors import QuestionSetError

logger = logging.getLogger(__name__)

QUESTION_TYPES: Tuple[str, ...] = (
    "text",
    "integer",
    "currency",
    "boolean",
    "date",
    "single-select",
    "multi-select",
)
DEFAULT_QUESTION_TYPE = "text"

QUESTION_TYPE_ALIASES: Dict[str, str] = {
    "string": "text",
    "select": "single-select",
    "single": "single-select",
    "multiselect": "multi-select",
    "bool": "boolean",
}

OPERATORS: Tuple[str, ...] = (
    "equals",
    "not-equals",
    "greater-than",
    "greater-or-equal",
    "less-than",
    "less-or-equal",
    "contains",
)

# Names used by the session API and older question set files.
OPERATOR_ALIASES: Dict[str, str] = {
    "eq": "equals",
    "not_equals": "not-equals",
    "neq": "not-equals",
    "gt": "greater-than",
    "gte": "greater-or-equal",
    "lt": "less-than",
    "lte": "less-or-equal",
    "includes": "contains",
}


@dataclass(frozen=True)
class Condition:
    """A single comparison gating the visibility of a question."""

    field_key: str
    operator: str
    value: str


@dataclass(frozen=True)
class Option:
    """A selectable option of a single- or multi-select question."""

    value: str
    label: str


@dataclass(frozen=True)
class Question:
    """An immutable wizard question."""

    key: str
    label: str
    type: str = DEFAULT_QUESTION_TYPE
    required: bool = False
    conditions: Tuple[Condition, ...] = ()
    help_text: Optional[str] = None
    options: Tuple[Option, ...] = ()


@dataclass(frozen=True)
class QuestionSet:
    """The ordered questions served for one state."""

    state: str
    questions: Tuple[Question, ...] = field(default_factory=tuple)
    version: str = ""


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return dict(value) if isinstance(value, Mapping) else {}


def _ensure_sequence(value: Any) -> List[Any]:
    """Return ``value`` if it is a list or tuple, otherwise an empty list."""

    return list(value) if isinstance(value, (list, tuple)) else []


def _clean_text(value: Any) -> str:
    """Return ``value`` converted to a trimmed string."""

    if isinstance(value, str):
        return value.strip()
    if value is None:
        return ""
    return str(value).strip()


def _derive_label(key: str, payload: Mapping[str, Any]) -> str:
    """Return a human-friendly label for a question entry."""

    label = _clean_text(payload.get("label"))
    if label:
        return label
    return key.replace("_", " ").replace("-", " ").capitalize() if key else "Question"


def normalize_operator(operator: Any) -> str:
    """Return the canonical operator name for ``operator``.

    Unknown operators are returned as given so they evaluate to ``False``
    instead of being silently rewritten into something else.
    """

    text = _clean_text(operator)
    lowered = text.lower()
    if lowered in OPERATORS:
        return lowered
    if lowered in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[lowered]
    dashed = lowered.replace("_", "-")
    if dashed in OPERATORS:
        return dashed
    return text


def normalize_question_type(question_type: Any) -> str:
    """Return the canonical question type for ``question_type``."""

    text = _clean_text(question_type).lower()
    if text in QUESTION_TYPES:
        return text
    if text in QUESTION_TYPE_ALIASES:
        return QUESTION_TYPE_ALIASES[text]
    dashed = text.replace("_", "-")
    if dashed in QUESTION_TYPES:
        return dashed
    if text:
        logger.warning("Unsupported question type %r; treating it as text.", question_type)
    return DEFAULT_QUESTION_TYPE


def parse_condition(payload: Any) -> Optional[Condition]:
    """Return a :class:`Condition` for ``payload`` or ``None`` if unusable."""

    entry = _ensure_mapping(payload)
    field_key = _clean_text(entry.get("fieldKey", entry.get("field_key", entry.get("field"))))
    if not field_key:
        return None
    raw_value = entry.get("value")
    value = "" if raw_value is None else str(raw_value)
    return Condition(
        field_key=field_key,
        operator=normalize_operator(entry.get("operator", "equals")),
        value=value,
    )


def _parse_options(value: Any) -> Tuple[Option, ...]:
    """Return the options of a select question."""

    options: List[Option] = []
    for item in _ensure_sequence(value):
        if isinstance(item, Mapping):
            option_value = _clean_text(item.get("value"))
            label = _clean_text(item.get("label")) or option_value
        else:
            option_value = _clean_text(item)
            label = option_value
        if option_value:
            options.append(Option(value=option_value, label=label))
    return tuple(options)


def parse_question(payload: Any) -> Optional[Question]:
    """Return a :class:`Question` for ``payload`` or ``None`` without a key."""

    entry = _ensure_mapping(payload)
    key = _clean_text(entry.get("key"))
    if not key:
        return None

    conditions = tuple(
        condition
        for condition in (parse_condition(item) for item in _ensure_sequence(entry.get("conditions")))
        if condition is not None
    )
    help_text = _clean_text(entry.get("helpText", entry.get("help_text", entry.get("help"))))

    return Question(
        key=key,
        label=_derive_label(key, entry),
        type=normalize_question_type(entry.get("type")),
        required=bool(entry.get("required")),
        conditions=conditions,
        help_text=help_text or None,
        options=_parse_options(entry.get("options")),
    )


def parse_questions(payloads: Iterable[Any]) -> Tuple[Question, ...]:
    """Parse ``payloads`` in order, dropping entries that are not questions."""

    questions: List[Question] = []
    for payload in payloads:
        question = parse_question(payload)
        if question is None:
            logger.warning("Skipping question entry without a key: %r", payload)
            continue
        questions.append(question)
    return tuple(questions)


def parse_question_set(payload: Any, state_code: str = "") -> QuestionSet:
    """Return the :class:`QuestionSet` described by an API or file payload.

    Both ``{"state": ..., "questions": [...]}`` documents and bare question
    lists are accepted.
    """

    if isinstance(payload, (list, tuple)):
        entry: Dict[str, Any] = {"questions": list(payload)}
    else:
        entry = _ensure_mapping(payload)

    state = _clean_text(entry.get("state")) or _clean_text(state_code)
    return QuestionSet(
        state=state.upper(),
        questions=parse_questions(_ensure_sequence(entry.get("questions"))),
        version=_clean_text(entry.get("version")),
    )


def question_keys(questions: Sequence[Question]) -> List[str]:
    """Return the keys of ``questions`` in order."""

    return [question.key for question in questions]


def _has_cycle(nodes: Set[str], edges: Mapping[str, Set[str]]) -> bool:
    """Return ``True`` if the dependency graph contains a cycle."""

    in_degree = {node: 0 for node in nodes}
    for dependencies in edges.values():
        for dependency in dependencies:
            if dependency in in_degree:
                in_degree[dependency] += 1

    queue = deque(node for node, degree in in_degree.items() if degree == 0)
    visited = 0
    while queue:
        node = queue.popleft()
        visited += 1
        for neighbour in edges.get(node, ()):
            if neighbour not in in_degree:
                continue
            in_degree[neighbour] -= 1
            if in_degree[neighbour] == 0:
                queue.append(neighbour)

    return visited != len(nodes)


def validate_question_set(questions: Sequence[Question]) -> None:
    """Raise :class:`QuestionSetError` if ``questions`` cannot drive a session.

    Keys must be unique, conditions may only reference known questions other
    than their own, and the dependencies must not form a cycle.
    """

    problems: List[str] = []
    seen: Set[str] = set()
    for question in questions:
        if question.key in seen:
            problems.append(f"Duplicate question key '{question.key}'.")
        seen.add(question.key)

    edges: Dict[str, Set[str]] = {}
    for question in questions:
        for condition in question.conditions:
            if condition.field_key == question.key:
                problems.append(f"Question '{question.key}' has a condition on itself.")
            elif condition.field_key not in seen:
                problems.append(
                    f"Question '{question.key}' references unknown question '{condition.field_key}'."
                )
            else:
                edges.setdefault(question.key, set()).add(condition.field_key)

    if problems:
        raise QuestionSetError(problems)
    if _has_cycle(seen, edges):
        raise QuestionSetError(["Circular question conditions detected."])


__all__ = [
    "Condition",
    "OPERATORS",
    "OPERATOR_ALIASES",
    "Option",
    "QUESTION_TYPES",
    "Question",
    "QuestionSet",
    "normalize_operator",
    "normalize_question_type",
    "parse_condition",
    "parse_question",
    "parse_question_set",
    "parse_questions",
    "question_keys",
    "validate_question_set",
]
