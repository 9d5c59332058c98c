"""Helpers for working with question set files stored in the repository."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from wizard.questionnaire_utils import QuestionSet, parse_question_set, validate_question_set

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
QUESTION_SET_FILENAME = "questions.json"
QUESTION_SETS_ROOT = PROJECT_ROOT / "question_sets"


def discover_local_question_sets(root: Optional[Path] = None) -> Dict[str, Path]:
    """Return a mapping of ``state_code -> path`` for local question sets."""

    base = root or QUESTION_SETS_ROOT
    found: Dict[str, Path] = {}
    if base.exists():
        for entry in sorted(base.iterdir()):
            if not entry.is_dir():
                continue
            path = entry / QUESTION_SET_FILENAME
            if path.exists():
                found[entry.name.upper()] = path
    return found


def available_state_codes(root: Optional[Path] = None) -> List[str]:
    """Return the state codes with a local question set."""

    return list(discover_local_question_sets(root).keys())


def load_local_question_set(state_code: str, root: Optional[Path] = None) -> QuestionSet:
    """Load and validate the question set for ``state_code``.

    Raises ``LookupError`` if no file exists for the state, and
    :class:`~wizard.errors.QuestionSetError` if the file describes an unusable
    set of questions.
    """

    code = state_code.strip().upper()
    path = discover_local_question_sets(root).get(code)
    if path is None:
        raise LookupError(f"No question set available for state '{code}'.")

    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    question_set = parse_question_set(payload, state_code=code)
    validate_question_set(question_set.questions)
    logger.debug("Loaded %d questions for %s from %s", len(question_set.questions), code, path)
    return question_set


__all__ = [
    "QUESTION_SETS_ROOT",
    "available_state_codes",
    "discover_local_question_sets",
    "load_local_question_set",
]
