"""Exceptions raised by the wizard engine."""

from __future__ import annotations

from typing import List, Optional, Sequence


class WizardError(Exception):
    """Base class for wizard engine errors."""


class QuestionSetError(WizardError, ValueError):
    """Raised when a question set cannot be used for a session."""

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid question set.")


class AnswerSaveError(WizardError):
    """Raised when an answer could not be persisted while advancing.

    The navigator keeps its position and the unsaved answer, so the same call
    can simply be repeated.
    """

    retryable = True

    def __init__(self, field_key: str, cause: Optional[BaseException] = None) -> None:
        self.field_key = field_key
        self.cause = cause
        message = f"Failed to save answer for '{field_key}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


__all__ = ["AnswerSaveError", "QuestionSetError", "WizardError"]
