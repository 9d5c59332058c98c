"""Clients for the session API that stores wizard answers."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from wizard.answers import Answer
from wizard.defaults import DEFAULT_API_TIMEOUT, DEFAULT_SESSION_TIMEOUT_MINUTES
from wizard.errors import WizardError
from wizard.form_store import load_local_question_set
from wizard.questionnaire_utils import Question, QuestionSet, parse_question_set

logger = logging.getLogger(__name__)

INVALID_SESSION_STATUSES = {401, 404}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Return ``value`` as an aware datetime, or ``None`` if it cannot be parsed."""

    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def session_is_active(session: Mapping[str, Any], now: Optional[datetime] = None) -> bool:
    """Return ``True`` unless ``session`` is revoked or already expired."""

    if session.get("isRevoked"):
        return False
    expires_at = _parse_timestamp(session.get("expiresAt"))
    if expires_at is None:
        return True
    return expires_at > (now or datetime.now(timezone.utc))


@dataclass
class SessionApiClient:
    """HTTP wrapper for the question and session answer endpoints."""

    base_url: str
    session_id: Optional[str] = None
    token: Optional[str] = None
    timeout: float = DEFAULT_API_TIMEOUT

    def _headers(self) -> Dict[str, str]:
        """Build request headers for the session API."""

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        """Join ``path`` onto the configured base URL."""

        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _require_session(self) -> str:
        if not self.session_id:
            raise WizardError("No wizard session has been started.")
        return self.session_id

    def create_session(self, timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES) -> Dict[str, Any]:
        """Create a new anonymous session and remember its identifier."""

        payload = {
            "timeoutMinutes": timeout_minutes,
            "inactivityTimeoutMinutes": timeout_minutes,
        }
        response = requests.post(
            self._url("sessions"),
            headers=self._headers(),
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        session = response.json()
        self.session_id = str(session.get("id") or "") or None
        return session

    def current_session(self) -> Optional[Dict[str, Any]]:
        """Return the active session, or ``None`` if it is missing or expired.

        Only the session held in ``session_id`` is checked; without one there
        is nothing to resume.
        """

        if not self.session_id:
            return None
        response = requests.get(
            self._url(f"sessions/{self.session_id}"), headers=self._headers(), timeout=self.timeout
        )
        if response.status_code in INVALID_SESSION_STATUSES:
            return None
        response.raise_for_status()
        session = response.json()
        if not isinstance(session, dict) or not session_is_active(session):
            return None
        return session

    def fetch_question_set(self, state_code: str) -> QuestionSet:
        """Download the question set served for ``state_code``."""

        response = requests.get(
            self._url("questions"),
            headers=self._headers(),
            params={"state": state_code},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return parse_question_set(response.json(), state_code=state_code)

    def fetch_questions(self, state_code: str) -> Tuple[Question, ...]:
        return self.fetch_question_set(state_code).questions

    def save_answer(self, answer: Answer) -> Dict[str, Any]:
        """Create or update ``answer`` for the current session."""

        session_id = self._require_session()
        response = requests.post(
            self._url(f"sessions/{session_id}/answers"),
            headers=self._headers(),
            json=answer.to_payload(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def fetch_answers(self) -> List[Answer]:
        """Return every answer recorded for the current session."""

        session_id = self._require_session()
        response = requests.get(
            self._url(f"sessions/{session_id}/answers"),
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            raise WizardError("Unexpected answers payload from the session API.")
        answers: List[Answer] = []
        for item in payload:
            answer = Answer.from_payload(item) if isinstance(item, Mapping) else None
            if answer is not None:
                answers.append(answer)
        return answers


@dataclass
class LocalSessionStore:
    """In-process stand-in for the session API.

    Used when no API is configured: answers live in memory and question sets
    come from the files under ``question_sets/``.
    """

    question_sets_root: Optional[Path] = None
    session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES
    session_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    answers: Dict[str, Answer] = field(default_factory=dict)

    def create_session(self, timeout_minutes: Optional[int] = None) -> Dict[str, Any]:
        minutes = timeout_minutes or self.session_timeout_minutes
        self.session_id = uuid.uuid4().hex
        self.expires_at = datetime.now(timezone.utc) + timedelta(minutes=minutes)
        self.answers = {}
        return self.current_session() or {}

    def current_session(self) -> Optional[Dict[str, Any]]:
        # Only sessions created by this process are known here.
        if not self.session_id or self.expires_at is None:
            return None
        session = {
            "id": self.session_id,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "isRevoked": False,
        }
        return session if session_is_active(session) else None

    def fetch_questions(self, state_code: str) -> Tuple[Question, ...]:
        return load_local_question_set(state_code, self.question_sets_root).questions

    def save_answer(self, answer: Answer) -> Dict[str, Any]:
        if not self.session_id:
            raise WizardError("No wizard session has been started.")
        self.answers[answer.field_key] = answer
        return answer.to_payload()

    def fetch_answers(self) -> List[Answer]:
        return list(self.answers.values())


__all__ = ["LocalSessionStore", "SessionApiClient", "session_is_active"]
