"""Restore a wizard session after a reload from persisted answers.

The browser-side snapshot only remembers which state's questions were being
answered and when. Everything else (answers, visibility, position) is rebuilt
from the session API, and any doubt about that data results in a fresh start
instead of a half-restored wizard.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Protocol, Sequence, Tuple

from wizard.answers import Answer, AnswerMap, build_answer_map, is_answered
from wizard.defaults import DEFAULT_RESUME_WINDOW_MINUTES
from wizard.flow import AnswerSink, FlowNavigator
from wizard.perf import track_transition
from wizard.questionnaire_utils import Question, validate_question_set
from wizard.visibility import VisibilityState, compute_visibility

logger = logging.getLogger(__name__)

SNAPSHOT_STATE_KEY = "wizard_snapshot"


@dataclass(frozen=True)
class Snapshot:
    """Locally cached pointer to an in-progress wizard."""

    state_code: str
    last_index: int
    timestamp: float
    state_name: str = ""
    session_id: Optional[str] = None
    client_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["Snapshot"]:
        """Return a snapshot for ``payload`` or ``None`` if it is unusable."""

        state_code = payload.get("state_code") or payload.get("stateCode")
        last_index = payload.get("last_index", payload.get("lastStep", 0))
        timestamp = payload.get("timestamp")
        if not isinstance(state_code, str) or not state_code.strip():
            return None
        try:
            last_index = int(last_index)
            timestamp = float(timestamp)
        except (TypeError, ValueError):
            return None
        session_id = payload.get("session_id")
        client_id = payload.get("client_id")
        return cls(
            state_code=state_code.strip().upper(),
            last_index=last_index,
            timestamp=timestamp,
            state_name=str(payload.get("state_name") or payload.get("stateName") or ""),
            session_id=str(session_id) if session_id else None,
            client_id=str(client_id) if client_id else None,
        )


class SnapshotStore(Protocol):
    def read(self) -> Optional[Snapshot]:
        ...

    def write(self, snapshot: Snapshot) -> None:
        ...

    def clear(self) -> None:
        ...


class JsonFileSnapshotStore:
    """Keep the snapshot in a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> Optional[Snapshot]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable snapshot %s: %s", self.path, exc)
            return None
        if not isinstance(payload, dict):
            return None
        return Snapshot.from_dict(payload)

    def write(self, snapshot: Snapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(snapshot.to_dict(), handle)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class MappingSnapshotStore:
    """Keep the snapshot in a mutable mapping such as ``st.session_state``."""

    def __init__(self, mapping: MutableMapping[str, Any], key: str = SNAPSHOT_STATE_KEY) -> None:
        self._mapping = mapping
        self._key = key

    def read(self) -> Optional[Snapshot]:
        payload = self._mapping.get(self._key)
        if not isinstance(payload, Mapping):
            return None
        return Snapshot.from_dict(payload)

    def write(self, snapshot: Snapshot) -> None:
        self._mapping[self._key] = snapshot.to_dict()

    def clear(self) -> None:
        self._mapping.pop(self._key, None)


def save_snapshot(
    store: SnapshotStore,
    state_code: str,
    last_index: int,
    *,
    state_name: str = "",
    session_id: Optional[str] = None,
    client_id: Optional[str] = None,
    clock: Callable[[], float] = time.time,
) -> Optional[Snapshot]:
    """Record the wizard position; failures are logged and otherwise ignored."""

    snapshot = Snapshot(
        state_code=state_code.strip().upper(),
        last_index=last_index,
        timestamp=clock(),
        state_name=state_name,
        session_id=session_id,
        client_id=client_id,
    )
    try:
        store.write(snapshot)
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Failed to save wizard snapshot: %s", exc)
        return None
    return snapshot


def clear_snapshot(store: SnapshotStore) -> None:
    """Forget the cached wizard position."""

    try:
        store.clear()
    except OSError as exc:
        logger.warning("Failed to clear wizard snapshot: %s", exc)


def is_snapshot_fresh(
    snapshot: Snapshot,
    now: float,
    window_minutes: float = DEFAULT_RESUME_WINDOW_MINUTES,
) -> bool:
    """Return ``True`` if ``snapshot`` is no older than the resume window."""

    return now - snapshot.timestamp <= window_minutes * 60


def resume_position(
    questions: Sequence[Question],
    answer_map: Mapping[str, Any],
    visibility: Mapping[str, bool],
) -> int:
    """Return the index to resume at.

    That is the first visible question without an answer or, when every
    visible question is answered, the last visible one. ``0`` if nothing is
    visible.
    """

    last_visible = -1
    for index, question in enumerate(questions):
        if not visibility.get(question.key, False):
            continue
        if not is_answered(answer_map, question.key):
            return index
        last_visible = index
    return max(last_visible, 0)


class ResumeSource(Protocol):
    """The session API calls rehydration depends on."""

    def current_session(self) -> Optional[Dict[str, Any]]:
        ...

    def fetch_questions(self, state_code: str) -> Sequence[Question]:
        ...

    def fetch_answers(self) -> List[Answer]:
        ...


@dataclass(frozen=True)
class ResumeResult:
    """Outcome of a resume attempt; ``resumed`` is ``False`` for a cold start."""

    resumed: bool
    reason: str
    state_code: str = ""
    state_name: str = ""
    questions: Tuple[Question, ...] = ()
    answers: Tuple[Answer, ...] = ()
    answer_map: AnswerMap = field(default_factory=dict)
    visibility: VisibilityState = field(default_factory=dict)
    position: int = 0

    def navigator(self, store: AnswerSink) -> FlowNavigator:
        """Return a navigator positioned where the user left off."""

        return FlowNavigator(
            self.questions,
            store,
            answers=self.answer_map,
            current_index=self.position,
        )


def _cold_start(reason: str) -> ResumeResult:
    return ResumeResult(resumed=False, reason=reason)


class ResumeCoordinator:
    """Run the resume sequence once per session bootstrap.

    Later calls to :meth:`run` return the first outcome without contacting
    the session API again.
    """

    def __init__(
        self,
        source: ResumeSource,
        snapshot_store: SnapshotStore,
        *,
        window_minutes: float = DEFAULT_RESUME_WINDOW_MINUTES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._snapshot_store = snapshot_store
        self._window_minutes = window_minutes
        self._clock = clock
        self._result: Optional[ResumeResult] = None

    @property
    def has_run(self) -> bool:
        return self._result is not None

    def run(self) -> ResumeResult:
        if self._result is None:
            self._result = self._rehydrate()
        return self._result

    def _discard(self, reason: str) -> ResumeResult:
        clear_snapshot(self._snapshot_store)
        return _cold_start(reason)

    def _rehydrate(self) -> ResumeResult:
        snapshot = self._snapshot_store.read()
        if snapshot is None:
            return _cold_start("no-snapshot")

        if not is_snapshot_fresh(snapshot, self._clock(), self._window_minutes):
            logger.info(
                "Discarding wizard snapshot for %s older than %s minutes",
                snapshot.state_code,
                self._window_minutes,
            )
            return self._discard("expired")

        with track_transition("session_restore", state_code=snapshot.state_code):
            try:
                session = self._source.current_session()
                if session is None:
                    logger.info("Session behind the wizard snapshot is no longer valid")
                    return self._discard("invalid-session")
                questions = tuple(self._source.fetch_questions(snapshot.state_code))
                validate_question_set(questions)
                answers = tuple(self._source.fetch_answers())
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Failed to resume wizard for %s: %s", snapshot.state_code, exc)
                return self._discard("fetch-failed")

        if not questions:
            logger.warning("No questions returned for %s; starting over", snapshot.state_code)
            return self._discard("no-questions")

        answer_map = build_answer_map(answers)
        visibility = compute_visibility(questions, answer_map)
        position = resume_position(questions, answer_map, visibility)
        logger.info(
            "Resuming %s at question %d of %d with %d saved answers",
            snapshot.state_code,
            position + 1,
            len(questions),
            len(answers),
        )
        return ResumeResult(
            resumed=True,
            reason="resumed",
            state_code=snapshot.state_code,
            state_name=snapshot.state_name,
            questions=questions,
            answers=answers,
            answer_map=answer_map,
            visibility=visibility,
            position=position,
        )


__all__ = [
    "JsonFileSnapshotStore",
    "MappingSnapshotStore",
    "ResumeCoordinator",
    "ResumeResult",
    "ResumeSource",
    "SNAPSHOT_STATE_KEY",
    "Snapshot",
    "SnapshotStore",
    "clear_snapshot",
    "is_snapshot_fresh",
    "resume_position",
    "save_snapshot",
]
