"""Debounced visibility recomputation for rapid answer edits."""

from __future__ import annotations

import time
from typing import Callable, Mapping, Optional, Sequence

from wizard.answers import AnswerValue
from wizard.defaults import DEFAULT_DEBOUNCE_MS
from wizard.questionnaire_utils import Question
from wizard.visibility import VisibilityState, compute_visibility


class VisibilityScheduler:
    """Recompute visibility at most once every ``interval_ms`` milliseconds.

    ``request`` is meant for edits in progress (typing into a field) and may
    hand back the previous result. ``flush`` always recomputes and is what
    navigation decisions must use, so throttling never changes the visibility
    a step is taken on.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        interval_ms: int = DEFAULT_DEBOUNCE_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_ms < 0:
            raise ValueError("interval_ms must not be negative")
        self._questions = tuple(questions)
        self._interval = interval_ms / 1000.0
        self._clock = clock
        self._last_run: Optional[float] = None
        self._last_result: VisibilityState = {}
        self._pending = False
        self.runs = 0

    @property
    def pending(self) -> bool:
        """``True`` when a request was deferred and not yet recomputed."""

        return self._pending

    @property
    def last_result(self) -> VisibilityState:
        return dict(self._last_result)

    def _run(self, answer_map: Mapping[str, AnswerValue]) -> VisibilityState:
        self._last_result = compute_visibility(self._questions, answer_map)
        self._last_run = self._clock()
        self._pending = False
        self.runs += 1
        return dict(self._last_result)

    def request(self, answer_map: Mapping[str, AnswerValue]) -> VisibilityState:
        """Recompute if the interval has elapsed, otherwise defer."""

        now = self._clock()
        if self._last_run is None or now - self._last_run >= self._interval:
            return self._run(answer_map)
        self._pending = True
        return dict(self._last_result)

    def flush(self, answer_map: Mapping[str, AnswerValue]) -> VisibilityState:
        """Recompute immediately and clear any deferred request."""

        return self._run(answer_map)


__all__ = ["VisibilityScheduler"]
