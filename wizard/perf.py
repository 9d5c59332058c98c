"""Timing of wizard transitions, logged when they exceed their threshold."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from wizard.defaults import SESSION_RESTORE_MS, STEP_TRANSITION_MS

logger = logging.getLogger(__name__)

THRESHOLDS_MS: Dict[str, int] = {
    "step_advance": STEP_TRANSITION_MS,
    "step_back": STEP_TRANSITION_MS,
    "session_restore": SESSION_RESTORE_MS,
    "answer_save": SESSION_RESTORE_MS,
}


@contextmanager
def track_transition(
    kind: str,
    *,
    clock: Callable[[], float] = time.perf_counter,
    **metadata: Any,
) -> Iterator[Dict[str, Any]]:
    """Measure the wrapped block and warn if it was slower than allowed.

    The yielded dict can be updated with extra metadata; ``duration_ms`` is
    filled in when the block exits, including when it raises.
    """

    record: Dict[str, Any] = dict(metadata)
    started = clock()
    try:
        yield record
    finally:
        duration_ms = (clock() - started) * 1000.0
        record["duration_ms"] = duration_ms
        threshold: Optional[int] = THRESHOLDS_MS.get(kind)
        if threshold is not None and duration_ms > threshold:
            logger.warning(
                "%s took %.1fms (threshold %dms) %s", kind, duration_ms, threshold, record
            )
        else:
            logger.debug("%s took %.1fms", kind, duration_ms)


__all__ = ["THRESHOLDS_MS", "track_transition"]
