"""Default values shared between the wizard engine and the Streamlit pages."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

DEFAULT_PAGE_TITLE = "Medicaid eligibility check"
DEFAULT_API_TIMEOUT = 10
DEFAULT_RESUME_WINDOW_MINUTES = 30
DEFAULT_DEBOUNCE_MS = 300
DEFAULT_SESSION_TIMEOUT_MINUTES = 30
DEFAULT_SNAPSHOT_DIR = Path(".wizard") / "snapshots"
DEFAULT_LOG_LEVEL = "INFO"

# Step transitions should feel instant; anything slower is worth a log line.
STEP_TRANSITION_MS = 500
SESSION_RESTORE_MS = 2000

SAVE_ERROR_MESSAGE = "We could not save your answer. Please try again."
RESUME_ERROR_MESSAGE = "We could not restore your previous session, so we started a new one."

PILOT_STATES: Dict[str, str] = {
    "IL": "Illinois",
    "TX": "Texas",
}
