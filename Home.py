"""Streamlit landing page: pick a state, start the wizard or resume it."""

from __future__ import annotations

import re
import uuid
from typing import Dict, Optional, Union

import streamlit as st

from wizard.defaults import DEFAULT_PAGE_TITLE, PILOT_STATES, RESUME_ERROR_MESSAGE
from wizard.flow import FlowNavigator
from wizard.form_store import available_state_codes
from wizard.questionnaire_utils import validate_question_set
from wizard.resume import (
    JsonFileSnapshotStore,
    ResumeCoordinator,
    clear_snapshot,
    save_snapshot,
)
from wizard.session_backend import LocalSessionStore, SessionApiClient
from wizard.settings import WizardSettings, configure_logging, wizard_settings
from wizard.ui_theme import apply_app_theme, page_header

Backend = Union[SessionApiClient, LocalSessionStore]

BACKEND_STATE_KEY = "wizard_backend"
NAVIGATOR_STATE_KEY = "wizard_navigator"
RESUME_STATE_KEY = "wizard_resume"
STATE_CODE_STATE_KEY = "wizard_state_code"
STATE_NAME_STATE_KEY = "wizard_state_name"
COMPLETE_STATE_KEY = "wizard_complete"
CLIENT_STATE_KEY = "wizard_client"
CLIENT_QUERY_PARAM = "client"
WIZARD_PAGE = "pages/01_Wizard.py"

_CLIENT_TOKEN = re.compile(r"^[0-9a-f]{32}$")


def load_settings() -> WizardSettings:
    """Return the wizard settings, configuring logging on first use."""

    settings = wizard_settings()
    configure_logging(settings)
    return settings


def client_id() -> str:
    """Return the opaque token that identifies this browser.

    The token rides along in the page URL so it survives a reload. Anything
    that is not a token this app could have issued is replaced.
    """

    token = st.session_state.get(CLIENT_STATE_KEY)
    if token is None:
        candidate = st.query_params.get(CLIENT_QUERY_PARAM)
        if isinstance(candidate, str) and _CLIENT_TOKEN.match(candidate):
            token = candidate
        else:
            token = uuid.uuid4().hex
        st.query_params[CLIENT_QUERY_PARAM] = token
        st.session_state[CLIENT_STATE_KEY] = token
    return token


def snapshot_store(settings: WizardSettings, client: Optional[str] = None) -> JsonFileSnapshotStore:
    """Return the snapshot store belonging to ``client`` (this browser by default)."""

    return JsonFileSnapshotStore(settings.snapshot_dir / f"{client or client_id()}.json")


def get_backend(settings: WizardSettings) -> Backend:
    """Return the session backend kept for this browser session."""

    backend = st.session_state.get(BACKEND_STATE_KEY)
    if backend is None:
        if settings.api_configured:
            backend = SessionApiClient(
                base_url=settings.base_url or "",
                token=settings.token,
                timeout=settings.timeout,
            )
        else:
            backend = LocalSessionStore()
        st.session_state[BACKEND_STATE_KEY] = backend
    return backend


def state_choices(settings: WizardSettings) -> Dict[str, str]:
    """Return ``state_code -> name`` for the states the wizard can run."""

    if settings.api_configured:
        return dict(PILOT_STATES)
    return {code: PILOT_STATES.get(code, code) for code in available_state_codes()}


def start_wizard(
    backend: Backend,
    state_code: str,
    state_name: str,
    settings: WizardSettings,
) -> FlowNavigator:
    """Create a session, load the state's questions and remember the start."""

    backend.create_session()
    questions = tuple(backend.fetch_questions(state_code))
    validate_question_set(questions)
    navigator = FlowNavigator(questions, backend)
    client = client_id()
    save_snapshot(
        snapshot_store(settings, client),
        state_code,
        navigator.current_index,
        state_name=state_name,
        session_id=backend.session_id,
        client_id=client,
    )
    st.session_state[NAVIGATOR_STATE_KEY] = navigator
    st.session_state[STATE_CODE_STATE_KEY] = state_code
    st.session_state[STATE_NAME_STATE_KEY] = state_name
    st.session_state[COMPLETE_STATE_KEY] = False
    return navigator


def resume_wizard(backend: Backend, settings: WizardSettings) -> Optional[FlowNavigator]:
    """Try to restore an interrupted wizard once per browser session."""

    coordinator: Optional[ResumeCoordinator] = st.session_state.get(RESUME_STATE_KEY)
    if coordinator is None:
        client = client_id()
        store = snapshot_store(settings, client)
        snapshot = store.read()
        # Only pick up a session this browser started itself.
        if (
            snapshot is not None
            and snapshot.client_id == client
            and snapshot.session_id
            and not backend.session_id
        ):
            backend.session_id = snapshot.session_id
        coordinator = ResumeCoordinator(
            backend,
            store,
            window_minutes=settings.resume_window_minutes,
        )
        st.session_state[RESUME_STATE_KEY] = coordinator

    already_ran = coordinator.has_run
    result = coordinator.run()
    if not result.resumed:
        if not already_ran and result.reason == "fetch-failed":
            st.warning(RESUME_ERROR_MESSAGE)
        return None

    navigator = st.session_state.get(NAVIGATOR_STATE_KEY)
    if navigator is None and not already_ran:
        navigator = result.navigator(backend)
        st.session_state[NAVIGATOR_STATE_KEY] = navigator
        st.session_state[STATE_CODE_STATE_KEY] = result.state_code
        st.session_state[STATE_NAME_STATE_KEY] = result.state_name or result.state_code
        st.session_state[COMPLETE_STATE_KEY] = False
    return navigator


def _switch_to_wizard() -> None:
    """Navigate to the wizard page."""

    if hasattr(st, "switch_page"):
        try:
            st.switch_page(WIZARD_PAGE)
        except Exception:  # pragma: no cover - streamlit navigation fallback
            st.info("Use the navigation menu to open the wizard.")
    else:
        st.info("Use the navigation menu to open the wizard.")


def main() -> None:
    """Render the landing page."""

    apply_app_theme(page_title=DEFAULT_PAGE_TITLE, page_icon="🩺")
    page_header(
        DEFAULT_PAGE_TITLE,
        "Answer a few questions to see which Medicaid programs may fit your situation.",
        icon="🩺",
    )

    settings = load_settings()
    backend = get_backend(settings)
    navigator = resume_wizard(backend, settings)

    if navigator is not None and not st.session_state.get(COMPLETE_STATE_KEY):
        state_name = st.session_state.get(STATE_NAME_STATE_KEY, "")
        progress = navigator.progress()
        st.info(
            f"You have an application in progress for {state_name} "
            f"({progress.percent_complete}% complete)."
        )
        resume_col, restart_col = st.columns(2)
        if resume_col.button("Continue where I left off", type="primary"):
            _switch_to_wizard()
        if restart_col.button("Start over"):
            clear_snapshot(snapshot_store(settings))
            st.session_state.pop(NAVIGATOR_STATE_KEY, None)
            st.rerun()
        return

    choices = state_choices(settings)
    if not choices:
        st.error("No question sets are configured. Add one under question_sets/<STATE>/questions.json.")
        return

    codes = list(choices.keys())
    state_code = st.selectbox(
        "Which state do you live in?",
        options=codes,
        format_func=lambda code: f"{choices[code]} ({code})",
    )

    if st.button("Start", type="primary"):
        try:
            start_wizard(backend, state_code, choices[state_code], settings)
        except Exception as exc:  # pylint: disable=broad-except
            st.error(f"Failed to start the wizard: {exc}")
            return
        _switch_to_wizard()


if __name__ == "__main__":
    main()
