"""Streamlit page that walks the user through the visible wizard questions."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from Home import (
    COMPLETE_STATE_KEY,
    NAVIGATOR_STATE_KEY,
    STATE_CODE_STATE_KEY,
    STATE_NAME_STATE_KEY,
    client_id,
    get_backend,
    load_settings,
    snapshot_store,
)
from wizard.answers import Answer, Multi, Scalar, answer_from_input, value_kind_for
from wizard.defaults import DEFAULT_PAGE_TITLE, SAVE_ERROR_MESSAGE
from wizard.errors import AnswerSaveError
from wizard.flow import FlowNavigator
from wizard.questionnaire_utils import Question
from wizard.resume import clear_snapshot, save_snapshot
from wizard.scheduler import VisibilityScheduler
from wizard.ui_theme import apply_app_theme, page_header, progress_markup
from wizard.visibility import visible_questions

SCHEDULER_STATE_KEY = "wizard_scheduler"
SAVE_ERROR_STATE_KEY = "wizard_save_error"


def _input_key(question: Question) -> str:
    return f"wizard_input_{question.key}"


def _stored_value(navigator: FlowNavigator, question: Question) -> Any:
    """Return the saved (or unsaved draft) value for ``question``."""

    draft = navigator.draft
    if draft is not None and draft.field_key == question.key:
        return draft.value
    return navigator.answers.get(question.key)


def _scalar_text(value: Any) -> str:
    return value.text if isinstance(value, Scalar) else ""


def _render_input(question: Question, stored: Any) -> Any:
    """Render the widget for ``question`` and return its raw value."""

    key = _input_key(question)
    label = question.label + (" *" if question.required else "")
    help_text = question.help_text
    text = _scalar_text(stored)

    if question.type == "boolean":
        choices = ["Yes", "No"]
        index = None
        if text in ("true", "false"):
            index = 0 if text == "true" else 1
        picked = st.radio(label, choices, index=index, key=key, help=help_text, horizontal=True)
        if picked is None:
            return None
        return picked == "Yes"

    if question.type in ("integer", "currency"):
        try:
            current: Optional[float] = float(text) if text else None
        except ValueError:
            current = None
        if question.type == "integer":
            return st.number_input(
                label,
                min_value=0,
                step=1,
                value=int(current) if current is not None else None,
                key=key,
                help=help_text,
            )
        return st.number_input(
            label,
            min_value=0.0,
            step=50.0,
            format="%.2f",
            value=current,
            key=key,
            help=help_text,
        )

    if question.type == "date":
        try:
            current_date: Optional[date] = date.fromisoformat(text) if text else None
        except ValueError:
            current_date = None
        return st.date_input(
            label,
            value=current_date,
            min_value=date(1900, 1, 1),
            key=key,
            help=help_text,
        )

    if question.type == "single-select":
        values = [option.value for option in question.options]
        labels = {option.value: option.label for option in question.options}
        return st.selectbox(
            label,
            values,
            index=values.index(text) if text in values else None,
            format_func=lambda value: labels.get(value, value),
            key=key,
            help=help_text,
            placeholder="Choose an option",
        )

    if question.type == "multi-select":
        values = [option.value for option in question.options]
        labels = {option.value: option.label for option in question.options}
        selected = [item for item in stored.items if item in values] if isinstance(stored, Multi) else []
        return st.multiselect(
            label,
            values,
            default=selected,
            format_func=lambda value: labels.get(value, value),
            key=key,
            help=help_text,
        )

    return st.text_input(label, value=text, key=key, help=help_text)


def _answer_for(question: Question, raw: Any) -> Optional[Answer]:
    """Return the answer to submit for ``question``.

    Optional questions left empty are saved as blank so the session records
    that they were seen.
    """

    answer = answer_from_input(question.key, question.type, raw)
    if answer is None and not question.required:
        empty = Multi(()) if question.type == "multi-select" else Scalar("")
        answer = Answer(field_key=question.key, value=empty, value_kind=value_kind_for(question.type))
    return answer


def _scheduler(navigator: FlowNavigator, interval_ms: int) -> VisibilityScheduler:
    owner, scheduler = st.session_state.get(SCHEDULER_STATE_KEY, (None, None))
    if scheduler is None or owner != id(navigator):
        scheduler = VisibilityScheduler(navigator.questions, interval_ms=interval_ms)
        st.session_state[SCHEDULER_STATE_KEY] = (id(navigator), scheduler)
    return scheduler


def remaining_questions(
    navigator: FlowNavigator,
    scheduler: VisibilityScheduler,
    answers: Dict[str, Any],
) -> int:
    """Count the visible questions after the current one for ``answers``.

    A deferred recompute is flushed first, so the count (and the Next/Finish
    label built from it) always reflects the answer as entered.
    """

    visibility = scheduler.request(answers)
    if scheduler.pending:
        visibility = scheduler.flush(answers)
    return sum(
        1
        for later in navigator.questions[navigator.current_index + 1 :]
        if visibility.get(later.key, False)
    )


def _remember_position(navigator: FlowNavigator, settings: Any, session_id: Optional[str]) -> None:
    client = client_id()
    save_snapshot(
        snapshot_store(settings, client),
        st.session_state.get(STATE_CODE_STATE_KEY, ""),
        navigator.current_index,
        state_name=st.session_state.get(STATE_NAME_STATE_KEY, ""),
        session_id=session_id,
        client_id=client,
    )


def render_summary(navigator: FlowNavigator) -> None:
    """Show the answers given to the visible questions."""

    answers = navigator.answers
    rows = []
    for question in visible_questions(navigator.questions, navigator.visibility):
        value = answers.get(question.key)
        if isinstance(value, Multi):
            shown = ", ".join(value.items)
        elif isinstance(value, Scalar):
            shown = value.text
        else:
            shown = ""
        rows.append({"Question": question.label, "Answer": shown})

    st.success("Thank you. Your answers have been saved.")
    if rows:
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)


def main() -> None:
    apply_app_theme(page_title=DEFAULT_PAGE_TITLE, page_icon="🩺")
    settings = load_settings()
    backend = get_backend(settings)

    navigator: Optional[FlowNavigator] = st.session_state.get(NAVIGATOR_STATE_KEY)
    state_name = st.session_state.get(STATE_NAME_STATE_KEY, "")
    page_header(DEFAULT_PAGE_TITLE, f"Questions for {state_name}" if state_name else None, icon="🩺")

    if navigator is None:
        st.info("Choose your state on the Home page to begin.")
        return

    if st.session_state.get(COMPLETE_STATE_KEY):
        render_summary(navigator)
        return

    navigator.realign()
    question = navigator.current_question
    if question is None or not navigator.current_is_visible:
        st.session_state[COMPLETE_STATE_KEY] = True
        clear_snapshot(snapshot_store(settings))
        st.rerun()
        return

    st.markdown(progress_markup(navigator.progress()), unsafe_allow_html=True)

    save_error = st.session_state.pop(SAVE_ERROR_STATE_KEY, None)
    if save_error:
        st.error(save_error)

    raw = _render_input(question, _stored_value(navigator, question))
    answer = _answer_for(question, raw)

    # Preview of what the pending answer would reveal.
    preview_answers = navigator.answers
    if answer is not None:
        preview_answers[answer.field_key] = answer.value
    remaining = remaining_questions(
        navigator, _scheduler(navigator, settings.debounce_ms), preview_answers
    )
    st.caption("This is the last question." if remaining == 0 else f"{remaining} more to go.")

    back_col, next_col = st.columns(2)
    if back_col.button("Back", disabled=not navigator.can_go_back):
        if navigator.go_back():
            _remember_position(navigator, settings, backend.session_id)
        st.rerun()

    next_label = "Finish" if remaining == 0 else "Next"
    if next_col.button(next_label, type="primary", disabled=answer is None):
        try:
            advanced = navigator.go_next(answer)
        except AnswerSaveError:
            st.session_state[SAVE_ERROR_STATE_KEY] = SAVE_ERROR_MESSAGE
            st.rerun()
            return
        if advanced:
            _remember_position(navigator, settings, backend.session_id)
        else:
            st.session_state[COMPLETE_STATE_KEY] = True
            clear_snapshot(snapshot_store(settings))
        st.rerun()


if __name__ == "__main__":
    main()
