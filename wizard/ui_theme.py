"""Shared look and feel for the wizard's Streamlit pages."""

from __future__ import annotations

from html import escape as html_escape
from typing import Any, Optional

import streamlit as st

from wizard.progress import Progress

_THEME_CSS = """
<style>
:root {
    --wizard-accent: #1D6FA3;
    --wizard-accent-dark: #145179;
    --wizard-accent-soft: #E3F0F8;
    --wizard-surface: #FFFFFF;
    --wizard-text: #1F2933;
    --wizard-muted: #52606D;
    --wizard-shadow: 0 14px 32px rgba(15, 23, 42, 0.08);
}

html, body {
    font-family: "Inter", "Segoe UI", system-ui, -apple-system, sans-serif;
    color: var(--wizard-text);
}

.block-container {
    max-width: 820px;
    padding-top: 2.5rem;
    padding-bottom: 4rem;
}

.wizard-header {
    display: flex;
    align-items: center;
    gap: 1.25rem;
    padding: 1.5rem 1.75rem;
    background: var(--wizard-surface);
    border-radius: 1.5rem;
    border: 1px solid rgba(29, 111, 163, 0.18);
    box-shadow: var(--wizard-shadow);
    margin-bottom: 1.75rem;
}

.wizard-header__icon {
    font-size: 2.5rem;
    line-height: 1;
}

.wizard-header__title {
    margin: 0;
    font-size: 2rem;
    font-weight: 700;
}

.wizard-header__subtitle {
    margin: 0.25rem 0 0 0;
    color: var(--wizard-muted);
}

.wizard-progress {
    margin-bottom: 1.25rem;
}

.wizard-progress__label {
    font-size: 0.8rem;
    font-weight: 700;
    color: var(--wizard-muted);
    text-transform: uppercase;
    letter-spacing: 0.08em;
}

.wizard-progress__track {
    height: 0.6rem;
    border-radius: 999px;
    background: var(--wizard-accent-soft);
    overflow: hidden;
    margin-top: 0.4rem;
}

.wizard-progress__bar {
    height: 100%;
    background: var(--wizard-accent);
}

.stButton>button {
    border-radius: 999px !important;
    font-weight: 600 !important;
}
</style>
"""


def apply_app_theme(page_title: str, page_icon: Optional[str] = None) -> None:
    """Set up consistent page configuration and inject the shared CSS theme."""

    st.set_page_config(
        page_title=page_title,
        page_icon=page_icon,
        layout="centered",
        initial_sidebar_state="collapsed",
    )
    st.markdown(_THEME_CSS, unsafe_allow_html=True)


def page_header(
    title: str,
    subtitle: Optional[str] = None,
    icon: Optional[str] = None,
    *,
    container: Optional[Any] = None,
) -> None:
    """Render the page title block."""

    icon_markup = f"<span class='wizard-header__icon'>{icon}</span>" if icon else ""
    subtitle_markup = (
        f"<p class='wizard-header__subtitle'>{html_escape(subtitle)}</p>" if subtitle else ""
    )
    target = container.markdown if container is not None else st.markdown
    target(
        f"""
        <div class="wizard-header">
            {icon_markup}
            <div>
                <h1 class="wizard-header__title">{html_escape(title)}</h1>
                {subtitle_markup}
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def progress_markup(progress: Progress) -> str:
    """Return the HTML for the "Question x of y" progress bar."""

    if progress.total_visible == 0:
        label = "No questions to answer"
    else:
        label = f"Question {progress.ordinal} of {progress.total_visible}"
    return (
        "<div class='wizard-progress'>"
        f"<div class='wizard-progress__label'>{label} · {progress.percent_complete}%</div>"
        "<div class='wizard-progress__track'>"
        f"<div class='wizard-progress__bar' style='width: {progress.percent_complete}%'></div>"
        "</div></div>"
    )


__all__ = ["apply_app_theme", "page_header", "progress_markup"]
