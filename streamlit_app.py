"""Streamlit entrypoint for the eligibility wizard; renders the landing page."""

from importlib import import_module

import streamlit as st


def main() -> None:
    """Load ``Home`` lazily so a broken deployment shows an error instead of a traceback."""

    try:
        home_module = import_module("Home")
    except ModuleNotFoundError:
        st.error("The wizard landing page could not be loaded.")
        return

    render = getattr(home_module, "main", None)
    if render is None:
        st.error("The wizard landing page has no main() function.")
        return

    render()


if __name__ == "__main__":
    main()
