"""Session state management for the review session.

This module keeps the ReviewSession for the current browser session in
st.session_state, providing functions to initialize, access and reset
it. Streamlit reruns the script on every interaction, so everything the
review needs between reruns lives here.
"""

from __future__ import annotations

import logging

import streamlit as st

from webapp.utils.review_session import ReviewEvents, ReviewSession

logger = logging.getLogger(__name__)

# Session state key constants
SESSION_KEYS = {
    "review_session": "review_session",
    "selected_annotation": "selected_annotation_id",
    "auto_orient": "auto_orient",
    "session_initialized": "review_session_initialized",
}


def _build_session() -> ReviewSession:
    events = ReviewEvents(
        on_annotation_selected=lambda ann: set_selected_annotation_id(ann.id),
        on_annotation_deleted=_clear_selection_if,
    )
    return ReviewSession(
        events=events,
        auto_orient=bool(st.session_state.get(SESSION_KEYS["auto_orient"], False)),
    )


def _clear_selection_if(annotation_id: str) -> None:
    if get_selected_annotation_id() == annotation_id:
        set_selected_annotation_id(None)


def initialize_review_session() -> None:
    """Initialize review state in session.

    Safe to call multiple times - only sets defaults if not present.
    Should be called at app startup before any review operations.
    """
    if SESSION_KEYS["session_initialized"] not in st.session_state:
        st.session_state[SESSION_KEYS["review_session"]] = _build_session()
        st.session_state[SESSION_KEYS["selected_annotation"]] = None
        st.session_state[SESSION_KEYS["session_initialized"]] = True
        logger.debug("Review session initialized")


def get_review_session() -> ReviewSession:
    """Get the review session, creating it on first use.

    Returns:
        The ReviewSession for this browser session (mutable reference).
    """
    initialize_review_session()
    return st.session_state[SESSION_KEYS["review_session"]]


def reset_review_session() -> ReviewSession:
    """Discard the current review and start a fresh session.

    Returns:
        The new ReviewSession.
    """
    st.session_state[SESSION_KEYS["review_session"]] = _build_session()
    st.session_state[SESSION_KEYS["selected_annotation"]] = None
    st.session_state[SESSION_KEYS["session_initialized"]] = True
    logger.info("Review session reset")
    return st.session_state[SESSION_KEYS["review_session"]]


def get_selected_annotation_id() -> str | None:
    """Get the id of the annotation highlighted in the viewer, if any."""
    return st.session_state.get(SESSION_KEYS["selected_annotation"])


def set_selected_annotation_id(annotation_id: str | None) -> None:
    st.session_state[SESSION_KEYS["selected_annotation"]] = annotation_id
    logger.debug(f"Selected annotation: {annotation_id}")


def set_auto_orient(enabled: bool) -> None:
    """Toggle automatic re-orientation after annotation changes."""
    st.session_state[SESSION_KEYS["auto_orient"]] = enabled
    get_review_session().auto_orient = enabled
