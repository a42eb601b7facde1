"""Keyboard shortcuts for the review workflow.

This module provides keyboard shortcut handling for fast review:
- A/←: Previous workflow step
- D/→: Next workflow step
- 0/Home: Reset view (same as double-click)
- +/-: Zoom in/out by one wheel step
- ESC: Cancel the pending annotation

The streamlit-shortcuts library binds keyboard shortcuts to Streamlit UI elements
(buttons with specific keys), triggering click events when the shortcut is pressed.

Example:
    >>> from webapp.utils.shortcuts import register_shortcuts, render_shortcut_help
    >>> register_shortcuts()  # Call after creating buttons with matching keys
"""

from __future__ import annotations

import logging

import streamlit as st
from streamlit_shortcuts import add_shortcuts

from webapp.utils.interaction import InteractionState
from webapp.utils.session import get_review_session

logger = logging.getLogger(__name__)

# Maps button keys to keyboard shortcuts
SHORTCUTS: dict[str, str | list[str]] = {
    "btn_prev_step": ["a", "ArrowLeft"],  # A/← = Previous step
    "btn_next_step": ["d", "ArrowRight"],  # D/→ = Next step
    "btn_reset_view": ["0", "Home"],  # 0/Home = Reset view
    "btn_zoom_in": "+",
    "btn_zoom_out": "-",
    "btn_cancel_annotation": "Escape",  # ESC = Cancel pending annotation
}


def register_shortcuts() -> None:
    """Register all keyboard shortcuts for button elements.

    Binds keyboard shortcuts to buttons with matching keys.
    Must be called after buttons are created with the corresponding keys.
    """
    add_shortcuts(**SHORTCUTS)


def is_annotation_pending() -> bool:
    """Check whether the annotation form is waiting for input."""
    return get_review_session().engine.state is InteractionState.AWAITING_INPUT


def handle_step_shortcut(direction: str) -> None:
    """Handle A/D/←/→ step navigation.

    Args:
        direction: "previous" or "next"

    Does nothing while an annotation is pending.
    """
    if is_annotation_pending():
        logger.debug("Step shortcut blocked - annotation pending")
        return

    session = get_review_session()
    if direction == "previous":
        moved = session.previous_step()
    else:
        moved = session.next_step()
    logger.debug(f"Step shortcut {direction}: {'moved' if moved else 'blocked'}")

    st.rerun()


def handle_zoom_shortcut(direction: str) -> None:
    """Handle +/- zoom as a single wheel step.

    Args:
        direction: "in" or "out"
    """
    engine = get_review_session().engine
    engine.wheel(-1 if direction == "in" else 1)
    st.rerun()


def handle_reset_view_shortcut() -> None:
    """Handle 0/Home: reset pan, zoom and orientation."""
    get_review_session().engine.double_click()
    logger.info("View reset via shortcut")
    st.rerun()


def handle_cancel_shortcut() -> None:
    """Handle ESC: drop the pending annotation without creating it."""
    get_review_session().engine.cancel_annotation()
    logger.info("Pending annotation cancelled via shortcut")
    st.rerun()


def render_shortcut_help() -> None:
    """Render keyboard shortcut reference panel."""
    with st.expander("⌨️ Keyboard Shortcuts"):
        st.markdown(
            """
| Key | Action |
|-----|--------|
| **A** or **←** | Previous step |
| **D** or **→** | Next step |
| **0** or **Home** | Reset view |
| **+** / **-** | Zoom in / out |
| **ESC** | Cancel pending annotation |
"""
        )


__all__ = [
    "SHORTCUTS",
    "handle_cancel_shortcut",
    "handle_reset_view_shortcut",
    "handle_step_shortcut",
    "handle_zoom_shortcut",
    "is_annotation_pending",
    "register_shortcuts",
    "render_shortcut_help",
]
