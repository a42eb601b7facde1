"""Workflow stepper for the four review steps.

Each step shows its label and description, styled as completed,
active, available or disabled. Previous/Next buttons share their keys
with the keyboard shortcuts.
"""

from __future__ import annotations

import logging

import streamlit as st

from webapp.utils.review_session import ReviewSession
from webapp.utils.shortcuts import handle_step_shortcut
from webapp.utils.workflow import STEP_LABELS, STEPS, ReviewStep

logger = logging.getLogger(__name__)

ACTIVE_COLOR = "#1E40AF"  # Deep Blue
COMPLETED_COLOR = "#22C55E"  # Green
AVAILABLE_COLOR = "#64748B"  # Slate
DISABLED_COLOR = "#CBD5E1"  # Light Slate


def get_step_status(session: ReviewSession, step: ReviewStep) -> str:
    """Display status of a step.

    Returns:
        One of "active", "completed", "available", "disabled".
    """
    state = session.workflow_state()
    if step is state.current_step:
        return "active"
    if state.is_complete or step in state.step_history:
        return "completed"
    if session.workflow.can_go_to_step(step):
        return "available"
    return "disabled"


def render_step_badge(step: ReviewStep, index: int, status: str, *, return_html: bool = False) -> str | None:
    """Render one step of the stepper as an HTML badge."""
    color = {
        "active": ACTIVE_COLOR,
        "completed": COMPLETED_COLOR,
        "available": AVAILABLE_COLOR,
    }.get(status, DISABLED_COLOR)
    marker = "✓" if status == "completed" else str(index + 1)
    weight = "bold" if status == "active" else "normal"

    html = (
        f'<div style="text-align:center; color:{color}; font-weight:{weight};">'
        f'<span style="display:inline-block; width:24px; height:24px; line-height:24px; '
        f'border-radius:12px; background-color:{color}; color:white;">{marker}</span>'
        f"<div>{STEP_LABELS[step]}</div></div>"
    )
    if return_html:
        return html

    st.markdown(html, unsafe_allow_html=True)
    return None


def render_workflow_stepper(session: ReviewSession) -> None:
    """Render the step indicator, current step description and navigation."""
    state = session.workflow_state()

    cols = st.columns(len(STEPS))
    for index, (col, step) in enumerate(zip(cols, STEPS)):
        with col:
            status = get_step_status(session, step)
            render_step_badge(step, index, status)
            if status == "available" and st.button(
                "Go", key=f"btn_step_{step.value}", use_container_width=True
            ):
                session.go_to_step(step)
                st.rerun()

    st.caption(session.workflow.get_step_description(state.current_step))

    if state.is_complete:
        st.success("✅ Review complete")
        return

    index = STEPS.index(state.current_step)
    col_prev, col_next, col_done = st.columns(3)
    with col_prev:
        if st.button("← Previous", key="btn_prev_step", disabled=index == 0, use_container_width=True):
            handle_step_shortcut("previous")
    with col_next:
        next_allowed = index < len(STEPS) - 1 and session.workflow.can_go_to_step(STEPS[index + 1])
        if st.button("Next →", key="btn_next_step", disabled=not next_allowed, use_container_width=True):
            handle_step_shortcut("next")
    with col_done:
        if state.current_step is ReviewStep.SUMMARY and st.button(
            "Complete Review", key="btn_complete_review", type="primary", use_container_width=True
        ):
            session.complete()
            st.rerun()


__all__ = [
    "get_step_status",
    "render_step_badge",
    "render_workflow_stepper",
]
