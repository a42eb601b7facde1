"""Annotation form for the pending point or region.

Shown while the interaction engine waits for input. The category and
priority are pre-selected from the context analyzer's suggestion for
the pending location; the reviewer can change both before confirming.
"""

from __future__ import annotations

import logging

import streamlit as st

from webapp.components.canvas import bump_canvas_revision
from webapp.utils.errors import ValidationError
from webapp.utils.models import (
    AnnotationCategory,
    AnnotationPriority,
    AnnotationType,
    Coordinates,
)
from webapp.utils.review_session import ReviewSession
from webapp.utils.shortcuts import handle_cancel_shortcut

logger = logging.getLogger(__name__)

CATEGORY_OPTIONS = list(AnnotationCategory)
PRIORITY_OPTIONS = list(AnnotationPriority)


def describe_pending(coordinates: Coordinates) -> str:
    """Human-readable location of a pending annotation.

    Example:
        >>> describe_pending(Coordinates(x=12.4, y=30.0))
        'Point at (12, 30)'
    """
    if coordinates.width is not None and coordinates.height is not None:
        return (
            f"Region at ({coordinates.x:.0f}, {coordinates.y:.0f}), "
            f"{coordinates.width:.0f}×{coordinates.height:.0f} px"
        )
    return f"Point at ({coordinates.x:.0f}, {coordinates.y:.0f})"


def pending_type(coordinates: Coordinates) -> AnnotationType:
    if coordinates.width is not None and coordinates.height is not None:
        return AnnotationType.REGION
    return AnnotationType.POINT


def submit_annotation(
    session: ReviewSession,
    category: AnnotationCategory,
    priority: AnnotationPriority,
) -> bool:
    """Confirm the pending annotation.

    Returns:
        True if the annotation was created. On a ValidationError the
        message is shown and the pending annotation is kept.
    """
    pending = session.engine.pending_annotation
    if pending is None:
        return False

    try:
        session.engine.confirm_annotation(pending_type(pending), category, priority)
    except ValidationError as e:
        logger.warning(f"Annotation rejected: {e.message}")
        st.error(f"❌ {e.user_message}")
        return False

    bump_canvas_revision()
    return True


def render_annotation_form(session: ReviewSession) -> None:
    """Render the form for the pending annotation, if there is one."""
    pending = session.engine.pending_annotation
    if pending is None:
        return

    recommendation = session.annotation_recommendation(pending)

    st.markdown("### 📍 New Annotation")
    st.caption(describe_pending(pending))
    if recommendation is not None:
        st.info(f"💡 {recommendation.reason}")

    category_index = (
        CATEGORY_OPTIONS.index(recommendation.suggested_category) if recommendation else 0
    )
    priority_index = (
        PRIORITY_OPTIONS.index(recommendation.suggested_priority) if recommendation else 1
    )

    category = st.selectbox(
        "Category",
        CATEGORY_OPTIONS,
        index=category_index,
        format_func=lambda c: c.value.title(),
        key="annotation_category",
    )
    priority = st.selectbox(
        "Priority",
        PRIORITY_OPTIONS,
        index=priority_index,
        format_func=lambda p: p.value.title(),
        key="annotation_priority",
    )

    col_confirm, col_cancel = st.columns(2)
    with col_confirm:
        if st.button("✓ Add", key="btn_confirm_annotation", type="primary", use_container_width=True):
            if submit_annotation(session, category, priority):
                st.rerun()
    with col_cancel:
        if st.button("✕ Cancel", key="btn_cancel_annotation", use_container_width=True):
            bump_canvas_revision()
            handle_cancel_shortcut()


__all__ = [
    "describe_pending",
    "pending_type",
    "render_annotation_form",
    "submit_annotation",
]
