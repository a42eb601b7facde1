"""Annotation panel listing the annotations of the current image.

The panel shows:
- A count header
- Annotations ordered by priority, then category (optionally grouped)
- A card per annotation with select and delete buttons
"""

from __future__ import annotations

import logging

import streamlit as st

from webapp.utils.context import group_annotations, order_annotations
from webapp.utils.models import Annotation, AnnotationPriority
from webapp.utils.review_session import ReviewSession
from webapp.utils.session import get_selected_annotation_id

logger = logging.getLogger(__name__)

GROUP_TOGGLE_KEY = "annotation_panel_grouped"

SELECTED_BORDER_COLOR = "#1E40AF"  # Deep Blue
SELECTED_BG_COLOR = "#EFF6FF"  # Light Blue

PRIORITY_DOTS: dict[AnnotationPriority, str] = {
    AnnotationPriority.HIGH: "🔴",
    AnnotationPriority.MEDIUM: "🟡",
    AnnotationPriority.LOW: "🟢",
}


def format_annotation(annotation: Annotation) -> str:
    """One-line summary of an annotation.

    Example:
        "🔴 Finding · point (120, 88)"
    """
    c = annotation.coordinates
    location = f"({c.x:.0f}, {c.y:.0f})"
    if annotation.is_region:
        location += f" {c.width:.0f}×{c.height:.0f}"
    dot = PRIORITY_DOTS.get(annotation.priority, "⚪")
    return f"{dot} {annotation.category.value.title()} · {annotation.type.value} {location}"


def render_empty_state() -> None:
    st.info("📭 No annotations yet")
    st.markdown("Click the image to mark a point, or switch to region mode and drag a box.")


def render_annotation_card(
    session: ReviewSession,
    annotation: Annotation,
    is_selected: bool,
) -> None:
    """Render a single annotation card with select/delete buttons."""
    border = SELECTED_BORDER_COLOR if is_selected else "transparent"
    bg_color = SELECTED_BG_COLOR if is_selected else "#FFFFFF"
    st.markdown(
        f"""
    <div style="
        border-left: 4px solid {border};
        background-color: {bg_color};
        padding: 6px 8px;
        margin-bottom: 4px;
        border-radius: 4px;
        font-size: 0.85em;
    ">
        {format_annotation(annotation)}
        <div style="font-size: 0.8em; color: #666;">
            {annotation.priority.value} priority · {annotation.created_at:%H:%M:%S}
        </div>
    </div>
    """,
        unsafe_allow_html=True,
    )

    col_select, col_delete = st.columns(2)
    with col_select:
        if st.button("Select", key=f"select_{annotation.id}", use_container_width=True):
            session.select_annotation(annotation.id)
            st.rerun()
    with col_delete:
        if st.button("🗑️ Delete", key=f"delete_{annotation.id}", use_container_width=True):
            session.delete_annotation(annotation.id)
            st.rerun()


def render_annotation_panel(session: ReviewSession) -> None:
    """Render the annotation list for the current image."""
    annotations = session.annotations_for_current_image()
    selected_id = get_selected_annotation_id()

    st.markdown(f"**📌 {len(annotations)} annotation(s)**")
    if not annotations:
        render_empty_state()
        return

    grouped = st.toggle("Group by category and priority", key=GROUP_TOGGLE_KEY)

    with st.container(height=400):
        if grouped:
            for (category, priority), members in group_annotations(annotations).items():
                st.caption(f"{category.value.title()} · {priority.value}")
                for annotation in members:
                    render_annotation_card(session, annotation, annotation.id == selected_id)
        else:
            for annotation in order_annotations(annotations):
                render_annotation_card(session, annotation, annotation.id == selected_id)


__all__ = [
    "format_annotation",
    "render_annotation_card",
    "render_annotation_panel",
]
