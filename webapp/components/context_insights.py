"""Context insights panel.

Visual summary of the context analyzer's output for the current image:

- Recommendation badge coloured by confidence (green high, amber
  medium, red low)
- Focus suggestions
- Metadata insights
"""

from __future__ import annotations

import html as html_lib
from typing import TYPE_CHECKING

from webapp.utils.models import Confidence

if TYPE_CHECKING:
    from webapp.utils.context import ContextAnalysis, ViewRecommendation

CONFIDENCE_COLORS: dict[Confidence, str] = {
    Confidence.HIGH: "#22C55E",  # Tailwind green-500
    Confidence.MEDIUM: "#F59E0B",  # Tailwind amber-500
    Confidence.LOW: "#EF4444",  # Tailwind red-500
}

CONFIDENCE_LABELS: dict[Confidence, str] = {
    Confidence.HIGH: "High confidence",
    Confidence.MEDIUM: "Medium confidence",
    Confidence.LOW: "Low confidence",
}


def render_recommendation_badge(
    recommendation: "ViewRecommendation",
    *,
    return_html: bool = False,
) -> str | None:
    """Render a coloured badge for a view recommendation.

    The reason is shown as the badge tooltip.

    Args:
        recommendation: View recommendation to display.
        return_html: If True, return HTML string instead of rendering.

    Returns:
        HTML string if return_html=True, otherwise None (renders via st.markdown).
    """
    color = CONFIDENCE_COLORS[recommendation.confidence]
    label = CONFIDENCE_LABELS[recommendation.confidence]
    html = (
        f'<span title="{html_lib.escape(recommendation.reason)}" style="'
        f"background-color:{color}; "
        f"color:white; "
        f"padding:4px 8px; "
        f"border-radius:4px; "
        f"font-weight:bold; "
        f"display:inline-block; "
        f"cursor:help;"
        f'">{recommendation.orientation.value.title()} view ({label})</span>'
    )

    if return_html:
        return html

    import streamlit as st

    st.markdown(html, unsafe_allow_html=True)
    return None


def _list_html(title: str, items: tuple[str, ...]) -> str:
    if not items:
        return ""
    entries = "".join(f"<li>{html_lib.escape(item)}</li>" for item in items)
    return f'<div style="margin-top:8px;"><strong>{title}</strong><ul>{entries}</ul></div>'


def render_context_insights(
    analysis: "ContextAnalysis",
    *,
    return_html: bool = False,
) -> str | None:
    """Render the recommendation, focus suggestions and metadata insights.

    Args:
        analysis: Result of ``analyze_context``.
        return_html: If True, return HTML string instead of rendering.

    Returns:
        HTML string if return_html=True, otherwise None (renders via st.markdown).

    Example:
        >>> html = render_context_insights(analysis, return_html=True)
        >>> "Axial view" in html
        True
    """
    recommendation = analysis.recommended_view
    html = (
        "<div>"
        + render_recommendation_badge(recommendation, return_html=True)
        + f'<div style="font-size:0.9em; color:#666; margin-top:4px;">'
        f"{html_lib.escape(recommendation.reason)}</div>"
        + _list_html("Focus", analysis.suggested_focus)
        + _list_html("Study", analysis.metadata_insights)
        + "</div>"
    )

    if return_html:
        return html

    import streamlit as st

    st.markdown(html, unsafe_allow_html=True)
    return None


__all__ = [
    "CONFIDENCE_COLORS",
    "CONFIDENCE_LABELS",
    "render_context_insights",
    "render_recommendation_badge",
]
