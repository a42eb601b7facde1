"""Image viewer rendering for medreview.

This module renders the reviewed image the way the reviewer sees it:
windowed to 8-bit grayscale, resampled through the current pan/zoom
transform into a fixed-size viewport, with annotation markers drawn on
top at their screen positions.

The viewport supports:
- 2D numpy arrays of any numeric dtype
- Window level/width intensity mapping
- Pan/zoom through the same transform the interaction engine inverts
- Point markers (filled circles) and region markers (rectangles)
- Marker colour by priority and highlight of the selected annotation

Example:
    >>> import numpy as np
    >>> from webapp.components.viewer import render_viewport
    >>> from webapp.utils.view import ViewState
    >>> image = render_viewport(np.zeros((256, 256)), ViewState(), markers=[])
    >>> image.size
    (720, 540)
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import streamlit as st
from PIL import Image, ImageDraw

from imaging.normalize import apply_window
from webapp.utils.interaction import ContainerRect, ScreenMarker
from webapp.utils.models import AnnotationPriority
from webapp.utils.view import ViewState, get_zoom_display

logger = logging.getLogger(__name__)

# Viewport size in screen pixels
VIEWPORT_WIDTH = 720
VIEWPORT_HEIGHT = 540

BACKGROUND_COLOR = "#1A1A1A"

# Marker colours by priority
PRIORITY_COLORS: dict[AnnotationPriority, str] = {
    AnnotationPriority.HIGH: "#EF4444",  # Red
    AnnotationPriority.MEDIUM: "#F59E0B",  # Amber
    AnnotationPriority.LOW: "#22C55E",  # Green
}
SELECTED_COLOR = "#06B6D4"  # Cyan
PENDING_COLOR = "#EAB308"  # Yellow

POINT_MARKER_RADIUS = 6
MARKER_STROKE_WIDTH = 2


def viewport_container(
    width: int = VIEWPORT_WIDTH,
    height: int = VIEWPORT_HEIGHT,
) -> ContainerRect:
    """Container rectangle of the viewport in its own pixel space."""
    return ContainerRect(left=0, top=0, width=width, height=height)


def _affine_data(
    image_size: tuple[int, int],
    view: ViewState,
    size: tuple[int, int],
) -> tuple[float, ...]:
    """Affine coefficients mapping viewport pixels back to image pixels.

    PIL's affine transform maps each output pixel to an input position,
    which is exactly the unclamped screen-to-image mapping.
    """
    zoom = view.zoom
    offset_x = image_size[0] / 2 - (size[0] / 2 + view.pan.x) / zoom
    offset_y = image_size[1] / 2 - (size[1] / 2 + view.pan.y) / zoom
    return (1 / zoom, 0, offset_x, 0, 1 / zoom, offset_y)


def _draw_marker(
    draw: ImageDraw.ImageDraw,
    marker: ScreenMarker,
    color: str,
    selected: bool = False,
) -> None:
    if marker.width is not None and marker.height is not None:
        draw.rectangle(
            [(marker.x, marker.y), (marker.x + marker.width, marker.y + marker.height)],
            outline=SELECTED_COLOR if selected else color,
            width=MARKER_STROKE_WIDTH + 2 if selected else MARKER_STROKE_WIDTH,
        )
        return

    r = POINT_MARKER_RADIUS
    draw.ellipse(
        [(marker.x - r, marker.y - r), (marker.x + r, marker.y + r)],
        fill=color,
        outline="#FFFFFF",
        width=1,
    )
    if selected:
        r += 4
        draw.ellipse(
            [(marker.x - r, marker.y - r), (marker.x + r, marker.y + r)],
            outline=SELECTED_COLOR,
            width=MARKER_STROKE_WIDTH,
        )


def render_viewport(
    pixels: np.ndarray,
    view: ViewState,
    markers: Sequence[ScreenMarker],
    size: tuple[int, int] = (VIEWPORT_WIDTH, VIEWPORT_HEIGHT),
    selected_id: str | None = None,
    pending: tuple[float, float] | None = None,
) -> Image.Image:
    """Render the viewport image for the current view.

    Args:
        pixels: 2D image array (H, W) of raw intensities.
        view: Current view state (windowing, zoom and pan are used).
        markers: Annotation markers in viewport coordinates.
        size: Viewport (width, height) in pixels.
        selected_id: Id of the annotation to highlight.
        pending: Viewport position of a pending annotation, if any.

    Returns:
        RGB PIL Image of the given size.

    Raises:
        ValueError: If pixels is not a non-empty 2D array.
    """
    if pixels.ndim != 2 or pixels.size == 0:
        raise ValueError(f"Expected a non-empty 2D array, got shape {pixels.shape}")

    windowed = Image.fromarray(apply_window(pixels, view.windowing.level, view.windowing.width))
    data = _affine_data(windowed.size, view, size)

    # Areas outside the image get the background colour, not black
    resampled = windowed.transform(
        size, Image.Transform.AFFINE, data, resample=Image.Resampling.NEAREST
    ).convert("RGB")
    mask = Image.new("L", windowed.size, 255).transform(
        size, Image.Transform.AFFINE, data, resample=Image.Resampling.NEAREST, fillcolor=0
    )
    viewport = Image.composite(resampled, Image.new("RGB", size, BACKGROUND_COLOR), mask)

    draw = ImageDraw.Draw(viewport)
    for marker in markers:
        ann = marker.annotation
        color = PRIORITY_COLORS.get(ann.priority, SELECTED_COLOR)
        _draw_marker(draw, marker, color, selected=ann.id == selected_id)

    if pending is not None:
        px, py = pending
        r = POINT_MARKER_RADIUS + 2
        draw.ellipse([(px - r, py - r), (px + r, py + r)], outline=PENDING_COLOR, width=2)

    logger.debug(
        f"Rendered viewport {size} at {get_zoom_display(view)} with {len(markers)} markers"
    )
    return viewport


def render_image_viewer(
    viewport: Image.Image,
    view: ViewState,
    caption: str | None = None,
) -> None:
    """Display a rendered viewport as a static image.

    Used when the review no longer accepts new annotations (e.g. after
    completion).

    Args:
        viewport: Image from ``render_viewport``.
        view: View state, shown in the caption.
        caption: Optional caption prefix.
    """
    details = f"{view.orientation.value} · {get_zoom_display(view)}"
    st.image(
        viewport,
        caption=f"{caption} · {details}" if caption else details,
        use_container_width=True,
    )
