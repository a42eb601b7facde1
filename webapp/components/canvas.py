"""Interactive viewport canvas.

This module puts the rendered viewport on a streamlit-drawable-canvas
and turns what the reviewer draws into interaction engine gestures:

- Point mode: a click opens a pending point annotation
- Rect mode: a dragged rectangle opens a pending region annotation
- Pan buttons replay a drag gesture past the drag threshold
- Zoom buttons replay one wheel step
- Reset replays a double-click

The canvas accumulates drawn objects between reruns. Each consumed
gesture bumps a revision counter that is part of the canvas key, which
gives the next rerun a fresh, empty canvas.

Example:
    >>> from webapp.components.canvas import extract_canvas_gesture
    >>> gesture = extract_canvas_gesture(canvas_result)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import streamlit as st

from webapp.utils.interaction import ContainerRect, InteractionEngine
from webapp.utils.models import Coordinates
from webapp.utils.shortcuts import handle_reset_view_shortcut, handle_zoom_shortcut
from webapp.utils.view import get_zoom_display

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)

# Drawing colours (pending annotations are yellow)
STROKE_COLOR = "#EAB308"
STROKE_WIDTH = 2
FILL_OPACITY = 0.1
POINT_DISPLAY_RADIUS = 4

# Pan step per button press, well above the drag threshold
PAN_STEP_PX = 50

DRAWING_MODES = {"Point": "point", "Region": "rect"}

CANVAS_REVISION_KEY = "canvas_revision"


@dataclass(frozen=True)
class CanvasGesture:
    """A gesture read from the canvas, in viewport pixels.

    Points have x0 == x1 and y0 == y1.
    """

    kind: str
    x0: float
    y0: float
    x1: float
    y1: float


def extract_canvas_gesture(canvas_result: Any) -> CanvasGesture | None:
    """Extract the most recent gesture from a canvas result.

    Point mode stores circles as:
    {
        "type": "circle",
        "left": x,
        "top": y,
        "radius": r,
        "originX": "left" | "center",
        ...
    }

    Rect mode stores rectangles as:
    {
        "type": "rect",
        "left": x_min,
        "top": y_min,
        "width": w,
        "height": h
    }

    Args:
        canvas_result: Result object from streamlit-drawable-canvas.

    Returns:
        CanvasGesture for the last drawn object, or None if nothing
        usable was drawn.
    """
    if canvas_result is None or canvas_result.json_data is None:
        return None

    objects = canvas_result.json_data.get("objects", [])
    if not objects:
        return None

    obj = objects[-1]
    kind = obj.get("type")
    left = float(obj.get("left", 0))
    top = float(obj.get("top", 0))

    if kind == "circle":
        radius = float(obj.get("radius", 0))
        x = left if obj.get("originX") == "center" else left + radius
        y = top if obj.get("originY") == "center" else top + radius
        return CanvasGesture("point", x, y, x, y)

    if kind == "rect":
        width = float(obj.get("width", 0)) * float(obj.get("scaleX", 1))
        height = float(obj.get("height", 0)) * float(obj.get("scaleY", 1))
        if width <= 0 or height <= 0:
            logger.warning(f"Ignoring degenerate rectangle: {width}x{height}")
            return None
        return CanvasGesture("rect", left, top, left + width, top + height)

    logger.debug(f"Ignoring canvas object of type {kind}")
    return None


def apply_gesture(
    engine: InteractionEngine,
    gesture: CanvasGesture,
    container: ContainerRect,
) -> Coordinates | None:
    """Replay a canvas gesture on the interaction engine.

    A point is a press and release at the same position, so it always
    stays under the drag threshold and becomes a click.

    Returns:
        The pending annotation coordinates, or None if the engine
        ignored the gesture.
    """
    if gesture.kind == "rect":
        return engine.select_region(gesture.x0, gesture.y0, gesture.x1, gesture.y1, container)

    engine.pointer_down(gesture.x0, gesture.y0)
    return engine.pointer_up(gesture.x1, gesture.y1, container)


def pan_by(
    engine: InteractionEngine,
    dx: float,
    dy: float,
    container: ContainerRect,
) -> None:
    """Pan the view by replaying a drag from the viewport centre."""
    cx, cy = container.center_x, container.center_y
    engine.pointer_down(cx, cy)
    engine.pointer_move(cx + dx, cy + dy)
    engine.pointer_up(cx + dx, cy + dy, container)


def get_canvas_revision() -> int:
    return st.session_state.get(CANVAS_REVISION_KEY, 0)


def bump_canvas_revision() -> None:
    """Clear the canvas on the next rerun."""
    st.session_state[CANVAS_REVISION_KEY] = get_canvas_revision() + 1


def _fill_color(stroke_color: str) -> str:
    r = int(stroke_color[1:3], 16)
    g = int(stroke_color[3:5], 16)
    b = int(stroke_color[5:7], 16)
    return f"rgba({r}, {g}, {b}, {FILL_OPACITY})"


def render_interaction_canvas(
    engine: InteractionEngine,
    background_image: "Image.Image",
    container: ContainerRect,
    drawing_mode: str = "point",
    key: str = "viewer_canvas",
) -> Coordinates | None:
    """Render the viewport canvas and feed new gestures to the engine.

    Args:
        engine: Interaction engine of the review session.
        background_image: Rendered viewport (PIL Image).
        container: Viewport container rectangle.
        drawing_mode: "point" or "rect".
        key: Base Streamlit key; the canvas revision is appended.

    Returns:
        Pending annotation coordinates opened by this rerun, or None.
    """
    from streamlit_drawable_canvas import st_canvas

    canvas_result = st_canvas(
        fill_color=_fill_color(STROKE_COLOR),
        stroke_width=STROKE_WIDTH,
        stroke_color=STROKE_COLOR,
        background_image=background_image,
        update_streamlit=True,
        height=background_image.height,
        width=background_image.width,
        drawing_mode=drawing_mode,
        point_display_radius=POINT_DISPLAY_RADIUS,
        key=f"{key}_{get_canvas_revision()}",
    )

    gesture = extract_canvas_gesture(canvas_result)
    if gesture is None:
        return None

    pending = apply_gesture(engine, gesture, container)
    bump_canvas_revision()
    if pending is None:
        logger.debug(f"Gesture ignored in state {engine.state.value}")
        return None

    logger.info(f"Pending {gesture.kind} annotation at {pending}")
    st.rerun()
    return pending


def render_navigation_controls(
    engine: InteractionEngine,
    container: ContainerRect,
) -> None:
    """Render pan, zoom and reset buttons for the viewport.

    Button keys match the keyboard shortcut bindings.
    """
    view = engine.view.get_state()
    cols = st.columns([1, 1, 1, 1, 1, 1, 1, 2])

    with cols[0]:
        if st.button("➖", key="btn_zoom_out", help="Zoom out (-)"):
            handle_zoom_shortcut("out")
    with cols[1]:
        if st.button("➕", key="btn_zoom_in", help="Zoom in (+)"):
            handle_zoom_shortcut("in")
    with cols[2]:
        if st.button("⬅️", key="btn_pan_left", help="Pan left"):
            pan_by(engine, -PAN_STEP_PX, 0, container)
            st.rerun()
    with cols[3]:
        if st.button("➡️", key="btn_pan_right", help="Pan right"):
            pan_by(engine, PAN_STEP_PX, 0, container)
            st.rerun()
    with cols[4]:
        if st.button("⬆️", key="btn_pan_up", help="Pan up"):
            pan_by(engine, 0, -PAN_STEP_PX, container)
            st.rerun()
    with cols[5]:
        if st.button("⬇️", key="btn_pan_down", help="Pan down"):
            pan_by(engine, 0, PAN_STEP_PX, container)
            st.rerun()
    with cols[6]:
        if st.button("⟲", key="btn_reset_view", help="Reset view (0)"):
            handle_reset_view_shortcut()
    with cols[7]:
        st.caption(
            f"Zoom {get_zoom_display(view)} · Pan ({view.pan.x:.0f}, {view.pan.y:.0f})"
        )


__all__ = [
    "DRAWING_MODES",
    "PAN_STEP_PX",
    "CanvasGesture",
    "apply_gesture",
    "bump_canvas_revision",
    "extract_canvas_gesture",
    "get_canvas_revision",
    "pan_by",
    "render_interaction_canvas",
    "render_navigation_controls",
]
