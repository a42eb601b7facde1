"""Tests for the interactive viewport canvas.

Tests cover:
- Gesture extraction from streamlit-drawable-canvas results
- Replaying gestures and pan steps on the interaction engine
- Canvas revision handling
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from webapp.utils.interaction import ContainerRect, InteractionEngine, InteractionState
from webapp.utils.models import Coordinates
from webapp.utils.view import Pan, ViewController

CONTAINER = ContainerRect(left=0, top=0, width=512, height=512)


class MockSessionState(dict):
    """Mock Streamlit session_state that supports both dict and attribute access."""

    def __getattr__(self, key: str):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(f"No attribute '{key}'")

    def __setattr__(self, key: str, value) -> None:
        self[key] = value

    def __delattr__(self, key: str) -> None:
        try:
            del self[key]
        except KeyError:
            raise AttributeError(f"No attribute '{key}'")


def _result(*objects) -> SimpleNamespace:
    return SimpleNamespace(json_data={"objects": list(objects)})


@pytest.fixture
def engine(ct_image) -> InteractionEngine:
    engine = InteractionEngine(ViewController())
    engine.set_image(ct_image)
    return engine


class TestExtractCanvasGesture:
    """Tests for extract_canvas_gesture."""

    def test_none_result(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        assert extract_canvas_gesture(None) is None
        assert extract_canvas_gesture(SimpleNamespace(json_data=None)) is None

    def test_empty_objects(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        assert extract_canvas_gesture(_result()) is None

    def test_circle_left_origin(self) -> None:
        """Circle centre is left/top plus radius with a left origin."""
        from webapp.components.canvas import CanvasGesture, extract_canvas_gesture

        gesture = extract_canvas_gesture(
            _result({"type": "circle", "left": 96, "top": 46, "radius": 4, "originX": "left"})
        )

        assert gesture == CanvasGesture("point", 100.0, 50.0, 100.0, 50.0)

    def test_circle_center_origin(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        gesture = extract_canvas_gesture(
            _result({
                "type": "circle",
                "left": 100,
                "top": 50,
                "radius": 4,
                "originX": "center",
                "originY": "center",
            })
        )

        assert (gesture.x0, gesture.y0) == (100.0, 50.0)

    def test_uses_last_object(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        gesture = extract_canvas_gesture(
            _result(
                {"type": "circle", "left": 0, "top": 0, "radius": 0},
                {"type": "rect", "left": 10, "top": 20, "width": 30, "height": 40},
            )
        )

        assert gesture.kind == "rect"
        assert (gesture.x0, gesture.y0, gesture.x1, gesture.y1) == (10.0, 20.0, 40.0, 60.0)

    def test_rect_scaled(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        gesture = extract_canvas_gesture(
            _result({
                "type": "rect",
                "left": 10,
                "top": 10,
                "width": 20,
                "height": 10,
                "scaleX": 2,
                "scaleY": 3,
            })
        )

        assert (gesture.x1, gesture.y1) == (50.0, 40.0)

    def test_degenerate_rect_ignored(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        result = _result({"type": "rect", "left": 10, "top": 10, "width": 0, "height": 5})

        assert extract_canvas_gesture(result) is None

    def test_unknown_object_ignored(self) -> None:
        from webapp.components.canvas import extract_canvas_gesture

        assert extract_canvas_gesture(_result({"type": "path", "left": 1, "top": 1})) is None


class TestApplyGesture:
    """Tests for replaying gestures on the engine."""

    def test_point_opens_pending(self, engine) -> None:
        from webapp.components.canvas import CanvasGesture, apply_gesture

        pending = apply_gesture(engine, CanvasGesture("point", 256, 256, 256, 256), CONTAINER)

        assert pending == Coordinates(256.0, 256.0)
        assert engine.state is InteractionState.AWAITING_INPUT

    def test_rect_opens_region(self, engine) -> None:
        from webapp.components.canvas import CanvasGesture, apply_gesture

        pending = apply_gesture(engine, CanvasGesture("rect", 100, 100, 150, 120), CONTAINER)

        assert pending == Coordinates(100.0, 100.0, 50.0, 20.0)

    def test_pan_by(self, engine) -> None:
        from webapp.components.canvas import PAN_STEP_PX, pan_by

        pan_by(engine, -PAN_STEP_PX, 0, CONTAINER)

        assert engine.view.get_state().pan == Pan(-PAN_STEP_PX, 0)
        assert engine.pending_annotation is None


class TestCanvasRevision:
    """Tests for the canvas revision counter."""

    def test_default_revision(self) -> None:
        from webapp.components.canvas import get_canvas_revision

        with patch("webapp.components.canvas.st.session_state", MockSessionState()):
            assert get_canvas_revision() == 0

    def test_bump_revision(self) -> None:
        from webapp.components.canvas import (
            CANVAS_REVISION_KEY,
            bump_canvas_revision,
            get_canvas_revision,
        )

        state = MockSessionState()
        with patch("webapp.components.canvas.st.session_state", state):
            bump_canvas_revision()
            bump_canvas_revision()

            assert get_canvas_revision() == 2
            assert state[CANVAS_REVISION_KEY] == 2


class TestRenderInteractionCanvas:
    """Tests for render_interaction_canvas."""

    def test_click_opens_pending_and_reruns(self, engine) -> None:
        from webapp.components.canvas import render_interaction_canvas

        circle = {"type": "circle", "left": 256, "top": 256, "radius": 4, "originX": "center",
                  "originY": "center"}
        with patch("webapp.components.canvas.st") as mock_st, \
             patch("streamlit_drawable_canvas.st_canvas", return_value=_result(circle)) as canvas:
            mock_st.session_state = MockSessionState()

            pending = render_interaction_canvas(engine, Image.new("RGB", (512, 512)), CONTAINER)

            assert pending == Coordinates(256.0, 256.0)
            assert canvas.call_args.kwargs["key"] == "viewer_canvas_0"
            assert mock_st.session_state["canvas_revision"] == 1
            mock_st.rerun.assert_called_once()

    def test_nothing_drawn(self, engine) -> None:
        from webapp.components.canvas import render_interaction_canvas

        with patch("webapp.components.canvas.st") as mock_st, \
             patch("streamlit_drawable_canvas.st_canvas", return_value=_result()):
            mock_st.session_state = MockSessionState()

            assert render_interaction_canvas(
                engine, Image.new("RGB", (512, 512)), CONTAINER
            ) is None
            mock_st.rerun.assert_not_called()


class TestNavigationControls:
    """Tests for the pan/zoom button row."""

    def test_renders_buttons_with_shortcut_keys(self, engine) -> None:
        from webapp.components.canvas import render_navigation_controls

        with patch("webapp.components.canvas.st") as mock_st:
            mock_st.columns.return_value = [MagicMock() for _ in range(8)]
            mock_st.button.return_value = False

            render_navigation_controls(engine, CONTAINER)

            keys = {c.kwargs["key"] for c in mock_st.button.call_args_list}
            assert {"btn_zoom_in", "btn_zoom_out", "btn_reset_view"} <= keys
            mock_st.caption.assert_called_once_with("Zoom 100% · Pan (0, 0)")
