"""Tests for coordinate mapping and the interaction engine."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from webapp.utils.interaction import (
    INTERACTIVE_MAX_ZOOM,
    INTERACTIVE_MIN_ZOOM,
    AnnotationRequest,
    ContainerRect,
    InteractionEngine,
    InteractionState,
    image_to_screen,
    screen_to_image,
)
from webapp.utils.models import AnnotationType, Coordinates, Orientation
from webapp.utils.view import Pan, ViewController, ViewState

CONTAINER = ContainerRect(left=0, top=0, width=800, height=600)


@pytest.fixture
def view() -> ViewController:
    return ViewController()


@pytest.fixture
def engine(view, ct_image) -> InteractionEngine:
    engine = InteractionEngine(view)
    engine.set_image(ct_image)
    return engine


def _click(engine, x, y, container=CONTAINER):
    engine.pointer_down(x, y)
    return engine.pointer_up(x, y, container)


class TestCoordinateMapping:
    """Tests for screen/image coordinate transforms."""

    def test_centre_maps_to_image_centre(self):
        assert screen_to_image(400, 300, CONTAINER, ViewState(), 512, 512) == (256.0, 256.0)

    def test_zoom_and_pan(self):
        view = ViewState(zoom=2.0, pan=Pan(40, -20))

        x, y = screen_to_image(440, 280, CONTAINER, view, 512, 512)

        assert (x, y) == (256.0, 256.0)

    def test_container_offset(self):
        container = ContainerRect(left=100, top=50, width=800, height=600)

        assert screen_to_image(500, 350, container, ViewState(), 512, 512) == (256.0, 256.0)

    def test_clamped_on_input(self):
        assert screen_to_image(-5000, 9000, CONTAINER, ViewState(), 512, 512) == (0.0, 512.0)

    def test_unclamped_when_requested(self):
        x, _ = screen_to_image(0, 300, CONTAINER, ViewState(), 512, 512, clamp=False)

        assert x == -144.0

    @pytest.mark.parametrize("zoom", [0.1, 0.5, 1.0, 2.3, 5.0])
    @pytest.mark.parametrize("pan", [Pan(0, 0), Pan(-137.5, 42.25), Pan(900, -900)])
    @pytest.mark.parametrize("point", [(1.0, 1.0), (256.0, 100.5), (511.0, 300.0)])
    def test_round_trip(self, zoom, pan, point):
        view = ViewState(zoom=zoom, pan=pan)
        container = ContainerRect(left=12, top=34, width=640, height=480)

        sx, sy = image_to_screen(*point, container, view, 512, 512)
        x, y = screen_to_image(sx, sy, container, view, 512, 512, clamp=False)

        assert x == pytest.approx(point[0])
        assert y == pytest.approx(point[1])


class TestClickAndDrag:
    """Tests for pointer disambiguation."""

    def test_click_opens_pending_annotation(self, engine):
        pending = _click(engine, 400, 300)

        assert pending == Coordinates(256.0, 256.0)
        assert engine.state is InteractionState.AWAITING_INPUT
        assert engine.pending_annotation == pending

    def test_small_movement_is_still_a_click(self, engine, view):
        engine.pointer_down(400, 300)
        engine.pointer_move(403, 302)
        pending = engine.pointer_up(403, 303, CONTAINER)

        assert pending is not None
        assert view.get_state().pan == Pan(0, 0)

    def test_drag_pans_without_annotation(self, engine, view):
        engine.pointer_down(400, 300)
        assert engine.state is InteractionState.DRAGGING
        engine.pointer_move(420, 310)
        result = engine.pointer_up(430, 300, CONTAINER)

        assert result is None
        assert view.get_state().pan == Pan(30, 0)
        assert engine.state is InteractionState.IDLE

    def test_drag_threshold_is_inclusive(self, engine, view):
        engine.pointer_down(0, 0)
        result = engine.pointer_up(3, 4, CONTAINER)

        assert result is None
        assert view.get_state().pan == Pan(3, 4)

    def test_drag_keeps_existing_pan(self, engine, view):
        view.set_pan(100, 50)
        engine.pointer_down(400, 300)
        engine.pointer_up(380, 300, CONTAINER)

        assert view.get_state().pan == Pan(80, 50)

    def test_non_primary_button_ignored(self, engine):
        engine.pointer_down(400, 300, button=2)

        assert engine.state is InteractionState.IDLE
        assert engine.pointer_up(400, 300, CONTAINER) is None

    def test_pointer_down_ignored_while_awaiting_input(self, engine):
        first = _click(engine, 400, 300)
        engine.pointer_down(100, 100)

        assert engine.state is InteractionState.AWAITING_INPUT
        assert engine.pending_annotation == first

    def test_click_without_image(self, view):
        engine = InteractionEngine(view)

        assert _click(engine, 400, 300) is None
        assert engine.state is InteractionState.IDLE

    def test_click_outside_image_is_clamped(self, engine):
        pending = _click(engine, 5, 5)

        assert pending == Coordinates(0.0, 0.0)

    def test_view_change_callback(self, view, ct_image):
        on_view_change = MagicMock()
        engine = InteractionEngine(view, on_view_change=on_view_change)
        engine.set_image(ct_image)

        engine.pointer_down(0, 0)
        engine.pointer_move(10, 0)
        engine.pointer_up(20, 0, CONTAINER)

        assert on_view_change.call_count == 2
        assert on_view_change.call_args.args[0].pan == Pan(20, 0)


class TestRegionSelection:
    """Tests for region selection."""

    def test_region_from_corners(self, engine):
        pending = engine.select_region(450, 350, 350, 250, CONTAINER)

        assert pending == Coordinates(206.0, 206.0, 100.0, 100.0)
        assert engine.state is InteractionState.AWAITING_INPUT

    def test_region_scaled_by_zoom(self, engine, view):
        view.set_zoom(2.0)

        pending = engine.select_region(400, 300, 500, 400, CONTAINER)

        assert pending == Coordinates(256.0, 256.0, 50.0, 50.0)


class TestWheelAndReset:
    """Tests for wheel zoom and double-click reset."""

    def test_wheel_zooms_in_and_out(self, engine):
        assert engine.wheel(-120) == pytest.approx(1.1)
        assert engine.wheel(120) == pytest.approx(1.0)

    def test_wheel_zero_delta_is_noop(self, engine, view):
        assert engine.wheel(0) == 1.0

    def test_wheel_respects_interactive_limits(self, engine):
        for _ in range(100):
            zoom = engine.wheel(-1)
        assert zoom == pytest.approx(INTERACTIVE_MAX_ZOOM)

        for _ in range(100):
            zoom = engine.wheel(1)
        assert zoom == pytest.approx(INTERACTIVE_MIN_ZOOM)

    def test_double_click_resets_view(self, engine, view):
        view.set_zoom(3.0)
        view.set_pan(40, 40)
        view.set_orientation(Orientation.CORONAL)

        engine.double_click()

        assert view.get_state() == ViewState()

    def test_double_click_keeps_pending_annotation(self, engine):
        pending = _click(engine, 400, 300)

        engine.double_click()

        assert engine.pending_annotation == pending


class TestPendingAnnotation:
    """Tests for confirming and cancelling pending annotations."""

    def test_confirm_without_callback_returns_request(self, engine):
        _click(engine, 400, 300)

        request = engine.confirm_annotation("point", "finding", "high")

        assert isinstance(request, AnnotationRequest)
        assert request.coordinates == Coordinates(256.0, 256.0)
        assert engine.state is InteractionState.IDLE

    def test_confirm_calls_callback(self, view, ct_image):
        on_request = MagicMock(return_value="created")
        engine = InteractionEngine(view, on_annotation_request=on_request)
        engine.set_image(ct_image)
        _click(engine, 400, 300)

        assert engine.confirm_annotation(AnnotationType.POINT, "finding", "low") == "created"
        on_request.assert_called_once()

    def test_confirm_failure_keeps_pending(self, view, ct_image):
        engine = InteractionEngine(view, on_annotation_request=MagicMock(side_effect=ValueError))
        engine.set_image(ct_image)
        pending = _click(engine, 400, 300)

        with pytest.raises(ValueError):
            engine.confirm_annotation("point", "finding", "low")

        assert engine.pending_annotation == pending

    def test_confirm_nothing_pending(self, engine):
        assert engine.confirm_annotation("point", "finding", "low") is None

    def test_cancel(self, engine):
        _click(engine, 400, 300)
        engine.cancel_annotation()

        assert engine.state is InteractionState.IDLE

    def test_set_image_clears_pending(self, engine, mri_image):
        _click(engine, 400, 300)
        engine.set_image(mri_image)

        assert engine.pending_annotation is None


class TestScreenMarkers:
    """Tests for annotation marker placement."""

    def test_markers_for_current_image_only(self, engine, make_annotation, mri_image):
        on_image = make_annotation(x=256, y=256)
        other = make_annotation(x=10, y=10, image=mri_image)

        markers = engine.screen_markers([on_image, other], CONTAINER)

        assert [m.annotation for m in markers] == [on_image]
        assert (markers[0].x, markers[0].y) == (400.0, 300.0)

    def test_region_marker_scaled(self, engine, view, make_annotation):
        view.set_zoom(2.0)
        region = make_annotation(x=256, y=256, width=10, height=20)

        marker = engine.screen_markers([region], CONTAINER)[0]

        assert (marker.width, marker.height) == (20.0, 40.0)
