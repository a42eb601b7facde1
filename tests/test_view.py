"""Tests for the view state and ViewController."""

from __future__ import annotations

import dataclasses

import pytest

from webapp.utils.models import Orientation
from webapp.utils.view import (
    MAX_ZOOM,
    MIN_ZOOM,
    Pan,
    ViewController,
    ViewState,
    Windowing,
    clamp_zoom,
    get_zoom_display,
)


class TestViewStateDefaults:
    """Tests for the initial view state."""

    def test_default_state(self):
        state = ViewController().get_state()

        assert state.orientation is Orientation.AXIAL
        assert state.zoom == 1.0
        assert state.pan == Pan(0, 0)
        assert state.windowing == Windowing(0.0, 255.0)

    def test_state_is_immutable(self):
        state = ViewState()

        with pytest.raises(dataclasses.FrozenInstanceError):
            state.zoom = 2.0  # type: ignore[misc]


class TestZoom:
    """Tests for zoom clamping."""

    @pytest.mark.parametrize(
        "requested, expected",
        [(2.5, 2.5), (12.0, MAX_ZOOM), (0.01, MIN_ZOOM), (-3.0, MIN_ZOOM), (5.0, 5.0), (0.1, 0.1)],
    )
    def test_set_zoom_clamps(self, requested, expected):
        controller = ViewController()
        controller.set_zoom(requested)

        assert controller.get_state().zoom == pytest.approx(expected)

    def test_clamp_zoom_custom_bounds(self):
        assert clamp_zoom(0.2, 0.5, 5.0) == 0.5
        assert clamp_zoom(7.0, 0.5, 5.0) == 5.0

    def test_zoom_display(self):
        assert get_zoom_display(ViewState(zoom=1.5)) == "150%"
        assert get_zoom_display(ViewState(zoom=0.1)) == "10%"


class TestMutators:
    """Tests for orientation, pan and windowing setters."""

    def test_set_orientation_accepts_string(self):
        controller = ViewController()
        controller.set_orientation("sagittal")

        assert controller.get_state().orientation is Orientation.SAGITTAL

    def test_set_orientation_rejects_unknown(self):
        with pytest.raises(ValueError):
            ViewController().set_orientation("oblique")

    def test_pan_is_unbounded(self):
        controller = ViewController()
        controller.set_pan(-10_000, 25_000)

        assert controller.get_state().pan == Pan(-10_000, 25_000)

    def test_set_windowing(self):
        controller = ViewController()
        controller.set_windowing(40, 400)

        assert controller.get_state().windowing == Windowing(40, 400)

    def test_returned_state_is_a_snapshot(self):
        controller = ViewController()
        before = controller.get_state()
        controller.set_zoom(3.0)

        assert before.zoom == 1.0
        assert controller.get_state().zoom == 3.0

    def test_reset_restores_defaults(self):
        controller = ViewController()
        controller.set_orientation(Orientation.CORONAL)
        controller.set_zoom(4.0)
        controller.set_pan(30, 40)
        controller.set_windowing(40, 400)

        controller.reset()

        assert controller.get_state() == ViewState()
