"""View state for the image viewer: orientation, zoom, pan and windowing.

The ViewState is an immutable value. ViewController owns the single
current value for a session and replaces it on every change, so the
state returned by ``get_state()`` can be kept by callers without any
risk of it changing underneath them.

Example:
    >>> controller = ViewController()
    >>> controller.set_zoom(12.0)
    >>> controller.get_state().zoom
    5.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from webapp.utils.models import Orientation

logger = logging.getLogger(__name__)

# Model-level zoom limits
MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
DEFAULT_ZOOM = 1.0

DEFAULT_WINDOW_LEVEL = 0.0
DEFAULT_WINDOW_WIDTH = 255.0


@dataclass(frozen=True)
class Pan:
    """Pan offset in screen pixels."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Windowing:
    """Display intensity mapping (window centre and width)."""

    level: float = DEFAULT_WINDOW_LEVEL
    width: float = DEFAULT_WINDOW_WIDTH


@dataclass(frozen=True)
class ViewState:
    """Snapshot of how the image is displayed."""

    orientation: Orientation = Orientation.AXIAL
    zoom: float = DEFAULT_ZOOM
    pan: Pan = field(default_factory=Pan)
    windowing: Windowing = field(default_factory=Windowing)


def clamp_zoom(zoom: float, min_zoom: float = MIN_ZOOM, max_zoom: float = MAX_ZOOM) -> float:
    """Clamp a zoom factor into [min_zoom, max_zoom]."""
    return max(min_zoom, min(max_zoom, zoom))


def get_zoom_display(state: ViewState) -> str:
    """Format zoom level as percentage string for display.

    Args:
        state: Current view state.

    Returns:
        Zoom level formatted as percentage (e.g., "150%").
    """
    return f"{round(state.zoom * 100)}%"


class ViewController:
    """Owns the session's ViewState and applies validated changes to it.

    Every mutator is total: values are clamped (zoom) or stored as given
    (orientation, pan, windowing). Panning is unbounded.
    """

    def __init__(self) -> None:
        self._state = ViewState()

    def get_state(self) -> ViewState:
        """Return the current state. The returned value is immutable."""
        return self._state

    def set_orientation(self, orientation: Orientation | str) -> None:
        self._state = replace(self._state, orientation=Orientation(orientation))
        logger.debug(f"Orientation set to {self._state.orientation.value}")

    def set_zoom(self, zoom: float) -> None:
        """Set zoom, clamped to [0.1, 5.0]."""
        self._state = replace(self._state, zoom=clamp_zoom(zoom))
        logger.debug(f"Zoom set to {get_zoom_display(self._state)}")

    def set_pan(self, x: float, y: float) -> None:
        self._state = replace(self._state, pan=Pan(x, y))

    def set_windowing(self, level: float, width: float) -> None:
        self._state = replace(self._state, windowing=Windowing(level, width))
        logger.debug(f"Windowing set to level={level}, width={width}")

    def reset(self) -> None:
        """Restore axial orientation, 100% zoom, no pan and default windowing."""
        self._state = ViewState()
        logger.debug("View reset to defaults")


__all__ = [
    "DEFAULT_WINDOW_LEVEL",
    "DEFAULT_WINDOW_WIDTH",
    "DEFAULT_ZOOM",
    "MAX_ZOOM",
    "MIN_ZOOM",
    "Pan",
    "ViewController",
    "ViewState",
    "Windowing",
    "clamp_zoom",
    "get_zoom_display",
]
