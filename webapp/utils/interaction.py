"""Pointer interaction engine and screen/image coordinate transforms.

Coordinate model
----------------
The image is drawn centred in its container, scaled by ``zoom`` and
shifted by ``pan`` (screen pixels). For a container whose bounding box
is ``(left, top, width, height)``:

    screen = container_centre + (image - image_size / 2) * zoom + pan
    image  = (screen - container_centre - pan) / zoom + image_size / 2

``screen_to_image`` clamps its result to the image bounds because it is
used for input; ``image_to_screen`` does not clamp.

Interaction states
------------------
- idle: nothing in progress
- dragging: primary button held; pointer moves pan the image
- awaiting input: a click (press/release within 5px) selected an image
  point; the annotation form must confirm or cancel it

Wheel events and double-clicks are handled in any state.

Example:
    >>> view = ViewController()
    >>> engine = InteractionEngine(view)
    >>> engine.set_image(MedicalImage(id="ct-1", modality="CT", width=512, height=512))
    >>> box = ContainerRect(left=0, top=0, width=800, height=600)
    >>> engine.pointer_down(400, 300)
    >>> engine.pointer_up(400, 300, box)
    >>> engine.pending_annotation
    Coordinates(x=256.0, y=256.0, width=None, height=None)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from webapp.utils.models import (
    Annotation,
    AnnotationCategory,
    AnnotationPriority,
    AnnotationType,
    Coordinates,
    MedicalImage,
)
from webapp.utils.view import Pan, ViewController, ViewState, clamp_zoom

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0

# Press/release displacement below which a gesture counts as a click
DRAG_THRESHOLD_PX = 5.0

# Interactive zoom range and per-wheel-event step
INTERACTIVE_MIN_ZOOM = 0.5
INTERACTIVE_MAX_ZOOM = 5.0
ZOOM_STEP = 0.1


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    AWAITING_INPUT = "awaiting_input"


@dataclass(frozen=True)
class ContainerRect:
    """Bounding box of the viewer container in screen pixels."""

    left: float
    top: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class DragStart:
    """Where a drag began.

    ``anchor`` is the pointer position minus the pan at press time, so
    that ``pan = pointer - anchor`` during the drag.
    """

    pointer_x: float
    pointer_y: float
    anchor_x: float
    anchor_y: float
    original_pan: Pan


@dataclass(frozen=True)
class AnnotationRequest:
    """A confirmed annotation awaiting creation upstream."""

    coordinates: Coordinates
    type: AnnotationType | str
    category: AnnotationCategory | str
    priority: AnnotationPriority | str


@dataclass(frozen=True)
class ScreenMarker:
    """Where an annotation is drawn on screen for the current view."""

    annotation: Annotation
    x: float
    y: float
    width: float | None = None
    height: float | None = None


def screen_to_image(
    screen_x: float,
    screen_y: float,
    container: ContainerRect,
    view: ViewState,
    image_width: float,
    image_height: float,
    clamp: bool = True,
) -> tuple[float, float]:
    """Map a screen position to image pixel coordinates.

    Args:
        screen_x: Pointer x in screen pixels.
        screen_y: Pointer y in screen pixels.
        container: Viewer container bounding box.
        view: Current view state (zoom and pan are used).
        image_width: Native image width.
        image_height: Native image height.
        clamp: Clamp the result into [0, width] x [0, height].

    Returns:
        Tuple of (x, y) in image pixels.
    """
    x = (screen_x - container.center_x - view.pan.x) / view.zoom + image_width / 2
    y = (screen_y - container.center_y - view.pan.y) / view.zoom + image_height / 2
    if clamp:
        x = min(max(x, 0.0), float(image_width))
        y = min(max(y, 0.0), float(image_height))
    return x, y


def image_to_screen(
    image_x: float,
    image_y: float,
    container: ContainerRect,
    view: ViewState,
    image_width: float,
    image_height: float,
) -> tuple[float, float]:
    """Map image pixel coordinates to a screen position.

    Exact inverse of ``screen_to_image`` without clamping.
    """
    x = (image_x - image_width / 2) * view.zoom + container.center_x + view.pan.x
    y = (image_y - image_height / 2) * view.zoom + container.center_y + view.pan.y
    return x, y


class InteractionEngine:
    """Turns pointer, wheel and double-click events into view changes
    and annotation requests.

    The engine holds a reference to the session's ViewController and
    changes the view only through its public mutators.

    Callbacks:
        on_view_change(ViewState): after every pan, zoom or reset.
        on_annotation_request(AnnotationRequest): when a pending
            annotation is confirmed. Exceptions raised by the callback
            propagate to the caller of ``confirm_annotation`` and leave
            the pending annotation in place.
    """

    def __init__(
        self,
        view: ViewController,
        on_view_change: Callable[[ViewState], None] | None = None,
        on_annotation_request: Callable[[AnnotationRequest], object] | None = None,
    ) -> None:
        self.view = view
        self.on_view_change = on_view_change
        self.on_annotation_request = on_annotation_request
        self._image: MedicalImage | None = None
        self._drag_start: DragStart | None = None
        self._pending: Coordinates | None = None

    @property
    def image(self) -> MedicalImage | None:
        return self._image

    def set_image(self, image: MedicalImage | None) -> None:
        """Switch the image used for coordinate mapping.

        Clears any drag or pending annotation, which belonged to the
        previous image.
        """
        self._image = image
        self._drag_start = None
        self._pending = None

    @property
    def state(self) -> InteractionState:
        if self._drag_start is not None:
            return InteractionState.DRAGGING
        if self._pending is not None:
            return InteractionState.AWAITING_INPUT
        return InteractionState.IDLE

    @property
    def is_dragging(self) -> bool:
        return self._drag_start is not None

    @property
    def drag_start(self) -> DragStart | None:
        return self._drag_start

    @property
    def pending_annotation(self) -> Coordinates | None:
        return self._pending

    def _notify_view_change(self) -> None:
        if self.on_view_change is not None:
            self.on_view_change(self.view.get_state())

    # Pointer events

    def pointer_down(
        self,
        x: float,
        y: float,
        button: int = PRIMARY_BUTTON,
    ) -> None:
        """Start a drag with the primary button.

        Ignored for other buttons, while a drag is already active, and
        while a pending annotation waits for input.
        """
        if button != PRIMARY_BUTTON or self.state is not InteractionState.IDLE:
            return

        pan = self.view.get_state().pan
        self._drag_start = DragStart(
            pointer_x=x,
            pointer_y=y,
            anchor_x=x - pan.x,
            anchor_y=y - pan.y,
            original_pan=pan,
        )
        logger.debug(f"Drag started at ({x}, {y})")

    def pointer_move(self, x: float, y: float) -> None:
        """Pan so the image follows the pointer. Ignored unless dragging."""
        start = self._drag_start
        if start is None:
            return
        self.view.set_pan(x - start.anchor_x, y - start.anchor_y)
        self._notify_view_change()

    def pointer_up(
        self,
        x: float,
        y: float,
        container: ContainerRect,
        button: int = PRIMARY_BUTTON,
    ) -> Coordinates | None:
        """Finish a drag, or turn it into a click if the pointer barely moved.

        A release within DRAG_THRESHOLD_PX of the press restores the pan
        from before the press and opens a pending annotation at the
        release point's image coordinates.

        Returns:
            The pending annotation coordinates for a click, otherwise None.
        """
        start = self._drag_start
        if start is None or button != PRIMARY_BUTTON:
            return None
        self._drag_start = None

        displacement = math.hypot(x - start.pointer_x, y - start.pointer_y)
        if displacement >= DRAG_THRESHOLD_PX:
            self.view.set_pan(x - start.anchor_x, y - start.anchor_y)
            self._notify_view_change()
            logger.debug(f"Drag finished, displacement {displacement:.1f}px")
            return None

        if self.view.get_state().pan != start.original_pan:
            self.view.set_pan(start.original_pan.x, start.original_pan.y)
            self._notify_view_change()

        if self._image is None:
            logger.debug("Click ignored: no image loaded")
            return None

        ix, iy = screen_to_image(
            x, y, container, self.view.get_state(), self._image.width, self._image.height
        )
        self._pending = Coordinates(x=ix, y=iy)
        logger.debug(f"Pending annotation at image ({ix:.1f}, {iy:.1f})")
        return self._pending

    def select_region(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        container: ContainerRect,
    ) -> Coordinates | None:
        """Open a pending region from two opposite screen corners.

        Both corners are mapped (and clamped) into image space. Ignored
        while dragging or when a pending annotation already exists.

        Returns:
            The pending region coordinates, or None if ignored.
        """
        if self._image is None or self.state is not InteractionState.IDLE:
            return None

        view = self.view.get_state()
        ax, ay = screen_to_image(x0, y0, container, view, self._image.width, self._image.height)
        bx, by = screen_to_image(x1, y1, container, view, self._image.width, self._image.height)
        self._pending = Coordinates(
            x=min(ax, bx),
            y=min(ay, by),
            width=abs(bx - ax),
            height=abs(by - ay),
        )
        logger.debug(f"Pending region at image {self._pending}")
        return self._pending

    # Wheel and double-click

    def wheel(self, delta_y: float) -> float:
        """Zoom by one step per event: in for negative delta, out for positive.

        Interactive zoom stays within [0.5, 5.0].

        Returns:
            The zoom after the event.
        """
        zoom = self.view.get_state().zoom
        if delta_y == 0:
            return zoom

        step = ZOOM_STEP if delta_y < 0 else -ZOOM_STEP
        new_zoom = clamp_zoom(zoom + step, INTERACTIVE_MIN_ZOOM, INTERACTIVE_MAX_ZOOM)
        self.view.set_zoom(new_zoom)
        self._notify_view_change()
        return self.view.get_state().zoom

    def double_click(self) -> None:
        """Reset pan, zoom and orientation. A pending annotation is kept."""
        self.view.reset()
        self._notify_view_change()

    # Pending annotation

    def confirm_annotation(
        self,
        type: AnnotationType | str,
        category: AnnotationCategory | str,
        priority: AnnotationPriority | str,
    ) -> object:
        """Emit the pending annotation upstream and return to idle.

        Returns:
            Whatever ``on_annotation_request`` returned (the created
            annotation for a ReviewSession), or the request itself when
            no callback is set. None when nothing is pending.
        """
        if self._pending is None:
            return None

        request = AnnotationRequest(
            coordinates=self._pending,
            type=type,
            category=category,
            priority=priority,
        )
        result = request
        if self.on_annotation_request is not None:
            result = self.on_annotation_request(request)
        self._pending = None
        return result

    def cancel_annotation(self) -> None:
        if self._pending is not None:
            logger.debug("Pending annotation cancelled")
        self._pending = None

    # Rendering support

    def screen_markers(
        self,
        annotations: Iterable[Annotation],
        container: ContainerRect,
    ) -> list[ScreenMarker]:
        """Screen positions of annotations on the current image.

        Annotations belonging to other images are skipped. Region sizes
        are scaled by the zoom.
        """
        if self._image is None:
            return []

        view = self.view.get_state()
        markers = []
        for ann in annotations:
            if ann.image_id != self._image.id:
                continue
            coords = ann.coordinates
            sx, sy = image_to_screen(
                coords.x, coords.y, container, view, self._image.width, self._image.height
            )
            markers.append(
                ScreenMarker(
                    annotation=ann,
                    x=sx,
                    y=sy,
                    width=coords.width * view.zoom if coords.width is not None else None,
                    height=coords.height * view.zoom if coords.height is not None else None,
                )
            )
        return markers


__all__ = [
    "DRAG_THRESHOLD_PX",
    "INTERACTIVE_MAX_ZOOM",
    "INTERACTIVE_MIN_ZOOM",
    "PRIMARY_BUTTON",
    "ZOOM_STEP",
    "AnnotationRequest",
    "ContainerRect",
    "DragStart",
    "InteractionEngine",
    "InteractionState",
    "ScreenMarker",
    "image_to_screen",
    "screen_to_image",
]
