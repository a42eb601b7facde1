"""Review session: one reviewer, one image, one workflow.

ReviewSession is the composition root for the review core. It creates
and owns exactly one ViewController and one WorkflowController, wires
an InteractionEngine to them, and exposes the operations the UI layer
calls. Nothing here is global; the Streamlit layer keeps one session
per browser session (see ``webapp.utils.session``).

Data flow for a new annotation:

    pointer events -> InteractionEngine (pending point)
    -> confirm -> ReviewSession.create_from_request (validated)
    -> WorkflowController.add_annotation -> on_annotation_created
    -> optional re-orientation from the context analyzer
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from webapp.utils.annotations import create_annotation
from webapp.utils.context import (
    AnnotationRecommendation,
    ContextAnalysis,
    ViewRecommendation,
    analyze_context,
    annotation_context,
    recommended_view,
)
from webapp.utils.interaction import AnnotationRequest, InteractionEngine
from webapp.utils.models import Annotation, Coordinates, MedicalImage
from webapp.utils.view import ViewController, ViewState
from webapp.utils.workflow import ReviewStep, WorkflowController, WorkflowState

logger = logging.getLogger(__name__)


@dataclass
class ReviewEvents:
    """Optional callbacks fired by a ReviewSession."""

    on_view_change: Callable[[ViewState], None] | None = None
    on_annotation_created: Callable[[Annotation], None] | None = None
    on_annotation_selected: Callable[[Annotation], None] | None = None
    on_annotation_deleted: Callable[[str], None] | None = None
    on_step_change: Callable[[ReviewStep], None] | None = None


class ReviewSession:
    """Session-scoped owner of the view, workflow and interaction engine.

    Args:
        events: Callbacks to notify. Defaults to no callbacks.
        auto_orient: Apply the recommended orientation after every
            annotation change.
    """

    def __init__(
        self,
        events: ReviewEvents | None = None,
        auto_orient: bool = False,
    ) -> None:
        self.events = events or ReviewEvents()
        self.auto_orient = auto_orient
        self.view = ViewController()
        self.workflow = WorkflowController()
        self.engine = InteractionEngine(
            self.view,
            on_view_change=self._emit_view_change,
            on_annotation_request=self.create_from_request,
        )
        self.pixels: Any = None

    def _emit_view_change(self, state: ViewState) -> None:
        if self.events.on_view_change is not None:
            self.events.on_view_change(state)

    def _emit_step_change(self) -> None:
        if self.events.on_step_change is not None:
            self.events.on_step_change(self.workflow.current_step)

    @property
    def image(self) -> MedicalImage | None:
        return self.workflow.current_image

    def view_state(self) -> ViewState:
        return self.view.get_state()

    def workflow_state(self) -> WorkflowState:
        return self.workflow.get_state()

    # Image and annotations

    def load_image(self, image: MedicalImage, pixels: Any = None) -> None:
        """Load a new image and restart the workflow.

        The view is reset. Annotations from earlier images are kept;
        call ``clear_annotations`` first for per-image isolation.

        Args:
            image: Image to review.
            pixels: Optional pixel array for rendering. Defaults to the
                image's pixel_source.
        """
        self.workflow.load_image(image)
        self.engine.set_image(image)
        self.pixels = pixels if pixels is not None else image.pixel_source
        self.view.reset()
        self._emit_view_change(self.view.get_state())
        self._emit_step_change()

    def create_from_request(self, request: AnnotationRequest) -> Annotation:
        """Validate a confirmed request and add the annotation.

        Raises:
            ValidationError: If the request is invalid or no image is
                loaded. The workflow is unchanged in that case.
        """
        image = self.workflow.current_image
        annotation = create_annotation(
            image.id if image is not None else "",
            request.coordinates,
            request.type,
            request.category,
            request.priority,
            image_width=image.width if image is not None else 0,
            image_height=image.height if image is not None else 0,
        )
        self.add_annotation(annotation)
        return annotation

    def add_annotation(self, annotation: Annotation) -> None:
        self.workflow.add_annotation(annotation)
        logger.info(
            f"Annotation created: {annotation.id} "
            f"({annotation.category.value}/{annotation.priority.value})"
        )
        if self.events.on_annotation_created is not None:
            self.events.on_annotation_created(annotation)
        self._after_annotations_changed()

    def delete_annotation(self, annotation_id: str) -> bool:
        """Remove an annotation. Returns False for unknown ids."""
        removed = self.workflow.remove_annotation(annotation_id)
        if not removed:
            logger.warning(f"Delete ignored: unknown annotation {annotation_id}")
            return False

        logger.info(f"Annotation deleted: {annotation_id}")
        if self.events.on_annotation_deleted is not None:
            self.events.on_annotation_deleted(annotation_id)
        self._after_annotations_changed()
        return True

    def select_annotation(self, annotation_id: str) -> Annotation | None:
        """Look up an annotation and notify listeners that it was selected."""
        for annotation in self.workflow.get_state().annotations:
            if annotation.id == annotation_id:
                if self.events.on_annotation_selected is not None:
                    self.events.on_annotation_selected(annotation)
                return annotation
        return None

    def clear_annotations(self) -> None:
        self.workflow.clear_annotations()
        self._after_annotations_changed()

    def annotations_for_current_image(self) -> list[Annotation]:
        image = self.workflow.current_image
        if image is None:
            return []
        return [ann for ann in self.workflow.get_state().annotations if ann.image_id == image.id]

    def _after_annotations_changed(self) -> None:
        if self.auto_orient and self.workflow.current_image is not None:
            self.apply_recommended_view()

    # Workflow navigation

    def go_to_step(self, step: ReviewStep) -> bool:
        previous = self.workflow.current_step
        moved = self.workflow.go_to_step(step)
        if moved and self.workflow.current_step is not previous:
            self._emit_step_change()
        return moved

    def next_step(self) -> bool:
        previous = self.workflow.current_step
        moved = self.workflow.next_step()
        if moved and self.workflow.current_step is not previous:
            self._emit_step_change()
        return moved

    def previous_step(self) -> bool:
        previous = self.workflow.current_step
        moved = self.workflow.previous_step()
        if moved and self.workflow.current_step is not previous:
            self._emit_step_change()
        return moved

    def complete(self) -> None:
        previous = self.workflow.current_step
        self.workflow.complete()
        if self.workflow.current_step is not previous:
            self._emit_step_change()

    # Context analysis

    def recommended_view(self) -> ViewRecommendation | None:
        image = self.workflow.current_image
        if image is None:
            return None
        return recommended_view(image, self.annotations_for_current_image())

    def annotation_recommendation(self, point: Coordinates) -> AnnotationRecommendation | None:
        image = self.workflow.current_image
        if image is None:
            return None
        return annotation_context(image, point)

    def analyze(self) -> ContextAnalysis | None:
        image = self.workflow.current_image
        if image is None:
            return None
        return analyze_context(image, self.annotations_for_current_image())

    def apply_recommended_view(self) -> ViewRecommendation | None:
        """Set the orientation to the current recommendation."""
        recommendation = self.recommended_view()
        if recommendation is None:
            return None
        if self.view.get_state().orientation is not recommendation.orientation:
            self.view.set_orientation(recommendation.orientation)
            self._emit_view_change(self.view.get_state())
        return recommendation


__all__ = ["ReviewEvents", "ReviewSession"]
