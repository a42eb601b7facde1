"""Guided review workflow state machine.

A review walks through four ordered steps:

    Overview -> Focus Areas -> Detailed Review -> Summary

Moving backwards, or to any step already visited, is always allowed.
Moving forward is allowed one step at a time and only once that step's
prerequisite holds:

- Focus Areas: an image is loaded
- Detailed Review: at least one annotation exists
- Summary: at least one annotation exists

Once the review is completed no navigation is possible at all.
Invalid navigation never raises; the navigation methods return False.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from webapp.utils.models import Annotation, MedicalImage

logger = logging.getLogger(__name__)


class ReviewStep(str, Enum):
    OVERVIEW = "overview"
    FOCUS_AREAS = "focus"
    DETAILED_REVIEW = "detail"
    SUMMARY = "summary"


# Ordered step sequence
STEPS: tuple[ReviewStep, ...] = (
    ReviewStep.OVERVIEW,
    ReviewStep.FOCUS_AREAS,
    ReviewStep.DETAILED_REVIEW,
    ReviewStep.SUMMARY,
)

STEP_LABELS: dict[ReviewStep, str] = {
    ReviewStep.OVERVIEW: "Overview",
    ReviewStep.FOCUS_AREAS: "Focus Areas",
    ReviewStep.DETAILED_REVIEW: "Detailed Review",
    ReviewStep.SUMMARY: "Summary",
}

STEP_DESCRIPTIONS: dict[ReviewStep, str] = {
    ReviewStep.OVERVIEW: "Initial image overview and orientation",
    ReviewStep.FOCUS_AREAS: "Identify and mark areas of interest",
    ReviewStep.DETAILED_REVIEW: "Detailed examination and annotation",
    ReviewStep.SUMMARY: "Review summary and findings",
}


@dataclass(frozen=True)
class WorkflowState:
    """Immutable snapshot of the workflow.

    Attributes:
        current_step: Step the reviewer is on.
        current_image: Loaded image, or None before the first load.
        annotations: Annotations in insertion order.
        is_complete: True once the review has been completed.
        step_history: Steps visited since the last image load, in visit order.
    """

    current_step: ReviewStep
    current_image: MedicalImage | None
    annotations: tuple[Annotation, ...]
    is_complete: bool
    step_history: tuple[ReviewStep, ...]


def get_step_description(step: ReviewStep) -> str:
    """Return the fixed human-readable description of a step."""
    return STEP_DESCRIPTIONS[ReviewStep(step)]


class WorkflowController:
    """Owns the session's workflow state and enforces step reachability."""

    def __init__(self) -> None:
        self._current_step = ReviewStep.OVERVIEW
        self._current_image: MedicalImage | None = None
        self._annotations: list[Annotation] = []
        self._is_complete = False
        self._step_history: list[ReviewStep] = [ReviewStep.OVERVIEW]

    def get_state(self) -> WorkflowState:
        """Return a snapshot detached from the controller's internals."""
        return WorkflowState(
            current_step=self._current_step,
            current_image=self._current_image,
            annotations=tuple(self._annotations),
            is_complete=self._is_complete,
            step_history=tuple(self._step_history),
        )

    @property
    def current_step(self) -> ReviewStep:
        return self._current_step

    @property
    def current_image(self) -> MedicalImage | None:
        return self._current_image

    @property
    def annotation_count(self) -> int:
        return len(self._annotations)

    @property
    def is_complete(self) -> bool:
        return self._is_complete

    def load_image(self, image: MedicalImage) -> None:
        """Load an image and restart the workflow at Overview.

        Existing annotations are kept. Callers that want per-image
        isolation must clear them explicitly.
        """
        self._current_image = image
        self._current_step = ReviewStep.OVERVIEW
        self._step_history = [ReviewStep.OVERVIEW]
        logger.info(f"Loaded image {image.id} ({image.width}x{image.height})")

    def add_annotation(self, annotation: Annotation) -> None:
        self._annotations.append(annotation)
        logger.debug(f"Added annotation {annotation.id} ({len(self._annotations)} total)")

    def remove_annotation(self, annotation_id: str) -> bool:
        """Remove an annotation by id.

        Returns:
            True if an annotation was removed, False if the id was unknown.
        """
        before = len(self._annotations)
        self._annotations = [ann for ann in self._annotations if ann.id != annotation_id]
        removed = len(self._annotations) < before
        if removed:
            logger.debug(f"Removed annotation {annotation_id}")
        return removed

    def clear_annotations(self) -> None:
        self._annotations = []
        logger.debug("Cleared all annotations")

    def can_go_to_step(self, step: ReviewStep) -> bool:
        """Check whether navigating to ``step`` is currently allowed."""
        if self._is_complete:
            return False

        try:
            step = ReviewStep(step)
        except ValueError:
            return False

        if step is ReviewStep.OVERVIEW:
            return True

        if step in self._step_history:
            return True

        target_index = STEPS.index(step)
        current_index = STEPS.index(self._current_step)

        if target_index <= current_index:
            return True

        if target_index == current_index + 1:
            return self._prerequisite_met(step)

        return False

    def _prerequisite_met(self, step: ReviewStep) -> bool:
        if step is ReviewStep.FOCUS_AREAS:
            return self._current_image is not None
        if step in (ReviewStep.DETAILED_REVIEW, ReviewStep.SUMMARY):
            return len(self._annotations) > 0
        return True

    def go_to_step(self, step: ReviewStep) -> bool:
        """Navigate to ``step`` if allowed.

        Returns:
            True if the current step changed (or was re-entered), False otherwise.
        """
        if not self.can_go_to_step(step):
            logger.debug(f"Navigation to {getattr(step, 'value', step)} rejected from {self._current_step.value}")
            return False

        step = ReviewStep(step)
        previous = self._current_step
        self._current_step = step
        if step not in self._step_history:
            self._step_history.append(step)
        logger.debug(f"Step changed: {previous.value} -> {step.value}")
        return True

    def next_step(self) -> bool:
        """Advance to the following step. False at the last step."""
        index = STEPS.index(self._current_step)
        if index < len(STEPS) - 1:
            return self.go_to_step(STEPS[index + 1])
        return False

    def previous_step(self) -> bool:
        """Go back to the preceding step. False at the first step."""
        index = STEPS.index(self._current_step)
        if index > 0:
            return self.go_to_step(STEPS[index - 1])
        return False

    def complete(self) -> None:
        """Finish the review: jump to Summary and lock navigation."""
        self._current_step = ReviewStep.SUMMARY
        self._is_complete = True
        logger.info("Review completed")

    def get_step_description(self, step: ReviewStep) -> str:
        return get_step_description(step)


__all__ = [
    "STEPS",
    "STEP_DESCRIPTIONS",
    "STEP_LABELS",
    "ReviewStep",
    "WorkflowController",
    "WorkflowState",
    "get_step_description",
]
