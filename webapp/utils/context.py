"""Context analysis: view and annotation recommendations.

Every function in this module is a pure, deterministic table lookup over
the image, its metadata and the current annotations. There is no model
inference here; the heuristics only encode common reading conventions:

- Initial view depends on modality (and, for MRI, the study type).
- Once annotations exist, high-priority work favours sagittal review
  and findings favour coronal review.
- Points in the central region of the image are suggested as findings,
  peripheral points as landmarks.

Example:
    >>> image = MedicalImage(id="ct-1", modality="CT", width=512, height=512)
    >>> recommended_view(image, []).orientation
    <Orientation.AXIAL: 'axial'>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from webapp.utils.models import (
    Annotation,
    AnnotationCategory,
    AnnotationPriority,
    Confidence,
    Coordinates,
    MedicalImage,
    Modality,
    Orientation,
)

logger = logging.getLogger(__name__)

# Open interval bounds of the central region, in normalized coordinates
CENTRAL_REGION_MIN = 0.25
CENTRAL_REGION_MAX = 0.75

WIDE_ASPECT_RATIO = 1.2
TALL_ASPECT_RATIO = 0.8

PRIORITY_RANK: dict[AnnotationPriority, int] = {
    AnnotationPriority.HIGH: 3,
    AnnotationPriority.MEDIUM: 2,
    AnnotationPriority.LOW: 1,
}

CATEGORY_RANK: dict[AnnotationCategory, int] = {
    AnnotationCategory.FINDING: 4,
    AnnotationCategory.MEASUREMENT: 3,
    AnnotationCategory.LANDMARK: 2,
    AnnotationCategory.OTHER: 1,
}

# Series description keywords, checked in order
STUDY_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("brain", ("brain", "head")),
    ("spine", ("spine", "spinal")),
    ("chest", ("chest", "thorax")),
    ("abdomen", ("abdomen", "abdominal")),
)

MODALITY_REASONS: dict[Modality, str] = {
    Modality.CT: "CT scans: Central regions may show pathology in organs or vessels.",
    Modality.MRI: "MRI scans: Central regions often contain critical anatomical structures.",
    Modality.US: "Ultrasound: Central regions typically show organ parenchyma.",
}

FOCUS_TIPS: dict[Modality, tuple[str, str]] = {
    Modality.CT: (
        "Review central regions for organ pathology",
        "Check for contrast enhancement patterns",
    ),
    Modality.MRI: (
        "Examine T1/T2 signal characteristics",
        "Look for symmetry in bilateral structures",
    ),
    Modality.US: (
        "Assess echogenicity patterns",
        "Check for shadowing or enhancement",
    ),
}


@dataclass(frozen=True)
class ViewRecommendation:
    orientation: Orientation
    reason: str
    confidence: Confidence


@dataclass(frozen=True)
class AnnotationRecommendation:
    suggested_category: AnnotationCategory
    suggested_priority: AnnotationPriority
    reason: str


@dataclass(frozen=True)
class ContextAnalysis:
    """Everything the insights panel shows for the current image."""

    recommended_view: ViewRecommendation
    suggested_focus: tuple[str, ...] = field(default_factory=tuple)
    metadata_insights: tuple[str, ...] = field(default_factory=tuple)


_INITIAL_VIEWS: dict[Modality, ViewRecommendation] = {
    Modality.CT: ViewRecommendation(
        Orientation.AXIAL,
        "Axial view is standard for CT scans - provides cross-sectional anatomy",
        Confidence.HIGH,
    ),
    Modality.MRI: ViewRecommendation(
        Orientation.AXIAL,
        "Axial view is standard starting point for MRI",
        Confidence.MEDIUM,
    ),
    Modality.US: ViewRecommendation(
        Orientation.AXIAL,
        "Axial view is standard for ultrasound imaging",
        Confidence.MEDIUM,
    ),
}

_MRI_NEURO_VIEW = ViewRecommendation(
    Orientation.SAGITTAL,
    "Sagittal view is optimal for brain and spine MRI studies",
    Confidence.HIGH,
)

_DEFAULT_VIEW = ViewRecommendation(
    Orientation.AXIAL,
    "Default axial view for initial review",
    Confidence.LOW,
)


def _metadata_text(image: MedicalImage, key: str) -> str | None:
    # Empty values (None, "", 0) count as absent
    value = image.metadata.get(key)
    if not value:
        return None
    return str(value)


def study_type(image: MedicalImage) -> str | None:
    """Derive the study type from image metadata.

    Lookup order: ``study_type``, then ``body_part``, then a keyword
    search over ``series_description`` (brain/head, spine/spinal,
    chest/thorax, abdomen/abdominal).

    Returns:
        Study type text, or None when nothing matches.
    """
    explicit = _metadata_text(image, "study_type") or _metadata_text(image, "body_part")
    if explicit is not None:
        return explicit

    description = _metadata_text(image, "series_description")
    if description is not None:
        description = description.lower()
        for name, keywords in STUDY_TYPE_KEYWORDS:
            if any(keyword in description for keyword in keywords):
                return name

    return None


def _initial_view(image: MedicalImage) -> ViewRecommendation:
    if image.modality == Modality.MRI:
        if study_type(image) in ("brain", "spine"):
            return _MRI_NEURO_VIEW
    return _INITIAL_VIEWS.get(image.modality, _DEFAULT_VIEW)


def recommended_view(
    image: MedicalImage,
    annotations: Sequence[Annotation],
) -> ViewRecommendation:
    """Recommend a viewing plane for the image in its current context.

    Args:
        image: The image under review.
        annotations: Annotations placed so far.

    Returns:
        ViewRecommendation with orientation, reason and confidence.
    """
    if not annotations:
        return _initial_view(image)

    if any(ann.priority is AnnotationPriority.HIGH for ann in annotations):
        return ViewRecommendation(
            Orientation.SAGITTAL,
            "Sagittal view recommended for high-priority findings",
            Confidence.HIGH,
        )

    if any(ann.category is AnnotationCategory.FINDING for ann in annotations):
        return ViewRecommendation(
            Orientation.CORONAL,
            "Coronal view recommended for detailed finding review",
            Confidence.MEDIUM,
        )

    return ViewRecommendation(
        Orientation.AXIAL,
        "Axial view suitable for current context",
        Confidence.MEDIUM,
    )


def _normalized(image: MedicalImage, point: Coordinates) -> tuple[float, float]:
    return point.x / image.width, point.y / image.height


def is_central(image: MedicalImage, point: Coordinates) -> bool:
    """Check whether a point falls inside the open central rectangle."""
    nx, ny = _normalized(image, point)
    return (
        CENTRAL_REGION_MIN < nx < CENTRAL_REGION_MAX
        and CENTRAL_REGION_MIN < ny < CENTRAL_REGION_MAX
    )


def modality_priority(image: MedicalImage, point: Coordinates) -> AnnotationPriority:
    """Baseline priority for a point given the image modality."""
    if image.modality in (Modality.CT, Modality.MRI):
        return AnnotationPriority.HIGH if is_central(image, point) else AnnotationPriority.MEDIUM
    if image.modality == Modality.US:
        return AnnotationPriority.MEDIUM
    return AnnotationPriority.LOW


def annotation_context(image: MedicalImage, point: Coordinates) -> AnnotationRecommendation:
    """Suggest a category and priority for an annotation at ``point``.

    Args:
        image: The image under review.
        point: Image-space position of the new annotation.

    Returns:
        AnnotationRecommendation for pre-filling the annotation form.
    """
    nx, ny = _normalized(image, point)
    position = f"{round(nx * 100)}%, {round(ny * 100)}%"

    if is_central(image, point):
        baseline = modality_priority(image, point)
        priority = (
            AnnotationPriority.HIGH
            if baseline is AnnotationPriority.HIGH
            else AnnotationPriority.MEDIUM
        )
        reason = f"Central region ({position}) often contains significant findings."
        modality_reason = MODALITY_REASONS.get(image.modality)
        if modality_reason:
            reason = f"{reason} {modality_reason}"
        return AnnotationRecommendation(AnnotationCategory.FINDING, priority, reason)

    return AnnotationRecommendation(
        AnnotationCategory.LANDMARK,
        AnnotationPriority.LOW,
        f"Peripheral region typically contains anatomical landmarks. Position: {position}",
    )


def metadata_insights(image: MedicalImage) -> list[str]:
    """Summarise study metadata and image shape as display lines."""
    insights: list[str] = []

    study_date = _metadata_text(image, "study_date")
    if study_date:
        insights.append(f"Study date: {study_date}")

    series = _metadata_text(image, "series_number")
    if series:
        insights.append(f"Series: {series}")

    thickness = _metadata_text(image, "slice_thickness")
    if thickness:
        insights.append(f"Slice thickness: {thickness}mm")

    kind = study_type(image)
    if kind:
        insights.append(f"Study type: {kind}")

    if image.aspect_ratio > WIDE_ASPECT_RATIO:
        insights.append("Wide format image - may indicate panoramic view")
    elif image.aspect_ratio < TALL_ASPECT_RATIO:
        insights.append("Tall format image - may indicate sagittal/coronal view")

    return insights


def focus_suggestions(
    image: MedicalImage,
    annotations: Sequence[Annotation],
) -> list[str]:
    """Suggest where to look next.

    Without annotations this returns modality-specific reading tips;
    otherwise it counts findings and high-priority annotations.
    """
    if not annotations:
        return list(FOCUS_TIPS.get(image.modality, ()))

    suggestions: list[str] = []

    findings = sum(1 for ann in annotations if ann.category is AnnotationCategory.FINDING)
    if findings > 0:
        suggestions.append(f"{findings} finding(s) identified - review surrounding areas")

    high_priority = sum(1 for ann in annotations if ann.priority is AnnotationPriority.HIGH)
    if high_priority > 0:
        suggestions.append(
            f"{high_priority} high-priority annotation(s) require detailed review"
        )

    return suggestions


def order_annotations(annotations: Iterable[Annotation]) -> list[Annotation]:
    """Return annotations sorted by priority, then category, most important first.

    The sort is stable, so equal-ranked annotations keep insertion order.
    """
    return sorted(
        annotations,
        key=lambda ann: (PRIORITY_RANK[ann.priority], CATEGORY_RANK[ann.category]),
        reverse=True,
    )


def group_annotations(
    annotations: Iterable[Annotation],
) -> dict[tuple[AnnotationCategory, AnnotationPriority], list[Annotation]]:
    """Group annotations by (category, priority), in order of first occurrence."""
    groups: dict[tuple[AnnotationCategory, AnnotationPriority], list[Annotation]] = {}
    for ann in annotations:
        groups.setdefault((ann.category, ann.priority), []).append(ann)
    return groups


def analyze_context(
    image: MedicalImage,
    annotations: Sequence[Annotation],
) -> ContextAnalysis:
    """Bundle the recommendation, focus suggestions and metadata insights."""
    analysis = ContextAnalysis(
        recommended_view=recommended_view(image, annotations),
        suggested_focus=tuple(focus_suggestions(image, annotations)),
        metadata_insights=tuple(metadata_insights(image)),
    )
    logger.debug(
        f"Context for {image.id}: {analysis.recommended_view.orientation.value} "
        f"({analysis.recommended_view.confidence.value})"
    )
    return analysis


__all__ = [
    "CATEGORY_RANK",
    "PRIORITY_RANK",
    "AnnotationRecommendation",
    "ContextAnalysis",
    "ViewRecommendation",
    "analyze_context",
    "annotation_context",
    "focus_suggestions",
    "group_annotations",
    "is_central",
    "metadata_insights",
    "modality_priority",
    "order_annotations",
    "recommended_view",
    "study_type",
]
