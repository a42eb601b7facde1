"""Domain models for image review.

This module defines the closed vocabularies used across the application
(modality, orientation, annotation type/category/priority) and the
immutable records exchanged between the controllers, the context
analyzer and the UI layer.

All records are frozen dataclasses with read-only metadata: once an image
is loaded or an annotation is created it is never mutated in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)


class Modality(str, Enum):
    """Acquisition technique of a medical image."""

    CT = "CT"
    MRI = "MRI"
    US = "US"


class Orientation(str, Enum):
    """Anatomical viewing plane."""

    AXIAL = "axial"
    SAGITTAL = "sagittal"
    CORONAL = "coronal"


class AnnotationType(str, Enum):
    POINT = "point"
    REGION = "region"


class AnnotationCategory(str, Enum):
    FINDING = "finding"
    LANDMARK = "landmark"
    MEASUREMENT = "measurement"
    OTHER = "other"


class AnnotationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Confidence(str, Enum):
    """Confidence level attached to a view recommendation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class MedicalImage:
    """A single image loaded for review.

    Attributes:
        id: Identifier of the image (foreign key for annotations).
        modality: Acquisition modality. Known values are coerced to
            Modality; anything else is kept as the raw string.
        width: Width in pixels (> 0).
        height: Height in pixels (> 0).
        pixel_source: Opaque reference to the pixel data (array, path, URL).
            Not used for equality.
        metadata: Free-form study metadata (study_date, series_number,
            slice_thickness, study_type, body_part, series_description).
    """

    id: str
    modality: Modality | str
    width: int
    height: int
    pixel_source: Any = field(default=None, compare=False, repr=False)
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if not isinstance(self.modality, Modality):
            try:
                object.__setattr__(self, "modality", Modality(self.modality))
            except ValueError:
                logger.warning(f"Unrecognised modality for image {self.id}: {self.modality}")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


@dataclass(frozen=True)
class Coordinates:
    """Image-space position of an annotation, in pixels.

    ``width`` and ``height`` are only set for region annotations.
    """

    x: float
    y: float
    width: float | None = None
    height: float | None = None


@dataclass(frozen=True)
class Annotation:
    """A point or rectangular region marked on an image.

    Instances are built by ``webapp.utils.annotations.create_annotation``,
    which validates them against the image bounds.
    """

    id: str
    image_id: str
    type: AnnotationType
    category: AnnotationCategory
    priority: AnnotationPriority
    coordinates: Coordinates
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)
    created_at: datetime = field(default_factory=datetime.now, compare=False)
    updated_at: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def is_region(self) -> bool:
        return self.type is AnnotationType.REGION
