"""Annotation construction and validation.

This module is the only place annotations are created. Inputs are
validated in a fixed order (image id, coordinates, type, category,
priority) and the first failure raises a ValidationError with a
field-specific message. Nothing is returned unless every check passes.

Example:
    >>> ann = create_annotation(
    ...     "ct-001", {"x": 256, "y": 256}, "point", "finding", "high",
    ...     image_width=512, image_height=512,
    ... )
    >>> ann.coordinates
    Coordinates(x=256.0, y=256.0, width=None, height=None)
"""

from __future__ import annotations

import logging
import math
import sys
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from webapp.utils.errors import ValidationError
from webapp.utils.models import (
    Annotation,
    AnnotationCategory,
    AnnotationPriority,
    AnnotationType,
    Coordinates,
)

logger = logging.getLogger(__name__)

MAX_IMAGE_ID_LENGTH = 255

# Used when the caller does not pass image dimensions. Always pass the
# real image size when creating annotations for a loaded image.
UNBOUNDED_DIMENSION = sys.maxsize


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_image_id(image_id: Any) -> str:
    """Validate an image identifier.

    Returns:
        The image id unchanged.

    Raises:
        ValidationError: If empty or longer than 255 characters after trimming.
    """
    if not isinstance(image_id, str) or not image_id.strip():
        raise ValidationError("Image ID must be a non-empty string")
    if len(image_id.strip()) > MAX_IMAGE_ID_LENGTH:
        raise ValidationError(
            f"Image ID must be {MAX_IMAGE_ID_LENGTH} characters or less"
        )
    return image_id


def validate_coordinates(
    coordinates: Coordinates | Mapping[str, Any],
    image_width: float,
    image_height: float,
) -> Coordinates:
    """Validate an image-space position against the image bounds.

    Args:
        coordinates: Coordinates, or a mapping with x, y and optional
            width, height keys.
        image_width: Image width in pixels.
        image_height: Image height in pixels.

    Returns:
        The position as a Coordinates record (floats).

    Raises:
        ValidationError: On the first violated rule.
    """
    if isinstance(coordinates, Coordinates):
        raw = {
            "x": coordinates.x,
            "y": coordinates.y,
            "width": coordinates.width,
            "height": coordinates.height,
        }
    elif isinstance(coordinates, Mapping) and "x" in coordinates and "y" in coordinates:
        raw = dict(coordinates)
    else:
        raise ValidationError("Coordinates must be an object with x and y properties")

    x, y = raw["x"], raw["y"]
    if not _is_finite_number(x):
        raise ValidationError("Coordinate x must be a finite number")
    if not _is_finite_number(y):
        raise ValidationError("Coordinate y must be a finite number")
    if x < 0 or x > image_width:
        raise ValidationError(f"Coordinate x must be between 0 and {image_width}")
    if y < 0 or y > image_height:
        raise ValidationError(f"Coordinate y must be between 0 and {image_height}")

    width = raw.get("width")
    if width is not None:
        if not _is_finite_number(width) or width < 0:
            raise ValidationError("Width must be a non-negative finite number")
        if x + width > image_width:
            raise ValidationError("Region extends beyond image width")

    height = raw.get("height")
    if height is not None:
        if not _is_finite_number(height) or height < 0:
            raise ValidationError("Height must be a non-negative finite number")
        if y + height > image_height:
            raise ValidationError("Region extends beyond image height")

    return Coordinates(
        x=float(x),
        y=float(y),
        width=float(width) if width is not None else None,
        height=float(height) if height is not None else None,
    )


def _validate_member(value: Any, enum_cls: type[Enum], label: str) -> Any:
    choices = ", ".join(member.value for member in enum_cls)
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    raise ValidationError(f"{label} must be one of: {choices}")


def validate_type(value: Any) -> AnnotationType:
    return _validate_member(value, AnnotationType, "Type")


def validate_category(value: Any) -> AnnotationCategory:
    return _validate_member(value, AnnotationCategory, "Category")


def validate_priority(value: Any) -> AnnotationPriority:
    return _validate_member(value, AnnotationPriority, "Priority")


def generate_annotation_id() -> str:
    """Build a unique id from the current time and a random suffix."""
    return f"ann-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def create_annotation(
    image_id: str,
    coordinates: Coordinates | Mapping[str, Any],
    type: AnnotationType | str,
    category: AnnotationCategory | str,
    priority: AnnotationPriority | str,
    image_width: float = UNBOUNDED_DIMENSION,
    image_height: float = UNBOUNDED_DIMENSION,
    metadata: Mapping[str, Any] | None = None,
) -> Annotation:
    """Validate inputs and build a new annotation.

    Args:
        image_id: Id of the image the annotation belongs to.
        coordinates: Position in image pixels; width/height for regions.
        type: "point" or "region".
        category: "finding", "landmark", "measurement" or "other".
        priority: "low", "medium" or "high".
        image_width: Image width used for bounds checks.
        image_height: Image height used for bounds checks.
        metadata: Optional free-form metadata.

    Returns:
        A new immutable Annotation with a fresh id and timestamps.

    Raises:
        ValidationError: If any input is invalid. No annotation is built.
    """
    image_id = validate_image_id(image_id)
    coords = validate_coordinates(coordinates, image_width, image_height)
    ann_type = validate_type(type)
    ann_category = validate_category(category)
    ann_priority = validate_priority(priority)

    coords = Coordinates(
        x=min(max(coords.x, 0.0), float(image_width)),
        y=min(max(coords.y, 0.0), float(image_height)),
        width=coords.width,
        height=coords.height,
    )

    now = datetime.now()
    annotation = Annotation(
        id=generate_annotation_id(),
        image_id=image_id,
        type=ann_type,
        category=ann_category,
        priority=ann_priority,
        coordinates=coords,
        metadata=metadata or {},
        created_at=now,
        updated_at=now,
    )
    logger.debug(
        f"Created {ann_type.value} annotation {annotation.id} on {image_id} "
        f"at ({coords.x:.1f}, {coords.y:.1f})"
    )
    return annotation


__all__ = [
    "MAX_IMAGE_ID_LENGTH",
    "UNBOUNDED_DIMENSION",
    "create_annotation",
    "generate_annotation_id",
    "validate_category",
    "validate_coordinates",
    "validate_image_id",
    "validate_priority",
    "validate_type",
]
