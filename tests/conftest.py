"""Shared fixtures for the medreview test suite."""

from __future__ import annotations

import pytest

from webapp.utils.annotations import create_annotation
from webapp.utils.models import MedicalImage, Modality


@pytest.fixture
def ct_image() -> MedicalImage:
    """A 512x512 CT image with typical study metadata."""
    return MedicalImage(
        id="ct-001",
        modality=Modality.CT,
        width=512,
        height=512,
        metadata={"study_date": "2024-03-01", "series_number": 3, "slice_thickness": 1.25},
    )


@pytest.fixture
def mri_image() -> MedicalImage:
    return MedicalImage(id="mri-001", modality=Modality.MRI, width=256, height=256)


@pytest.fixture
def make_annotation(ct_image):
    """Factory for valid annotations on ``ct_image``."""

    def _make(
        x: float = 100.0,
        y: float = 100.0,
        category: str = "finding",
        priority: str = "medium",
        image: MedicalImage | None = None,
        **coords,
    ):
        image = image or ct_image
        return create_annotation(
            image.id,
            {"x": x, "y": y, **coords},
            "region" if coords else "point",
            category,
            priority,
            image_width=image.width,
            image_height=image.height,
        )

    return _make
