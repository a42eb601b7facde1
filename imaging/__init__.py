"""medreview shared imaging module.

This package provides the pixel-level helpers shared by the viewer
and the upload pipeline.

Exports:
    normalize_slice: Normalize 2D slice to 0-255 range
    apply_window: Map intensities through a level/width window
    auto_window: Window covering the full data range
    load_image: Load PNG/JPG images as grayscale arrays
    load_nifti: Load NIfTI volumes in canonical orientation
    nifti_metadata: Review metadata from a NIfTI header
    extract_slice: Extract a 2D plane from a 3D volume
    slice_count: Number of slices for an orientation
    create_sample_slice: Synthetic CT-like slice
"""

from imaging.formats import load_image, load_nifti, nifti_metadata
from imaging.normalize import apply_window, auto_window, normalize_slice
from imaging.sample import create_sample_slice
from imaging.volume import extract_slice, slice_count

__all__ = [
    "apply_window",
    "auto_window",
    "create_sample_slice",
    "extract_slice",
    "load_image",
    "load_nifti",
    "nifti_metadata",
    "normalize_slice",
    "slice_count",
]
