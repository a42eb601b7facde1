"""Intensity mapping functions for display.

This module provides the intensity normalization and windowing functions
used to turn raw pixel data into 8-bit grayscale for the viewer.
"""

import numpy as np


def normalize_slice(slice_2d: np.ndarray) -> np.ndarray:
    """Normalize 2D slice to 0-255 range.

    Performs min-max normalization on the input slice and scales to
    uint8 range (0-255). Handles constant-value slices by returning
    an array of zeros.

    Args:
        slice_2d: 2D numpy array representing an image slice.

    Returns:
        Normalized and scaled slice as uint8 with values in range [0, 255].
        Returns zeros array for constant-value inputs.

    Example:
        >>> import numpy as np
        >>> slice_data = np.array([[0, 100], [50, 200]], dtype=np.float32)
        >>> normalized = normalize_slice(slice_data)
        >>> normalized.dtype
        dtype('uint8')
    """
    slice_2d = slice_2d.astype(np.float64)
    if slice_2d.max() > slice_2d.min():
        normalized = (slice_2d - slice_2d.min()) / (slice_2d.max() - slice_2d.min())
    else:
        normalized = np.zeros_like(slice_2d)  # handle constant slice
    return (normalized * 255).astype(np.uint8)


def apply_window(slice_2d: np.ndarray, level: float, width: float) -> np.ndarray:
    """Map pixel intensities through a window level/width to uint8.

    Values at or below ``level - width / 2`` become 0, values at or above
    ``level + width / 2`` become 255, and values in between are scaled
    linearly.

    Args:
        slice_2d: 2D numpy array of raw intensities.
        level: Window centre.
        width: Window width. Non-positive widths are treated as 1.

    Returns:
        Windowed slice as uint8.

    Example:
        >>> apply_window(np.array([[0.0, 50.0, 100.0]]), level=50, width=100)
        array([[  0, 127, 255]], dtype=uint8)
    """
    width = max(float(width), 1.0)
    lower = level - width / 2
    scaled = (slice_2d.astype(np.float64) - lower) / width
    return (np.clip(scaled, 0.0, 1.0) * 255).astype(np.uint8)


def auto_window(slice_2d: np.ndarray) -> tuple[float, float]:
    """Compute a window covering the full data range.

    Args:
        slice_2d: 2D numpy array of raw intensities.

    Returns:
        Tuple of (level, width). Constant slices get a width of 1.
    """
    low = float(slice_2d.min())
    high = float(slice_2d.max())
    width = max(high - low, 1.0)
    return low + width / 2, width
