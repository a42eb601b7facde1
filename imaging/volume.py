"""Volume slicing utilities for 3D medical images.

A reviewed image is always a single 2D plane. These helpers pick that
plane out of a canonical (RAS+) volume for a given anatomical orientation.
"""

import numpy as np

# Volume axis holding the slices for each viewing plane (RAS+ layout)
ORIENTATION_AXES = {
    "sagittal": 0,
    "coronal": 1,
    "axial": 2,
}


def _axis_for(orientation: str) -> int:
    try:
        return ORIENTATION_AXES[getattr(orientation, "value", orientation)]
    except KeyError:
        raise ValueError(
            f"Invalid orientation: {orientation}. "
            f"Must be one of {sorted(ORIENTATION_AXES)}"
        ) from None


def slice_count(volume: np.ndarray, orientation: str = "axial") -> int:
    """Return the number of slices along the plane for an orientation.

    Args:
        volume: 3D numpy array with shape (X, Y, Z).
        orientation: "axial", "coronal" or "sagittal".

    Returns:
        Number of available slices.
    """
    return int(volume.shape[_axis_for(orientation)])


def extract_slice(
    volume: np.ndarray,
    index: int,
    orientation: str = "axial",
) -> np.ndarray:
    """Extract a 2D slice from a 3D volume.

    Args:
        volume: 3D numpy array with shape (X, Y, Z).
        index: Index of the slice along the orientation's axis.
        orientation: "axial" (Z), "coronal" (Y) or "sagittal" (X).

    Returns:
        2D numpy array. Rows run top to bottom in display order.

    Raises:
        IndexError: If index is outside the volume.
        ValueError: If orientation is unknown.

    Example:
        >>> volume = np.random.rand(240, 240, 155)
        >>> extract_slice(volume, 77).shape
        (240, 240)
        >>> extract_slice(volume, 100, "sagittal").shape
        (155, 240)
    """
    axis = _axis_for(orientation)
    if not 0 <= index < volume.shape[axis]:
        raise IndexError(
            f"Slice index {index} out of range for {orientation} "
            f"(0 to {volume.shape[axis] - 1})"
        )

    plane = np.take(volume, index, axis=axis)
    # Remaining axes are (a, b) with superior/anterior increasing along b;
    # transpose and flip so the top of the display is superior/anterior.
    return np.flipud(plane.T)
