"""Synthetic slice generation for demos and tests."""

import numpy as np


def create_sample_slice(size: int = 512, seed: int | None = 0) -> np.ndarray:
    """Create a synthetic CT-like axial slice.

    The slice has an air background, an elliptical body outline with soft
    tissue intensity, two darker lung fields and a bright spine-like disc,
    expressed roughly in Hounsfield units.

    Args:
        size: Width and height of the square slice in pixels.
        seed: Seed for the added noise. None for non-deterministic noise.

    Returns:
        float32 array with shape (size, size).
    """
    rng = np.random.default_rng(seed)
    yy, xx = np.mgrid[0:size, 0:size].astype(np.float32) / size

    image = np.full((size, size), -1000.0, dtype=np.float32)

    body = ((xx - 0.5) / 0.42) ** 2 + ((yy - 0.5) / 0.32) ** 2 <= 1.0
    image[body] = 40.0

    for cx in (0.33, 0.67):
        lung = ((xx - cx) / 0.12) ** 2 + ((yy - 0.47) / 0.18) ** 2 <= 1.0
        image[lung] = -700.0

    spine = (xx - 0.5) ** 2 + (yy - 0.72) ** 2 <= 0.045**2
    image[spine] = 700.0

    image += rng.normal(0.0, 12.0, size=image.shape).astype(np.float32)
    return image
