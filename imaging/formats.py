"""Image format loading utilities.

This module provides functions for loading images from various formats
(PNG, JPG, NIfTI) into numpy arrays for review.
"""

from pathlib import Path
from typing import IO

import nibabel as nib
import numpy as np
from PIL import Image


def load_image(source: str | Path | IO[bytes]) -> np.ndarray:
    """Load an image file and return it as a grayscale array.

    Supports PNG and JPG image formats. Colour images are converted to
    a single luminance channel, since review works on intensities.

    Args:
        source: Path to the image file, or a binary file-like object.

    Returns:
        Image data as float32 numpy array with shape (H, W).

    Raises:
        FileNotFoundError: If the image path does not exist.
        PIL.UnidentifiedImageError: If the file is not a valid image.

    Example:
        >>> from pathlib import Path
        >>> img = load_image(Path("chest_ct.png"))
        >>> img.shape
        (512, 512)
    """
    if isinstance(source, (str, Path)):
        source = Path(source)
        if not source.exists():
            raise FileNotFoundError(f"Image file not found: {source}")

    img = Image.open(source).convert("L")
    return np.array(img, dtype=np.float32)


def load_nifti(path: str | Path) -> nib.Nifti1Image:
    """Load a NIfTI volume in canonical orientation.

    Supports both .nii and .nii.gz formats. Returns the image in
    canonical (RAS+) orientation so slicing by anatomical plane is
    consistent across files.

    Args:
        path: Path to the NIfTI file.

    Returns:
        Canonical nibabel image. Use ``get_fdata()`` for the voxel array.

    Raises:
        FileNotFoundError: If the volume file does not exist.
        nibabel.filebasedimages.ImageFileError: If the file is not a valid NIfTI.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Volume file not found: {path}")

    nii = nib.load(path)
    return nib.as_closest_canonical(nii)


def nifti_metadata(nii: nib.Nifti1Image) -> dict[str, object]:
    """Extract review metadata from a NIfTI header.

    Only fields with a usable value are returned:
    - series_description: the header ``descrip`` text
    - slice_thickness: voxel size along the third axis, in mm

    Args:
        nii: Loaded nibabel image.

    Returns:
        Metadata dictionary (possibly empty).
    """
    header = nii.header
    metadata: dict[str, object] = {}

    descrip = header.get("descrip")
    if descrip is not None:
        text = np.asarray(descrip).item().decode("latin-1").strip()
        if text:
            metadata["series_description"] = text

    zooms = header.get_zooms()
    if len(zooms) >= 3 and zooms[2] > 0:
        metadata["slice_thickness"] = round(float(zooms[2]), 3)

    return metadata
