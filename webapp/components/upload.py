"""Image upload component for medreview.

This module provides the file upload functionality for 2D images and 3D
volumes, including validation, session state caching, and the step that
turns an upload into the MedicalImage under review.
"""

import logging
import tempfile
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np
import streamlit as st
from PIL import UnidentifiedImageError

from imaging.formats import load_image, load_nifti, nifti_metadata
from imaging.sample import create_sample_slice
from imaging.volume import extract_slice
from webapp.utils.models import MedicalImage, Modality, Orientation

logger = logging.getLogger(__name__)

# File size limits
MAX_FILE_SIZE_MB = 10
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

UPLOAD_STATE_KEY = "uploaded_data"

SAMPLE_IMAGE_ID = "sample-ct-001"
SAMPLE_IMAGE_SIZE = 512


@dataclass
class UploadedImage:
    """Container for an uploaded 2D image.

    Attributes:
        filename: Original filename of the uploaded image.
        data: Grayscale image as float32 array with shape (H, W).
        file_size_bytes: Size of the uploaded file in bytes.
        file_id: Unique identifier for the uploaded file (used for caching).
        upload_time: Timestamp when the image was uploaded.
    """

    filename: str
    data: np.ndarray
    file_size_bytes: int
    file_id: str = ""
    upload_time: datetime = field(default_factory=datetime.now)

    @property
    def file_size_mb(self) -> float:
        return self.file_size_bytes / (1024 * 1024)

    @property
    def dimensions(self) -> tuple[int, int]:
        """Return image dimensions as (height, width)."""
        return (self.data.shape[0], self.data.shape[1])


@dataclass
class UploadedVolume:
    """Container for an uploaded 3D volume.

    Attributes:
        filename: Original filename of the uploaded volume.
        volume_data: Volume in canonical orientation, shape (X, Y, Z).
        file_size_bytes: Size of the uploaded file in bytes.
        metadata: Review metadata read from the NIfTI header.
        file_id: Unique identifier for caching.
        upload_time: Timestamp when the volume was uploaded.
    """

    filename: str
    volume_data: np.ndarray
    file_size_bytes: int
    metadata: dict[str, Any] = field(default_factory=dict)
    file_id: str = ""
    upload_time: datetime = field(default_factory=datetime.now)

    @property
    def file_size_mb(self) -> float:
        return self.file_size_bytes / (1024 * 1024)

    @property
    def dimensions(self) -> tuple[int, int, int]:
        return (
            self.volume_data.shape[0],
            self.volume_data.shape[1],
            self.volume_data.shape[2],
        )


@dataclass
class UploadedStudy:
    """The image under review together with its pixels.

    Attributes:
        image: MedicalImage handed to the review session.
        pixels: 2D intensity array of shape (image.height, image.width).
    """

    image: MedicalImage
    pixels: np.ndarray


def is_nifti_file(filename: str) -> bool:
    """Check if filename indicates a NIfTI file (.nii or .nii.gz)."""
    lower = filename.lower()
    return lower.endswith(".nii") or lower.endswith(".nii.gz")


def _get_nifti_suffix(filename: str) -> str:
    if filename.lower().endswith(".nii.gz"):
        return ".nii.gz"
    return ".nii"


def _image_id_base(filename: str) -> str:
    name = Path(filename).name
    for suffix in (".nii.gz", ".nii", ".png", ".jpg", ".jpeg"):
        if name.lower().endswith(suffix):
            return name[: -len(suffix)] or name
    return name


def study_from_image(upload: UploadedImage, modality: Modality | str) -> UploadedStudy:
    """Build the study for a 2D image upload."""
    height, width = upload.dimensions
    image = MedicalImage(
        id=_image_id_base(upload.filename)[:255],
        modality=modality,
        width=width,
        height=height,
        pixel_source=upload.data,
    )
    return UploadedStudy(image=image, pixels=upload.data)


def study_from_volume(
    upload: UploadedVolume,
    modality: Modality | str,
    orientation: Orientation | str,
    index: int,
) -> UploadedStudy:
    """Build the study for one slice of a volume upload.

    The image id names the volume, plane and slice, so every slice is
    reviewed as its own image.

    Raises:
        IndexError: If index is out of range for the orientation.
    """
    orientation = Orientation(orientation)
    pixels = extract_slice(upload.volume_data, index, orientation.value).astype(np.float32)
    height, width = pixels.shape
    image = MedicalImage(
        id=f"{_image_id_base(upload.filename)}-{orientation.value}-{index}"[:255],
        modality=modality,
        width=width,
        height=height,
        pixel_source=pixels,
        metadata=upload.metadata,
    )
    return UploadedStudy(image=image, pixels=pixels)


def load_sample_study() -> UploadedStudy:
    """Synthetic CT study for trying the viewer without an upload."""
    pixels = create_sample_slice(SAMPLE_IMAGE_SIZE)
    image = MedicalImage(
        id=SAMPLE_IMAGE_ID,
        modality=Modality.CT,
        width=SAMPLE_IMAGE_SIZE,
        height=SAMPLE_IMAGE_SIZE,
        pixel_source=pixels,
        metadata={
            "study_date": date.today().isoformat(),
            "series_number": 1,
            "slice_thickness": 1.0,
        },
    )
    return UploadedStudy(image=image, pixels=pixels)


def clear_upload() -> None:
    """Clear the uploaded data from session state."""
    st.session_state[UPLOAD_STATE_KEY] = None
    logger.info("Upload cleared from session state")


def render_modality_selector() -> Modality:
    """Render the modality picker for uploaded studies."""
    return st.selectbox(
        "Modality",
        list(Modality),
        format_func=lambda m: m.value,
        key="upload_modality",
        help="Modality of the uploaded study; drives the recommended view",
    )


def render_upload_component() -> UploadedImage | UploadedVolume | None:
    """Render file upload component and return uploaded data if valid.

    Displays a file uploader widget that accepts PNG, JPG images and
    NIfTI volumes (.nii, .nii.gz). Validates file size (max 10MB) and
    file format. Stores valid uploads in st.session_state["uploaded_data"].

    Uses file_id caching to avoid redundant processing on reruns.
    Clears zombie state when validation fails.

    Returns:
        UploadedImage for 2D images, UploadedVolume for 3D volumes, or None.
    """
    if UPLOAD_STATE_KEY not in st.session_state:
        st.session_state[UPLOAD_STATE_KEY] = None

    uploaded_file = st.file_uploader(
        "Upload image or volume",
        type=["png", "jpg", "jpeg", "nii", "nii.gz"],
        help=f"Upload a 2D image (PNG/JPG) or 3D volume (NIfTI), max {MAX_FILE_SIZE_MB}MB",
    )

    if uploaded_file is None:
        # Clear zombie state when no file is present
        if st.session_state[UPLOAD_STATE_KEY] is not None:
            clear_upload()
        return None

    # Same file as last rerun: return cached result
    current_file_id = uploaded_file.file_id
    existing_data = st.session_state[UPLOAD_STATE_KEY]
    if existing_data is not None and existing_data.file_id == current_file_id:
        return existing_data

    if uploaded_file.size > MAX_FILE_SIZE_BYTES:
        st.error(
            f"⚠️ **File too large** — Your file is {uploaded_file.size / (1024 * 1024):.1f}MB. "
            f"Please upload a file smaller than {MAX_FILE_SIZE_MB}MB."
        )
        logger.warning(f"Upload rejected: file too large ({uploaded_file.size} bytes)")
        st.session_state[UPLOAD_STATE_KEY] = None
        return None

    if is_nifti_file(uploaded_file.name):
        return _load_nifti_volume(uploaded_file, current_file_id)
    return _load_2d_image(uploaded_file, current_file_id)


def _load_nifti_volume(uploaded_file, file_id: str) -> UploadedVolume | None:
    """Load a NIfTI volume from an uploaded file.

    Returns:
        UploadedVolume if successful, None on error.
    """
    tmp_path = None
    try:
        # nibabel needs a file path
        with tempfile.NamedTemporaryFile(
            suffix=_get_nifti_suffix(uploaded_file.name),
            delete=False,
        ) as tmp:
            tmp.write(uploaded_file.getvalue())
            tmp_path = Path(tmp.name)

        nii = load_nifti(tmp_path)
        volume_data = np.asarray(nii.get_fdata(), dtype=np.float32)
        if volume_data.ndim != 3:
            raise ValueError(f"Expected a 3D volume, got shape {volume_data.shape}")

        uploaded_volume = UploadedVolume(
            filename=uploaded_file.name,
            volume_data=volume_data,
            file_size_bytes=uploaded_file.size,
            metadata=nifti_metadata(nii),
            file_id=file_id,
        )
    except Exception as e:
        st.error(
            "⚠️ **Failed to load NIfTI volume** — The file could not be read as a valid "
            "3D NIfTI. Please upload a valid .nii or .nii.gz file."
        )
        logger.error(f"NIfTI load error: {e}")
        st.session_state[UPLOAD_STATE_KEY] = None
        return None
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)

    st.session_state[UPLOAD_STATE_KEY] = uploaded_volume
    logger.info(
        f"Volume uploaded successfully: {uploaded_file.name} "
        f"({uploaded_volume.file_size_mb:.2f}MB, {uploaded_volume.dimensions})"
    )
    return uploaded_volume


def _load_2d_image(uploaded_file, file_id: str) -> UploadedImage | None:
    """Load a 2D image from an uploaded file.

    Returns:
        UploadedImage if successful, None on error.
    """
    try:
        img_array = load_image(uploaded_file)
    except UnidentifiedImageError:
        st.error(
            "⚠️ **Invalid image file** — The file could not be read as an image. "
            "Please upload a valid PNG or JPG file."
        )
        logger.error(f"Image load error: unidentified image format for {uploaded_file.name}")
        st.session_state[UPLOAD_STATE_KEY] = None
        return None
    except Exception as e:
        st.error(
            "⚠️ **Failed to load image** — An unexpected error occurred while reading the file. "
            "Please try again with a different image."
        )
        logger.error(f"Image load error: {e}")
        st.session_state[UPLOAD_STATE_KEY] = None
        return None

    uploaded_image = UploadedImage(
        filename=uploaded_file.name,
        data=img_array,
        file_size_bytes=uploaded_file.size,
        file_id=file_id,
    )

    st.session_state[UPLOAD_STATE_KEY] = uploaded_image
    logger.info(
        f"Image uploaded successfully: {uploaded_file.name} "
        f"({uploaded_image.file_size_mb:.2f}MB, {uploaded_image.dimensions})"
    )
    return uploaded_image
