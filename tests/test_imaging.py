"""Unit tests for the imaging package."""

from pathlib import Path

import nibabel as nib
import numpy as np
import pytest
from PIL import Image

from imaging.formats import load_image, load_nifti, nifti_metadata
from imaging.normalize import apply_window, auto_window, normalize_slice
from imaging.sample import create_sample_slice
from imaging.volume import extract_slice, slice_count


class TestNormalizeSlice:
    """Tests for normalize_slice function."""

    def test_normalize_slice_scales_to_255(self):
        """Normal range input should scale to 0-255."""
        slice_2d = np.array([[0, 50], [100, 200]], dtype=np.float32)
        result = normalize_slice(slice_2d)

        assert result.min() == 0
        assert result.max() == 255
        assert result.dtype == np.uint8

    def test_normalize_slice_handles_constant_image(self):
        """Constant slice should return zeros, not NaN."""
        constant_slice = np.full((10, 10), 42.0, dtype=np.float32)
        result = normalize_slice(constant_slice)

        assert np.all(result == 0)

    def test_normalize_slice_handles_negative_values(self):
        """Negative intensities (e.g. Hounsfield units) map to the low end."""
        result = normalize_slice(np.array([[-1000.0, 1000.0]]))

        assert result.tolist() == [[0, 255]]


class TestApplyWindow:
    """Tests for apply_window function."""

    def test_linear_inside_window(self):
        result = apply_window(np.array([[0.0, 50.0, 100.0]]), level=50, width=100)

        assert result.tolist() == [[0, 127, 255]]

    def test_clips_outside_window(self):
        result = apply_window(np.array([[-500.0, 500.0]]), level=40, width=400)

        assert result.tolist() == [[0, 255]]

    def test_non_positive_width_treated_as_one(self):
        result = apply_window(np.array([[9.0, 11.0]]), level=10, width=0)

        assert result.tolist() == [[0, 255]]


class TestAutoWindow:
    """Tests for auto_window function."""

    def test_covers_data_range(self):
        level, width = auto_window(np.array([[-1000.0, 1000.0]]))

        assert (level, width) == (0.0, 2000.0)

    def test_constant_slice(self):
        level, width = auto_window(np.full((4, 4), 7.0))

        assert width == 1.0
        assert level == 7.5


class TestLoadImage:
    """Tests for load_image function."""

    def test_load_image_loads_png(self, tmp_path):
        """PNG should load as a float32 grayscale array."""
        path = tmp_path / "slice.png"
        Image.fromarray(np.full((32, 48), 200, dtype=np.uint8)).save(path)

        result = load_image(path)

        assert result.shape == (32, 48)
        assert result.dtype == np.float32
        assert result[0, 0] == 200.0

    def test_load_image_converts_rgb(self, tmp_path):
        path = tmp_path / "color.jpg"
        Image.new("RGB", (20, 10), (255, 255, 255)).save(path)

        assert load_image(str(path)).shape == (10, 20)

    def test_load_image_accepts_file_object(self, tmp_path):
        path = tmp_path / "slice.png"
        Image.new("L", (8, 8)).save(path)

        with open(path, "rb") as f:
            assert load_image(f).shape == (8, 8)

    def test_load_image_raises_on_missing_file(self):
        with pytest.raises(FileNotFoundError, match="Image file not found"):
            load_image(Path("/nonexistent/image.png"))


class TestNifti:
    """Tests for NIfTI loading and metadata."""

    def _write_volume(self, path: Path, descrip: str = "") -> None:
        affine = np.diag([1.0, 1.0, 2.5, 1.0])
        nii = nib.Nifti1Image(np.zeros((16, 12, 8), dtype=np.float32), affine)
        nii.header["descrip"] = descrip.encode("latin-1")
        nib.save(nii, path)

    def test_load_nifti(self, tmp_path):
        path = tmp_path / "volume.nii.gz"
        self._write_volume(path)

        nii = load_nifti(path)

        assert nii.get_fdata().shape == (16, 12, 8)

    def test_load_nifti_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Volume file not found"):
            load_nifti(tmp_path / "missing.nii")

    def test_metadata(self, tmp_path):
        path = tmp_path / "volume.nii"
        self._write_volume(path, descrip="AX T1 BRAIN")

        metadata = nifti_metadata(load_nifti(path))

        assert metadata == {"series_description": "AX T1 BRAIN", "slice_thickness": 2.5}

    def test_metadata_skips_empty_description(self, tmp_path):
        path = tmp_path / "volume.nii"
        self._write_volume(path)

        assert "series_description" not in nifti_metadata(load_nifti(path))


class TestExtractSlice:
    """Tests for extract_slice and slice_count."""

    def test_axial_shape(self):
        volume = np.zeros((240, 240, 155))

        assert extract_slice(volume, 77).shape == (240, 240)
        assert slice_count(volume) == 155

    def test_sagittal_and_coronal_shapes(self):
        volume = np.zeros((240, 200, 155))

        assert extract_slice(volume, 100, "sagittal").shape == (155, 200)
        assert extract_slice(volume, 100, "coronal").shape == (155, 240)
        assert slice_count(volume, "sagittal") == 240
        assert slice_count(volume, "coronal") == 200

    def test_superior_at_top(self):
        """The last index along the superior axis ends up in row 0."""
        volume = np.zeros((4, 4, 6))
        volume[:, :, 5] = 1.0

        plane = extract_slice(volume, 0, "sagittal")

        assert plane[0].tolist() == [1.0] * 4
        assert plane[1:].sum() == 0

    def test_accepts_enum_orientation(self):
        from webapp.utils.models import Orientation

        volume = np.zeros((8, 6, 4))

        assert extract_slice(volume, 0, Orientation.CORONAL).shape == (4, 8)

    @pytest.mark.parametrize("index", [-1, 155])
    def test_index_out_of_range(self, index):
        with pytest.raises(IndexError, match="out of range"):
            extract_slice(np.zeros((240, 240, 155)), index)

    def test_unknown_orientation(self):
        with pytest.raises(ValueError, match="Invalid orientation"):
            extract_slice(np.zeros((4, 4, 4)), 0, "oblique")


class TestSampleSlice:
    """Tests for create_sample_slice."""

    def test_shape_and_dtype(self):
        image = create_sample_slice(128)

        assert image.shape == (128, 128)
        assert image.dtype == np.float32

    def test_deterministic_with_seed(self):
        np.testing.assert_array_equal(create_sample_slice(64, seed=3), create_sample_slice(64, seed=3))

    def test_ct_like_intensities(self):
        image = create_sample_slice(256)

        assert image[0, 0] < -900
        assert image[int(0.72 * 256), 128] > 500
