"""Unit tests for the slice selector component."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from webapp.components.slice_selector import (
    ORIENTATION_KEY,
    clamp_slice_index,
    render_slice_selector,
)
from webapp.components.upload import UploadedVolume, study_from_volume
from webapp.utils.interaction import ContainerRect
from webapp.utils.models import Modality, Orientation
from webapp.utils.review_session import ReviewSession
from webapp.utils.workflow import ReviewStep


class TestClampSliceIndex:
    """Tests for clamp_slice_index."""

    def test_valid_index_kept(self) -> None:
        assert clamp_slice_index(10, 155) == 10

    @pytest.mark.parametrize("index", [-1, 155, 400])
    def test_invalid_index_falls_back_to_middle(self, index: int) -> None:
        assert clamp_slice_index(index, 155) == 77


def _mock_st(state: dict) -> MagicMock:
    mock_st = MagicMock()
    mock_st.session_state = state
    mock_st.radio.side_effect = lambda *args, **kwargs: state[kwargs["key"]]
    mock_st.slider.side_effect = lambda *args, **kwargs: kwargs["value"]
    return mock_st


class TestRenderSliceSelector:
    """Tests for render_slice_selector."""

    def test_defaults_to_middle_axial_slice(self) -> None:
        state: dict = {}
        volume = np.zeros((240, 200, 155))

        with patch("webapp.components.slice_selector.st", _mock_st(state)) as mock_st:
            orientation, index = render_slice_selector(volume)

            slider_kwargs = mock_st.slider.call_args.kwargs
            assert slider_kwargs["max_value"] == 154
            assert slider_kwargs["key"] == "slice_slider_axial"

        assert orientation is Orientation.AXIAL
        assert index == 77
        assert state[ORIENTATION_KEY] is Orientation.AXIAL

    def test_default_orientation_used_on_first_render(self) -> None:
        state: dict = {}
        volume = np.zeros((240, 200, 155))

        with patch("webapp.components.slice_selector.st", _mock_st(state)):
            orientation, index = render_slice_selector(volume, Orientation.CORONAL)

        assert orientation is Orientation.CORONAL
        assert index == 100

    def test_index_remembered_per_plane(self) -> None:
        state: dict = {
            ORIENTATION_KEY: Orientation.SAGITTAL,
            "current_slice_idx_sagittal": 30,
        }
        volume = np.zeros((240, 200, 155))

        with patch("webapp.components.slice_selector.st", _mock_st(state)):
            orientation, index = render_slice_selector(volume)

        assert orientation is Orientation.SAGITTAL
        assert index == 30

    def test_picked_plane_wins_over_default(self) -> None:
        state: dict = {ORIENTATION_KEY: Orientation.SAGITTAL}
        volume = np.zeros((240, 200, 155))

        with patch("webapp.components.slice_selector.st", _mock_st(state)):
            orientation, _ = render_slice_selector(volume, Orientation.AXIAL)

        assert orientation is Orientation.SAGITTAL


class TestVolumeReviewProgress:
    """View orientation changes must not replace the reviewed slice."""

    def test_recommended_view_keeps_slice_and_progress(self) -> None:
        state: dict = {}
        upload = UploadedVolume(
            filename="head.nii.gz",
            volume_data=np.zeros((64, 64, 40), dtype=np.float32),
            file_size_bytes=10,
        )
        session = ReviewSession()

        with patch("webapp.components.slice_selector.st", _mock_st(state)):
            orientation, index = render_slice_selector(upload.volume_data)
        study = study_from_volume(upload, Modality.CT, orientation, index)
        session.load_image(study.image, study.pixels)

        container = ContainerRect(left=0, top=0, width=64, height=64)
        assert session.next_step() is True
        session.engine.pointer_down(32, 32)
        session.engine.pointer_up(32, 32, container)
        session.engine.confirm_annotation("point", "finding", "high")
        session.apply_recommended_view()
        assert session.view_state().orientation is Orientation.SAGITTAL

        with patch("webapp.components.slice_selector.st", _mock_st(state)):
            orientation, index = render_slice_selector(upload.volume_data)
        rerun_study = study_from_volume(upload, Modality.CT, orientation, index)

        assert orientation is Orientation.AXIAL
        assert rerun_study.image == session.image
        assert session.workflow.current_step is ReviewStep.FOCUS_AREAS
        assert len(session.annotations_for_current_image()) == 1
