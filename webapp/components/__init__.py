"""medreview UI components package.

This package contains reusable Streamlit components for the review app.
"""

from webapp.components.annotation_form import render_annotation_form
from webapp.components.annotation_panel import render_annotation_panel
from webapp.components.canvas import (
    render_interaction_canvas,
    render_navigation_controls,
)
from webapp.components.context_insights import render_context_insights
from webapp.components.slice_selector import render_slice_selector
from webapp.components.upload import (
    MAX_FILE_SIZE_BYTES,
    MAX_FILE_SIZE_MB,
    UploadedImage,
    UploadedStudy,
    UploadedVolume,
    clear_upload,
    is_nifti_file,
    load_sample_study,
    render_modality_selector,
    render_upload_component,
    study_from_image,
    study_from_volume,
)
from webapp.components.viewer import render_image_viewer, render_viewport
from webapp.components.workflow_stepper import render_workflow_stepper

__all__ = [
    "MAX_FILE_SIZE_BYTES",
    "MAX_FILE_SIZE_MB",
    "UploadedImage",
    "UploadedStudy",
    "UploadedVolume",
    "clear_upload",
    "is_nifti_file",
    "load_sample_study",
    "render_annotation_form",
    "render_annotation_panel",
    "render_context_insights",
    "render_image_viewer",
    "render_interaction_canvas",
    "render_modality_selector",
    "render_navigation_controls",
    "render_slice_selector",
    "render_upload_component",
    "render_viewport",
    "render_workflow_stepper",
    "study_from_image",
    "study_from_volume",
]
