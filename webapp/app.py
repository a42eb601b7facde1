"""medreview Streamlit Web Application Entry Point.

This module serves as the main entry point for the medreview web
application, a guided viewer for reviewing and annotating medical images.

Run with:
    streamlit run webapp/app.py
"""

import logging

import numpy as np
import streamlit as st

from imaging.normalize import auto_window
from webapp.components.annotation_form import render_annotation_form
from webapp.components.annotation_panel import render_annotation_panel
from webapp.components.canvas import (
    DRAWING_MODES,
    render_interaction_canvas,
    render_navigation_controls,
)
from webapp.components.context_insights import render_context_insights
from webapp.components.slice_selector import render_slice_selector
from webapp.components.upload import (
    UploadedStudy,
    UploadedVolume,
    load_sample_study,
    render_modality_selector,
    render_upload_component,
    study_from_image,
    study_from_volume,
)
from webapp.components.viewer import (
    VIEWPORT_HEIGHT,
    VIEWPORT_WIDTH,
    render_image_viewer,
    render_viewport,
    viewport_container,
)
from webapp.components.workflow_stepper import render_workflow_stepper
from webapp.utils.errors import handle_error, log_error
from webapp.utils.interaction import image_to_screen
from webapp.utils.models import Orientation
from webapp.utils.review_session import ReviewSession
from webapp.utils.session import (
    get_review_session,
    get_selected_annotation_id,
    reset_review_session,
    set_auto_orient,
)
from webapp.utils.shortcuts import register_shortcuts, render_shortcut_help

# Configure logging (backend)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Page configuration - MUST be first Streamlit command
st.set_page_config(
    page_title="medreview",
    page_icon="🩻",
    layout="wide",
    initial_sidebar_state="expanded",
)

USE_SAMPLE_KEY = "use_sample_study"


def load_study(session: ReviewSession, study: UploadedStudy, orientation: Orientation | None = None) -> None:
    """Hand a study to the review session if it is not already loaded.

    Loading resets the view, so the slice plane (for volumes) is
    re-applied afterwards and the window is fitted to the data.
    """
    if session.image == study.image:
        return

    session.load_image(study.image, study.pixels)
    if orientation is not None:
        session.view.set_orientation(orientation)
    level, width = auto_window(study.pixels)
    session.view.set_windowing(level, width)
    logger.info(
        f"Image loaded for review: {study.image.id} "
        f"({study.image.width}x{study.image.height})"
    )


def render_sidebar(session: ReviewSession) -> UploadedStudy | None:
    """Upload, modality and options. Returns the study to review."""
    st.sidebar.header("📤 Study")
    with st.sidebar:
        modality = render_modality_selector()
        uploaded = render_upload_component()

    if uploaded is None:
        if st.sidebar.button("Use sample CT image", key="btn_use_sample"):
            st.session_state[USE_SAMPLE_KEY] = True
        if st.session_state.get(USE_SAMPLE_KEY):
            return load_sample_study()
        return None

    st.session_state[USE_SAMPLE_KEY] = False
    if isinstance(uploaded, UploadedVolume):
        st.sidebar.info(
            f"🔬 3D volume: {uploaded.dimensions[0]}×{uploaded.dimensions[1]}×{uploaded.dimensions[2]}"
        )
        with st.sidebar:
            orientation, index = render_slice_selector(uploaded.volume_data)
        study = study_from_volume(uploaded, modality, orientation, index)
        load_study(session, study, orientation)
        return study

    return study_from_image(uploaded, modality)


def render_options(session: ReviewSession, pixels: np.ndarray) -> None:
    """Windowing and auto-orientation controls."""
    with st.sidebar.expander("🎚️ Display", expanded=False):
        low, high = float(pixels.min()), float(pixels.max())
        windowing = session.view_state().windowing
        span = max(high - low, 1.0)
        level = st.slider(
            "Window level",
            min_value=low,
            max_value=low + span,
            value=float(min(max(windowing.level, low), low + span)),
            key=f"window_level_{session.image.id}",
        )
        width = st.slider(
            "Window width",
            min_value=1.0,
            max_value=span * 2,
            value=float(min(max(windowing.width, 1.0), span * 2)),
            key=f"window_width_{session.image.id}",
        )
        session.view.set_windowing(level, width)

        auto_orient = st.toggle(
            "Follow recommended view",
            value=session.auto_orient,
            help="Switch orientation automatically when annotations change",
        )
        if auto_orient != session.auto_orient:
            set_auto_orient(auto_orient)


def render_viewer(session: ReviewSession, pixels: np.ndarray) -> None:
    """Viewport, navigation controls and drawing mode."""
    container = viewport_container()
    view = session.view_state()
    engine = session.engine
    image = session.image

    markers = engine.screen_markers(session.annotations_for_current_image(), container)
    pending_screen = None
    pending = engine.pending_annotation
    if pending is not None:
        pending_screen = image_to_screen(
            pending.x, pending.y, container, view, image.width, image.height
        )

    viewport = render_viewport(
        pixels,
        view,
        markers,
        size=(VIEWPORT_WIDTH, VIEWPORT_HEIGHT),
        selected_id=get_selected_annotation_id(),
        pending=pending_screen,
    )

    if session.workflow.is_complete:
        render_image_viewer(viewport, view, caption=image.id)
        return

    mode_label = st.radio(
        "Annotate",
        list(DRAWING_MODES),
        horizontal=True,
        key="drawing_mode",
        label_visibility="collapsed",
    )
    render_interaction_canvas(engine, viewport, container, drawing_mode=DRAWING_MODES[mode_label])
    render_navigation_controls(engine, container)


def render_review_page() -> None:
    """Render the full review page for the current session."""
    session = get_review_session()
    study = render_sidebar(session)
    render_shortcut_help()

    if study is None:
        st.info("Upload a PNG/JPG image or NIfTI volume, or use the sample CT image to begin.")
        return

    load_study(session, study)
    render_options(session, study.pixels)

    render_workflow_stepper(session)

    viewer_col, side_col = st.columns([3, 1])
    with viewer_col:
        render_viewer(session, study.pixels)

    with side_col:
        render_annotation_form(session)

        analysis = session.analyze()
        if analysis is not None:
            st.markdown("### 🧭 Context")
            render_context_insights(analysis)
            if st.button("Apply recommended view", key="btn_apply_view", use_container_width=True):
                session.apply_recommended_view()
                st.rerun()

        st.markdown("### 📌 Annotations")
        render_annotation_panel(session)

    register_shortcuts()


def render_error(error) -> None:
    """Show a reviewer-facing error with details and a recovery button."""
    st.error(f"⚠️ {error.user_message}")
    with st.expander("Error details"):
        st.code(f"{error.code}: {error.message}")
    if st.button("Try again", key="btn_try_again"):
        reset_review_session()
        st.rerun()


def main() -> None:
    """Main entry point for the medreview application."""
    st.title("🩻 medreview")
    st.markdown("**Guided medical image review**")

    try:
        render_review_page()
    except Exception as e:
        error = handle_error(e, "review page")
        log_error(error, "review page")
        render_error(error)

    logger.debug("medreview page rendered")


if __name__ == "__main__":
    main()
