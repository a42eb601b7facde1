"""Slice selector component for 3D volume navigation.

This module provides the plane picker and slider for choosing which
slice of a volume is reviewed.
"""

import numpy as np
import streamlit as st

from imaging.volume import slice_count
from webapp.utils.models import Orientation

ORIENTATION_KEY = "slice_orientation"


def clamp_slice_index(index: int, num_slices: int) -> int:
    """Keep a remembered index valid, falling back to the middle slice."""
    if 0 <= index < num_slices:
        return index
    return num_slices // 2


def render_slice_selector(
    volume: np.ndarray,
    default_orientation: Orientation = Orientation.AXIAL,
) -> tuple[Orientation, int]:
    """Render plane and slice pickers and return the selection.

    The plane is owned by the picker alone. Changing the view
    orientation (recommended view, reset) relabels the viewport but
    never switches the reviewed slice, which would load a new image.
    The index is remembered per plane, so switching planes and back
    returns to the same slice.

    Args:
        volume: 3D volume in canonical orientation.
        default_orientation: Plane shown on first render.

    Returns:
        Tuple of (orientation, slice index).

    Example:
        >>> # In Streamlit app with a (240, 240, 155) volume
        >>> orientation, idx = render_slice_selector(volume)
    """
    if ORIENTATION_KEY not in st.session_state:
        st.session_state[ORIENTATION_KEY] = Orientation(default_orientation)

    orientation = st.radio(
        "Plane",
        list(Orientation),
        format_func=lambda o: o.value.title(),
        horizontal=True,
        key=ORIENTATION_KEY,
    )

    num_slices = slice_count(volume, orientation.value)
    state_key = f"current_slice_idx_{orientation.value}"
    st.session_state[state_key] = clamp_slice_index(
        st.session_state.get(state_key, num_slices // 2), num_slices
    )

    selected_idx = st.slider(
        "Select Slice",
        min_value=0,
        max_value=num_slices - 1,
        value=st.session_state[state_key],
        key=f"slice_slider_{orientation.value}",
        help=f"Navigate through {num_slices} slices (0 to {num_slices - 1})",
    )

    st.session_state[state_key] = selected_idx
    return orientation, selected_idx
