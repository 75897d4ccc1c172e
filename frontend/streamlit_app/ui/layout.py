# frontend/streamlit_app/ui/layout.py
# SPDX-License-Identifier: Apache-2.0
"""Layout helpers for the Songjam console.

- `configure_page`: consistent browser title, wide layout and a branded H1.
- `stack_or_columns_spec`: the same page code renders either stacked
  sections (step-by-step mode, friendlier on laptops during a live space) or
  side-by-side columns.

Call `configure_page()` exactly once, first thing in `app.py`; Streamlit
requires `st.set_page_config` before any other element.
"""

from __future__ import annotations

from collections.abc import Sequence

import streamlit as st
from streamlit.delta_generator import DeltaGenerator


def configure_page(title: str) -> None:
    """Configure global page options and render the main title."""
    st.set_page_config(page_title=title, page_icon="🎧", layout="wide")
    st.title(f"🎧🪂 {title}")


def stack_or_columns_spec(
    spec: int | Sequence[float] | Sequence[int],
    stacked: bool,
) -> list[DeltaGenerator]:
    """Return layout containers: stacked containers or `st.columns(spec)`.

    Args:
      spec: Column count or relative widths, as accepted by `st.columns`.
      stacked: True → one vertical container per slot (widths ignored).
    """
    if stacked:
        count = spec if isinstance(spec, int) else len(spec)
        return [st.container() for _ in range(count)]
    return st.columns(spec)
