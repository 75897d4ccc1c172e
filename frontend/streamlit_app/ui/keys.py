# frontend/streamlit_app/ui/keys.py
# SPDX-License-Identifier: Apache-2.0
"""Namespaced Streamlit widget keys.

Several tabs render similar controls ("Username", "Load", per-profile
checkboxes). Without explicit keys Streamlit raises
`StreamlitDuplicateElementId`, so every widget key is built here as
"<page>:<name>".

Usage
-----
    from ui.keys import k

    host = st.text_input("Host X username", key=k("dj", "host"))
    st.checkbox(profile.name, key=k("airdrop", f"pick_{profile.farcaster_id}"))
"""

from __future__ import annotations


def k(page: str, name: str) -> str:
    """Return a stable, namespaced widget key ("<page>:<name>").

    `page` is a short literal namespace ("airdrop", "dj", "qr", "x").
    `name` may include an id suffix for per-row widgets; ids must be stable
    across reruns (Farcaster fids, track indices), never list positions that
    shift when data reloads.
    """
    return f"{page}:{name}"
