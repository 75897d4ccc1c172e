# frontend/streamlit_app/pages/x_lookup.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: X Lookup

Look up a Twitter/X profile through the server-side twitterapi.io proxy
(`services.twitter.fetch_user_info`). Useful when vetting a host before
scheduling a space or when matching a Farcaster `xUsername`.
"""

import streamlit as st

from core.clients import get_http
from services.twitter import fetch_user_info
from ui.keys import k


def _profile(data: dict) -> dict:
    # twitterapi.io wraps the user under "data"; older payloads are flat.
    inner = data.get("data")
    return inner if isinstance(inner, dict) else data


def render(ctx: dict) -> None:
    """Render the X Lookup tab."""
    st.header("🔎 X Lookup")

    username = st.text_input("X username", placeholder="@handle", key=k("x", "user"))
    if not st.button("Look up", disabled=not username.strip(), key=k("x", "go")):
        return

    with st.spinner("Fetching profile…"):
        resp = fetch_user_info(username, session=get_http())

    if not resp.ok:
        st.error(f"{resp.error} (HTTP {resp.status})")
        if resp.body.get("details"):
            st.caption(str(resp.body["details"]))
        return

    user = _profile(resp.body.get("data") or {})
    cols = st.columns([1, 4])
    with cols[0]:
        if user.get("profilePicture"):
            st.image(user["profilePicture"], width=72)
    with cols[1]:
        st.markdown(f"**{user.get('name', '')}**  @{user.get('userName', username)}")
        st.caption(
            f"{user.get('followers', 0):,} followers · {user.get('following', 0):,} following"
        )
    with st.expander("Raw response"):
        st.json(resp.body)
