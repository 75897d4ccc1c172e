# frontend/streamlit_app/core/state.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Session-scoped UI state helpers for the Songjam console.

This module centralizes the **default values** we expect to exist in
`st.session_state` and provides a single entry point to initialize them.

Why this exists
---------------
- Streamlit widgets often read/write from `st.session_state`. If a key is
  missing (e.g., on first render or after a hot reload), downstream code can
  crash or show inconsistent UI.
- Keeping defaults in one place prevents "magic strings" scattered across
  pages and helps avoid typos.

Design notes
------------
- Defaults are primitives. Collections are created fresh per session by
  `ensure_defaults()` so two sessions never share one mutable default.
- Live objects (the DJ console and its call) are also kept in session state,
  but they are created lazily by the DJ page, not here.
- Initialization is **idempotent**: calling `ensure_defaults()` multiple
  times is safe; existing values are preserved.
"""

from collections.abc import Mapping
from typing import Any, Final

import streamlit as st

from .constants import DEFAULT_AIRDROP_TOTAL

# Canonical set of session keys and their initial values.
# Keep these aligned with the pages that consume them.
DEFAULTS: Final[Mapping[str, Any]] = {
    # Neynar user object of the signed-in Farcaster creator (None if signed out).
    "FC_USER": None,
    # Total tokens to distribute across the selected recipients.
    "AIRDROP_TOTAL": DEFAULT_AIRDROP_TOTAL,
    # Token contract the airdrop is registered against.
    "AIRDROP_TOKEN_ADDRESS": "",
    # True while the registration request is in flight.
    "AIRDROP_DEPLOYING": False,
    # Host whose music library the DJ console has loaded.
    "DJ_HOST": "",
    # Index of the selected track in the loaded library.
    "DJ_TRACK_INDEX": 0,
    # Download URL of the most recently uploaded space QR.
    "QR_LAST_URL": "",
}

# Keys whose default is a new empty container per session.
_FACTORIES: Final[Mapping[str, type]] = {
    # Eligible airdrop profiles loaded from the social graph.
    "AIRDROP_PROFILES": list,
    # Farcaster ids currently selected for the airdrop.
    "AIRDROP_SELECTED": set,
}

__all__ = ["DEFAULTS", "ensure_defaults"]


def ensure_defaults() -> None:
    """Ensure all expected session keys exist with sane defaults.

    Sets each key in :data:`st.session_state` **only if** it is not already
    present, preserving values written by widgets or prior logic.

    Returns:
        None
    """
    for key, default_value in DEFAULTS.items():
        st.session_state.setdefault(key, default_value)
    for key, factory in _FACTORIES.items():
        if key not in st.session_state:
            st.session_state[key] = factory()
