# frontend/streamlit_app/app.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__doc__ = """Songjam Operator Console (Streamlit).

This module is the Streamlit entrypoint for the creator/operator console. It
wires up logging, the global page chrome, the left sidebar (identity and
integration status), and the main tab set.

Tabs (left-to-right order):
  1) Airdrop      : Split a token across Farcaster followers, register the tree.
  2) DJ Console   : Stream the host's uploaded music into the Daily room.
  3) Space QR     : Branded QR for a host's space, uploaded to Storage.
  4) X Lookup     : Twitter/X profile lookup through the server-side proxy.

Design notes:
* We import sibling packages (ui/, pages/, core/, services/) by adding this
  directory to sys.path. This avoids requiring an installable package layout
  and keeps local imports explicit and stable inside the container.
* Each page module renders its own UI and must ensure stable, unique widget
  keys (see ui/keys.py). Page modules should be side-effect free on import.
* Keep this file intentionally thin. Business logic belongs to services/*.
"""

# ────────────────────── sys.path bootstrap for local packages ─────────────────
# Streamlit executes scripts from the working dir; adding the app directory to
# sys.path allows `from pages import ...` style imports without packaging.
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))
# ──────────────────────────────────────────────────────────────────────────────

import logging
from typing import Final

import streamlit as st

from core.config import settings
from pages import airdrop, dj_console, space_qr, x_lookup
from ui.layout import configure_page
from ui.sidebar import render_sidebar_and_status

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)-8s: %(message)s",
)

# ─────────────────────────────── Page chrome ──────────────────────────────────
configure_page(title="Songjam · Operator Console")

# The sidebar returns a dictionary ("ctx") with settings, layout preference
# and the signed-in identities. It is passed to each tab renderer.
ctx: dict = render_sidebar_and_status()

# ─────────────────────────────── Tabs wiring ──────────────────────────────────
# Keep tab order stable; Streamlit persists per-tab widget state by key.
TAB_TITLES: Final[list[str]] = [
    "Airdrop",
    "DJ Console",
    "Space QR",
    "X Lookup",
]

tab1, tab2, tab3, tab4 = st.tabs(TAB_TITLES)

with tab1:
    airdrop.render(ctx)  # Followers → split → Merkle tree → Empire

with tab2:
    dj_console.render(ctx)  # Library → room → play/pause/select

with tab3:
    space_qr.render(ctx)  # QR with logo → download / upload

with tab4:
    x_lookup.render(ctx)  # twitterapi.io user info
