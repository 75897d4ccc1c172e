# frontend/streamlit_app/ui/sidebar.py
# SPDX-License-Identifier: Apache-2.0
"""Sidebar composition for the Songjam console.

The sidebar is where the operator identifies as a creator and where pages
get their shared context.

Identity
--------
- **Firebase ID token** (Twitter/X sign-in from the web app). Verified with
  firebase-admin on every rerun; the Twitter identity is shown when valid.
- **Farcaster FID**. "Sign in with Farcaster" fetches the profile from Neynar
  and stores it in `farcaster_users` (storage failures do not block).

Security & Privacy
------------------
- The ID token is a password input and lives only in this session's memory.
- API keys are never shown; the status block only reports whether each
  integration is configured.

Returns
-------
`render_sidebar_and_status()` returns a context dictionary:
- `settings`: the loaded settings dataclass instance.
- `STACKED`: bool, step-by-step (stacked) layout preference.
- `auth`: `AuthContext` for the Firebase session.
- `fc_user`: Neynar user object of the Farcaster creator, or None.
"""

from __future__ import annotations

import logging
from typing import Any

import streamlit as st

from core.clients import get_firestore, get_http
from core.config import settings
from core.state import ensure_defaults
from services.auth import on_farcaster_sign_in, sign_in_with_token, signed_out
from services.neynar import fetch_user
from ui.keys import k

log = logging.getLogger(__name__)


def _firestore_or_none():
    try:
        return get_firestore()
    except Exception as e:
        st.sidebar.warning(f"Firestore unavailable: {e}")
        return None


def _render_firebase_identity(db) -> Any:
    id_token = st.sidebar.text_input(
        "Firebase ID token (X sign-in)", type="password", key=k("sidebar", "id_token")
    )
    if not id_token:
        st.sidebar.write("**X account**: -")
        return signed_out()
    ctx = sign_in_with_token(id_token, db=db)
    if ctx.authenticated and ctx.twitter:
        handle = f"@{ctx.twitter.username}" if ctx.twitter.username else "(no handle)"
        st.sidebar.write(f"**X account** {ctx.twitter.name or ''} {handle} ✅")
    elif ctx.authenticated:
        st.sidebar.write("**Signed in** (no X provider linked) ⚠️")
    else:
        st.sidebar.error("ID token rejected. Sign in again in the web app.")
    return ctx


def _render_farcaster_identity(db) -> dict | None:
    ss = st.session_state
    fid = st.sidebar.number_input(
        "Farcaster FID", min_value=0, step=1, value=0, key=k("sidebar", "fid")
    )
    col_in, col_out = st.sidebar.columns(2)
    with col_in:
        if st.button("Sign in", disabled=not fid, use_container_width=True):
            try:
                user = fetch_user(int(fid), session=get_http())
                if not user:
                    st.sidebar.error(f"No Farcaster user with FID {fid}")
                else:
                    ss["FC_USER"] = user
                    if db is not None:
                        on_farcaster_sign_in(db, user)
            except Exception as e:
                st.sidebar.error(f"Farcaster sign-in failed: {e}")
    with col_out:
        if st.button("Sign out", disabled=not ss.get("FC_USER"), use_container_width=True):
            log.info("Neynar signout")
            ss["FC_USER"] = None

    user = ss.get("FC_USER")
    if user:
        st.sidebar.write(f"**Farcaster** @{user.get('username')} (fid {user.get('fid')}) ✅")
    return user


def _render_status() -> None:
    def flag(ok: bool) -> str:
        return "✅" if ok else "⚠️ not set"

    st.sidebar.markdown("### Integrations")
    st.sidebar.markdown(
        f"Empire API key: {flag(bool(settings.EMPIRE_API_KEY))}  \n"
        f"Twitter API key: {flag(bool(settings.TWITTER_API_KEY))}  \n"
        f"Neynar API key: {flag(bool(settings.NEYNAR_API_KEY))}  \n"
        f"Storage bucket: {flag(bool(settings.FIREBASE_STORAGE_BUCKET))}  \n"
        f"Daily room: {flag(bool(settings.DAILY_ROOM_URL))}"
    )


def render_sidebar_and_status() -> dict[str, Any]:
    """Render the entire sidebar and return a context dict for page use."""
    ensure_defaults()

    st.sidebar.header("Creator")
    db = _firestore_or_none()
    auth_ctx = _render_firebase_identity(db)
    fc_user = _render_farcaster_identity(db)

    STACKED = st.sidebar.toggle("Step-by-step layout", value=True)

    _render_status()

    st.sidebar.markdown("---")
    ss = st.session_state
    st.sidebar.markdown(
        f"**Current Session**  \n"
        f"Airdrop recipients: `{len(ss.get('AIRDROP_SELECTED', ()))}`  \n"
        f"DJ host: `{ss.get('DJ_HOST') or '-'}`"
    )

    return dict(
        settings=settings,
        STACKED=STACKED,
        auth=auth_ctx,
        fc_user=fc_user,
    )
