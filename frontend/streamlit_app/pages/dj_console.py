# frontend/streamlit_app/pages/dj_console.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: DJ Console

Purpose
-------
Let a host play their uploaded music into the live space:
  • Load the host's library (Firestore `users` → Storage `dj/<id>/`)
  • Join the Daily room as a music bot
  • Play / pause and switch tracks; the track is published as the
    `music-stream` custom audio track
  • Watch the room: a MusicPlayer attached to the same call reports whether
    a music stream from another participant is live

Design Notes
------------
- The call, console and player are long-lived objects kept in
  `st.session_state` (keys DJ_CALL / DJ_CONSOLE / DJ_PLAYER) because a
  rerun must not drop the room connection.
- The console mirrors its state into `live_space_music/<host>` so the web
  app can show "now playing".
"""

import logging
from collections.abc import MutableMapping
from typing import Any

import streamlit as st

from core.clients import get_firestore, get_http, get_storage_bucket
from core.config import settings
from services.daily_call import DailyMusicCall
from services.music import LiveSpaceMusicStore, MusicConsole, MusicPlayer, load_host_tracks
from ui.components import status_chip
from ui.keys import k
from ui.layout import stack_or_columns_spec

log = logging.getLogger(__name__)


def _close_console() -> None:
    console = st.session_state.pop("DJ_CONSOLE", None)
    if console:
        console.close()


def _leave_room() -> None:
    ss = st.session_state
    _close_console()
    player = ss.pop("DJ_PLAYER", None)
    if player:
        player.detach()
    call = ss.pop("DJ_CALL", None)
    if call:
        call.leave()


def _join_room() -> DailyMusicCall:
    ss = st.session_state
    call = DailyMusicCall(session=get_http())
    call.join()
    player = MusicPlayer()
    player.attach(call)
    ss["DJ_CALL"] = call
    ss["DJ_PLAYER"] = player
    console = ss.get("DJ_CONSOLE")
    if console:
        console.call = call
    return call


def _reset_deck(ss: MutableMapping[str, Any], host: str) -> None:
    """Point the deck at a freshly loaded library, first track selected."""
    ss["DJ_HOST"] = host
    ss["DJ_TRACK_INDEX"] = 0
    # The track selectbox takes its value from this key.
    ss[k("dj", "track")] = 0


def _toggle_playback(ss: MutableMapping[str, Any], console: MusicConsole) -> None:
    """Play/pause; a failed start is kept for the next rerun to show."""
    was_playing = console.is_playing
    if not console.toggle() and not was_playing:
        ss["DJ_ERROR"] = "Could not start the music stream. See logs for details."


def _load_library(host: str) -> None:
    ss = st.session_state
    db = get_firestore()
    bucket = get_storage_bucket()
    if bucket is None:
        st.error("Storage bucket not configured (set FIREBASE_STORAGE_BUCKET).")
        return
    tracks, error = load_host_tracks(db, bucket, host)
    _close_console()
    _reset_deck(ss, host)
    if error:
        st.warning(error)
        return
    ss["DJ_CONSOLE"] = MusicConsole(
        host, tracks, call=ss.get("DJ_CALL"), store=LiveSpaceMusicStore(db)
    )
    st.success(f"Loaded {len(tracks)} track(s) for @{host}")


def _on_track_change() -> None:
    ss = st.session_state
    index = int(ss[k("dj", "track")])
    ss["DJ_TRACK_INDEX"] = index
    console: MusicConsole | None = ss.get("DJ_CONSOLE")
    if console:
        console.select(index)


def render(ctx: dict) -> None:
    """Render the DJ Console tab."""
    st.header("🎧 DJ Console")
    ss = st.session_state

    auth = ctx.get("auth")
    default_host = auth.twitter.username if auth and auth.twitter else ""
    ss.setdefault(k("dj", "host"), ss.get("DJ_HOST") or default_host)

    library_col, room_col = stack_or_columns_spec([3, 2], ctx["STACKED"])

    # ─────────────────────────────────────────────────────────────────────
    # Library
    # ─────────────────────────────────────────────────────────────────────
    with library_col:
        st.subheader("Library")
        host = st.text_input("Host X username", key=k("dj", "host")).strip().lstrip("@")
        if st.button("Load music", disabled=not host, key=k("dj", "load")):
            with st.spinner("Loading music..."):
                try:
                    _load_library(host)
                except Exception as e:
                    st.error(f"Failed to load music: {e}")

    # ─────────────────────────────────────────────────────────────────────
    # Room
    # ─────────────────────────────────────────────────────────────────────
    with room_col:
        st.subheader("Room")
        call: DailyMusicCall | None = ss.get("DJ_CALL")
        status_chip("Connected" if call else "Not connected", bool(call))
        if call is None:
            if st.button(
                "Join room as DJ",
                disabled=not settings.DAILY_ROOM_URL,
                key=k("dj", "join"),
            ):
                try:
                    _join_room()
                    st.rerun()
                except Exception as e:
                    st.error(f"Could not join the Daily room: {e}")
            if not settings.DAILY_ROOM_URL:
                st.caption("Set DAILY_ROOM_URL in .env to enable the room.")
        else:
            if st.button("Leave room", key=k("dj", "leave")):
                try:
                    _leave_room()
                except Exception as e:
                    st.error(f"Leave failed: {e}")
                st.rerun()
            player: MusicPlayer | None = ss.get("DJ_PLAYER")
            if player:
                status_chip("Music stream from another participant", player.is_playing)

    st.markdown("---")

    # ─────────────────────────────────────────────────────────────────────
    # Deck
    # ─────────────────────────────────────────────────────────────────────
    console: MusicConsole | None = ss.get("DJ_CONSOLE")
    if console is None or not console.tracks:
        st.info("No music uploaded" if ss.get("DJ_HOST") else "Load a host library to start.")
        return

    if ss.get("DJ_ERROR"):
        st.error(ss.pop("DJ_ERROR"))

    deck = st.columns([1, 4])
    with deck[0]:
        playing = console.is_playing
        if st.button(
            "⏸ Pause" if playing else "▶ Play",
            disabled=console.call is None,
            use_container_width=True,
            key=k("dj", "play"),
        ):
            with st.spinner("Starting stream..." if not playing else "Stopping..."):
                _toggle_playback(ss, console)
            st.rerun()
    with deck[1]:
        ss.setdefault(k("dj", "track"), console.current_index)
        st.selectbox(
            "Track",
            options=list(range(len(console.tracks))),
            format_func=lambda i: console.tracks[i].display_name,
            key=k("dj", "track"),
            on_change=_on_track_change,
        )

    status_chip(
        f"On air: {console.current_track.display_name}" if console.is_playing else "Paused",
        console.is_playing,
    )
    if console.call is None:
        st.caption("Join the room to put music on air.")

    with st.expander("Published state (live_space_music)"):
        try:
            st.json(LiveSpaceMusicStore(get_firestore()).read(console.host) or {})
        except Exception as e:
            st.error(f"Could not read state: {e}")
