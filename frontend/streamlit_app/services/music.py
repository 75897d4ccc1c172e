# frontend/streamlit_app/services/music.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
DJ console and music player for live spaces.

A host uploads music to Firebase Storage (`dj/<user_id>/...`). During a live
space the DJ console publishes the selected track into the Daily room as a
custom audio track named `MUSIC_TRACK_NAME`; listeners' players pick up any
audio track carrying that name and play it.

This module is SDK-agnostic. The console talks to anything implementing
`MusicCall` (see `services.daily_call.DailyMusicCall` for the Daily adapter),
which keeps the console and player testable with a fake call.

Contents
--------
  • `MusicTrack` and the host library loaders (Firestore + Storage)
  • `LiveSpaceMusicStore`: mirrors the console state to Firestore so the web
    app can show "now playing" without joining the call
  • `MusicConsole`: play / pause / track selection state machine
  • `MusicPlayer`: reacts to `track-started` / `track-stopped` events
"""

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from core.constants import (
    LIVE_SPACE_MUSIC_COLLECTION,
    MUSIC_TRACK_NAME,
    MUSIC_UPLOADS_PREFIX,
    USERS_COLLECTION,
)

from .storage import blob_download_url

log = logging.getLogger(__name__)

_EXTENSION = re.compile(r"\.[^/.]+$")

TrackEventHandler = Callable[[dict[str, Any]], None]


class MusicCall(Protocol):
    """The slice of a call SDK the console and player rely on."""

    def start_custom_track(
        self, track_name: str, audio_url: str, *, loop: bool = True
    ) -> None: ...

    def stop_custom_track(self, track_name: str) -> None: ...

    def on(self, event: str, handler: TrackEventHandler) -> None: ...

    def off(self, event: str, handler: TrackEventHandler) -> None: ...


@dataclass(frozen=True)
class MusicTrack:
    name: str
    audio_url: str

    @property
    def display_name(self) -> str:
        """File name without its extension."""
        return _EXTENSION.sub("", self.name)


# =============================================================================
# Host library
# =============================================================================


def find_user_id_by_twitter(db, twitter_username: str) -> str | None:
    """Document id of the first `users` doc with this `twitterUsername`."""
    query = (
        db.collection(USERS_COLLECTION)
        .where("twitterUsername", "==", twitter_username)
        .limit(1)
    )
    for snap in query.stream():
        return snap.id
    return None


def list_music_uploads(bucket, user_id: str) -> list[MusicTrack]:
    """List a user's uploaded tracks, sorted by file name."""
    prefix = f"{MUSIC_UPLOADS_PREFIX}/{user_id}/"
    tracks = []
    for blob in bucket.list_blobs(prefix=prefix):
        name = blob.name[len(prefix):]
        if not name or name.endswith("/"):
            continue
        tracks.append(MusicTrack(name=name, audio_url=blob_download_url(blob)))
    return sorted(tracks, key=lambda t: t.name.lower())


def load_host_tracks(
    db, bucket, twitter_username: str
) -> tuple[list[MusicTrack], str | None]:
    """Load a host's library for the console.

    Returns:
      (tracks, error). `error` is a short UI message or None.
    """
    try:
        user_id = find_user_id_by_twitter(db, twitter_username)
        if not user_id:
            return [], "User not found"
        tracks = list_music_uploads(bucket, user_id)
        if not tracks:
            return [], "No music uploaded yet"
        return tracks, None
    except Exception:
        log.exception("Error fetching music for @%s", twitter_username)
        return [], "Failed to load music"


class LiveSpaceMusicStore:
    """`live_space_music/<host>` documents describing what the DJ is playing."""

    def __init__(self, db) -> None:
        self._db = db

    def _doc(self, host: str):
        return self._db.collection(LIVE_SPACE_MUSIC_COLLECTION).document(host)

    def publish(self, host: str, state: dict[str, Any]) -> None:
        self._doc(host).set({**state, "updatedAt": int(time.time() * 1000)})

    def read(self, host: str) -> dict[str, Any] | None:
        snap = self._doc(host).get()
        return snap.to_dict() if snap.exists else None


# =============================================================================
# Console
# =============================================================================


class MusicConsole:
    """Host-side controller: which track, and whether it is on air."""

    def __init__(
        self,
        host: str,
        tracks: list[MusicTrack],
        call: MusicCall | None = None,
        store: LiveSpaceMusicStore | None = None,
    ) -> None:
        self.host = host
        self.tracks = list(tracks)
        self.call = call
        self.store = store
        self.current_index = 0
        self.is_playing = False
        self.custom_track_name: str | None = None

    @property
    def current_track(self) -> MusicTrack | None:
        if not self.tracks:
            return None
        return self.tracks[self.current_index]

    def snapshot(self) -> dict[str, Any]:
        track = self.current_track
        return {
            "isPlaying": self.is_playing,
            "trackIndex": self.current_index,
            "trackName": track.display_name if track else None,
            "audioUrl": track.audio_url if track else None,
            "customTrackName": self.custom_track_name,
        }

    def _publish(self) -> None:
        if not self.store:
            return
        try:
            self.store.publish(self.host, self.snapshot())
        except Exception:
            log.exception("Failed to publish music state for %s", self.host)

    def _stop_stream(self) -> None:
        if self.custom_track_name and self.call:
            try:
                self.call.stop_custom_track(self.custom_track_name)
            except Exception:
                log.exception("Failed to stop custom track %s", self.custom_track_name)
        self.custom_track_name = None

    def play(self) -> bool:
        """Start streaming the current track. Returns the resulting playing state."""
        track = self.current_track
        if track is None or self.call is None:
            log.warning("Cannot play: %s", "no tracks" if track is None else "no call")
            return False

        self._stop_stream()
        try:
            self.call.start_custom_track(MUSIC_TRACK_NAME, track.audio_url, loop=True)
            self.custom_track_name = MUSIC_TRACK_NAME
            self.is_playing = True
            log.info("Custom track started: %s (%s)", MUSIC_TRACK_NAME, track.name)
        except Exception:
            log.exception("Error setting up audio track")
            self.is_playing = False
        self._publish()
        return self.is_playing

    def pause(self) -> None:
        self._stop_stream()
        self.is_playing = False
        self._publish()

    def toggle(self) -> bool:
        if self.is_playing:
            self.pause()
            return False
        return self.play()

    def select(self, index: int) -> None:
        """Switch tracks; keeps playing (on the new track) if already playing."""
        if not 0 <= index < len(self.tracks):
            raise IndexError(f"track index {index} out of range")
        if index == self.current_index:
            return
        self.current_index = index
        if self.is_playing:
            self.play()
        else:
            self._publish()

    def close(self) -> None:
        self._stop_stream()
        self.is_playing = False
        self._publish()


# =============================================================================
# Player
# =============================================================================


class MusicPlayer:
    """Listener-side handler for the host's music track.

    `renderer` receives the `track-started` event of the music track (the
    adapter decides what "play" means: subscribe, render PCM, forward);
    `on_stop` is called when it stops. Both are optional; the player always
    records whether a music stream is live and who publishes it.
    """

    def __init__(
        self,
        renderer: TrackEventHandler | None = None,
        on_stop: Callable[[], None] | None = None,
    ) -> None:
        self.renderer = renderer
        self.on_stop = on_stop
        self.call: MusicCall | None = None
        self.active: dict[str, Any] | None = None

    @property
    def is_playing(self) -> bool:
        return self.active is not None

    @staticmethod
    def _is_music(event: dict[str, Any]) -> bool:
        return event.get("type") == MUSIC_TRACK_NAME

    def handle_track_started(self, event: dict[str, Any]) -> None:
        track = event.get("track") or {}
        if track.get("kind") != "audio" or not self._is_music(event):
            return
        log.info("Music stream track detected, setting up audio playback")
        self.active = event
        if self.renderer:
            try:
                self.renderer(event)
            except Exception:
                log.exception("Error setting up music playback")

    def handle_track_stopped(self, event: dict[str, Any]) -> None:
        if not self._is_music(event):
            return
        self._stop()

    def _stop(self) -> None:
        was_playing = self.active is not None
        self.active = None
        if was_playing and self.on_stop:
            try:
                self.on_stop()
            except Exception:
                log.exception("Error stopping music playback")

    def attach(self, call: MusicCall) -> None:
        if self.call is call:
            return
        self.detach()
        call.on("track-started", self.handle_track_started)
        call.on("track-stopped", self.handle_track_stopped)
        self.call = call

    def detach(self) -> None:
        if self.call is None:
            return
        self.call.off("track-started", self.handle_track_started)
        self.call.off("track-stopped", self.handle_track_stopped)
        self.call = None
        self._stop()
