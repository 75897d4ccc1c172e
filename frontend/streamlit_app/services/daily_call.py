# frontend/streamlit_app/services/daily_call.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Daily adapter for the DJ console (daily-python).

`DailyMusicCall` joins the live-space room as a bot participant and
implements the `services.music.MusicCall` protocol:

  • `start_custom_track(name, url)` downloads the track, decodes it to PCM
    (pydub; needs ffmpeg for compressed formats) and pumps 10 ms frames into
    a `CustomAudioSource` published with `add_custom_audio_track`.
  • `stop_custom_track(name)` stops the pump and unpublishes the track.
  • `on` / `off` expose `track-started` / `track-stopped` events derived from
    remote participants' custom audio state, the shape `MusicPlayer` expects.

Threading
---------
Daily delivers events on its own thread and `write_frames` blocks at
real-time pace, so each published track gets a daemon pump thread. The
console only ever publishes one music track at a time.
"""

import io
import logging
import threading
from collections import defaultdict
from collections.abc import Iterator
from typing import Any

import requests
from daily import CallClient, CustomAudioSource, CustomAudioTrack, Daily, EventHandler
from pydub import AudioSegment

from core.config import settings
from core.constants import MUSIC_CHANNELS, MUSIC_FRAME_MS, MUSIC_SAMPLE_RATE

from .music import TrackEventHandler

log = logging.getLogger(__name__)

_SAMPLE_WIDTH = 2  # 16-bit PCM
_COMPLETION_TIMEOUT_S = 15.0

_init_lock = threading.Lock()
_daily_ready = False


def _ensure_daily() -> None:
    global _daily_ready
    with _init_lock:
        if not _daily_ready:
            Daily.init()
            _daily_ready = True


def frame_bytes(
    sample_rate: int = MUSIC_SAMPLE_RATE,
    channels: int = MUSIC_CHANNELS,
    frame_ms: int = MUSIC_FRAME_MS,
) -> int:
    return sample_rate * frame_ms // 1000 * channels * _SAMPLE_WIDTH


def decode_track(data: bytes) -> bytes:
    """Decode any ffmpeg-readable audio into 48 kHz / 16-bit / stereo PCM."""
    seg = AudioSegment.from_file(io.BytesIO(data))
    seg = (
        seg.set_frame_rate(MUSIC_SAMPLE_RATE)
        .set_channels(MUSIC_CHANNELS)
        .set_sample_width(_SAMPLE_WIDTH)
    )
    return seg.raw_data


def iter_frames(pcm: bytes, size: int) -> Iterator[bytes]:
    """Fixed-size frames; the last one is padded with silence."""
    for start in range(0, len(pcm), size):
        chunk = pcm[start : start + size]
        if len(chunk) < size:
            chunk += b"\x00" * (size - len(chunk))
        yield chunk


def custom_audio_states(participant: dict[str, Any]) -> dict[str, str]:
    """`{track_name: state}` for a participant's custom audio tracks."""
    custom = (participant.get("media") or {}).get("customAudio") or {}
    return {name: str((info or {}).get("state", "")) for name, info in custom.items()}


def _call_and_wait(fn, *args, **kwargs) -> tuple:
    """Invoke a daily-python method with a completion callback and block on it."""
    done = threading.Event()
    result: dict[str, tuple] = {}

    def completion(*res):
        result["res"] = res
        done.set()

    fn(*args, completion=completion, **kwargs)
    if not done.wait(_COMPLETION_TIMEOUT_S):
        raise TimeoutError(f"{getattr(fn, '__name__', fn)} timed out")
    res = result.get("res", ())
    error = res[-1] if res else None
    if error:
        raise RuntimeError(f"{getattr(fn, '__name__', fn)} failed: {error}")
    return res


class _CallEvents(EventHandler):
    def __init__(self, owner: DailyMusicCall) -> None:
        self._owner = owner

    def on_participant_updated(self, participant):
        self._owner._on_participant_updated(participant)

    def on_participant_left(self, participant, reason):
        self._owner._on_participant_left(participant)


class DailyMusicCall:
    """A bot participant that can publish and observe custom audio tracks."""

    def __init__(
        self,
        room_url: str | None = None,
        meeting_token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.room_url = room_url or settings.DAILY_ROOM_URL
        self.meeting_token = meeting_token or settings.DAILY_MEETING_TOKEN or None
        if not self.room_url:
            raise RuntimeError("Daily room not configured (set DAILY_ROOM_URL)")
        self._http = session or requests
        self._handlers: dict[str, list[TrackEventHandler]] = defaultdict(list)
        self._live: set[tuple[str, str]] = set()
        self._pumps: dict[str, tuple[threading.Thread, threading.Event]] = {}
        self._client: CallClient | None = None
        self._events = _CallEvents(self)

    # ------------------------------------------------------------------ join

    @property
    def joined(self) -> bool:
        return self._client is not None

    def join(self) -> None:
        if self._client is not None:
            return
        _ensure_daily()
        client = CallClient(event_handler=self._events)
        try:
            _call_and_wait(
                client.join,
                self.room_url,
                meeting_token=self.meeting_token,
                client_settings={"inputs": {"camera": False, "microphone": False}},
            )
        except Exception:
            client.release()
            raise
        self._client = client
        log.info("Joined Daily room %s", self.room_url)

    def leave(self) -> None:
        for name in list(self._pumps):
            self.stop_custom_track(name)
        client, self._client = self._client, None
        if client is None:
            return
        try:
            _call_and_wait(client.leave)
        except Exception:
            log.exception("Error leaving Daily room")
        finally:
            client.release()

    # ------------------------------------------------------------ publishing

    def start_custom_track(self, track_name: str, audio_url: str, *, loop: bool = True) -> None:
        self.join()
        if track_name in self._pumps:
            self.stop_custom_track(track_name)

        resp = self._http.get(audio_url, timeout=settings.HTTP_TIMEOUT_S)
        resp.raise_for_status()
        pcm = decode_track(resp.content)
        if not pcm:
            raise RuntimeError("Decoded track is empty")

        source = CustomAudioSource(MUSIC_SAMPLE_RATE, MUSIC_CHANNELS)
        track = CustomAudioTrack(source)
        _call_and_wait(
            self._client.add_custom_audio_track,
            track_name=track_name,
            audio_track=track,
        )

        stop = threading.Event()
        pump = threading.Thread(
            target=self._pump,
            args=(source, pcm, stop, loop),
            name=f"daily-pump-{track_name}",
            daemon=True,
        )
        self._pumps[track_name] = (pump, stop)
        pump.start()

    @staticmethod
    def _pump(source: CustomAudioSource, pcm: bytes, stop: threading.Event, loop: bool) -> None:
        size = frame_bytes()
        try:
            while not stop.is_set():
                for frame in iter_frames(pcm, size):
                    if stop.is_set():
                        return
                    source.write_frames(frame)
                if not loop:
                    return
        except Exception:
            log.exception("Audio pump failed")

    def stop_custom_track(self, track_name: str) -> None:
        pump = self._pumps.pop(track_name, None)
        if pump:
            thread, stop = pump
            stop.set()
            thread.join(timeout=1.0)
        if self._client is not None:
            _call_and_wait(self._client.remove_custom_audio_track, track_name=track_name)

    # ---------------------------------------------------------------- events

    def on(self, event: str, handler: TrackEventHandler) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str, handler: TrackEventHandler) -> None:
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def _emit(self, event: str, payload: dict[str, Any]) -> None:
        for handler in list(self._handlers[event]):
            try:
                handler(payload)
            except Exception:
                log.exception("%s handler failed", event)

    @staticmethod
    def _payload(participant: dict[str, Any], track_name: str) -> dict[str, Any]:
        return {
            "type": track_name,
            "track": {"kind": "audio"},
            "participant": participant,
        }

    def _on_participant_updated(self, participant: dict[str, Any]) -> None:
        if (participant.get("info") or {}).get("isLocal"):
            return
        pid = str(participant.get("id", ""))
        for name, state in custom_audio_states(participant).items():
            key = (pid, name)
            if state == "playable" and key not in self._live:
                self._live.add(key)
                self._emit("track-started", self._payload(participant, name))
            elif state != "playable" and key in self._live:
                self._live.discard(key)
                self._emit("track-stopped", self._payload(participant, name))

    def _on_participant_left(self, participant: dict[str, Any]) -> None:
        pid = str(participant.get("id", ""))
        for key in [k for k in self._live if k[0] == pid]:
            self._live.discard(key)
            self._emit("track-stopped", self._payload(participant, key[1]))
