"""
Tests for the Daily adapter: pure helpers, participant event mapping, and
custom-track publishing against a fake CallClient whose completions fire
immediately.
"""

import threading
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

pytest.importorskip("daily")
pytest.importorskip("pydub")

from core.constants import MUSIC_TRACK_NAME  # noqa: E402
from services.daily_call import (  # noqa: E402
    DailyMusicCall,
    custom_audio_states,
    frame_bytes,
    iter_frames,
)
from services.music import MusicConsole, MusicPlayer, MusicTrack  # noqa: E402


def _participant(state, pid="p2", local=False):
    return {
        "id": pid,
        "info": {"isLocal": local},
        "media": {"customAudio": {MUSIC_TRACK_NAME: {"state": state}}},
    }


def test_frame_bytes_is_ten_ms_of_stereo_pcm():
    assert frame_bytes() == 48000 // 100 * 2 * 2


def test_iter_frames_pads_last_frame():
    frames = list(iter_frames(b"\x01" * 10, 4))
    assert frames == [b"\x01" * 4, b"\x01" * 4, b"\x01\x01\x00\x00"]


def test_custom_audio_states():
    assert custom_audio_states(_participant("playable")) == {MUSIC_TRACK_NAME: "playable"}
    assert custom_audio_states({"media": {}}) == {}


def test_room_required(monkeypatch):
    import dataclasses

    from services import daily_call

    monkeypatch.setattr(
        daily_call, "settings", dataclasses.replace(daily_call.settings, DAILY_ROOM_URL="")
    )
    with pytest.raises(RuntimeError, match="DAILY_ROOM_URL"):
        DailyMusicCall(room_url="")


class TestParticipantEvents:
    def test_playable_music_drives_player(self):
        call = DailyMusicCall(room_url="https://example.daily.co/room")
        player = MusicPlayer()
        player.attach(call)

        call._on_participant_updated(_participant("playable"))
        assert player.is_playing
        assert player.active["participant"]["id"] == "p2"

        call._on_participant_updated(_participant("playable"))
        call._on_participant_updated(_participant("off"))
        assert not player.is_playing

    def test_local_participant_ignored(self):
        call = DailyMusicCall(room_url="https://example.daily.co/room")
        player = MusicPlayer()
        player.attach(call)
        call._on_participant_updated(_participant("playable", local=True))
        assert not player.is_playing

    def test_participant_left_stops_track(self):
        call = DailyMusicCall(room_url="https://example.daily.co/room")
        player = MusicPlayer()
        player.attach(call)
        call._on_participant_updated(_participant("playable"))
        call._on_participant_left({"id": "p2"})
        assert not player.is_playing


class FakeCallClient:
    """CallClient stand-in whose completions fire immediately."""

    join_error = None

    def __init__(self, event_handler=None):
        self.event_handler = event_handler
        self.added = []
        self.removed = []
        self.left = False
        self.released = False

    def join(self, url, meeting_token=None, client_settings=None, completion=None):
        self.url = url
        self.client_settings = client_settings
        completion(None, self.join_error)

    def add_custom_audio_track(self, track_name, audio_track, completion=None):
        self.added.append((track_name, audio_track))
        completion(None)

    def remove_custom_audio_track(self, track_name, completion=None):
        self.removed.append(track_name)
        completion(None)

    def leave(self, completion=None):
        self.left = True
        completion(None)

    def release(self):
        self.released = True


class FakeAudioSource:
    def __init__(self, sample_rate, channels):
        self.format = (sample_rate, channels)
        self.frames = 0
        self.wrote = threading.Event()

    def write_frames(self, frame):
        self.frames += 1
        self.wrote.set()
        time.sleep(0.001)


class FakeAudioTrack:
    def __init__(self, source):
        self.source = source


@pytest.fixture
def fake_daily(monkeypatch):
    from services import daily_call

    clients, sources = [], []

    def make_client(**kwargs):
        client = FakeCallClient(**kwargs)
        clients.append(client)
        return client

    def make_source(*args):
        source = FakeAudioSource(*args)
        sources.append(source)
        return source

    monkeypatch.setattr(daily_call, "_ensure_daily", lambda: None)
    monkeypatch.setattr(daily_call, "CallClient", make_client)
    monkeypatch.setattr(daily_call, "CustomAudioSource", make_source)
    monkeypatch.setattr(daily_call, "CustomAudioTrack", FakeAudioTrack)
    monkeypatch.setattr(daily_call, "decode_track", lambda data: b"\x01" * frame_bytes() * 3)
    return SimpleNamespace(clients=clients, sources=sources)


@pytest.fixture
def http():
    session = MagicMock()
    session.get.return_value = MagicMock(content=b"mp3-bytes")
    return session


class TestPublishing:
    def test_start_publishes_and_pumps_frames(self, fake_daily, http):
        call = DailyMusicCall(room_url="https://example.daily.co/room", session=http)
        call.start_custom_track(MUSIC_TRACK_NAME, "https://cdn/a.mp3")

        client = fake_daily.clients[0]
        assert client.url == "https://example.daily.co/room"
        assert client.client_settings == {"inputs": {"camera": False, "microphone": False}}
        assert [name for name, _ in client.added] == [MUSIC_TRACK_NAME]
        assert http.get.call_args.args[0] == "https://cdn/a.mp3"

        source = fake_daily.sources[0]
        assert source.wrote.wait(1.0)
        thread, _ = call._pumps[MUSIC_TRACK_NAME]

        call.stop_custom_track(MUSIC_TRACK_NAME)
        assert not thread.is_alive()
        assert client.removed == [MUSIC_TRACK_NAME]
        assert MUSIC_TRACK_NAME not in call._pumps
        call.leave()

    def test_leave_stops_pump_and_releases(self, fake_daily, http):
        call = DailyMusicCall(room_url="https://example.daily.co/room", session=http)
        call.start_custom_track(MUSIC_TRACK_NAME, "https://cdn/a.mp3")
        thread, _ = call._pumps[MUSIC_TRACK_NAME]

        call.leave()
        client = fake_daily.clients[0]
        assert not thread.is_alive()
        assert client.removed == [MUSIC_TRACK_NAME]
        assert client.left and client.released
        assert not call.joined

    def test_console_goes_on_air_through_daily(self, fake_daily, http):
        call = DailyMusicCall(room_url="https://example.daily.co/room", session=http)
        console = MusicConsole("alice", [MusicTrack("a.mp3", "https://cdn/a.mp3")], call=call)
        assert console.play()
        assert [name for name, _ in fake_daily.clients[0].added] == [MUSIC_TRACK_NAME]
        console.close()
        assert fake_daily.clients[0].removed == [MUSIC_TRACK_NAME]
        call.leave()

    def test_failed_join_releases_client(self, fake_daily, monkeypatch, http):
        monkeypatch.setattr(FakeCallClient, "join_error", "room is full")
        call = DailyMusicCall(room_url="https://example.daily.co/room", session=http)
        with pytest.raises(RuntimeError, match="room is full"):
            call.join()
        assert fake_daily.clients[0].released
        assert not call.joined
