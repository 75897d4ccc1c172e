# frontend/streamlit_app/core/constants.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Platform constants shared by services and pages.

This module centralizes:
  1) **Airdrop economics**: the minimum total a creator may distribute and
     the token decimals used when converting whole tokens to base units.
  2) **Firestore / Storage names**: collection ids and storage prefixes, so a
     typo cannot silently point a helper at an empty collection.
  3) **Live audio**: the custom track name shared by the DJ console (which
     publishes it) and the music player (which listens for it).

Constants are typed `Final` to communicate immutability and to help static
analyzers catch accidental reassignment.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Airdrop economics (whole tokens)
# ---------------------------------------------------------------------------

#: Smallest total airdrop a creator may deploy.
MIN_AIRDROP_TOTAL: Final[int] = 260_000_000

#: Initial value of the total-amount field.
DEFAULT_AIRDROP_TOTAL: Final[int] = MIN_AIRDROP_TOTAL

#: ERC-20 decimals of Clanker tokens; leaves encode base units.
TOKEN_DECIMALS: Final[int] = 18

# ---------------------------------------------------------------------------
# Firestore collections / Storage prefixes
# ---------------------------------------------------------------------------

FARCASTER_USERS_COLLECTION: Final[str] = "farcaster_users"
USERS_COLLECTION: Final[str] = "users"
LIVE_SPACE_MUSIC_COLLECTION: Final[str] = "live_space_music"

#: Storage prefix of a host's uploaded music: `dj/<user_id>/<file>`.
MUSIC_UPLOADS_PREFIX: Final[str] = "dj"

#: Storage prefix of generated live-space QR codes.
SPACES_QR_PREFIX: Final[str] = "spaces-qr"

# ---------------------------------------------------------------------------
# Live audio
# ---------------------------------------------------------------------------

#: Custom track name carrying the host's music into the room.
MUSIC_TRACK_NAME: Final[str] = "music-stream"

#: PCM format pushed into the call: 48 kHz, 16-bit, stereo, 10 ms frames.
MUSIC_SAMPLE_RATE: Final[int] = 48_000
MUSIC_CHANNELS: Final[int] = 2
MUSIC_FRAME_MS: Final[int] = 10
