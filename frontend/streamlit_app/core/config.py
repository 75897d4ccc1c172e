# frontend/streamlit_app/core/config.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Centralized, immutable application configuration for the Songjam console.

This module defines a frozen `Settings` dataclass whose fields are populated
from environment variables (loaded via python-dotenv if a `.env` file is
present). The resulting singleton `settings` is imported by other modules to
avoid scattering `os.getenv` calls throughout the codebase.

Design goals
------------
- **Single source of truth**: API keys, upstream URLs and Firebase/Daily
  wiring live here; services receive them as arguments.
- **Immutability**: `@dataclass(frozen=True)` prevents accidental mutation at
  runtime. Changes require process restart (or re-instantiation in tests).
- **Fast import**: Only minimal work at import time (dotenv load + dataclass
  construction). No network calls or validation here.
- **Safe defaults**: Secrets default to empty strings. The operation that
  needs a secret reports its absence (e.g. the airdrop proxy answers 500
  "Empire API key is not configured").

Security notes
--------------
- `EMPIRE_API_KEY`, `TWITTER_API_KEY` and `NEYNAR_API_KEY` are server-side
  secrets. They are passed to upstream services as headers and never rendered
  or logged.
- `FIREBASE_CREDENTIALS` may be a path to a service-account JSON file or the
  JSON document itself. Leave it empty to use application-default credentials.

Testing
-------
- Set environment variables **before** importing this module, or construct a
  fresh `Settings(...)` with explicit values:
      >>> import importlib, os
      >>> os.environ["EMPIRE_API_KEY"] = "test-key"
      >>> import core.config as cfg
      >>> importlib.reload(cfg)
      >>> assert cfg.settings.EMPIRE_API_KEY == "test-key"
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load key-value pairs from a local `.env` file into process environment, if
# present. `override=False` by default, so pre-set env vars take precedence.
load_dotenv()


def _float_env(name: str, default: float) -> float:
    """Read a float from the environment, falling back on blank/bad values."""
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """
    Immutable application settings.

    Each attribute is populated from the corresponding environment variable;
    when unset, a documented default is used. See `.env.example` for a
    template of common values.
    """

    # --- Empire (Clanker airdrop registration) -------------------------------
    EMPIRE_API_KEY: str = os.getenv("EMPIRE_API_KEY", "")
    EMPIRE_AIRDROP_URL: str = os.getenv(
        "EMPIRE_AIRDROP_URL",
        "https://empirebuilder.world/api/register-clanker-airdrop",
    )
    # Seconds to wait after token deploy so the registry can index the token.
    AIRDROP_INDEXING_DELAY_S: float = _float_env("AIRDROP_INDEXING_DELAY_S", 5.0)

    # --- Twitter/X user lookup (twitterapi.io) -------------------------------
    TWITTER_API_KEY: str = os.getenv("TWITTER_API_KEY", "")
    TWITTER_USER_INFO_URL: str = os.getenv(
        "TWITTER_USER_INFO_URL", "https://api.twitterapi.io/twitter/user/info"
    )

    # --- Neynar (Farcaster identity + social graph) --------------------------
    NEYNAR_API_KEY: str = os.getenv("NEYNAR_API_KEY", "")
    NEYNAR_API_URL: str = os.getenv("NEYNAR_API_URL", "https://api.neynar.com/v2")

    # --- Firebase -------------------------------------------------------------
    # Service-account JSON path, inline JSON, or blank for default credentials.
    FIREBASE_CREDENTIALS: str = os.getenv("FIREBASE_CREDENTIALS", "")
    # e.g. "songjam-app.appspot.com". Blank disables Storage features.
    FIREBASE_STORAGE_BUCKET: str = os.getenv("FIREBASE_STORAGE_BUCKET", "")

    # --- Daily (live audio room) ---------------------------------------------
    DAILY_ROOM_URL: str = os.getenv("DAILY_ROOM_URL", "")
    DAILY_MEETING_TOKEN: str = os.getenv("DAILY_MEETING_TOKEN", "")

    # --- Frontend deep-link base ---------------------------------------------
    # Public base URL of the web app; used to compose live-space QR links.
    FRONTEND_BASE_URL: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:3000")

    # --- Runtime --------------------------------------------------------------
    HTTP_TIMEOUT_S: float = _float_env("HTTP_TIMEOUT_S", 15.0)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Singleton settings object imported by consumers.
settings = Settings()
