# frontend/streamlit_app/services/twitter.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Twitter/X user lookup through twitterapi.io.

The console shows host profile details (avatar, follower counts) next to
live spaces. The lookup goes through the server so `TWITTER_API_KEY` stays
private. Responses mirror the public route contract:

- 400 when `username` is empty
- 500 when the key is missing
- upstream status + generic error when twitterapi.io fails
- 200 `{"status": "success", "data": ...}` on success
"""

import logging

import requests

from core.config import settings

from .proxy import ProxyResponse

log = logging.getLogger(__name__)


def fetch_user_info(
    username: str | None,
    *,
    api_key: str | None = None,
    url: str | None = None,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> ProxyResponse:
    """Fetch a Twitter/X profile by screen name.

    Args:
      username: Screen name, with or without a leading "@".
      api_key: twitterapi.io key (defaults to `settings.TWITTER_API_KEY`).
      url: Upstream endpoint (defaults to `settings.TWITTER_USER_INFO_URL`).
      session: HTTP session; a plain `requests` call is used when omitted.
      timeout: Request timeout in seconds.
    """
    try:
        name = (username or "").strip().lstrip("@")
        if not name:
            return ProxyResponse(400, {"error": "username query parameter is required"})

        api_key = settings.TWITTER_API_KEY if api_key is None else api_key
        if not api_key:
            log.error("TWITTER_API_KEY is not configured")
            return ProxyResponse(500, {"error": "Twitter API key not configured"})

        http = session or requests
        resp = http.get(
            url or settings.TWITTER_USER_INFO_URL,
            headers={"X-API-Key": api_key},
            params={"userName": name},
            timeout=timeout or settings.HTTP_TIMEOUT_S,
        )

        if not resp.ok:
            log.error("Twitter API error: %s", resp.text)
            return ProxyResponse(
                resp.status_code,
                {"error": "Failed to fetch user info from Twitter API"},
            )

        return ProxyResponse(200, {"status": "success", "data": resp.json()})

    except Exception as e:
        log.exception("Error fetching Twitter user info")
        return ProxyResponse(
            500,
            {
                "error": "Failed to fetch Twitter user info",
                "details": str(e) or "Unknown error",
            },
        )
