# frontend/streamlit_app/services/neynar.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Minimal Neynar v2 REST client (Farcaster identity and social graph).

Only two reads are needed by the console:
  • `fetch_user(fid)`      : the signed-in creator's profile
  • `fetch_followers(fid)` : the creator's followers, the airdrop audience

Neynar itself is an external identity provider; nothing here caches or
re-derives its data. HTTP failures raise `RuntimeError` with a one-line
message the page can show as-is.
"""

import logging
from typing import Any

import requests

from core.config import settings

log = logging.getLogger(__name__)

# Neynar caps follower pages at 100 users.
_PAGE_LIMIT = 100


def _get(
    path: str,
    params: dict[str, Any],
    *,
    api_key: str | None,
    session: requests.Session | None,
) -> dict[str, Any]:
    key = settings.NEYNAR_API_KEY if api_key is None else api_key
    if not key:
        raise RuntimeError("Neynar API key not configured (set NEYNAR_API_KEY)")
    http = session or requests
    url = f"{settings.NEYNAR_API_URL.rstrip('/')}/{path.lstrip('/')}"
    try:
        resp = http.get(
            url,
            headers={"x-api-key": key, "accept": "application/json"},
            params=params,
            timeout=settings.HTTP_TIMEOUT_S,
        )
    except requests.RequestException as e:
        raise RuntimeError(f"Neynar HTTP error at {url}: {e}") from e
    if not resp.ok:
        log.error("Neynar %s failed (%s): %s", path, resp.status_code, resp.text)
        raise RuntimeError(f"Neynar {path} failed with HTTP {resp.status_code}")
    return resp.json()


def fetch_user(
    fid: int,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> dict[str, Any] | None:
    """Return the Neynar user object for `fid`, or None if unknown."""
    data = _get("farcaster/user/bulk", {"fids": str(fid)}, api_key=api_key, session=session)
    users = data.get("users") or []
    return users[0] if users else None


def fetch_followers(
    fid: int,
    *,
    limit: int = 200,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> list[dict[str, Any]]:
    """Return up to `limit` follower user objects for `fid`, following cursors."""
    out: list[dict[str, Any]] = []
    cursor: str | None = None
    while len(out) < limit:
        params: dict[str, Any] = {"fid": fid, "limit": min(_PAGE_LIMIT, limit - len(out))}
        if cursor:
            params["cursor"] = cursor
        data = _get("farcaster/followers", params, api_key=api_key, session=session)
        page = [row.get("user", row) for row in data.get("users") or []]
        if not page:
            break
        out.extend(page)
        cursor = (data.get("next") or {}).get("cursor")
        if not cursor:
            break
    return out[:limit]
