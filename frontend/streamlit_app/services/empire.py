# frontend/streamlit_app/services/empire.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Airdrop registration with Empire Builder (Clanker airdrop registry).

`register_airdrop` forwards `{tokenAddress, airdropTree}` to Empire's
registration endpoint with the server-side `x-api-key`. The key never leaves
this process.

Status mapping
--------------
- 500 `Empire API key is not configured` when no key is set.
- 400 when `tokenAddress` or `airdropTree` is missing/empty.
- Upstream status + `{"error": "Failed to register airdrop", "details": ...}`
  when Empire rejects the request.
- 200 + Empire's JSON on success.
- 500 + exception message for transport or unexpected errors.

Empire indexes freshly deployed tokens asynchronously, so the call waits
`delay_s` seconds (5 by default) before posting.
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests

from core.config import settings

from .proxy import ProxyResponse, json_or_text

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("tokenAddress", "airdropTree")


def register_airdrop(
    body: Mapping[str, Any] | None,
    *,
    api_key: str | None = None,
    url: str | None = None,
    delay_s: float | None = None,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
    timeout: float | None = None,
) -> ProxyResponse:
    """Register an airdrop tree for a token.

    Args:
      body: Request payload with `tokenAddress` and `airdropTree`.
      api_key: Empire API key (defaults to `settings.EMPIRE_API_KEY`).
      url: Registration endpoint (defaults to `settings.EMPIRE_AIRDROP_URL`).
      delay_s: Indexing wait before posting (defaults to settings).
      session: HTTP session; a plain `requests` call is used when omitted.
      sleep: Injected for tests.
      timeout: Request timeout in seconds.

    Returns:
      ProxyResponse with the status/body described in the module docstring.
    """
    api_key = settings.EMPIRE_API_KEY if api_key is None else api_key
    if not api_key:
        return ProxyResponse(500, {"error": "Empire API key is not configured"})

    try:
        body = body or {}
        if not all(body.get(f) for f in REQUIRED_FIELDS):
            return ProxyResponse(
                400, {"error": "Missing required fields: tokenAddress, airdropTree"}
            )

        wait = settings.AIRDROP_INDEXING_DELAY_S if delay_s is None else delay_s
        if wait > 0:
            sleep(wait)

        http = session or requests
        resp = http.post(
            url or settings.EMPIRE_AIRDROP_URL,
            headers={"Content-Type": "application/json", "x-api-key": api_key},
            json={
                "tokenAddress": body["tokenAddress"],
                "airdropTree": body["airdropTree"],
            },
            timeout=timeout or settings.HTTP_TIMEOUT_S,
        )

        if not resp.ok:
            details = json_or_text(resp)
            log.error("Clanker airdrop registration error: %s", details)
            return ProxyResponse(
                resp.status_code,
                {"error": "Failed to register airdrop", "details": details},
            )

        result = resp.json()
        log.info("Registered airdrop for token %s", body["tokenAddress"])
        return ProxyResponse(200, result if isinstance(result, dict) else {"result": result})

    except Exception as e:
        log.exception("Error registering airdrop")
        return ProxyResponse(500, {"error": str(e) or "Internal Server Error"})
