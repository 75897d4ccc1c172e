# frontend/streamlit_app/services/proxy.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Shared shape for server-side API proxies.

The console calls third-party REST APIs (Empire, twitterapi.io) with keys
held in server configuration. Each proxy returns a `ProxyResponse` carrying
the HTTP status and JSON body a browser client would have received from the
equivalent route, so pages and CLIs branch on `status` exactly like a fetch
caller branches on `response.ok`.
"""

from dataclasses import dataclass, field
from typing import Any

import requests


@dataclass(frozen=True)
class ProxyResponse:
    """HTTP-like result of a proxied call."""

    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def error(self) -> str | None:
        """The `error` field of a failed response, if any."""
        if self.ok:
            return None
        return str(self.body.get("error") or f"HTTP {self.status}")


def json_or_text(resp: requests.Response) -> Any:
    """Decode an upstream body as JSON, falling back to raw text."""
    try:
        return resp.json()
    except ValueError:
        return resp.text
