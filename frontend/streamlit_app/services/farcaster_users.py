# frontend/streamlit_app/services/farcaster_users.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Firestore access for Farcaster user profiles.

Documents live in `farcaster_users/<fid>` and are written whenever a creator
signs in with Farcaster. The stored shape is camelCase because the web app
reads the same documents:

    fid, username, custodyAddress, followerCount, followingCount,
    createdAt, updatedAt              (always)
    displayName, pfpUrl, verifications, xUsername   (only when present)

Timestamps are epoch milliseconds. `createdAt` is preserved across updates.

Every helper takes the Firestore client as its first argument. Errors are
logged and re-raised as `RuntimeError` with a stable message.
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

from core.constants import FARCASTER_USERS_COLLECTION

log = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _x_username(verified_accounts: Any) -> str | None:
    for acc in verified_accounts or []:
        if acc.get("platform") == "x" and acc.get("username"):
            return acc["username"]
    return None


def build_farcaster_user_doc(
    user_data: Mapping[str, Any], *, created_at: int, now: int
) -> dict[str, Any]:
    """Shape a Neynar-style payload into the stored document."""
    doc: dict[str, Any] = {
        "fid": int(user_data["fid"]),
        "username": user_data["username"],
        "custodyAddress": user_data.get("custody_address"),
        "followerCount": user_data.get("follower_count") or 0,
        "followingCount": user_data.get("following_count") or 0,
        "createdAt": created_at,
        "updatedAt": now,
    }
    if user_data.get("display_name"):
        doc["displayName"] = user_data["display_name"]
    if user_data.get("pfp_url"):
        doc["pfpUrl"] = user_data["pfp_url"]
    if user_data.get("verifications"):
        doc["verifications"] = list(user_data["verifications"])
    x_username = _x_username(user_data.get("verified_accounts"))
    if x_username:
        doc["xUsername"] = x_username
    return doc


def create_or_update_farcaster_user(
    db, user_data: Mapping[str, Any], *, now_ms: int | None = None
) -> dict[str, Any]:
    """Create or overwrite `farcaster_users/<fid>`, keeping the original createdAt.

    Returns:
      The document as written.

    Raises:
      RuntimeError: on any Firestore or payload error.
    """
    try:
        doc_ref = db.collection(FARCASTER_USERS_COLLECTION).document(str(user_data["fid"]))
        existing = doc_ref.get()
        now = _now_ms() if now_ms is None else now_ms
        created_at = (existing.to_dict() or {}).get("createdAt", now) if existing.exists else now

        doc = build_farcaster_user_doc(user_data, created_at=created_at, now=now)
        doc_ref.set(doc)
        return doc
    except Exception as e:
        log.exception("Error creating/updating Farcaster user")
        raise RuntimeError("Failed to create/update Farcaster user") from e


def get_farcaster_user_by_fid(db, fid: int) -> dict[str, Any] | None:
    """Return the stored profile for `fid`, or None."""
    try:
        snap = db.collection(FARCASTER_USERS_COLLECTION).document(str(fid)).get()
        return snap.to_dict() if snap.exists else None
    except Exception as e:
        log.exception("Error getting Farcaster user by FID")
        raise RuntimeError("Failed to get Farcaster user by FID") from e


def get_farcaster_user_by_username(db, username: str) -> dict[str, Any] | None:
    """Return the first stored profile with `username`, or None."""
    try:
        query = (
            db.collection(FARCASTER_USERS_COLLECTION)
            .where("username", "==", username)
            .limit(1)
        )
        for snap in query.stream():
            return snap.to_dict()
        return None
    except Exception as e:
        log.exception("Error getting Farcaster user by username")
        raise RuntimeError("Failed to get Farcaster user by username") from e
