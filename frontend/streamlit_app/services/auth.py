# frontend/streamlit_app/services/auth.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Identity composition for the console.

Two identity sources meet here:

- **Firebase Auth (Twitter/X sign-in).** The web app signs the creator in and
  hands the console a Firebase ID token. `sign_in_with_token` verifies it
  with firebase-admin and exposes an `AuthContext` with the Twitter identity.
- **Farcaster via Neynar.** After a Neynar sign-in, `on_farcaster_sign_in`
  stores the profile in `farcaster_users`. Storage failures are logged and
  never block the sign-in.

Nothing here mints or stores credentials; tokens live only in the Streamlit
session that received them.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from firebase_admin import auth as firebase_auth

from core.constants import USERS_COLLECTION

from .farcaster_users import create_or_update_farcaster_user

log = logging.getLogger(__name__)

TWITTER_PROVIDER_ID = "twitter.com"


@dataclass(frozen=True)
class TwitterIdentity:
    twitter_id: str | None
    name: str | None
    username: str


@dataclass(frozen=True)
class AuthContext:
    user: Any = None
    loading: bool = False
    twitter: TwitterIdentity | None = None

    @property
    def authenticated(self) -> bool:
        return self.user is not None

    @property
    def ready(self) -> bool:
        return not self.loading


def signed_out() -> AuthContext:
    return AuthContext()


def _twitter_username(db, uid: str) -> str:
    if db is None:
        return ""
    try:
        snap = db.collection(USERS_COLLECTION).document(uid).get()
        return (snap.to_dict() or {}).get("twitterUsername", "") if snap.exists else ""
    except Exception:
        log.exception("Error reading twitterUsername for %s", uid)
        return ""


def extract_twitter_identity(user, db=None) -> TwitterIdentity | None:
    """Twitter identity from a firebase-admin `UserRecord`, or None if signed out."""
    if user is None:
        return None
    info = next(
        (p for p in user.provider_data or [] if p.provider_id == TWITTER_PROVIDER_ID),
        None,
    )
    return TwitterIdentity(
        twitter_id=info.uid if info else None,
        name=info.display_name if info else None,
        username=_twitter_username(db, user.uid),
    )


def sign_in_with_token(id_token: str, *, db=None, auth_module=firebase_auth) -> AuthContext:
    """Verify a Firebase ID token and build the session's auth context.

    Invalid, expired or revoked tokens are logged and yield a signed-out
    context rather than an exception.
    """
    if not id_token:
        return signed_out()
    try:
        decoded = auth_module.verify_id_token(id_token)
        user = auth_module.get_user(decoded["uid"])
    except Exception as e:
        log.error("Error verifying Firebase ID token: %s", e)
        return signed_out()
    return AuthContext(user=user, loading=False, twitter=extract_twitter_identity(user, db))


def on_farcaster_sign_in(db, neynar_user: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Persist a Neynar user after Farcaster sign-in; never raises."""
    if not neynar_user:
        return None
    try:
        doc = create_or_update_farcaster_user(db, neynar_user)
        log.info("Farcaster user data stored successfully (fid=%s)", doc["fid"])
        return doc
    except Exception:
        log.exception("Failed to store Farcaster user data")
        return None
