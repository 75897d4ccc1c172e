# frontend/streamlit_app/core/clients.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Client factories for the external services used by the Songjam console.

This module exposes three cached constructors:

- `get_firestore()`      → `google.cloud.firestore.Client`
- `get_storage_bucket()` → `Optional[google.cloud.storage.Bucket]`
- `get_http()`           → `requests.Session`

All are wrapped with `@st.cache_resource` so that:
  * A single Firebase app and HTTP session exist per Streamlit process,
    avoiding repeated credential loading and TLS handshakes.
  * The cached instance persists across reruns triggered by UI interaction.
  * Objects are stored as resources (not pickled), which is appropriate for
    network clients.

Environment configuration is sourced from `core.config.settings`.

Failure behavior:
  * `get_firestore()` raises if credentials are unusable; pages catch and
    surface the error.
  * `get_storage_bucket()` returns `None` when no bucket is configured so the
    QR upload and music library actions can be disabled.

Testing:
  * Services never call these factories themselves; they receive `db`,
    `bucket` and `session` arguments, so tests pass fakes directly.
"""

import json
import logging
import os

import firebase_admin
import requests
import streamlit as st
from firebase_admin import credentials, firestore, storage

from .config import settings

log = logging.getLogger(__name__)


def _credential() -> credentials.Base:
    """Resolve a service-account credential from settings (path or inline JSON)."""
    raw = settings.FIREBASE_CREDENTIALS.strip()
    if not raw:
        return credentials.ApplicationDefault()
    if raw.startswith("{"):
        return credentials.Certificate(json.loads(raw))
    if not os.path.exists(raw):
        raise RuntimeError(f"FIREBASE_CREDENTIALS file not found: {raw}")
    return credentials.Certificate(raw)


def init_firebase() -> firebase_admin.App:
    """Initialize the default Firebase app once per process and return it."""
    if firebase_admin._apps:
        return firebase_admin.get_app()
    options = {}
    if settings.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = settings.FIREBASE_STORAGE_BUCKET
    log.info("Initializing Firebase app")
    return firebase_admin.initialize_app(_credential(), options or None)


@st.cache_resource(show_spinner=False)
def get_firestore():
    """
    Construct (once) and return a cached Firestore client.

    Notes:
        * Initializes the Firebase app on first use.
        * No health check is performed; permission or network errors surface
          when the first document is read.
    """
    init_firebase()
    return firestore.client()


@st.cache_resource(show_spinner=False)
def get_storage_bucket():
    """
    Construct (once) and return the default Storage bucket, or None.

    Rationale:
        Storage backs optional features (QR upload, host music library).
        Rather than crash the UI when misconfigured, we return `None` and let
        callers disable those actions.
    """
    if not settings.FIREBASE_STORAGE_BUCKET:
        return None
    try:
        init_firebase()
        return storage.bucket()
    except Exception:
        log.exception("Firebase Storage unavailable")
        return None


@st.cache_resource(show_spinner=False)
def get_http() -> requests.Session:
    """Return a shared `requests.Session` for upstream API calls."""
    session = requests.Session()
    session.headers.update({"User-Agent": "songjam-console/0.1"})
    return session
