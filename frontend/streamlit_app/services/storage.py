# frontend/streamlit_app/services/storage.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""Firebase Storage URL helpers shared by the QR and music services."""

import uuid
from datetime import timedelta
from urllib.parse import quote

_DOWNLOAD_TOKEN_KEY = "firebaseStorageDownloadTokens"


def firebase_download_url(bucket_name: str, path: str, token: str) -> str:
    """Compose the token URL the Firebase web SDK's getDownloadURL returns."""
    return (
        f"https://firebasestorage.googleapis.com/v0/b/{bucket_name}/o/"
        f"{quote(path, safe='')}?alt=media&token={token}"
    )


def new_download_token() -> str:
    return str(uuid.uuid4())


def token_metadata(token: str) -> dict[str, str]:
    return {_DOWNLOAD_TOKEN_KEY: token}


def blob_download_url(blob, *, expires: timedelta = timedelta(hours=1)) -> str:
    """Download URL for an existing blob.

    Uses the blob's Firebase download token when it has one (files uploaded
    through the web SDK always do), otherwise a V4 signed URL.
    """
    tokens = (blob.metadata or {}).get(_DOWNLOAD_TOKEN_KEY, "")
    token = tokens.split(",")[0].strip() if tokens else ""
    if token:
        return firebase_download_url(blob.bucket.name, blob.name, token)
    return blob.generate_signed_url(expiration=expires, version="v4")
