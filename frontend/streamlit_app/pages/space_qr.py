# frontend/streamlit_app/pages/space_qr.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Space QR

Generate a branded QR code that opens a host's live space, preview it, and
upload it to Firebase Storage (`spaces-qr/<username>`) so the web app can
show it on the space page. The logo is either uploaded here or fetched from
a URL (e.g. the host's X avatar).
"""

import streamlit as st

from core.clients import get_http, get_storage_bucket
from services.qr import (
    generate_qr_with_logo,
    sanitize_name,
    space_link,
    space_qr_path,
    upload_qr_to_firebase,
)
from ui.keys import k
from ui.layout import stack_or_columns_spec


def render(ctx: dict) -> None:
    """Render the Space QR tab."""
    st.header("🔳 Space QR")
    ss = st.session_state

    auth = ctx.get("auth")
    default_user = auth.twitter.username if auth and auth.twitter else ""
    ss.setdefault(k("qr", "user"), default_user)

    form_col, preview_col = stack_or_columns_spec([1, 1], ctx["STACKED"])

    with form_col:
        username = st.text_input("Host X username", key=k("qr", "user")).strip().lstrip("@")
        link = st.text_input(
            "Link encoded in the QR",
            value=space_link(username) if username else "",
            key=k("qr", f"link_{username}"),
        )
        logo_file = st.file_uploader(
            "Logo (PNG/JPG)", type=["png", "jpg", "jpeg"], key=k("qr", "logo_file")
        )
        logo_url = st.text_input("…or logo URL", key=k("qr", "logo_url")).strip()
        size = st.select_slider(
            "Size (px)", options=[512, 768, 1024, 2048], value=1024, key=k("qr", "size")
        )

    logo = logo_file.getvalue() if logo_file else (logo_url or None)

    with preview_col:
        if not link:
            st.info("Enter a username or a link to preview the QR.")
            return
        try:
            png = generate_qr_with_logo(
                link, logo, width=size, height=size, session=get_http()
            )
        except Exception as e:
            st.error(f"QR generation failed: {e}")
            return

        st.image(png, caption=link, width=320)
        st.download_button(
            "Download PNG",
            data=png,
            file_name=f"{sanitize_name(username or 'space')}.png",
            mime="image/png",
            use_container_width=True,
            key=k("qr", "download"),
        )

        bucket = get_storage_bucket()
        if st.button(
            "Upload to Firebase",
            disabled=bucket is None or not username,
            use_container_width=True,
            key=k("qr", "upload"),
        ):
            try:
                ss["QR_LAST_URL"] = upload_qr_to_firebase(bucket, png, space_qr_path(username))
                st.success("✅ Uploaded")
            except Exception as e:
                st.error(f"Upload failed: {e}")
        if bucket is None:
            st.caption("Set FIREBASE_STORAGE_BUCKET in .env to enable uploads.")
        if ss.get("QR_LAST_URL"):
            st.code(ss["QR_LAST_URL"], language=None)
