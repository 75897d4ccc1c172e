# backend/scripts/space_qr.py
# SPDX-License-Identifier: Apache-2.0
#
# Purpose
# -------
# Generate the branded QR for a host's live space and write it as a PNG.
# With --upload the image is also stored in Firebase Storage at
# `spaces-qr/<username>` and the download URL is printed.
#
# Usage
# -----
#   python backend/scripts/space_qr.py --user songjamspace --logo logo.png
#   python backend/scripts/space_qr.py --user songjamspace \
#     --logo https://pbs.twimg.com/.../avatar.jpg --upload
#
# Environment (.env)
# ------------------
# FRONTEND_BASE_URL, FIREBASE_CREDENTIALS, FIREBASE_STORAGE_BUCKET

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parents[2] / "frontend" / "streamlit_app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from core.config import settings  # noqa: E402
from services.qr import (  # noqa: E402
    DEFAULT_SIZE,
    generate_qr_with_logo,
    make_qr_png,
    sanitize_name,
    space_link,
    space_qr_path,
    upload_qr_to_firebase,
)

log = logging.getLogger("space_qr")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Generate (and optionally upload) a space QR code.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--user", required=True, help="Host X username")
    ap.add_argument("--link", help="Override the encoded link")
    ap.add_argument("--logo", help="Logo path or URL; omit for a plain QR")
    ap.add_argument("--size", type=int, default=DEFAULT_SIZE, help="Output side in px")
    ap.add_argument("--out", type=pathlib.Path, help="Output PNG (default <user>.png)")
    ap.add_argument("--upload", action="store_true", help="Upload to Firebase Storage")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)-8s: %(message)s",
    )
    args = _parse_args(argv)
    username = args.user.strip().lstrip("@")
    link = args.link or space_link(username)

    try:
        if args.logo:
            png = generate_qr_with_logo(link, args.logo, width=args.size, height=args.size)
        else:
            png = make_qr_png(link)
    except (ValueError, RuntimeError, OSError) as e:
        raise SystemExit(f"QR generation failed: {e}") from e

    out = args.out or pathlib.Path(f"{sanitize_name(username)}.png")
    out.write_bytes(png)
    log.info("Wrote %s (%d bytes)", out, len(png))
    result = {"link": link, "file": str(out)}

    if args.upload:
        from core.clients import get_storage_bucket

        bucket = get_storage_bucket()
        if bucket is None:
            raise SystemExit("Set FIREBASE_STORAGE_BUCKET in .env to upload")
        result["url"] = upload_qr_to_firebase(bucket, png, space_qr_path(username))

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
