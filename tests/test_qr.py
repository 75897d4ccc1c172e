"""
Tests for space QR generation, Firebase download URLs and upload.
"""

import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from PIL import Image

from services.qr import (
    generate_qr_with_logo,
    make_qr_png,
    sanitize_name,
    space_link,
    space_qr_path,
    upload_qr_to_firebase,
)
from services.storage import blob_download_url, firebase_download_url


def _size(png: bytes):
    return Image.open(io.BytesIO(png)).size


@pytest.fixture
def logo_png():
    buf = io.BytesIO()
    Image.new("RGBA", (64, 32), (255, 0, 0, 255)).save(buf, format="PNG")
    return buf.getvalue()


class TestNames:
    def test_sanitize_name(self):
        assert sanitize_name("My Space!") == "My_Space"
        assert sanitize_name("  ") == "QR"

    def test_space_link(self):
        assert space_link("@alice", base_url="https://songjam.space/") == "https://songjam.space/alice"

    def test_space_qr_path(self):
        assert space_qr_path("@alice") == "spaces-qr/alice"


class TestGenerate:
    def test_default_size_with_logo_bytes(self, logo_png):
        png = generate_qr_with_logo("https://songjam.space/alice", logo_png)
        assert _size(png) == (1024, 1024)

    def test_logo_from_path_and_custom_size(self, tmp_path, logo_png):
        path = tmp_path / "logo.png"
        path.write_bytes(logo_png)
        png = generate_qr_with_logo("https://x", str(path), width=512, height=512)
        assert _size(png) == (512, 512)

    def test_logo_from_url(self, logo_png):
        session = MagicMock()
        session.get.return_value = SimpleNamespace(
            content=logo_png, raise_for_status=lambda: None
        )
        generate_qr_with_logo("https://x", "https://img/logo.png", session=session)
        assert session.get.call_args.args[0] == "https://img/logo.png"

    def test_logo_pixels_centred(self, logo_png):
        png = generate_qr_with_logo("https://x", logo_png)
        img = Image.open(io.BytesIO(png)).convert("RGB")
        assert img.getpixel((512, 512)) == (255, 0, 0)

    def test_without_logo(self):
        assert _size(generate_qr_with_logo("https://x", None, width=300, height=300)) == (300, 300)

    def test_empty_data_rejected(self):
        with pytest.raises(ValueError):
            generate_qr_with_logo("", None)
        with pytest.raises(ValueError):
            make_qr_png("")


class TestStorage:
    def test_download_url_encodes_path(self):
        url = firebase_download_url("bkt", "spaces-qr/alice", "tok")
        assert url == (
            "https://firebasestorage.googleapis.com/v0/b/bkt/o/"
            "spaces-qr%2Falice?alt=media&token=tok"
        )

    def test_upload_sets_token_and_content_type(self):
        bucket = MagicMock()
        bucket.name = "bkt"
        blob = bucket.blob.return_value
        url = upload_qr_to_firebase(bucket, b"png", "spaces-qr/alice")
        bucket.blob.assert_called_once_with("spaces-qr/alice")
        blob.upload_from_string.assert_called_once_with(b"png", content_type="image/png")
        token = blob.metadata["firebaseStorageDownloadTokens"]
        assert url.endswith(f"token={token}")

    def test_blob_url_prefers_token(self):
        blob = SimpleNamespace(
            name="dj/u1/a.mp3",
            bucket=SimpleNamespace(name="bkt"),
            metadata={"firebaseStorageDownloadTokens": "t1,t2"},
        )
        assert blob_download_url(blob).endswith("dj%2Fu1%2Fa.mp3?alt=media&token=t1")

    def test_blob_url_falls_back_to_signed(self):
        blob = MagicMock(metadata=None)
        blob.generate_signed_url.return_value = "https://signed"
        assert blob_download_url(blob) == "https://signed"
        assert blob.generate_signed_url.call_args.kwargs["version"] == "v4"
