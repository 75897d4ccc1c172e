"""
Tests for the backend CLI scripts (dry runs only, no network).
"""

import importlib.util
import io
import json
import pathlib

import pytest
from PIL import Image

SCRIPTS = pathlib.Path(__file__).resolve().parents[1] / "backend" / "scripts"


def _load(name):
    spec = importlib.util.spec_from_file_location(f"scripts_{name}", SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def register_airdrop():
    return _load("register_airdrop")


@pytest.fixture(scope="module")
def space_qr():
    return _load("space_qr")


def test_read_recipients_skips_header_and_comments(register_airdrop, tmp_path):
    path = tmp_path / "holders.csv"
    path.write_text("address,note\n# team\n0xaa,x\n\n0xbb\n", encoding="utf-8")
    assert register_airdrop.read_recipients(path) == ["0xaa", "0xbb"]


def test_register_dry_run_prints_tree(register_airdrop, capsys):
    code = register_airdrop.main(
        [
            "--token", "0x" + "11" * 20,
            "--total", "260000001",
            "--address", "0x" + "22" * 20,
            "--address", "0x" + "33" * 20,
            "--dry-run",
        ]
    )
    assert code == 0
    dump = json.loads(capsys.readouterr().out)
    assert dump["format"] == "standard-v1"
    amounts = sorted(int(v["value"][1]) for v in dump["values"])
    assert amounts == [130_000_000 * 10**18, 130_000_001 * 10**18]


def test_register_rejects_low_total(register_airdrop):
    with pytest.raises(SystemExit, match="at least"):
        register_airdrop.main(
            ["--token", "0x" + "11" * 20, "--total", "5", "--address", "0x" + "22" * 20]
        )


def test_register_rejects_bad_token_before_calling_api(register_airdrop, monkeypatch):
    sent = []
    monkeypatch.setattr(register_airdrop, "register_airdrop", lambda *a, **kw: sent.append(a))
    with pytest.raises(SystemExit, match="Invalid token address"):
        register_airdrop.main(["--token", "0x1", "--address", "0x" + "22" * 20])
    assert sent == []


def test_space_qr_writes_png(space_qr, tmp_path, capsys):
    out = tmp_path / "alice.png"
    assert space_qr.main(["--user", "@alice", "--out", str(out)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["file"] == str(out)
    assert result["link"].endswith("/alice")
    assert Image.open(io.BytesIO(out.read_bytes())).format == "PNG"
