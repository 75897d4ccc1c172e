# backend/scripts/register_airdrop.py
# SPDX-License-Identifier: Apache-2.0
#
# Purpose
# -------
# Register a token airdrop with Empire Builder from the command line:
#   recipients + total → even split (remainder to the first recipient)
#   → OpenZeppelin-standard Merkle tree → register-clanker-airdrop proxy.
#
# Recipients come from a text/CSV file (first column is the address, blank
# lines and `#` comments are ignored) and/or repeated --address flags, in
# that order.
#
# Usage
# -----
#   python backend/scripts/register_airdrop.py --token 0xTOKEN \
#     --total 260000000 --recipients holders.csv
#   python backend/scripts/register_airdrop.py --token 0xTOKEN \
#     --address 0xA... --address 0xB... --dry-run
#
# Environment (.env)
# ------------------
# EMPIRE_API_KEY, EMPIRE_AIRDROP_URL, AIRDROP_INDEXING_DELAY_S
#
# Output
# ------
# JSON on stdout: {"status", "body", "root"} (or the tree dump with --dry-run).
# Exit code 1 when the proxy answers with a non-2xx status.

from __future__ import annotations

import argparse
import csv
import json
import logging
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parents[2] / "frontend" / "streamlit_app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from web3 import Web3  # noqa: E402

from core.config import settings  # noqa: E402
from core.constants import DEFAULT_AIRDROP_TOTAL, TOKEN_DECIMALS  # noqa: E402
from services.airdrop import allocate  # noqa: E402
from services.empire import register_airdrop  # noqa: E402
from services.merkle import build_airdrop_tree  # noqa: E402

log = logging.getLogger("register_airdrop")


def read_recipients(path: pathlib.Path) -> list[str]:
    """Read addresses from the first column of a text/CSV file."""
    out: list[str] = []
    with path.open(newline="", encoding="utf-8") as fh:
        for row in csv.reader(fh):
            if not row:
                continue
            cell = row[0].strip()
            if not cell or cell.startswith("#") or cell.lower() == "address":
                continue
            out.append(cell)
    return out


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Split a token across recipients and register the airdrop tree.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--token", required=True, help="Token contract address (0x...)")
    ap.add_argument(
        "--total", type=int, default=DEFAULT_AIRDROP_TOTAL, help="Total whole tokens"
    )
    ap.add_argument("--recipients", type=pathlib.Path, help="Text/CSV file of addresses")
    ap.add_argument(
        "--address", action="append", default=[], help="Recipient address (repeatable)"
    )
    ap.add_argument(
        "--decimals", type=int, default=TOKEN_DECIMALS, help="Token decimals for leaf amounts"
    )
    ap.add_argument(
        "--delay",
        type=float,
        default=settings.AIRDROP_INDEXING_DELAY_S,
        help="Seconds to wait for token indexing before the API call",
    )
    ap.add_argument(
        "--dry-run", action="store_true", help="Print the tree dump, do not call the API"
    )
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)-8s: %(message)s",
    )
    args = _parse_args(argv)

    if not Web3.is_address(args.token):
        raise SystemExit(f"Invalid token address: {args.token!r}")

    addresses = read_recipients(args.recipients) if args.recipients else []
    addresses += args.address
    if not addresses:
        raise SystemExit("No recipients: pass --recipients FILE and/or --address 0x...")

    try:
        entries = allocate(addresses, args.total)
        tree = build_airdrop_tree(entries, args.decimals)
    except ValueError as e:
        raise SystemExit(f"Invalid airdrop: {e}") from e
    log.info("Built tree for %d recipients, root %s", len(entries), tree.root)

    if args.dry_run:
        print(json.dumps(tree.dump(), indent=2))
        return 0

    resp = register_airdrop(
        {"tokenAddress": args.token, "airdropTree": tree.dump()}, delay_s=args.delay
    )
    print(json.dumps({"status": resp.status, "body": resp.body, "root": tree.root}, indent=2))
    return 0 if resp.ok else 1


if __name__ == "__main__":
    sys.exit(main())
