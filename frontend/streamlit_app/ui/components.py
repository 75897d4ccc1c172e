# frontend/streamlit_app/ui/components.py
# SPDX-License-Identifier: Apache-2.0
"""Reusable Streamlit UI components.

Currently provided:
  • short_addr(): "0x1234…abcd" display form of a wallet address
  • status_chip(): one-line state indicator used by the DJ console
  • table_airdrop_allocations(): allocation preview before deploying
"""

from __future__ import annotations

from collections.abc import Sequence

import streamlit as st

from services.airdrop import AirdropEntry, AirdropProfile

# How many characters to show from the start/end of an address when eliding.
_ADDR_PREFIX = 6
_ADDR_SUFFIX = 4


def short_addr(
    addr: str | None, *, prefix: int = _ADDR_PREFIX, suffix: int = _ADDR_SUFFIX
) -> str:
    """Return a shortened wallet address; "-" for empty input."""
    if not addr:
        return "-"
    if len(addr) <= prefix + suffix + 1:
        return addr
    return f"{addr[:prefix]}…{addr[-suffix:]}"


def status_chip(label: str, on: bool) -> None:
    st.markdown(f"{'🟢' if on else '⚪'} **{label}**")


def table_airdrop_allocations(
    profiles: Sequence[AirdropProfile], entries: Sequence[AirdropEntry]
) -> None:
    """Render the (recipient, wallet, allocation) preview.

    `entries` must be aligned with `profiles` (both in selection order), which
    is what `services.airdrop.build_entries` produces for the selected subset.
    """
    if not entries:
        st.info("No recipients selected.")
        return

    rows = [
        {
            "Farcaster": f"@{p.username}",
            "Name": p.name,
            "Wallet": short_addr(e.address),
            "Allocation": f"{e.amount:,}",
        }
        for p, e in zip(profiles, entries)
    ]
    st.dataframe(rows, hide_index=True, use_container_width=True)
