# frontend/streamlit_app/services/airdrop.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Airdrop configuration helpers.

This module holds everything the Airdrop tab needs between "load the
creator's social graph" and "register the tree":

  • Profile shaping (Neynar user payload → `AirdropProfile`)
  • Recipient selection (default all, toggle one, toggle all)
  • Total-amount parsing and the minimum-total rule
  • The even split with remainder-to-first-recipient
  • Entry building (first verified ETH address per selected profile)

All functions are pure; the page keeps the selection and total in
`st.session_state` and calls in here on every rerun.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from web3 import Web3

from core.constants import MIN_AIRDROP_TOTAL

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class AirdropProfile:
    """A Farcaster account that can receive an airdrop."""

    farcaster_id: str
    username: str
    name: str = ""
    pfp_url: str | None = None
    eth_addresses: tuple[str, ...] = field(default_factory=tuple)

    @property
    def primary_address(self) -> str | None:
        return self.eth_addresses[0] if self.eth_addresses else None

    @classmethod
    def from_neynar(cls, user: Mapping[str, Any]) -> AirdropProfile:
        """Build a profile from a Neynar v2 user object."""
        verified = user.get("verified_addresses") or {}
        addresses = tuple(a for a in verified.get("eth_addresses") or [] if a)
        return cls(
            farcaster_id=str(user.get("fid", "")),
            username=str(user.get("username") or ""),
            name=str(user.get("display_name") or user.get("username") or ""),
            pfp_url=user.get("pfp_url") or None,
            eth_addresses=addresses,
        )


@dataclass(frozen=True)
class AirdropEntry:
    """One leaf of the airdrop: recipient address and whole-token amount."""

    address: str
    amount: int

    def as_dict(self) -> dict[str, Any]:
        return {"address": self.address, "amount": self.amount}


# =============================================================================
# Profiles & selection
# =============================================================================


def eligible_profiles(profiles: Iterable[AirdropProfile]) -> list[AirdropProfile]:
    """Keep profiles with at least one verified ETH address, first fid wins."""
    seen: set[str] = set()
    out: list[AirdropProfile] = []
    for p in profiles:
        if not p.primary_address or p.farcaster_id in seen:
            continue
        seen.add(p.farcaster_id)
        out.append(p)
    return out


def default_selection(profiles: Iterable[AirdropProfile]) -> set[str]:
    """Everyone is selected when the list loads."""
    return {p.farcaster_id for p in profiles}


def toggle_selection(selected: set[str], farcaster_id: str) -> set[str]:
    """Return a new selection with `farcaster_id` flipped."""
    out = set(selected)
    if farcaster_id in out:
        out.discard(farcaster_id)
    else:
        out.add(farcaster_id)
    return out


def toggle_select_all(
    selected: set[str], profiles: Sequence[AirdropProfile]
) -> set[str]:
    """All selected → none; otherwise → all."""
    if len(selected) == len(profiles):
        return set()
    return default_selection(profiles)


# =============================================================================
# Amounts
# =============================================================================


def parse_amount(text: str, previous: int) -> int:
    """Parse the total-amount field.

    Thousands separators are ignored. An empty field means 0; text without a
    leading integer leaves the previous value in place.
    """
    cleaned = (text or "").replace(",", "")
    if cleaned == "":
        return 0
    m = _LEADING_INT.match(cleaned)
    if not m:
        return previous
    return int(m.group(1))


def format_amount(amount: int) -> str:
    return f"{amount:,}"


def validate_total(total: int) -> str | None:
    """Return an error message when the total is below the minimum."""
    if total < MIN_AIRDROP_TOTAL:
        return f"Total airdrop amount must be at least {MIN_AIRDROP_TOTAL:,}"
    return None


def split_allocation(total: int, count: int) -> list[int]:
    """Split `total` evenly across `count` recipients.

    Every recipient receives `total // count`; the remainder goes to the
    first recipient so the allocations always sum to `total`.

    Raises:
      ValueError: if `total` is negative.
    """
    if total < 0:
        raise ValueError(f"total must be >= 0, got {total}")
    if count <= 0:
        return []
    base, remainder = divmod(total, count)
    allocations = [base] * count
    allocations[0] += remainder
    return allocations


def per_wallet_amount(total: int, count: int) -> int:
    """Display value for "N per wallet" (0 when nobody is selected)."""
    return total // count if count > 0 else 0


def can_deploy(
    total: int, selected_count: int, *, deploying: bool = False, signing: bool = False
) -> bool:
    return not (
        deploying or signing or selected_count == 0 or total < MIN_AIRDROP_TOTAL
    )


def deploy_button_label(deploying: bool, signing: bool) -> str:
    if signing:
        return "Signing..."
    if deploying:
        return "Deploying..."
    return "Deploy"


def allocate(addresses: Sequence[str], total: int) -> list[AirdropEntry]:
    """Split `total` across raw addresses, in order, checksumming each one.

    Raises:
      ValueError: on an invalid address or a total below the minimum.
    """
    problem = validate_total(total)
    if problem:
        raise ValueError(problem)
    entries: list[AirdropEntry] = []
    for addr, amount in zip(addresses, split_allocation(total, len(addresses))):
        if not Web3.is_address(addr):
            raise ValueError(f"Invalid ETH address: {addr!r}")
        entries.append(AirdropEntry(Web3.to_checksum_address(addr), amount))
    return entries


def build_entries(
    profiles: Sequence[AirdropProfile], selected: set[str], total: int
) -> list[AirdropEntry]:
    """Allocate `total` across the selected profiles, in list order.

    Addresses are checksummed; a profile whose first verified address is not
    a valid EVM address is rejected rather than silently skipped, since it
    would shift every later allocation.

    Raises:
      ValueError: on an invalid address or a total below the minimum.
    """
    chosen = [p for p in profiles if p.farcaster_id in selected]
    for profile in chosen:
        addr = profile.primary_address or ""
        if not Web3.is_address(addr):
            raise ValueError(f"Invalid ETH address for @{profile.username}: {addr!r}")
    return allocate([p.primary_address for p in chosen], total)
