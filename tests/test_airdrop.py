"""
Tests for airdrop allocation, amount parsing and recipient selection.
"""

import pytest

from core.constants import MIN_AIRDROP_TOTAL
from services.airdrop import (
    AirdropProfile,
    allocate,
    build_entries,
    can_deploy,
    default_selection,
    deploy_button_label,
    eligible_profiles,
    format_amount,
    parse_amount,
    per_wallet_amount,
    split_allocation,
    toggle_select_all,
    toggle_selection,
    validate_total,
)

ADDR_A = "0x" + "a1" * 20
ADDR_B = "0x" + "b2" * 20
ADDR_C = "0x" + "c3" * 20


def _profile(fid, addr, username=None):
    return AirdropProfile(
        farcaster_id=str(fid),
        username=username or f"user{fid}",
        name=f"User {fid}",
        pfp_url=None,
        eth_addresses=(addr,) if addr else (),
    )


class TestSplitAllocation:
    @pytest.mark.parametrize(
        "total,count",
        [(0, 1), (10, 3), (260_000_000, 7), (1_000_000_007, 13), (5, 5), (2, 9)],
    )
    def test_sum_is_preserved_and_remainder_goes_first(self, total, count):
        allocations = split_allocation(total, count)
        assert len(allocations) == count
        assert sum(allocations) == total
        assert allocations[0] == total // count + total % count
        assert all(a == total // count for a in allocations[1:])

    def test_no_recipients(self):
        assert split_allocation(100, 0) == []

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            split_allocation(-1, 3)

    def test_per_wallet_amount(self):
        assert per_wallet_amount(10, 3) == 3
        assert per_wallet_amount(10, 0) == 0


class TestAmountInput:
    def test_commas_are_stripped(self):
        assert parse_amount("300,000,000", 5) == 300_000_000

    def test_empty_is_zero(self):
        assert parse_amount("", 5) == 0
        assert parse_amount(",", 5) == 0

    def test_leading_integer_is_kept(self):
        assert parse_amount("123abc", 5) == 123

    def test_garbage_keeps_previous(self):
        assert parse_amount("abc", 42) == 42

    def test_format_amount(self):
        assert format_amount(260_000_000) == "260,000,000"

    def test_validate_total(self):
        assert validate_total(MIN_AIRDROP_TOTAL) is None
        assert validate_total(MIN_AIRDROP_TOTAL - 1) == (
            "Total airdrop amount must be at least 260,000,000"
        )


class TestSelection:
    def test_eligible_profiles_require_address_and_dedupe(self):
        profiles = [_profile(1, ADDR_A), _profile(2, None), _profile(1, ADDR_B)]
        eligible = eligible_profiles(profiles)
        assert [p.farcaster_id for p in eligible] == ["1"]

    def test_default_selection_is_everyone(self):
        profiles = [_profile(1, ADDR_A), _profile(2, ADDR_B)]
        assert default_selection(profiles) == {"1", "2"}

    def test_toggle_selection(self):
        assert toggle_selection({"1"}, "2") == {"1", "2"}
        assert toggle_selection({"1", "2"}, "2") == {"1"}

    def test_toggle_select_all(self):
        profiles = [_profile(1, ADDR_A), _profile(2, ADDR_B)]
        assert toggle_select_all({"1"}, profiles) == {"1", "2"}
        assert toggle_select_all({"1", "2"}, profiles) == set()

    def test_from_neynar_reads_verified_addresses(self):
        p = AirdropProfile.from_neynar(
            {
                "fid": 7,
                "username": "alice",
                "display_name": "Alice",
                "pfp_url": "https://img/alice.png",
                "verified_addresses": {"eth_addresses": [ADDR_A]},
            }
        )
        assert p.farcaster_id == "7"
        assert p.name == "Alice"
        assert p.primary_address == ADDR_A


class TestDeployGate:
    def test_can_deploy(self):
        assert can_deploy(MIN_AIRDROP_TOTAL, 1)
        assert not can_deploy(MIN_AIRDROP_TOTAL - 1, 1)
        assert not can_deploy(MIN_AIRDROP_TOTAL, 0)
        assert not can_deploy(MIN_AIRDROP_TOTAL, 1, deploying=True)
        assert not can_deploy(MIN_AIRDROP_TOTAL, 1, signing=True)

    def test_button_label(self):
        assert deploy_button_label(False, False) == "Deploy"
        assert deploy_button_label(True, False) == "Deploying..."
        assert deploy_button_label(True, True) == "Signing..."


class TestEntries:
    def test_build_entries_follows_profile_order(self):
        profiles = [_profile(1, ADDR_A), _profile(2, ADDR_B), _profile(3, ADDR_C)]
        total = MIN_AIRDROP_TOTAL + 2
        entries = build_entries(profiles, {"1", "3"}, total)
        assert [e.address.lower() for e in entries] == [ADDR_A, ADDR_C]
        assert entries[0].amount == total // 2 + total % 2
        assert entries[1].amount == total // 2

    def test_build_entries_checksums(self):
        entries = build_entries([_profile(1, ADDR_A)], {"1"}, MIN_AIRDROP_TOTAL)
        assert entries[0].address != ADDR_A
        assert entries[0].address.lower() == ADDR_A

    def test_build_entries_rejects_bad_address(self):
        with pytest.raises(ValueError, match="@user1"):
            build_entries([_profile(1, "0x123")], {"1"}, MIN_AIRDROP_TOTAL)

    def test_allocate_rejects_low_total(self):
        with pytest.raises(ValueError, match="at least"):
            allocate([ADDR_A], MIN_AIRDROP_TOTAL - 1)
