# frontend/streamlit_app/pages/airdrop.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Airdrop

Purpose
-------
Distribute a creator token to the creator's Farcaster community:
  1) Load eligible profiles (followers with a verified ETH address)
  2) Choose the total (minimum 260,000,000) and the recipients
  3) Preview the even split (remainder to the first recipient)
  4) Build the Merkle tree and register it with Empire for the token

Design Notes
------------
- Selection and total live in `st.session_state` (see core.state) so they
  survive reruns; all arithmetic lives in services.airdrop.
- Checkbox widget state is written explicitly whenever the selection changes
  wholesale (load, select all) so widgets and selection never disagree.

Error Handling
--------------
Every network action is wrapped and surfaced with st.error(); the deploy
button stays disabled until the total and selection are valid.
"""

import streamlit as st
from web3 import Web3

from core.clients import get_http
from core.constants import MIN_AIRDROP_TOTAL
from services.airdrop import (
    AirdropProfile,
    build_entries,
    can_deploy,
    default_selection,
    deploy_button_label,
    eligible_profiles,
    format_amount,
    parse_amount,
    per_wallet_amount,
    toggle_select_all,
    toggle_selection,
    validate_total,
)
from services.empire import register_airdrop
from services.merkle import build_airdrop_tree
from services.neynar import fetch_followers
from ui.components import short_addr, table_airdrop_allocations
from ui.keys import k
from ui.layout import stack_or_columns_spec


def _pick_key(fid: str) -> str:
    return k("airdrop", f"pick_{fid}")


def _set_selection(selected: set[str]) -> None:
    ss = st.session_state
    ss["AIRDROP_SELECTED"] = selected
    for p in ss["AIRDROP_PROFILES"]:
        ss[_pick_key(p.farcaster_id)] = p.farcaster_id in selected


def _on_pick(fid: str) -> None:
    ss = st.session_state
    ss["AIRDROP_SELECTED"] = toggle_selection(ss["AIRDROP_SELECTED"], fid)


def _on_total_change() -> None:
    ss = st.session_state
    ss["AIRDROP_TOTAL"] = parse_amount(ss[k("airdrop", "total")], ss["AIRDROP_TOTAL"])
    ss[k("airdrop", "total")] = format_amount(ss["AIRDROP_TOTAL"])


def _load_profiles(fid: int) -> None:
    users = fetch_followers(fid, session=get_http())
    profiles = eligible_profiles(AirdropProfile.from_neynar(u) for u in users)
    st.session_state["AIRDROP_PROFILES"] = profiles
    _set_selection(default_selection(profiles))


def _render_profiles(profiles: list[AirdropProfile], selected: set[str], total: int) -> None:
    per_wallet = per_wallet_amount(total, len(selected))
    header = st.columns([3, 2])
    with header[0]:
        all_on = bool(profiles) and len(selected) == len(profiles)
        if st.button(
            "Clear selection" if all_on else "Select all",
            key=k("airdrop", "toggle_all"),
            disabled=not profiles,
        ):
            _set_selection(toggle_select_all(selected, profiles))
            st.rerun()
    with header[1]:
        st.markdown(f"**{len(selected)}** / {len(profiles)} recipients")

    for p in profiles:
        key = _pick_key(p.farcaster_id)
        st.session_state.setdefault(key, p.farcaster_id in selected)
        row = st.columns([1, 4, 3])
        with row[0]:
            if p.pfp_url:
                st.image(p.pfp_url, width=32)
            else:
                st.markdown(f"`{p.username[:2].upper()}`")
        with row[1]:
            st.checkbox(
                f"{p.name}  @{p.username}",
                key=key,
                on_change=_on_pick,
                args=(p.farcaster_id,),
            )
        with row[2]:
            alloc = f"{per_wallet:,}  " if p.farcaster_id in selected else ""
            st.markdown(f"{alloc}`{short_addr(p.primary_address)}`")


def render(ctx: dict) -> None:
    """Render the Airdrop tab."""
    st.header("🪂 Airdrop List")
    st.caption("Distribute tokens to your community")
    ss = st.session_state

    fc_user = ctx.get("fc_user")
    token_col, load_col = stack_or_columns_spec([3, 2], ctx["STACKED"])

    with token_col:
        ss.setdefault(k("airdrop", "token"), ss["AIRDROP_TOKEN_ADDRESS"])
        st.text_input("Token address", placeholder="0x…", key=k("airdrop", "token"))
        ss["AIRDROP_TOKEN_ADDRESS"] = ss[k("airdrop", "token")].strip()

    with load_col:
        if st.button(
            "Load eligible profiles",
            disabled=not fc_user,
            use_container_width=True,
            key=k("airdrop", "load"),
        ):
            with st.spinner("Loading eligible profiles..."):
                try:
                    _load_profiles(int(fc_user["fid"]))
                except Exception as e:
                    st.error(f"Failed to load profiles: {e}")
        if not fc_user:
            st.caption("Sign in with Farcaster in the sidebar first.")

    # ── Total amount ─────────────────────────────────────────────────────
    st.session_state.setdefault(k("airdrop", "total"), format_amount(ss["AIRDROP_TOTAL"]))
    st.text_input(
        "Total Airdrop Amount",
        key=k("airdrop", "total"),
        on_change=_on_total_change,
    )
    total = int(ss["AIRDROP_TOTAL"])
    selected: set[str] = ss["AIRDROP_SELECTED"]
    problem = validate_total(total)
    msg = f"Minimum allocation: {MIN_AIRDROP_TOTAL:,}"
    st.caption(f":red[{msg}]" if problem else msg)
    st.caption(f"{per_wallet_amount(total, len(selected)):,} per wallet")

    # ── Recipients ───────────────────────────────────────────────────────
    profiles: list[AirdropProfile] = ss["AIRDROP_PROFILES"]
    if profiles:
        _render_profiles(profiles, selected, total)
    else:
        st.info(
            "No eligible profiles found in your social graph. Make sure your "
            "connections have verified ETH addresses."
        )

    st.markdown("---")

    # ── Preview & deploy ─────────────────────────────────────────────────
    entries = []
    chosen = [p for p in profiles if p.farcaster_id in selected]
    if chosen and not problem:
        try:
            entries = build_entries(profiles, selected, total)
        except ValueError as e:
            st.error(str(e))
    if entries:
        with st.expander("Allocation preview", expanded=False):
            table_airdrop_allocations(chosen, entries)

    token = ss["AIRDROP_TOKEN_ADDRESS"]
    deploying = bool(ss["AIRDROP_DEPLOYING"])
    ready = can_deploy(total, len(selected), deploying=deploying) and bool(entries)
    if st.button(
        deploy_button_label(deploying, False),
        type="primary",
        disabled=not (ready and token),
        use_container_width=True,
        key=k("airdrop", "deploy"),
    ):
        if not Web3.is_address(token):
            st.error("Token address looks invalid. Expecting a 0x-prefixed EVM address.")
            return
        ss["AIRDROP_DEPLOYING"] = True
        try:
            tree = build_airdrop_tree(entries)
            with st.spinner("Deploying... (waiting for token indexing)"):
                resp = register_airdrop(
                    {"tokenAddress": token, "airdropTree": tree.dump()},
                    session=get_http(),
                )
            if resp.ok:
                st.success(f"✅ Airdrop registered. Merkle root `{tree.root}`")
                st.json(resp.body)
            else:
                st.error(f"Registration failed ({resp.status}): {resp.error}")
                if "details" in resp.body:
                    st.json(resp.body["details"])
        except Exception as e:
            st.error(f"Airdrop deploy failed: {e}")
        finally:
            ss["AIRDROP_DEPLOYING"] = False
