# frontend/streamlit_app/services/merkle.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Airdrop Merkle tree in OpenZeppelin `StandardMerkleTree` format.

Clanker airdrop extensions verify claims against a Merkle root whose leaves
are `(address, uint256)` pairs. Empire's registration endpoint expects the
full tree dump so it can serve proofs to claimants. The layout and hashing
here follow `@openzeppelin/merkle-tree` v1:

  leaf  = keccak256(keccak256(abi.encode(types, value)))
  node  = keccak256(sorted(left, right))
  tree  = flat array, root at 0, leaves at the end in ascending hash order

Amounts are whole tokens in the UI and are converted to base units with
`to_base_units` before hashing.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import encode as abi_encode
from web3 import Web3

from core.constants import TOKEN_DECIMALS

from .airdrop import AirdropEntry

LEAF_ENCODING: tuple[str, str] = ("address", "uint256")


def to_base_units(amount: int, decimals: int = TOKEN_DECIMALS) -> int:
    """Whole tokens → base units (`parseEther` for 18 decimals)."""
    if amount < 0:
        raise ValueError(f"amount must be >= 0, got {amount}")
    return int(amount) * 10**decimals


def _keccak(data: bytes) -> bytes:
    return bytes(Web3.keccak(data))


def leaf_hash(address: str, amount: int) -> bytes:
    encoded = abi_encode(list(LEAF_ENCODING), [Web3.to_checksum_address(address), amount])
    return _keccak(_keccak(encoded))


def hash_pair(a: bytes, b: bytes) -> bytes:
    return _keccak(b"".join(sorted((a, b))))


def _hex(b: bytes) -> str:
    return "0x" + b.hex()


def _unhex(s: str) -> bytes:
    return bytes.fromhex(s[2:] if s.startswith("0x") else s)


@dataclass(frozen=True)
class AirdropTree:
    """A built tree plus the original values and their tree positions."""

    tree: tuple[bytes, ...]
    values: tuple[tuple[str, int], ...]
    tree_indices: tuple[int, ...]

    @property
    def root(self) -> str:
        return _hex(self.tree[0])

    def proof(self, value_index: int) -> list[str]:
        """Sibling hashes from the leaf of `values[value_index]` up to the root."""
        i = self.tree_indices[value_index]
        proof: list[str] = []
        while i > 0:
            sibling = i + 1 if i % 2 == 1 else i - 1
            proof.append(_hex(self.tree[sibling]))
            i = (i - 1) // 2
        return proof

    def dump(self) -> dict[str, Any]:
        """Serializable `standard-v1` dump (uint256 values as decimal strings)."""
        return {
            "format": "standard-v1",
            "leafEncoding": list(LEAF_ENCODING),
            "tree": [_hex(node) for node in self.tree],
            "values": [
                {"value": [addr, str(amount)], "treeIndex": idx}
                for (addr, amount), idx in zip(self.values, self.tree_indices)
            ],
        }


def build_airdrop_tree(
    entries: Sequence[AirdropEntry], decimals: int = TOKEN_DECIMALS
) -> AirdropTree:
    """Build the Merkle tree for a list of airdrop entries.

    Raises:
      ValueError: if `entries` is empty.
    """
    if not entries:
        raise ValueError("Cannot build an airdrop tree without entries")

    values = tuple(
        (Web3.to_checksum_address(e.address), to_base_units(e.amount, decimals))
        for e in entries
    )
    hashed = sorted(
        ((leaf_hash(addr, amount), i) for i, (addr, amount) in enumerate(values)),
        key=lambda t: t[0],
    )

    size = 2 * len(hashed) - 1
    tree: list[bytes] = [b""] * size
    tree_indices = [0] * len(values)
    for leaf_pos, (h, value_index) in enumerate(hashed):
        tree_index = size - 1 - leaf_pos
        tree[tree_index] = h
        tree_indices[value_index] = tree_index
    for i in range(size - 1 - len(hashed), -1, -1):
        tree[i] = hash_pair(tree[2 * i + 1], tree[2 * i + 2])

    return AirdropTree(tuple(tree), values, tuple(tree_indices))


def verify(root: str, address: str, amount: int, proof: Sequence[str]) -> bool:
    """Check a base-unit `(address, amount)` claim against `root`."""
    node = leaf_hash(address, amount)
    for sibling in proof:
        node = hash_pair(node, _unhex(sibling))
    return _hex(node) == root.lower()
