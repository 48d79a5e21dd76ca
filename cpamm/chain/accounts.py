"""Deterministic address derivation for accounts created on the local chain.

Mirrors contract-creation addressing: a new address depends only on its
creator and the creator's deployment nonce, so replaying the same sequence of
deployments always yields the same addresses.
"""

from __future__ import annotations

import hashlib

from eth_abi import encode  # type: ignore[attr-defined]

from cpamm.models.types import is_valid_address, normalize_address


def derive_address(creator: str, nonce: int) -> str:
    """Derive the address of the nonce-th object created by creator.

    The pair is ABI-encoded as ``(address, uint256)`` and hashed; the last
    20 bytes of the digest form the new address.

    Args:
        creator: Address of the deploying account or contract
        nonce: Per-creator deployment counter

    Returns:
        Lowercase 0x-prefixed address

    Raises:
        ValueError: If creator is not a valid address or nonce is negative
    """
    creator = normalize_address(creator)
    if not is_valid_address(creator):
        raise ValueError(f"Invalid creator address: {creator}")
    if nonce < 0:
        raise ValueError(f"Nonce cannot be negative: {nonce}")

    encoded = encode(["address", "uint256"], [bytes.fromhex(creator[2:]), nonce])
    digest = hashlib.sha256(encoded).digest()
    return "0x" + digest[-20:].hex()


def account(label: str) -> str:
    """Derive a stable externally-owned account address from a label.

    Handy for tests and local scripts: ``account("alice")`` is the same
    address on every run.
    """
    digest = hashlib.sha256(encode(["string"], [label])).digest()
    return "0x" + digest[-20:].hex()
