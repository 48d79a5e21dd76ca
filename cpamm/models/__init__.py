"""Shared types and pydantic models.

Only the dependency-free types are re-exported here; the HTTP models live in
``cpamm.models.api`` and are imported from there.
"""

from cpamm.models.types import Address, Uint256, is_valid_address, normalize_address

__all__ = [
    "Address",
    "Uint256",
    "is_valid_address",
    "normalize_address",
]
