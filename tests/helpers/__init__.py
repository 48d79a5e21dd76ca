"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Accounts and common amounts
- factories: Pool funding and trader setup functions
"""

from tests.helpers.constants import (
    OTHER,
    OWNER,
    STARTING_NATIVE,
    TOKEN_SUPPLY,
    UNKNOWN_ADDRESS,
    USER,
)
from tests.helpers.factories import expected_output, fund_pool, give_tokens

__all__ = [
    # Constants
    "OWNER",
    "USER",
    "OTHER",
    "STARTING_NATIVE",
    "TOKEN_SUPPLY",
    "UNKNOWN_ADDRESS",
    # Factories
    "fund_pool",
    "give_tokens",
    "expected_output",
]
