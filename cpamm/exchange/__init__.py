"""Constant-product exchange core: pricing, LP shares, swaps, factory."""

from cpamm.exchange.exchange import Exchange, ExchangeState
from cpamm.exchange.factory import Factory
from cpamm.exchange.invariants import assert_invariants, check_invariants
from cpamm.exchange.liquidity import LiquidityLedger
from cpamm.exchange.reserves import ReserveAccounting, quote_output, quote_price

__all__ = [
    # Pricing
    "ReserveAccounting",
    "quote_output",
    "quote_price",
    # LP shares
    "LiquidityLedger",
    # Exchange and registry
    "Exchange",
    "ExchangeState",
    "Factory",
    # Audit
    "check_invariants",
    "assert_invariants",
]
