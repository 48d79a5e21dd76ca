"""Post-operation audit of an exchange's accounting.

Checks that hold after every successful operation:
  - Native reserve, token reserve and LP supply are zero together or not at all
  - LP supply equals the sum of LP balances, and no balance is zero or negative
  - The token reserve matches the token ledger's balance for the exchange
  - The native reserve matches the native ledger's balance for the exchange

The constant-product growth check needs a before/after pair, so it is
exposed separately as ``product_did_not_shrink``.
"""

from __future__ import annotations

from cpamm.errors import InvariantViolation
from cpamm.exchange.exchange import Exchange


def check_invariants(exchange: Exchange) -> list[str]:
    """Audit an exchange and return human-readable violations (empty if sound)."""
    violations: list[str] = []
    native_reserve = exchange.native_reserve
    token_reserve = exchange.token_reserve
    supply = exchange.total_supply
    balances = exchange.liquidity.holders()

    if not (supply == 0) == (native_reserve == 0) == (token_reserve == 0):
        violations.append(
            f"supply/reserve coupling broken: supply={supply}, "
            f"reserves=({native_reserve}, {token_reserve})"
        )

    held = sum(balances.values())
    if held != supply:
        violations.append(f"LP balances sum to {held}, total supply is {supply}")

    bad = [owner for owner, amount in balances.items() if amount <= 0]
    if bad:
        violations.append(f"non-positive LP balances stored for {bad}")

    if native_reserve < 0 or token_reserve < 0:
        violations.append(f"negative reserve: ({native_reserve}, {token_reserve})")

    token_custody = exchange.token.balance_of(exchange.address)
    if token_custody != token_reserve:
        violations.append(
            f"token reserve {token_reserve} out of step with ledger balance {token_custody}"
        )

    native_custody = exchange.chain.native.balance_of(exchange.address)
    if native_custody != native_reserve:
        violations.append(
            f"native reserve {native_reserve} out of step with ledger balance {native_custody}"
        )

    return violations


def assert_invariants(exchange: Exchange) -> None:
    """Raise InvariantViolation listing every failed check."""
    violations = check_invariants(exchange)
    if violations:
        raise InvariantViolation(f"{exchange.address}: " + "; ".join(violations))


def product_did_not_shrink(before: tuple[int, int], after: tuple[int, int]) -> bool:
    """True if native * token did not decrease between two reserve pairs."""
    return after[0] * after[1] >= before[0] * before[1]
