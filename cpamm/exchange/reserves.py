"""Reserve accounting and constant-product pricing.

The exchange prices trades with the constant product formula x * y = k,
charging a 1% fee on the input amount. The fee is folded into the pricing
expression itself:

    amount_out = (amount_in * 99 * reserve_out) / (reserve_in * 100 + amount_in * 99)

so there is a single rounding point, and truncation always favors the pool.
"""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.constants import FEE_DENOMINATOR, FEE_NUMERATOR, PRICE_SCALE
from cpamm.errors import InvalidState
from cpamm.safe_int import S, require_uint256


def quote_output(amount_in: int, input_reserve: int, output_reserve: int) -> int:
    """Calculate the output of an exact-input swap, net of fee.

    Args:
        amount_in: Amount of the input asset sent to the pool
        input_reserve: Pool reserve of the input asset
        output_reserve: Pool reserve of the output asset

    Returns:
        Output amount, rounded down

    Raises:
        InvalidState: If either reserve is zero
        ValueError: If amount_in is negative
    """
    require_uint256("amount_in", amount_in)
    if input_reserve <= 0 or output_reserve <= 0:
        raise InvalidState("invalid reserves")
    if amount_in == 0:
        return 0

    amount_in_with_fee = S(amount_in) * S(FEE_NUMERATOR)
    numerator = amount_in_with_fee * S(output_reserve)
    denominator = S(input_reserve) * S(FEE_DENOMINATOR) + amount_in_with_fee

    return (numerator // denominator).value


def quote_price(input_reserve: int, output_reserve: int) -> int:
    """Fee-free spot price of the output asset in input units, scaled by 1e18.

    Informational only; swaps are priced with quote_output.

    Raises:
        InvalidState: If either reserve is zero
    """
    if input_reserve <= 0 or output_reserve <= 0:
        raise InvalidState("invalid reserves")
    return (S(input_reserve) * S(PRICE_SCALE) // S(output_reserve)).value


@dataclass
class ReserveAccounting:
    """The two reserves of one exchange.

    Kept in lockstep with the exchange's native and token balances on the
    chain; every mutation goes through checked arithmetic so an overflow or
    an over-withdrawal aborts instead of wrapping.
    """

    native_reserve: int = 0
    token_reserve: int = 0

    @property
    def is_empty(self) -> bool:
        return self.native_reserve == 0

    @property
    def product(self) -> int:
        """Constant-product invariant k = native * token."""
        return self.native_reserve * self.token_reserve

    def quote_native_in(self, native_in: int) -> int:
        """Tokens paid out for native_in native coin."""
        return quote_output(native_in, self.native_reserve, self.token_reserve)

    def quote_token_in(self, token_in: int) -> int:
        """Native coin paid out for token_in tokens."""
        return quote_output(token_in, self.token_reserve, self.native_reserve)

    def required_token_deposit(self, native_amount: int) -> int:
        """Tokens that must accompany native_amount to keep the current ratio.

        Rounded up so a depositor can never dilute the token side.
        """
        return (S(native_amount) * S(self.token_reserve)).ceiling_div(self.native_reserve).value

    def deposit(self, native_amount: int, token_amount: int) -> None:
        self.native_reserve = (S(self.native_reserve) + S(native_amount)).to_uint256()
        self.token_reserve = (S(self.token_reserve) + S(token_amount)).to_uint256()

    def withdraw(self, native_amount: int, token_amount: int) -> None:
        self.native_reserve = (S(self.native_reserve) - S(native_amount)).to_uint256()
        self.token_reserve = (S(self.token_reserve) - S(token_amount)).to_uint256()

    def swap_native_in(self, native_in: int, token_out: int) -> None:
        self.native_reserve = (S(self.native_reserve) + S(native_in)).to_uint256()
        self.token_reserve = (S(self.token_reserve) - S(token_out)).to_uint256()

    def swap_token_in(self, token_in: int, native_out: int) -> None:
        self.token_reserve = (S(self.token_reserve) + S(token_in)).to_uint256()
        self.native_reserve = (S(self.native_reserve) - S(native_out)).to_uint256()

    def snapshot(self) -> tuple[int, int]:
        return self.native_reserve, self.token_reserve

    def restore(self, state: tuple[int, int]) -> None:
        self.native_reserve, self.token_reserve = state


__all__ = [
    "ReserveAccounting",
    "quote_output",
    "quote_price",
]
