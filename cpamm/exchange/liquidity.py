"""LP share ledger for one exchange.

LP shares are a fungible claim on a fixed fraction of both reserves. They are
only ever minted against a deposit and burned against a withdrawal, so the
ledger exposes balance queries plus those two operations and nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cpamm.errors import InsufficientShares
from cpamm.models.types import normalize_address
from cpamm.safe_int import S, require_uint256


@dataclass
class LiquidityLedger:
    """Per-provider LP share balances and their total.

    Zero balances are dropped, and ``total_supply`` always equals the sum of
    ``balances``.
    """

    name: str
    symbol: str
    total_supply: int = 0
    balances: dict[str, int] = field(default_factory=dict)

    def balance_of(self, owner: str) -> int:
        return self.balances.get(normalize_address(owner), 0)

    def holders(self) -> dict[str, int]:
        return dict(self.balances)

    def mint_for_deposit(self, provider: str, native_amount: int, native_reserve: int) -> int:
        """Issue shares for a deposit of native_amount.

        The first deposit into an empty pool mints one share per unit of
        native coin. Later deposits mint in proportion to the share of the
        native reserve being added, rounded down.

        Args:
            provider: Account receiving the shares
            native_amount: Native coin being deposited
            native_reserve: Native reserve before the deposit

        Returns:
            Number of shares issued
        """
        require_uint256("native_amount", native_amount)
        if self.total_supply == 0:
            shares = native_amount
        else:
            shares = (S(native_amount) * S(self.total_supply) // S(native_reserve)).value

        provider = normalize_address(provider)
        self._set(provider, (S(self.balance_of(provider)) + S(shares)).to_uint256())
        self.total_supply = (S(self.total_supply) + S(shares)).to_uint256()
        return shares

    def burn_for_withdrawal(
        self,
        provider: str,
        share_amount: int,
        native_reserve: int,
        token_reserve: int,
    ) -> tuple[int, int]:
        """Burn shares and compute the pro-rata claim on both reserves.

        Args:
            provider: Account burning the shares
            share_amount: Shares to burn
            native_reserve: Native reserve before the withdrawal
            token_reserve: Token reserve before the withdrawal

        Returns:
            Tuple of (native_out, token_out), each rounded down

        Raises:
            InsufficientShares: If provider holds fewer than share_amount shares
        """
        require_uint256("share_amount", share_amount)
        provider = normalize_address(provider)
        held = self.balance_of(provider)
        if share_amount > held:
            raise InsufficientShares(
                f"burn amount exceeds balance: {provider} holds {held}, burning {share_amount}"
            )
        if share_amount == 0:
            return 0, 0

        native_out = (S(share_amount) * S(native_reserve) // S(self.total_supply)).value
        token_out = (S(share_amount) * S(token_reserve) // S(self.total_supply)).value

        self._set(provider, held - share_amount)
        self.total_supply = (S(self.total_supply) - S(share_amount)).value
        return native_out, token_out

    def _set(self, owner: str, amount: int) -> None:
        if amount == 0:
            self.balances.pop(owner, None)
        else:
            self.balances[owner] = amount

    def snapshot(self) -> tuple[int, dict[str, int]]:
        return self.total_supply, dict(self.balances)

    def restore(self, state: tuple[int, dict[str, int]]) -> None:
        self.total_supply, balances = state
        self.balances = dict(balances)
