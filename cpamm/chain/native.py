"""Native-coin balances on the local chain."""

from __future__ import annotations

import structlog

from cpamm.errors import InsufficientBalance
from cpamm.models.types import normalize_address
from cpamm.safe_int import S, require_uint256

logger = structlog.get_logger()


class NativeLedger:
    """Balances of the chain's base asset, keyed by address.

    Native coin only enters circulation through ``credit`` (genesis or
    faucet); after that it moves only by ``transfer``, so ``total_supply``
    equals the sum of all credits.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, owner: str) -> int:
        return self._balances.get(normalize_address(owner), 0)

    def credit(self, account: str, amount: int) -> None:
        """Mint native coin into an account."""
        require_uint256("amount", amount)
        account = normalize_address(account)
        self._balances[account] = (S(self.balance_of(account)) + S(amount)).to_uint256()
        self._total_supply = (S(self._total_supply) + S(amount)).to_uint256()
        logger.debug("native_credited", account=account[-8:], amount=amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move native coin between accounts.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        require_uint256("amount", amount)
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)

        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"insufficient native balance: {sender} has {balance}, needs {amount}"
            )
        if amount == 0 or sender == recipient:
            return

        self._set(sender, balance - amount)
        self._set(recipient, (S(self.balance_of(recipient)) + S(amount)).to_uint256())

    def _set(self, owner: str, amount: int) -> None:
        if amount == 0:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = amount

    # --- Unit-of-work participation ---

    def snapshot(self) -> tuple[dict[str, int], int]:
        return dict(self._balances), self._total_supply

    def restore(self, state: tuple[dict[str, int], int]) -> None:
        balances, total_supply = state
        self._balances = dict(balances)
        self._total_supply = total_supply
