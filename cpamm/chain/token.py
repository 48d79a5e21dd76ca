"""Fungible-token ledger with standard ERC-20 transfer/approve semantics.

The exchange only depends on the ``TokenLedger`` protocol. ``Token`` is the
in-memory ledger the local chain deploys; any object satisfying the protocol
can stand in for it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from cpamm.errors import InsufficientAllowance, InsufficientBalance
from cpamm.models.types import normalize_address
from cpamm.safe_int import UINT256_MAX, S, require_uint256


@runtime_checkable
class TokenLedger(Protocol):
    """Interface the exchange uses to move tokens in and out of custody."""

    address: str
    name: str
    symbol: str

    @property
    def total_supply(self) -> int: ...

    def balance_of(self, owner: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move amount from sender to recipient.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        """Move amount from owner to recipient on behalf of spender.

        Raises:
            InsufficientAllowance: If owner approved spender for less than amount
            InsufficientBalance: If owner holds less than amount
        """
        ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


class Token:
    """In-memory ERC-20 token.

    An allowance of ``UINT256_MAX`` is treated as unlimited and is not
    decreased by ``transfer_from``.
    """

    def __init__(
        self,
        address: str,
        name: str,
        symbol: str,
        initial_supply: int = 0,
        owner: str | None = None,
        decimals: int = 18,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

        if initial_supply:
            if owner is None:
                raise ValueError("initial_supply requires an owner")
            self.mint(owner, initial_supply)

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.address})"

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, owner: str) -> int:
        return self._balances.get(normalize_address(owner), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def mint(self, account: str, amount: int) -> None:
        require_uint256("amount", amount)
        account = normalize_address(account)
        self._total_supply = (S(self._total_supply) + S(amount)).to_uint256()
        self._set_balance(account, self.balance_of(account) + amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        require_uint256("amount", amount)
        key = (normalize_address(owner), normalize_address(spender))
        if amount == 0:
            self._allowances.pop(key, None)
        else:
            self._allowances[key] = amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        require_uint256("amount", amount)
        self._move(normalize_address(sender), normalize_address(recipient), amount)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        require_uint256("amount", amount)
        owner = normalize_address(owner)
        spender = normalize_address(spender)

        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{self.symbol}: insufficient allowance: {spender} may spend {allowed} "
                f"of {owner}, needs {amount}"
            )
        self._move(owner, normalize_address(recipient), amount)
        if allowed != UINT256_MAX:
            self.approve(owner, spender, allowed - amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{self.symbol}: transfer amount exceeds balance: {sender} has {balance}, "
                f"needs {amount}"
            )
        if amount == 0 or sender == recipient:
            return
        self._set_balance(sender, balance - amount)
        self._set_balance(recipient, self.balance_of(recipient) + amount)

    def _set_balance(self, owner: str, amount: int) -> None:
        if amount == 0:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = amount

    # --- Unit-of-work participation ---

    def snapshot(self) -> tuple[dict[str, int], dict[tuple[str, str], int], int]:
        return dict(self._balances), dict(self._allowances), self._total_supply

    def restore(self, state: tuple[dict[str, int], dict[tuple[str, str], int], int]) -> None:
        balances, allowances, total_supply = state
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total_supply = total_supply
