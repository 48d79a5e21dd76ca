"""Native-coin / token exchange.

One Exchange pairs the chain's native coin with a single token. It owns a
ReserveAccounting (the two reserves and the pricing formula) and a
LiquidityLedger (LP shares), and exposes the liquidity and swap operations.

Every operation quotes and checks its guards before touching any state, then
applies its mutations inside a UnitOfWork spanning the exchange, its token
ledger and the native ledger, so a failure at any point leaves no trace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from cpamm.chain.chain import Chain
from cpamm.chain.token import TokenLedger
from cpamm.chain.unit_of_work import Participant, UnitOfWork
from cpamm.errors import (
    ExchangeNotFound,
    InsufficientOutputAmount,
    InsufficientTokenAmount,
    InvalidExchange,
    InvalidState,
)
from cpamm.exchange.liquidity import LiquidityLedger
from cpamm.exchange.reserves import ReserveAccounting, quote_price
from cpamm.models.types import normalize_address
from cpamm.safe_int import require_uint256

if TYPE_CHECKING:
    from cpamm.exchange.factory import Factory

logger = structlog.get_logger()


@dataclass(frozen=True)
class ExchangeState:
    """Point-in-time view of an exchange, for inspection and reporting."""

    address: str
    token_id: str
    factory_address: str
    name: str
    symbol: str
    native_reserve: int
    token_reserve: int
    total_supply: int


class Exchange:
    """Constant-product exchange between the native coin and one token.

    Attributes:
        address: The exchange's own account; holds both reserves on the chain
        token_id: Address of the paired token (immutable)
        factory_address: Account that created the exchange (immutable)
        factory: Registry used to route token-to-token swaps, if any
    """

    def __init__(
        self,
        chain: Chain,
        token: TokenLedger,
        name: str,
        symbol: str,
        address: str,
        factory_address: str,
        factory: Factory | None = None,
    ) -> None:
        self.chain = chain
        self.token = token
        self.address = normalize_address(address, validate=True)
        self.factory_address = normalize_address(factory_address, validate=True)
        self.factory = factory
        self.reserves = ReserveAccounting()
        self.liquidity = LiquidityLedger(name=name, symbol=symbol)

    @classmethod
    def deploy(
        cls,
        chain: Chain,
        name: str,
        symbol: str,
        token_id: str,
        deployer: str,
    ) -> Exchange:
        """Deploy a standalone exchange, outside any factory.

        The deployer is recorded as the factory address. A standalone
        exchange has no registry, so token-to-token swaps from it raise
        ExchangeNotFound.
        """
        token = chain.token(token_id)
        if token is None:
            raise ValueError(f"No token deployed at {token_id}")
        return cls(
            chain=chain,
            token=token,
            name=name,
            symbol=symbol,
            address=chain.new_address(deployer),
            factory_address=deployer,
        )

    def __repr__(self) -> str:
        return (
            f"Exchange({self.symbol}, address={self.address}, "
            f"reserves=({self.native_reserve}, {self.token_reserve}))"
        )

    # --- Read-only views ---

    @property
    def token_id(self) -> str:
        return normalize_address(self.token.address)

    @property
    def name(self) -> str:
        return self.liquidity.name

    @property
    def symbol(self) -> str:
        return self.liquidity.symbol

    @property
    def native_reserve(self) -> int:
        return self.reserves.native_reserve

    @property
    def token_reserve(self) -> int:
        return self.reserves.token_reserve

    @property
    def total_supply(self) -> int:
        """Outstanding LP shares."""
        return self.liquidity.total_supply

    def balance_of(self, owner: str) -> int:
        """LP shares held by owner."""
        return self.liquidity.balance_of(owner)

    def get_reserve(self) -> int:
        """Token reserve held by this exchange."""
        return self.reserves.token_reserve

    def get_price(self, input_reserve: int, output_reserve: int) -> int:
        """Fee-free price for arbitrary reserves, scaled by 1e18."""
        return quote_price(input_reserve, output_reserve)

    def get_token_amount(self, eth_sold: int) -> int:
        """Tokens an eth_to_token swap of eth_sold would pay out right now."""
        return self.reserves.quote_native_in(eth_sold)

    def get_eth_amount(self, tokens_sold: int) -> int:
        """Native coin a token_to_eth swap of tokens_sold would pay out right now."""
        return self.reserves.quote_token_in(tokens_sold)

    def state(self) -> ExchangeState:
        return ExchangeState(
            address=self.address,
            token_id=self.token_id,
            factory_address=self.factory_address,
            name=self.name,
            symbol=self.symbol,
            native_reserve=self.native_reserve,
            token_reserve=self.token_reserve,
            total_supply=self.total_supply,
        )

    # --- Liquidity ---

    def add_liquidity(self, token_amount: int, *, sender: str, value: int = 0) -> int:
        """Deposit native coin (value) and tokens in exchange for LP shares.

        Into an empty pool both amounts are taken as offered and fix the
        initial price; both must be nonzero, or both zero for a no-op.
        Otherwise the deposit must match the current ratio: exactly
        ceil(value * token_reserve / native_reserve) tokens are pulled, and
        token_amount is only the most the sender will part with.

        Args:
            token_amount: Maximum tokens the sender offers
            sender: Depositing account; must have approved this exchange
            value: Native coin attached to the call

        Returns:
            LP shares minted to sender

        Raises:
            InsufficientTokenAmount: If token_amount is below the ratio requirement
            InvalidState: If a first deposit brings only one of the two assets
        """
        require_uint256("token_amount", token_amount)
        require_uint256("value", value)
        sender = normalize_address(sender)

        if self.reserves.is_empty:
            if (value == 0) != (token_amount == 0):
                logger.warning(
                    "liquidity_rejected",
                    exchange=self.address[-8:],
                    provider=sender[-8:],
                    native_amount=value,
                    token_amount=token_amount,
                )
                raise InvalidState(
                    f"invalid reserves: first deposit needs both assets, got {value} native "
                    f"and {token_amount} tokens"
                )
            token_in = token_amount
        else:
            token_in = self.reserves.required_token_deposit(value)
            if token_amount < token_in:
                logger.warning(
                    "liquidity_rejected",
                    exchange=self.address[-8:],
                    provider=sender[-8:],
                    token_amount=token_amount,
                    required=token_in,
                )
                raise InsufficientTokenAmount(
                    f"insufficient token amount: offered {token_amount}, required {token_in}"
                )

        with self._unit_of_work("add_liquidity"):
            self.chain.native.transfer(sender, self.address, value)
            self.token.transfer_from(self.address, sender, self.address, token_in)
            shares = self.liquidity.mint_for_deposit(sender, value, self.reserves.native_reserve)
            self.reserves.deposit(value, token_in)

        logger.info(
            "liquidity_added",
            exchange=self.address[-8:],
            provider=sender[-8:],
            native_amount=value,
            token_amount=token_in,
            shares=shares,
        )
        return shares

    def remove_liquidity(self, amount: int, *, sender: str) -> tuple[int, int]:
        """Burn LP shares and pay out the pro-rata share of both reserves.

        Returns:
            Tuple of (native_out, token_out) sent to sender

        Raises:
            InsufficientShares: If sender holds fewer than amount shares
        """
        require_uint256("amount", amount)
        sender = normalize_address(sender)

        with self._unit_of_work("remove_liquidity"):
            native_out, token_out = self.liquidity.burn_for_withdrawal(
                sender, amount, self.reserves.native_reserve, self.reserves.token_reserve
            )
            self.reserves.withdraw(native_out, token_out)
            self.chain.native.transfer(self.address, sender, native_out)
            self.token.transfer(self.address, sender, token_out)

        logger.info(
            "liquidity_removed",
            exchange=self.address[-8:],
            provider=sender[-8:],
            shares=amount,
            native_amount=native_out,
            token_amount=token_out,
        )
        return native_out, token_out

    # --- Swaps ---

    def eth_to_token_swap(self, min_tokens: int, *, sender: str, value: int) -> int:
        """Sell value native coin for at least min_tokens tokens, paid to sender."""
        return self._eth_to_token(value, min_tokens, sender=sender, recipient=sender)

    def eth_to_token_transfer(
        self, min_tokens: int, recipient: str, *, sender: str, value: int
    ) -> int:
        """Sell value native coin for at least min_tokens tokens, paid to recipient."""
        return self._eth_to_token(value, min_tokens, sender=sender, recipient=recipient)

    def token_to_eth_swap(self, tokens_sold: int, min_eth: int, *, sender: str) -> int:
        """Sell tokens_sold tokens for at least min_eth native coin.

        Returns:
            Native coin paid to sender

        Raises:
            InsufficientOutputAmount: If the output is below min_eth
        """
        require_uint256("tokens_sold", tokens_sold)
        require_uint256("min_eth", min_eth)
        sender = normalize_address(sender)

        eth_bought = self.reserves.quote_token_in(tokens_sold)
        self._check_output("token_to_eth", eth_bought, min_eth)

        with self._unit_of_work("token_to_eth_swap"):
            self.token.transfer_from(self.address, sender, self.address, tokens_sold)
            self.reserves.swap_token_in(tokens_sold, eth_bought)
            self.chain.native.transfer(self.address, sender, eth_bought)

        logger.info(
            "eth_purchase",
            exchange=self.address[-8:],
            buyer=sender[-8:],
            tokens_sold=tokens_sold,
            eth_bought=eth_bought,
        )
        return eth_bought

    def token_to_token_swap(
        self,
        tokens_sold: int,
        min_tokens_bought: int,
        token_id: str,
        *,
        sender: str,
    ) -> int:
        """Sell this exchange's token for another token, via the native coin.

        The first leg sells tokens_sold here for native coin, which stays in
        flight instead of being paid out; the second leg spends it on the
        exchange registered for token_id, paying the bought tokens to sender.
        Both legs are quoted before either is applied, and both are applied
        inside one unit of work.

        Returns:
            Tokens of token_id paid to sender

        Raises:
            ExchangeNotFound: If no exchange is registered for token_id
            InvalidExchange: If token_id resolves to this exchange
            InsufficientOutputAmount: If the final output is below min_tokens_bought
        """
        require_uint256("tokens_sold", tokens_sold)
        require_uint256("min_tokens_bought", min_tokens_bought)
        sender = normalize_address(sender)
        other = self._resolve_exchange(token_id)

        eth_bought = self.reserves.quote_token_in(tokens_sold)
        tokens_bought = other.reserves.quote_native_in(eth_bought)
        self._check_output("token_to_token", tokens_bought, min_tokens_bought)

        with self._unit_of_work("token_to_token_swap", other, other.token):
            self.token.transfer_from(self.address, sender, self.address, tokens_sold)
            self.reserves.swap_token_in(tokens_sold, eth_bought)
            tokens_bought = other._eth_to_token(
                eth_bought, min_tokens_bought, sender=self.address, recipient=sender
            )

        logger.info(
            "token_to_token_swap",
            exchange=self.address[-8:],
            target=other.address[-8:],
            trader=sender[-8:],
            tokens_sold=tokens_sold,
            eth_intermediate=eth_bought,
            tokens_bought=tokens_bought,
        )
        return tokens_bought

    def _eth_to_token(self, eth_sold: int, min_tokens: int, *, sender: str, recipient: str) -> int:
        require_uint256("value", eth_sold)
        require_uint256("min_tokens", min_tokens)
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)

        tokens_bought = self.reserves.quote_native_in(eth_sold)
        self._check_output("eth_to_token", tokens_bought, min_tokens)

        with self._unit_of_work("eth_to_token_swap"):
            self.chain.native.transfer(sender, self.address, eth_sold)
            self.reserves.swap_native_in(eth_sold, tokens_bought)
            self.token.transfer(self.address, recipient, tokens_bought)

        logger.info(
            "token_purchase",
            exchange=self.address[-8:],
            buyer=sender[-8:],
            recipient=recipient[-8:],
            eth_sold=eth_sold,
            tokens_bought=tokens_bought,
        )
        return tokens_bought

    # --- Helpers ---

    def _check_output(self, kind: str, amount_out: int, min_out: int) -> None:
        if amount_out < min_out:
            logger.warning(
                "swap_rejected",
                exchange=self.address[-8:],
                kind=kind,
                amount_out=amount_out,
                min_out=min_out,
            )
            raise InsufficientOutputAmount(
                f"insufficient output amount: {amount_out} < minimum {min_out}"
            )

    def _resolve_exchange(self, token_id: str) -> Exchange:
        if self.factory is None:
            raise ExchangeNotFound(f"exchange {self.address} has no registry to route {token_id}")
        other = self.factory.get_exchange(token_id)
        if other is None:
            raise ExchangeNotFound(f"no exchange for token {token_id}")
        if other is self:
            raise InvalidExchange("invalid exchange address")
        return other

    def _unit_of_work(self, name: str, *others: Participant) -> UnitOfWork:
        return UnitOfWork(name, self, self.token, self.chain.native, *others)

    # --- Unit-of-work participation ---

    def snapshot(self) -> tuple[tuple[int, int], tuple[int, dict[str, int]]]:
        return self.reserves.snapshot(), self.liquidity.snapshot()

    def restore(self, state: tuple[tuple[int, int], tuple[int, dict[str, int]]]) -> None:
        reserves, liquidity = state
        self.reserves.restore(reserves)
        self.liquidity.restore(liquidity)
