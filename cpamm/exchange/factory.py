"""Factory and registry of exchanges, one per token.

The factory deploys exchanges and is the registry exchanges consult to route
token-to-token swaps. It is an ordinary object owned by whoever builds it;
there is no process-wide instance.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from cpamm.chain.accounts import account
from cpamm.chain.chain import Chain
from cpamm.constants import ZERO_ADDRESS
from cpamm.errors import ExchangeAlreadyExists, InvalidTokenId
from cpamm.exchange.exchange import Exchange
from cpamm.models.types import is_valid_address, normalize_address

logger = structlog.get_logger()

DEFAULT_DEPLOYER = account("cpamm-factory-deployer")


class Factory:
    """Creates exchanges and maps each token to its exchange.

    Each token gets at most one exchange. Lookups are O(1) both by token and
    by exchange address.
    """

    def __init__(self, chain: Chain, deployer: str = DEFAULT_DEPLOYER) -> None:
        self.chain = chain
        self.address = chain.new_address(deployer)
        self._by_token: dict[str, Exchange] = {}
        self._by_address: dict[str, Exchange] = {}

    def __len__(self) -> int:
        return len(self._by_token)

    def __iter__(self) -> Iterator[Exchange]:
        return iter(list(self._by_token.values()))

    def create_exchange(self, lp_token_name: str, lp_token_symbol: str, token_id: str) -> Exchange:
        """Deploy and register the exchange for a token.

        Args:
            lp_token_name: Name of the exchange's LP share unit
            lp_token_symbol: Symbol of the exchange's LP share unit
            token_id: Address of the token to pair with the native coin

        Returns:
            The new exchange; its address is ``exchange.address``

        Raises:
            InvalidTokenId: If token_id is the zero address or no such token exists
            ExchangeAlreadyExists: If the token already has an exchange
        """
        if not is_valid_address(normalize_address(token_id)):
            raise InvalidTokenId(f"invalid token address: {token_id}")
        token_id = normalize_address(token_id)
        if token_id == ZERO_ADDRESS:
            raise InvalidTokenId("invalid token address")

        token = self.chain.token(token_id)
        if token is None:
            raise InvalidTokenId(f"invalid token address: no token deployed at {token_id}")
        if token_id in self._by_token:
            raise ExchangeAlreadyExists(f"exchange already exists for token {token_id}")

        exchange = Exchange(
            chain=self.chain,
            token=token,
            name=lp_token_name,
            symbol=lp_token_symbol,
            address=self.chain.new_address(self.address),
            factory_address=self.address,
            factory=self,
        )
        self._by_token[token_id] = exchange
        self._by_address[exchange.address] = exchange

        logger.info(
            "exchange_created",
            token=token_id,
            exchange=exchange.address,
            symbol=lp_token_symbol,
            exchange_count=len(self._by_token),
        )
        return exchange

    def get_exchange(self, token_id: str) -> Exchange | None:
        """Exchange for a token, or None if the token has none yet."""
        return self._by_token.get(normalize_address(token_id))

    def token_to_exchange(self, token_id: str) -> str:
        """Raw mapping read: exchange address for a token, zero address if unset."""
        exchange = self.get_exchange(token_id)
        return exchange.address if exchange is not None else ZERO_ADDRESS

    def exchange_at(self, address: str) -> Exchange | None:
        """Resolve an exchange address back to its handle."""
        return self._by_address.get(normalize_address(address))

    def exchanges(self) -> list[Exchange]:
        return list(self._by_token.values())
