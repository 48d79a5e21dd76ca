"""The local execution substrate: native coin, deployed tokens, addresses."""

from __future__ import annotations

import structlog

from cpamm.chain.accounts import derive_address
from cpamm.chain.native import NativeLedger
from cpamm.chain.token import Token, TokenLedger
from cpamm.constants import ZERO_ADDRESS
from cpamm.models.types import normalize_address

logger = structlog.get_logger()


class Chain:
    """In-memory stand-in for the host VM the exchange runs on.

    Holds the native-coin ledger and every token deployed on it, and hands
    out deterministic addresses for new contracts.
    """

    def __init__(self) -> None:
        self.native = NativeLedger()
        self._tokens: dict[str, TokenLedger] = {}
        self._nonces: dict[str, int] = {}

    def new_address(self, creator: str) -> str:
        """Allocate the next contract address for creator."""
        creator = normalize_address(creator)
        nonce = self._nonces.get(creator, 0)
        self._nonces[creator] = nonce + 1
        return derive_address(creator, nonce)

    def deploy_token(
        self,
        name: str,
        symbol: str,
        initial_supply: int,
        owner: str,
        decimals: int = 18,
    ) -> Token:
        """Deploy a token whose whole initial supply is held by owner."""
        token = Token(
            address=self.new_address(owner),
            name=name,
            symbol=symbol,
            initial_supply=initial_supply,
            owner=owner,
            decimals=decimals,
        )
        self.register_token(token)
        logger.info(
            "token_deployed",
            symbol=symbol,
            address=token.address,
            initial_supply=initial_supply,
        )
        return token

    def register_token(self, token: TokenLedger) -> None:
        """Make an externally constructed token ledger resolvable by address."""
        address = normalize_address(token.address)
        if address == ZERO_ADDRESS:
            raise ValueError("Token cannot live at the zero address")
        if address in self._tokens:
            raise ValueError(f"Token already registered at {address}")
        self._tokens[address] = token

    def token(self, address: str) -> TokenLedger | None:
        return self._tokens.get(normalize_address(address))

    def tokens(self) -> list[TokenLedger]:
        return list(self._tokens.values())
