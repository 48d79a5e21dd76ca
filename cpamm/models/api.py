"""Pydantic models for the HTTP surface.

Field names follow the exchange's compatibility names (camelCase on the wire,
snake_case in Python). Amounts are uint256 decimal strings.
"""

from pydantic import BaseModel, Field

from cpamm.exchange.exchange import ExchangeState
from cpamm.models.types import Address, Uint256


class CreateExchangeRequest(BaseModel):
    """Body of POST /exchanges."""

    lp_token_name: str = Field(alias="lpTokenName", min_length=1)
    lp_token_symbol: str = Field(alias="lpTokenSymbol", min_length=1)
    token_id: Address = Field(alias="tokenId")

    model_config = {"populate_by_name": True}


class ExchangeAddress(BaseModel):
    """An exchange's address."""

    address: Address


class ExchangeStateResponse(BaseModel):
    """Reserves and LP supply of one exchange."""

    address: Address
    token_id: Address = Field(alias="tokenId")
    factory_address: Address = Field(alias="factoryAddress")
    name: str
    symbol: str
    native_reserve: Uint256 = Field(alias="nativeReserve")
    token_reserve: Uint256 = Field(alias="tokenReserve")
    total_supply: Uint256 = Field(alias="totalSupply")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_state(cls, state: ExchangeState) -> "ExchangeStateResponse":
        return cls(
            address=state.address,
            token_id=state.token_id,
            factory_address=state.factory_address,
            name=state.name,
            symbol=state.symbol,
            native_reserve=state.native_reserve,
            token_reserve=state.token_reserve,
            total_supply=state.total_supply,
        )


class Quote(BaseModel):
    """Read-only swap quote."""

    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class AddLiquidityRequest(BaseModel):
    """Body of POST /exchanges/{token_id}/liquidity."""

    sender: Address
    token_amount: Uint256 = Field(alias="tokenAmount")
    value: Uint256 = Field(default="0", description="Native coin attached to the call")

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    shares: Uint256


class RemoveLiquidityRequest(BaseModel):
    """Body of POST /exchanges/{token_id}/liquidity/remove."""

    sender: Address
    amount: Uint256 = Field(description="LP shares to burn")


class RemoveLiquidityResponse(BaseModel):
    native_out: Uint256 = Field(alias="nativeOut")
    token_out: Uint256 = Field(alias="tokenOut")

    model_config = {"populate_by_name": True}


class EthToTokenRequest(BaseModel):
    """Body of POST /exchanges/{token_id}/swaps/eth-to-token.

    With ``recipient`` set this is ethToTokenTransfer, otherwise ethToTokenSwap.
    """

    sender: Address
    value: Uint256
    min_tokens: Uint256 = Field(alias="minTokens")
    recipient: Address | None = None

    model_config = {"populate_by_name": True}


class TokenToEthRequest(BaseModel):
    """Body of POST /exchanges/{token_id}/swaps/token-to-eth."""

    sender: Address
    tokens_sold: Uint256 = Field(alias="tokensSold")
    min_eth: Uint256 = Field(alias="minEth")

    model_config = {"populate_by_name": True}


class TokenToTokenRequest(BaseModel):
    """Body of POST /exchanges/{token_id}/swaps/token-to-token."""

    sender: Address
    tokens_sold: Uint256 = Field(alias="tokensSold")
    min_tokens_bought: Uint256 = Field(alias="minTokensBought")
    token_id: Address = Field(alias="tokenId", description="Token to buy")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Body of every domain-error response."""

    detail: str
    error: str
