"""API endpoints for exchanges and the local chain.

Handlers are ``async`` and never await, so each operation runs to completion
on the event loop before the next one starts.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from cpamm.chain.chain import Chain
from cpamm.errors import ExchangeNotFound, InvalidTokenId
from cpamm.exchange.exchange import Exchange
from cpamm.exchange.factory import Factory
from cpamm.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    CreateExchangeRequest,
    ErrorResponse,
    EthToTokenRequest,
    ExchangeAddress,
    ExchangeStateResponse,
    Quote,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapResponse,
    TokenToEthRequest,
    TokenToTokenRequest,
)
from cpamm.models.types import Address, Uint256

# Query-string uint256, range-checked by the exchange
AmountIn = Annotated[str, Query(alias="amountIn", pattern=r"^[0-9]+$", max_length=78)]

logger = structlog.get_logger()

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    }
)


def get_factory(request: Request) -> Factory:
    """Dependency provider for the factory the app was built with.

    Override this in tests to inject a prepared factory:
        app.dependency_overrides[get_factory] = lambda: factory
    """
    factory: Factory = request.app.state.factory
    return factory


def _exchange_for(factory: Factory, token_id: str) -> Exchange:
    exchange = factory.get_exchange(token_id)
    if exchange is None:
        raise ExchangeNotFound(f"no exchange for token {token_id}")
    return exchange


# --- Exchanges ---


@router.post("/exchanges", status_code=201, responses={409: {"model": ErrorResponse}})
async def create_exchange(
    body: CreateExchangeRequest,
    factory: Factory = Depends(get_factory),
) -> ExchangeAddress:
    exchange = factory.create_exchange(body.lp_token_name, body.lp_token_symbol, body.token_id)
    return ExchangeAddress(address=exchange.address)


@router.get("/exchanges/{token_id}")
async def get_exchange(token_id: str, factory: Factory = Depends(get_factory)) -> ExchangeAddress:
    return ExchangeAddress(address=_exchange_for(factory, token_id).address)


@router.get("/exchanges/{token_id}/state")
async def get_exchange_state(
    token_id: str, factory: Factory = Depends(get_factory)
) -> ExchangeStateResponse:
    return ExchangeStateResponse.from_state(_exchange_for(factory, token_id).state())


@router.get("/exchanges/{token_id}/quotes/token-amount")
async def get_token_amount(
    token_id: str, amount_in: AmountIn, factory: Factory = Depends(get_factory)
) -> Quote:
    amount_out = _exchange_for(factory, token_id).get_token_amount(int(amount_in))
    return Quote(amount_in=amount_in, amount_out=amount_out)


@router.get("/exchanges/{token_id}/quotes/eth-amount")
async def get_eth_amount(
    token_id: str, amount_in: AmountIn, factory: Factory = Depends(get_factory)
) -> Quote:
    amount_out = _exchange_for(factory, token_id).get_eth_amount(int(amount_in))
    return Quote(amount_in=amount_in, amount_out=amount_out)


@router.post("/exchanges/{token_id}/liquidity")
async def add_liquidity(
    token_id: str,
    body: AddLiquidityRequest,
    factory: Factory = Depends(get_factory),
) -> AddLiquidityResponse:
    exchange = _exchange_for(factory, token_id)
    shares = exchange.add_liquidity(
        int(body.token_amount), sender=body.sender, value=int(body.value)
    )
    return AddLiquidityResponse(shares=shares)


@router.post("/exchanges/{token_id}/liquidity/remove")
async def remove_liquidity(
    token_id: str,
    body: RemoveLiquidityRequest,
    factory: Factory = Depends(get_factory),
) -> RemoveLiquidityResponse:
    exchange = _exchange_for(factory, token_id)
    native_out, token_out = exchange.remove_liquidity(int(body.amount), sender=body.sender)
    return RemoveLiquidityResponse(native_out=native_out, token_out=token_out)


@router.post("/exchanges/{token_id}/swaps/eth-to-token")
async def eth_to_token(
    token_id: str,
    body: EthToTokenRequest,
    factory: Factory = Depends(get_factory),
) -> SwapResponse:
    exchange = _exchange_for(factory, token_id)
    if body.recipient is None:
        out = exchange.eth_to_token_swap(
            int(body.min_tokens), sender=body.sender, value=int(body.value)
        )
    else:
        out = exchange.eth_to_token_transfer(
            int(body.min_tokens), body.recipient, sender=body.sender, value=int(body.value)
        )
    return SwapResponse(amount_out=out)


@router.post("/exchanges/{token_id}/swaps/token-to-eth")
async def token_to_eth(
    token_id: str,
    body: TokenToEthRequest,
    factory: Factory = Depends(get_factory),
) -> SwapResponse:
    exchange = _exchange_for(factory, token_id)
    out = exchange.token_to_eth_swap(int(body.tokens_sold), int(body.min_eth), sender=body.sender)
    return SwapResponse(amount_out=out)


@router.post("/exchanges/{token_id}/swaps/token-to-token")
async def token_to_token(
    token_id: str,
    body: TokenToTokenRequest,
    factory: Factory = Depends(get_factory),
) -> SwapResponse:
    exchange = _exchange_for(factory, token_id)
    out = exchange.token_to_token_swap(
        int(body.tokens_sold), int(body.min_tokens_bought), body.token_id, sender=body.sender
    )
    return SwapResponse(amount_out=out)


# --- Local chain (development helpers) ---


class DeployTokenRequest(BaseModel):
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    initial_supply: Uint256 = Field(alias="initialSupply")
    owner: Address

    model_config = {"populate_by_name": True}


class ApproveRequest(BaseModel):
    owner: Address
    spender: Address
    amount: Uint256


class FaucetRequest(BaseModel):
    account: Address
    amount: Uint256


class BalanceResponse(BaseModel):
    account: Address
    native: Uint256
    tokens: dict[str, Uint256]


def _chain(factory: Factory) -> Chain:
    return factory.chain


@router.post("/chain/tokens", status_code=201)
async def deploy_token(
    body: DeployTokenRequest, factory: Factory = Depends(get_factory)
) -> dict[str, str]:
    token = _chain(factory).deploy_token(
        body.name, body.symbol, int(body.initial_supply), body.owner
    )
    return {"address": token.address}


@router.post("/chain/tokens/{token_id}/approve")
async def approve(
    token_id: str, body: ApproveRequest, factory: Factory = Depends(get_factory)
) -> dict[str, str]:
    token = _chain(factory).token(token_id)
    if token is None:
        raise InvalidTokenId(f"invalid token address: no token deployed at {token_id}")
    token.approve(body.owner, body.spender, int(body.amount))
    return {"status": "ok"}


@router.post("/chain/faucet")
async def faucet(body: FaucetRequest, factory: Factory = Depends(get_factory)) -> dict[str, str]:
    _chain(factory).native.credit(body.account, int(body.amount))
    logger.info("faucet_credited", account=body.account, amount=body.amount)
    return {"status": "ok"}


@router.get("/chain/balances/{account}")
async def balances(account: str, factory: Factory = Depends(get_factory)) -> BalanceResponse:
    chain = _chain(factory)
    return BalanceResponse(
        account=account.lower(),
        native=chain.native.balance_of(account),
        tokens={
            token.address: token.balance_of(account)
            for token in chain.tokens()
            if token.balance_of(account) > 0
        },
    )
