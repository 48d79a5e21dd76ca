"""Randomized operation sequences against a live exchange.

Each seed drives a reproducible mix of deposits, withdrawals and swaps by
several accounts; the accounting audit runs after every step.
"""

import random

import pytest

from cpamm.chain import Chain, account
from cpamm.errors import CpammError, InsufficientTokenAmount
from cpamm.exchange import Exchange, Factory, assert_invariants
from cpamm.exchange.invariants import product_did_not_shrink
from cpamm.safe_int import UINT256_MAX
from cpamm.units import to_wei
from tests.helpers import OWNER, TOKEN_SUPPLY, fund_pool

SEEDS = list(range(12))
STEPS = 60

ACTORS = [account(f"actor-{i}") for i in range(4)]


def _setup(seed: int) -> tuple[random.Random, Chain, Exchange]:
    rng = random.Random(seed)
    chain = Chain()
    chain.native.credit(OWNER, to_wei(1_000_000))
    token = chain.deploy_token("Token", "TKN", TOKEN_SUPPLY, OWNER)
    exchange = Factory(chain).create_exchange("LP", "LP", token.address)

    seed_native = to_wei(rng.randint(1, 5000))
    seed_tokens = to_wei(rng.randint(1, 5000))
    fund_pool(exchange, OWNER, native=seed_native, tokens=seed_tokens)

    for actor in ACTORS:
        chain.native.credit(actor, to_wei(10_000))
        token.transfer(OWNER, actor, to_wei(10_000))
        token.approve(actor, exchange.address, UINT256_MAX)
    return rng, chain, exchange


def _amount(rng: random.Random, high: int) -> int:
    """Random amount up to high, occasionally zero or dust."""
    roll = rng.random()
    if roll < 0.05:
        return 0
    if roll < 0.15:
        return rng.randint(1, 1000)
    return rng.randint(1, max(1, high))


def _step(rng: random.Random, exchange: Exchange) -> str:
    actor = rng.choice(ACTORS)
    op = rng.choice(["add", "remove", "eth_to_token", "token_to_eth"])
    native = exchange.chain.native.balance_of(actor)
    tokens = exchange.token.balance_of(actor)

    if op == "add":
        value = min(_amount(rng, native // 4), native)
        before = (exchange.native_reserve, exchange.token_reserve, exchange.total_supply)
        try:
            shares = exchange.add_liquidity(tokens, sender=actor, value=value)
        except InsufficientTokenAmount:
            return op
        if before[2]:
            # Shares track the native contribution, rounded down
            assert shares * before[0] <= value * before[2]
            # The token side was topped up at least pro rata
            assert (exchange.token_reserve - before[1]) * before[0] >= value * before[1]
    elif op == "remove":
        held = exchange.balance_of(actor)
        if held:
            supply = exchange.total_supply
            native_reserve = exchange.native_reserve
            shares = rng.randint(0, held)
            native_out, _ = exchange.remove_liquidity(shares, sender=actor)
            assert native_out * supply <= shares * native_reserve
    else:
        before = (exchange.native_reserve, exchange.token_reserve)
        if op == "eth_to_token":
            value = min(_amount(rng, native // 10), native)
            exchange.eth_to_token_swap(0, sender=actor, value=value)
        else:
            sold = min(_amount(rng, tokens // 10), tokens)
            exchange.token_to_eth_swap(sold, 0, sender=actor)
        assert product_did_not_shrink(before, (exchange.native_reserve, exchange.token_reserve))
    return op


@pytest.mark.parametrize("seed", SEEDS)
def test_random_sequences_keep_accounting_sound(seed):
    """Audit passes after every step; supply equals the sum of LP balances."""
    rng, chain, exchange = _setup(seed)
    native_supply = chain.native.total_supply
    token_supply = exchange.token.total_supply

    for _ in range(STEPS):
        try:
            _step(rng, exchange)
        except CpammError as exc:
            # Only pricing against a drained pool may reject an otherwise valid step
            assert exchange.native_reserve == 0, exc
        assert_invariants(exchange)
        assert exchange.total_supply == sum(exchange.liquidity.holders().values())

    # Value only moves between accounts; none is created or destroyed
    assert chain.native.total_supply == native_supply
    assert exchange.token.total_supply == token_supply
    assert sum(chain.native.snapshot()[0].values()) == native_supply


def _ratio_drift(before: tuple[int, int], after: tuple[int, int]) -> int:
    """Cross-multiplied change of token_reserve / native_reserve."""
    (native_before, token_before), (native_after, token_after) = before, after
    return abs(token_after * native_before - token_before * native_after)


@pytest.mark.parametrize("seed", SEEDS)
def test_liquidity_changes_keep_price(seed):
    """Without swaps, deposits and withdrawals move the reserve ratio by rounding only.

    Each step leaves token_reserve within one unit of each asset of the exact
    pro-rata value, i.e. |t1*n0 - t0*n1| <= n0 + t0.
    """
    rng, _, exchange = _setup(seed)

    for _ in range(STEPS):
        actor = rng.choice(ACTORS)
        before = (exchange.native_reserve, exchange.token_reserve)

        if rng.random() < 0.5:
            native = exchange.chain.native.balance_of(actor)
            value = min(_amount(rng, native // 4), native)
            try:
                exchange.add_liquidity(
                    exchange.token.balance_of(actor), sender=actor, value=value
                )
            except InsufficientTokenAmount:
                pass
        else:
            held = exchange.balance_of(actor)
            exchange.remove_liquidity(rng.randint(0, held), sender=actor)

        after = (exchange.native_reserve, exchange.token_reserve)
        assert after[0] > 0 and after[1] > 0
        assert _ratio_drift(before, after) <= before[0] + before[1]
        assert_invariants(exchange)


@pytest.mark.parametrize("seed", SEEDS)
def test_round_trip_never_profits(seed):
    """Depositing and immediately withdrawing returns no more than was put in."""
    rng, chain, exchange = _setup(seed)
    actor = ACTORS[0]
    native_before = chain.native.balance_of(actor)
    tokens_before = exchange.token.balance_of(actor)

    # Keep the ratio requirement within what the actor holds
    value = min(
        to_wei(rng.randint(1, 100)),
        exchange.native_reserve * tokens_before // exchange.token_reserve,
    )
    shares = exchange.add_liquidity(tokens_before, sender=actor, value=value)
    exchange.remove_liquidity(shares, sender=actor)

    assert chain.native.balance_of(actor) <= native_before
    assert exchange.token.balance_of(actor) <= tokens_before
    assert_invariants(exchange)


@pytest.mark.parametrize("seed", SEEDS)
def test_swap_round_trip_never_profits(seed):
    """Selling native coin for tokens and straight back loses at least the fees."""
    rng, chain, exchange = _setup(seed)
    actor = ACTORS[1]
    native_before = chain.native.balance_of(actor)
    tokens_before = exchange.token.balance_of(actor)

    bought = exchange.eth_to_token_swap(0, sender=actor, value=to_wei(rng.randint(1, 500)))
    exchange.token_to_eth_swap(bought, 0, sender=actor)

    assert chain.native.balance_of(actor) <= native_before
    assert exchange.token.balance_of(actor) == tokens_before


def test_fees_accrue_to_liquidity_providers():
    """After two-way trading, the sole LP redeems more than they deposited."""
    chain = Chain()
    chain.native.credit(OWNER, to_wei(1_000_000))
    token = chain.deploy_token("Token", "TKN", TOKEN_SUPPLY, OWNER)
    exchange = Factory(chain).create_exchange("LP", "LP", token.address)
    shares = fund_pool(exchange, OWNER, native=to_wei(100), tokens=to_wei(200))

    trader = ACTORS[0]
    chain.native.credit(trader, to_wei(1000))
    token.approve(trader, exchange.address, UINT256_MAX)
    for _ in range(5):
        bought = exchange.eth_to_token_swap(0, sender=trader, value=to_wei(10))
        exchange.token_to_eth_swap(bought, 0, sender=trader)

    native_out, token_out = exchange.remove_liquidity(shares, sender=OWNER)
    assert native_out > to_wei(100)
    assert token_out >= to_wei(200)
