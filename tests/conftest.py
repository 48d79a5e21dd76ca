"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from cpamm.api.main import create_app
from cpamm.chain import Chain, Token
from cpamm.exchange import Exchange, Factory
from cpamm.units import to_wei
from tests.helpers import OWNER, STARTING_NATIVE, TOKEN_SUPPLY, USER, fund_pool


@pytest.fixture
def chain() -> Chain:
    """Fresh chain with OWNER and USER holding native coin."""
    chain = Chain()
    chain.native.credit(OWNER, STARTING_NATIVE)
    chain.native.credit(USER, STARTING_NATIVE)
    return chain


@pytest.fixture
def token(chain: Chain) -> Token:
    """Token with its whole supply held by OWNER."""
    return chain.deploy_token("Token", "TKN", TOKEN_SUPPLY, OWNER)


@pytest.fixture
def factory(chain: Chain) -> Factory:
    return Factory(chain)


@pytest.fixture
def exchange(factory: Factory, token: Token) -> Exchange:
    """Empty exchange for ``token``, created through the factory."""
    return factory.create_exchange("LiqProvTokenETH", "LpTknEth", token.address)


@pytest.fixture
def pool(exchange: Exchange) -> Exchange:
    """Exchange seeded by OWNER with 1000 native / 2000 tokens."""
    fund_pool(exchange, OWNER, native=to_wei(1000), tokens=to_wei(2000))
    return exchange


@pytest.fixture
def small_pool(exchange: Exchange) -> Exchange:
    """Exchange seeded by OWNER with 100 native / 200 tokens."""
    fund_pool(exchange, OWNER, native=to_wei(100), tokens=to_wei(200))
    return exchange


@pytest.fixture
def client(factory: Factory) -> Iterator[TestClient]:
    """Test client around an app bound to the ``factory`` fixture."""
    app = create_app(factory)
    yield TestClient(app)
    app.dependency_overrides.clear()
