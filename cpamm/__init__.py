"""Constant-product native-coin/token exchange with a factory registry."""

from cpamm.chain import Chain, Token, UnitOfWork
from cpamm.exchange import Exchange, Factory

__version__ = "0.1.0"
__all__ = ["Chain", "Exchange", "Factory", "Token", "UnitOfWork", "__version__"]
