"""In-memory execution substrate: native coin, token ledgers, atomicity."""

from cpamm.chain.accounts import account, derive_address
from cpamm.chain.chain import Chain
from cpamm.chain.native import NativeLedger
from cpamm.chain.token import Token, TokenLedger
from cpamm.chain.unit_of_work import Participant, UnitOfWork

__all__ = [
    "Chain",
    "NativeLedger",
    "Token",
    "TokenLedger",
    "UnitOfWork",
    "Participant",
    "account",
    "derive_address",
]
