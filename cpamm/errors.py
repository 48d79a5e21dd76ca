"""Exchange and ledger error classes.

Messages follow the revert reasons of the on-chain exchange so callers can
match on either the type or the text.
"""


class CpammError(Exception):
    """Base error for everything raised by this package."""

    pass


class ExchangeError(CpammError):
    """Base error for exchange and factory operations."""

    pass


class InvalidTokenId(ExchangeError, ValueError):
    """Token id is the null address or not a deployed token."""

    pass


class ExchangeAlreadyExists(ExchangeError):
    """The factory already holds an exchange for this token."""

    pass


class ExchangeNotFound(ExchangeError, LookupError):
    """No exchange is registered for the requested token."""

    pass


class InvalidExchange(ExchangeError):
    """A token-to-token swap was routed back into the same exchange."""

    pass


class InsufficientTokenAmount(ExchangeError):
    """Deposit offers fewer tokens than the current reserve ratio requires."""

    pass


class InsufficientShares(ExchangeError):
    """Withdrawal burns more LP shares than the provider holds."""

    pass


class InsufficientOutputAmount(ExchangeError):
    """Swap output is below the caller's minimum (slippage guard)."""

    pass


class InvalidState(ExchangeError):
    """Pricing against an empty reserve, or a one-sided first deposit."""

    pass


class LedgerError(CpammError):
    """Base error for native-coin and token ledger transfers."""

    pass


class InsufficientBalance(LedgerError):
    """Sender does not hold enough of the asset."""

    pass


class InsufficientAllowance(LedgerError):
    """Spender is not approved for the requested amount."""

    pass


class InvariantViolation(CpammError):
    """An exchange failed its post-operation audit."""

    pass
