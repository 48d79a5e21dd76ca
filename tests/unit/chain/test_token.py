"""Tests for the in-memory token ledger."""

import pytest

from cpamm.chain import Token, TokenLedger
from cpamm.errors import InsufficientAllowance, InsufficientBalance
from cpamm.safe_int import UINT256_MAX
from tests.helpers import OTHER, OWNER, USER

TOKEN_ADDRESS = "0x" + "11" * 20


@pytest.fixture
def tkn() -> Token:
    return Token(TOKEN_ADDRESS, "Token", "TKN", initial_supply=1000, owner=OWNER)


class TestBalances:
    """Tests for minting and transfers."""

    def test_initial_supply_held_by_owner(self, tkn):
        assert tkn.total_supply == 1000
        assert tkn.balance_of(OWNER) == 1000
        assert tkn.balance_of(USER) == 0

    def test_initial_supply_needs_owner(self):
        with pytest.raises(ValueError):
            Token(TOKEN_ADDRESS, "Token", "TKN", initial_supply=1)

    def test_satisfies_ledger_protocol(self, tkn):
        assert isinstance(tkn, TokenLedger)

    def test_transfer(self, tkn):
        tkn.transfer(OWNER, USER, 300)
        assert tkn.balance_of(OWNER) == 700
        assert tkn.balance_of(USER) == 300
        assert tkn.total_supply == 1000

    def test_transfer_exceeding_balance(self, tkn):
        with pytest.raises(InsufficientBalance, match="transfer amount exceeds balance"):
            tkn.transfer(USER, OWNER, 1)

    def test_self_transfer_keeps_balance(self, tkn):
        tkn.transfer(OWNER, OWNER, 400)
        assert tkn.balance_of(OWNER) == 1000

    def test_mint(self, tkn):
        tkn.mint(USER, 5)
        assert tkn.total_supply == 1005
        assert tkn.balance_of(USER) == 5

    def test_addresses_are_case_insensitive(self, tkn):
        tkn.transfer(OWNER.upper().replace("0X", "0x"), USER, 1)
        assert tkn.balance_of(USER.upper().replace("0X", "0x")) == 1


class TestAllowances:
    """Tests for approve / transfer_from."""

    def test_transfer_from_spends_allowance(self, tkn):
        tkn.approve(OWNER, USER, 100)
        tkn.transfer_from(USER, OWNER, OTHER, 60)
        assert tkn.balance_of(OTHER) == 60
        assert tkn.allowance(OWNER, USER) == 40

    def test_transfer_from_without_allowance(self, tkn):
        with pytest.raises(InsufficientAllowance, match="insufficient allowance"):
            tkn.transfer_from(USER, OWNER, USER, 1)

    def test_unlimited_allowance_not_decreased(self, tkn):
        tkn.approve(OWNER, USER, UINT256_MAX)
        tkn.transfer_from(USER, OWNER, USER, 10)
        assert tkn.allowance(OWNER, USER) == UINT256_MAX

    def test_allowance_does_not_cover_balance(self, tkn):
        tkn.approve(USER, OWNER, 50)
        with pytest.raises(InsufficientBalance):
            tkn.transfer_from(OWNER, USER, OWNER, 50)
        assert tkn.allowance(USER, OWNER) == 50

    def test_zero_approval_clears(self, tkn):
        tkn.approve(OWNER, USER, 10)
        tkn.approve(OWNER, USER, 0)
        assert tkn.allowance(OWNER, USER) == 0

    def test_negative_approval_rejected(self, tkn):
        with pytest.raises(ValueError):
            tkn.approve(OWNER, USER, -1)


def test_snapshot_restore(tkn):
    state = tkn.snapshot()
    tkn.approve(OWNER, USER, 10)
    tkn.transfer(OWNER, USER, 10)
    tkn.mint(OTHER, 10)
    tkn.restore(state)

    assert tkn.balance_of(OWNER) == 1000
    assert tkn.balance_of(USER) == 0
    assert tkn.allowance(OWNER, USER) == 0
    assert tkn.total_supply == 1000
