"""Tests for all-or-nothing execution."""

import pytest

from cpamm.chain import NativeLedger, UnitOfWork
from tests.helpers import OTHER, OWNER, USER


class Counter:
    """Minimal participant."""

    def __init__(self, value: int = 0) -> None:
        self.value = value
        self.restores = 0

    def snapshot(self) -> int:
        return self.value

    def restore(self, state: int) -> None:
        self.value = state
        self.restores += 1


class Boom(Exception):
    pass


class TestCommitAndRollback:
    """Tests for the basic context-manager contract."""

    def test_commit_keeps_changes(self):
        counter = Counter()
        with UnitOfWork("commit", counter) as uow:
            counter.value = 5
        assert counter.value == 5
        assert uow.committed
        assert not uow.rolled_back

    def test_exception_restores_and_propagates(self):
        counter = Counter(1)
        uow = UnitOfWork("fail", counter)
        with pytest.raises(Boom):
            with uow:
                counter.value = 99
                raise Boom()
        assert counter.value == 1
        assert uow.rolled_back
        assert not uow.committed

    def test_restores_every_participant(self):
        native = NativeLedger()
        native.credit(OWNER, 10)
        a, b = Counter(), Counter()
        with pytest.raises(Boom):
            with UnitOfWork("multi", native, a, b):
                native.transfer(OWNER, USER, 10)
                a.value, b.value = 1, 2
                raise Boom()
        assert native.balance_of(OWNER) == 10
        assert native.balance_of(USER) == 0
        assert (a.value, b.value) == (0, 0)


class TestEnlist:
    """Tests for participants joining after entry."""

    def test_enlist_mid_flight_snapshots_current_state(self):
        counter = Counter()
        with pytest.raises(Boom):
            with UnitOfWork("late") as uow:
                counter.value = 3
                uow.enlist(counter)
                counter.value = 7
                raise Boom()
        assert counter.value == 3

    def test_duplicate_enlist_keeps_first_snapshot(self):
        counter = Counter()
        with pytest.raises(Boom):
            with UnitOfWork("dup", counter, counter) as uow:
                counter.value = 4
                uow.enlist(counter)
                raise Boom()
        assert counter.value == 0
        assert counter.restores == 1


class TestNesting:
    """Tests for nested units of work over shared participants."""

    def test_inner_rollback_leaves_outer_changes(self):
        counter = Counter()
        with UnitOfWork("outer", counter):
            counter.value = 1
            with pytest.raises(Boom):
                with UnitOfWork("inner", counter):
                    counter.value = 2
                    raise Boom()
            assert counter.value == 1
        assert counter.value == 1

    def test_outer_rollback_undoes_committed_inner(self):
        native = NativeLedger()
        native.credit(OWNER, 10)
        with pytest.raises(Boom):
            with UnitOfWork("outer", native):
                with UnitOfWork("inner", native):
                    native.transfer(OWNER, OTHER, 4)
                raise Boom()
        assert native.balance_of(OWNER) == 10
        assert native.balance_of(OTHER) == 0
