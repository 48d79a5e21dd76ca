"""All-or-nothing execution across ledgers and exchanges.

A UnitOfWork snapshots every participant it enlists. If the block raises,
each participant is restored to its snapshot and the exception propagates;
if the block completes, the snapshots are dropped and the mutations stand.

Participants only need ``snapshot() -> state`` and ``restore(state)``.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class Participant(Protocol):
    """Anything whose state a unit of work can capture and put back."""

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


class UnitOfWork:
    """Context manager making a block of ledger mutations atomic.

    Usage:
        with UnitOfWork("token_to_token_swap", this, other, token, native):
            ...  # any exception restores all four

    Participants can also join mid-flight with ``enlist``; they are
    snapshotted at that moment. Enlisting the same object twice keeps the
    first snapshot.
    """

    def __init__(self, name: str, *participants: Participant) -> None:
        self.name = name
        self._pending = list(participants)
        self._snapshots: list[tuple[Participant, Any]] = []
        self._enlisted: set[int] = set()
        self._active = False
        self.committed = False
        self.rolled_back = False

    def __enter__(self) -> UnitOfWork:
        self._active = True
        for participant in self._pending:
            self.enlist(participant)
        self._pending = []
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self._active = False
        if exc_type is not None:
            self._rollback()
            logger.warning(
                "unit_of_work_rolled_back",
                unit=self.name,
                participants=len(self._snapshots),
                error=type(exc).__name__,
                reason=str(exc),
            )
            return False
        self.committed = True
        self._snapshots = []
        return False

    def enlist(self, participant: Participant) -> None:
        """Capture a participant's state so a later failure can restore it."""
        if not self._active:
            self._pending.append(participant)
            return
        if id(participant) in self._enlisted:
            return
        self._enlisted.add(id(participant))
        self._snapshots.append((participant, participant.snapshot()))

    def _rollback(self) -> None:
        for participant, state in reversed(self._snapshots):
            participant.restore(state)
        self._snapshots = []
        self.rolled_back = True
