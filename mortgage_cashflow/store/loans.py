"""Processed-loan repository."""

from typing import Protocol, Sequence

from mortgage_cashflow.models.loan import LoanInfo
from mortgage_cashflow.store.locks import ReadWriteLock


class LoanRepository(Protocol):
    """Store of every loan descriptor the service has accepted."""

    def append(self, loans: Sequence[LoanInfo]) -> int:
        """Add a whole batch atomically; return the new total."""
        ...

    def list(self) -> list[LoanInfo]:
        """Snapshot of all stored loans, oldest first."""
        ...

    def count(self) -> int:
        ...


class InMemoryLoanRepository:
    """Thread-safe in-memory :class:`LoanRepository`.

    Appends hold the write lock for the whole batch, so readers see either
    none or all of it.
    """

    def __init__(self) -> None:
        self._loans: list[LoanInfo] = []
        self._batch_sizes: list[int] = []
        self._lock = ReadWriteLock()

    def append(self, loans: Sequence[LoanInfo]) -> int:
        batch = list(loans)
        with self._lock.write_locked():
            self._loans.extend(batch)
            self._batch_sizes.append(len(batch))
            return len(self._loans)

    def list(self) -> list[LoanInfo]:
        with self._lock.read_locked():
            return list(self._loans)

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._loans)

    def summary(self) -> dict[str, int]:
        """Return loan and batch counts."""
        with self._lock.read_locked():
            return {"loans": len(self._loans), "batches": len(self._batch_sizes)}
