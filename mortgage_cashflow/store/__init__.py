"""In-memory stores for processed loans."""

from mortgage_cashflow.store.loans import InMemoryLoanRepository, LoanRepository
from mortgage_cashflow.store.locks import ReadWriteLock

__all__ = ["InMemoryLoanRepository", "LoanRepository", "ReadWriteLock"]
