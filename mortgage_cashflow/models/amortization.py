"""Amortization schedule models."""

from dataclasses import dataclass, field
from datetime import datetime

from mortgage_cashflow.models.enums import DelinquencyState
from mortgage_cashflow.models.loan import LoanInfo


@dataclass
class DelinqArrays:
    """Per-period dollar balances in each delinquency bucket.

    All lists are empty unless the delinquency model was applied.
    """

    perf_arr: list[float] = field(default_factory=list)
    dq30_arr: list[float] = field(default_factory=list)
    dq60_arr: list[float] = field(default_factory=list)
    dq90_arr: list[float] = field(default_factory=list)
    dq120_arr: list[float] = field(default_factory=list)
    dq150_arr: list[float] = field(default_factory=list)
    dq180_arr: list[float] = field(default_factory=list)
    default_arr: list[float] = field(default_factory=list)

    def buckets(self) -> list[list[float]]:
        """Bucket sequences in :class:`DelinquencyState` order."""
        return [
            self.perf_arr,
            self.dq30_arr,
            self.dq60_arr,
            self.dq90_arr,
            self.dq120_arr,
            self.dq150_arr,
            self.dq180_arr,
            self.default_arr,
        ]

    def bucket(self, state: DelinquencyState) -> list[float]:
        return self.buckets()[list(DelinquencyState).index(state)]

    def append(self, distribution: list[float]) -> None:
        """Append one period's 8-state distribution."""
        for series, amount in zip(self.buckets(), distribution):
            series.append(amount)

    def is_empty(self) -> bool:
        return not self.perf_arr


@dataclass
class AmortizationTable:
    """Complete amortization schedule for one loan.

    The seven sequences are parallel and indexed by period (1..wam).
    """

    period: list[int] = field(default_factory=list)
    beg_bal: list[float] = field(default_factory=list)
    interest: list[float] = field(default_factory=list)
    principal: list[float] = field(default_factory=list)
    sched_bal: list[float] = field(default_factory=list)  # After scheduled principal
    prepay_amount_arr: list[float] = field(default_factory=list)
    end_bal: list[float] = field(default_factory=list)
    delinq_arrays: DelinqArrays = field(default_factory=DelinqArrays)

    def __len__(self) -> int:
        return len(self.period)

    @property
    def total_interest(self) -> float:
        return round(sum(self.interest), 2)

    @property
    def total_principal(self) -> float:
        """Scheduled principal plus prepayments."""
        return round(sum(self.principal) + sum(self.prepay_amount_arr), 2)


@dataclass
class CashflowResult:
    """Outcome of one loan in a batch, at its input position."""

    loan_id: str
    index: int
    cashflow: AmortizationTable | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CashflowRecord:
    """Persisted document: the loan, when it was run, and its schedule."""

    mortgage: LoanInfo
    local_date: datetime
    amort_table: AmortizationTable
