"""Domain models for mortgage cashflow calculation."""

from mortgage_cashflow.models.amortization import (
    AmortizationTable,
    CashflowRecord,
    CashflowResult,
    DelinqArrays,
)
from mortgage_cashflow.models.enums import DelinquencyState, DispatchMode, PoolKind
from mortgage_cashflow.models.loan import TRANSITION_FIELDS, LoanInfo

__all__ = [
    "AmortizationTable",
    "CashflowRecord",
    "CashflowResult",
    "DelinqArrays",
    "DelinquencyState",
    "DispatchMode",
    "LoanInfo",
    "PoolKind",
    "TRANSITION_FIELDS",
]
