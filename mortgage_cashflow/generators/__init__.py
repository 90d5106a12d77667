"""Synthetic loan generators."""

from mortgage_cashflow.generators.loans import LoanBatchGenerator

__all__ = ["LoanBatchGenerator"]
