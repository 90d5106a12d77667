"""Mortgage amortization cashflows with prepayment and delinquency modeling."""

__version__ = "1.0.0"
