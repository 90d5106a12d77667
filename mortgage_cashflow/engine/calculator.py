"""Single-loan cashflow pipeline: validate, amortize, true up, delinquency."""

import logging

from mortgage_cashflow.engine.amortization import generate_amortization_table, true_up_balances
from mortgage_cashflow.engine.delinquency import apply_delinquency_model, build_transition_matrix
from mortgage_cashflow.engine.prepayment import resolve_smm_schedule
from mortgage_cashflow.engine.validation import validate_loan
from mortgage_cashflow.models.amortization import AmortizationTable
from mortgage_cashflow.models.loan import LoanInfo

logger = logging.getLogger(__name__)


def calculate_cashflow(
    loan: LoanInfo,
    *,
    deadline: float | None = None,
    strict_transitions: bool = False,
    carry_forward: bool = False,
) -> AmortizationTable:
    """Compute the full amortization table for one loan.

    Parameters
    ----------
    loan : LoanInfo
        Loan descriptor.
    deadline : float | None
        ``time.monotonic()`` cutoff for period iteration.
    strict_transitions : bool
        Reject transition rows that do not sum to 1.0.
    carry_forward : bool
        Use the carry-forward delinquency mode.

    Returns
    -------
    AmortizationTable
        Schedule, with delinquency arrays when ``loan.static_dq`` is set.
    """
    validate_loan(loan, strict_transitions=strict_transitions)

    logger.debug("Starting amortization calculation for loan %s", loan.id)

    smm = resolve_smm_schedule(loan)
    table = generate_amortization_table(loan, smm, deadline=deadline)
    true_up_balances(table)

    if loan.static_dq:
        apply_delinquency_model(
            table, build_transition_matrix(loan), carry_forward=carry_forward
        )

    logger.debug("Completed amortization calculation for loan %s", loan.id)
    return table
