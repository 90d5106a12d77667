"""Level-payment amortization with prepayment.

All monetary values are rounded to the cent at every step, matching
servicer cent-level reporting. Rounding is half-up.
"""

import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from mortgage_cashflow.engine.prepayment import resolve_smm_schedule
from mortgage_cashflow.exceptions import CalculationError, DeadlineExceededError
from mortgage_cashflow.models.amortization import AmortizationTable
from mortgage_cashflow.models.loan import LoanInfo

CENT = Decimal("0.01")
BALANCE_TOLERANCE = 0.01


def round_to_cent(value: float) -> float:
    """Round to two decimals, ties away from zero (937.505 -> 937.51)."""
    return float(Decimal(repr(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def level_payment(balance: float, monthly_rate: float, n_months: int) -> float:
    """Standard fully-amortizing level payment (PMT).

    Parameters
    ----------
    balance : float
        Principal to retire.
    monthly_rate : float
        Periodic rate as a decimal (4.5% annual -> 0.00375).
    n_months : int
        Number of payments.

    Returns
    -------
    float
        Constant periodic payment, unrounded.
    """
    if n_months <= 0:
        return float(balance)
    if monthly_rate == 0:
        return float(balance) / n_months
    factor = (1 + monthly_rate) ** n_months
    return float(balance) * monthly_rate * factor / (factor - 1)


def generate_amortization_table(
    loan: LoanInfo,
    smm: Sequence[float] | None = None,
    *,
    deadline: float | None = None,
) -> AmortizationTable:
    """Calculate the period-by-period schedule for one loan.

    Parameters
    ----------
    loan : LoanInfo
        Validated loan descriptor.
    smm : Sequence[float] | None
        Monthly prepayment rates, one per period. Derived from the loan when
        omitted.
    deadline : float | None
        ``time.monotonic()`` value after which iteration is abandoned.

    Returns
    -------
    AmortizationTable
        Schedule with empty delinquency arrays.

    Raises
    ------
    DeadlineExceededError
        If ``deadline`` passes before the last period is computed.
    """
    n = int(loan.wam)
    if smm is None:
        smm = resolve_smm_schedule(loan)
    if len(smm) != n:
        raise CalculationError(
            f"Prepayment schedule for loan {loan.id} has {len(smm)} periods, expected {n}"
        )

    monthly_rate = loan.wac / 12.0 / 100.0
    bal = round_to_cent(loan.face)
    payment = level_payment(bal, monthly_rate, n)

    table = AmortizationTable()
    for j in range(n):
        if deadline is not None and time.monotonic() > deadline:
            raise DeadlineExceededError(
                f"Deadline exceeded for loan {loan.id} at period {j + 1} of {n}"
            )

        beg = round_to_cent(bal)
        interest = round_to_cent(bal * monthly_rate)

        if j == n - 1:
            # Final payment retires whatever is left
            principal = beg
        else:
            # Prepayments shrink the balance faster than the level payment assumes
            principal = min(max(round_to_cent(payment - interest), 0.0), beg)

        sched = round_to_cent(beg - principal)
        prepay = round_to_cent(smm[j] * sched)
        bal = max(round_to_cent(sched - prepay), 0.0)

        table.period.append(j + 1)
        table.beg_bal.append(beg)
        table.interest.append(interest)
        table.principal.append(principal)
        table.sched_bal.append(sched)
        table.prepay_amount_arr.append(prepay)
        table.end_bal.append(bal)

    return table


def true_up_balances(table: AmortizationTable) -> None:
    """Absorb final-period rounding drift into the last principal payment.

    If the last period's ``beg - principal - prepay`` disagrees with its
    ending balance by a cent or more, principal absorbs the remainder and the
    ending balance is forced to zero. A second call finds the period
    balanced and does nothing.
    """
    if not table.principal:
        return

    last = len(table.principal) - 1
    beg = table.beg_bal[last]
    prepay = table.prepay_amount_arr[last]
    left_over = beg - table.principal[last] - prepay
    end = table.end_bal[last]

    if abs(left_over - end) < BALANCE_TOLERANCE:
        return

    # Terminal balance is zero, so all of left_over belongs to principal.
    # Adding only left_over - end would leave beg - principal - prepay equal
    # to the old end while end is zeroed, and a second call would adjust again.
    table.principal[last] = round_to_cent(table.principal[last] + left_over)
    table.sched_bal[last] = round_to_cent(beg - table.principal[last])
    table.end_bal[last] = 0.0
