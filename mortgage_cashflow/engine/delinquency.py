"""Delinquency transition model.

Spreads each period's outstanding balance across eight delinquency buckets
using a roll-rate matrix. Rows are source states and columns destination
states, both in :class:`DelinquencyState` order.

By default the distribution is a snapshot: every period starts with the
whole balance performing and applies one transition step. The
``carry_forward`` mode instead rolls the previous period's distribution
forward like a Markov chain.
"""

from typing import Sequence

from mortgage_cashflow.engine.amortization import round_to_cent
from mortgage_cashflow.models.amortization import AmortizationTable, DelinqArrays
from mortgage_cashflow.models.enums import DelinquencyState
from mortgage_cashflow.models.loan import LoanInfo

NUM_STATES = len(DelinquencyState)

Matrix = list[list[float]]

# Monthly roll rates used when a loan does not supply its own row
DEFAULT_TRANSITION_ROWS: dict[DelinquencyState, tuple[float, ...]] = {
    DelinquencyState.PERFORMING: (0.98, 0.02, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    DelinquencyState.DQ30: (0.40, 0.30, 0.30, 0.0, 0.0, 0.0, 0.0, 0.0),
    DelinquencyState.DQ60: (0.20, 0.10, 0.20, 0.50, 0.0, 0.0, 0.0, 0.0),
    DelinquencyState.DQ90: (0.10, 0.0, 0.05, 0.15, 0.70, 0.0, 0.0, 0.0),
    DelinquencyState.DQ120: (0.05, 0.0, 0.0, 0.05, 0.10, 0.80, 0.0, 0.0),
    DelinquencyState.DQ150: (0.05, 0.0, 0.0, 0.0, 0.05, 0.10, 0.80, 0.0),
    DelinquencyState.DQ180: (0.02, 0.0, 0.0, 0.0, 0.0, 0.03, 0.15, 0.80),
    DelinquencyState.DEFAULT: (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0),
}


def default_transition_matrix() -> Matrix:
    """Return a fresh copy of the built-in roll-rate matrix."""
    return [list(DEFAULT_TRANSITION_ROWS[state]) for state in DelinquencyState]


def build_transition_matrix(loan: LoanInfo) -> Matrix:
    """Assemble the loan's matrix, filling missing rows from the default."""
    rows = loan.transition_rows()
    return [
        [float(p) for p in (rows[state] or DEFAULT_TRANSITION_ROWS[state])]
        for state in DelinquencyState
    ]


def transition(distribution: Sequence[float], matrix: Matrix) -> list[float]:
    """One step: ``dest[k] = sum(src[i] * matrix[i][k])``."""
    dest = [0.0] * NUM_STATES
    for i, amount in enumerate(distribution):
        if amount == 0:
            continue
        row = matrix[i]
        for k in range(NUM_STATES):
            dest[k] += amount * row[k]
    return dest


def rescale(distribution: Sequence[float], target: float) -> list[float]:
    """Scale a distribution to sum to ``target`` and round each bucket.

    Cent drift left by rounding is assigned to the largest bucket so the
    components add up to ``target`` exactly. A zero target or an empty
    distribution yields all zeros.
    """
    total = sum(distribution)
    if target <= 0 or total <= 0:
        return [0.0] * NUM_STATES

    scale = target / total
    scaled = [round_to_cent(amount * scale) for amount in distribution]

    drift = round_to_cent(target - sum(scaled))
    if drift:
        largest = max(range(NUM_STATES), key=lambda k: scaled[k])
        scaled[largest] = round_to_cent(scaled[largest] + drift)
    return scaled


def apply_delinquency_model(
    table: AmortizationTable,
    matrix: Matrix,
    *,
    carry_forward: bool = False,
) -> DelinqArrays:
    """Fill ``table.delinq_arrays`` with per-period bucket balances.

    Parameters
    ----------
    table : AmortizationTable
        Schedule whose ending balances are distributed.
    matrix : Matrix
        8x8 transition matrix.
    carry_forward : bool
        Roll the previous period's distribution forward instead of starting
        each period fully performing.

    Returns
    -------
    DelinqArrays
        The arrays now attached to ``table``.
    """
    arrays = DelinqArrays()
    previous: list[float] | None = None

    for balance in table.end_bal:
        if carry_forward and previous is not None and sum(previous) > 0:
            prior = previous
        else:
            prior = [balance] + [0.0] * (NUM_STATES - 1)

        stepped = transition(prior, matrix)
        if sum(stepped) <= 0:
            # Rows that move nothing leave the balance where it started
            stepped = prior
        distribution = rescale(stepped, balance)
        arrays.append(distribution)
        previous = distribution

    table.delinq_arrays = arrays
    return arrays
