"""Loan descriptor validation.

Validation is pure: it inspects a :class:`LoanInfo` and raises
:class:`LoanValidationError` describing the first problem found.
"""

import math
from typing import Sequence

from mortgage_cashflow.exceptions import LoanValidationError
from mortgage_cashflow.models.enums import DelinquencyState
from mortgage_cashflow.models.loan import TRANSITION_FIELDS, LoanInfo

MAX_ID_LENGTH = 50
MAX_WAM = 480  # 40 years
MAX_WAC = 30.0
MAX_FACE = 1e8
NUM_STATES = len(DelinquencyState)
ROW_SUM_TOLERANCE = 1e-6


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_transition_row(name: str, row: Sequence[float], strict: bool) -> None:
    if not isinstance(row, (list, tuple)):
        raise LoanValidationError(f"{name} must be a list of {NUM_STATES} numbers")
    if len(row) != NUM_STATES:
        raise LoanValidationError(
            f"{name} must have {NUM_STATES} elements, got {len(row)}"
        )
    for value in row:
        if not _is_number(value) or not math.isfinite(value) or value < 0:
            raise LoanValidationError(
                f"{name} elements must be non-negative numbers, got {value!r}"
            )
    if strict and abs(sum(row) - 1.0) > ROW_SUM_TOLERANCE:
        raise LoanValidationError(f"{name} must sum to 1.0, got {sum(row):.6f}")


def validate_loan(loan: LoanInfo, *, strict_transitions: bool = False) -> None:
    """Validate a single loan descriptor.

    Parameters
    ----------
    loan : LoanInfo
        Loan to check.
    strict_transitions : bool
        Also reject transition rows that do not sum to 1.0. Off by default:
        the delinquency model rescales its output, so non-unit rows are
        tolerated unless the caller opts in.

    Raises
    ------
    LoanValidationError
        On the first invalid field.
    """
    loan_id = loan.id if isinstance(loan.id, str) else None
    try:
        if not isinstance(loan.id, str) or not loan.id:
            raise LoanValidationError("loan ID cannot be empty")
        if len(loan.id) > MAX_ID_LENGTH:
            raise LoanValidationError(
                f"loan ID must be at most {MAX_ID_LENGTH} characters, got {len(loan.id)}"
            )
        if not isinstance(loan.wam, int) or isinstance(loan.wam, bool) or not 1 <= loan.wam <= MAX_WAM:
            raise LoanValidationError(
                f"WAM must be between 1 and {MAX_WAM} months, got {loan.wam!r}"
            )
        if not _is_number(loan.wac) or not math.isfinite(loan.wac) or not 0 <= loan.wac <= MAX_WAC:
            raise LoanValidationError(
                f"WAC must be between 0 and {MAX_WAC:g} percent, got {loan.wac!r}"
            )
        if not _is_number(loan.face) or not math.isfinite(loan.face) or loan.face <= 0:
            raise LoanValidationError(f"face value must be positive, got {loan.face!r}")
        if loan.face > MAX_FACE:
            raise LoanValidationError(
                f"face value must not exceed {MAX_FACE:,.0f}, got {loan.face!r}"
            )
        if (
            not _is_number(loan.prepay_cpr)
            or not math.isfinite(loan.prepay_cpr)
            or not 0 <= loan.prepay_cpr < 1
        ):
            raise LoanValidationError(
                f"CPR must be between 0 (inclusive) and 1 (exclusive), got {loan.prepay_cpr!r}"
            )

        if loan.smm_arr is not None:
            if not isinstance(loan.smm_arr, (list, tuple)):
                raise LoanValidationError(f"smm_arr must be a list of {loan.wam} numbers")
            if len(loan.smm_arr) != loan.wam:
                raise LoanValidationError(
                    f"smm_arr length must equal WAM ({loan.wam}), got {len(loan.smm_arr)}"
                )
            for value in loan.smm_arr:
                if not _is_number(value) or not math.isfinite(value) or not 0 <= value <= 1:
                    raise LoanValidationError(
                        f"smm_arr elements must be between 0 and 1, got {value!r}"
                    )

        for name in TRANSITION_FIELDS.values():
            row = getattr(loan, name)
            if row is not None:
                _check_transition_row(name, row, strict_transitions)
    except LoanValidationError as exc:
        raise LoanValidationError(exc.message, loan_id=loan_id) from None


def validate_batch(loans: Sequence[LoanInfo], *, strict_transitions: bool = False) -> None:
    """Validate every loan in input order, failing on the first bad one.

    Raises
    ------
    LoanValidationError
        Tagged with the ``index`` of the rejected loan.
    """
    for index, loan in enumerate(loans):
        try:
            validate_loan(loan, strict_transitions=strict_transitions)
        except LoanValidationError as exc:
            raise exc.at(index) from None


def collect_validation_errors(
    loans: Sequence[LoanInfo], *, strict_transitions: bool = False
) -> dict[int, LoanValidationError]:
    """Return the validation error of every invalid loan, keyed by index."""
    errors: dict[int, LoanValidationError] = {}
    for index, loan in enumerate(loans):
        try:
            validate_loan(loan, strict_transitions=strict_transitions)
        except LoanValidationError as exc:
            errors[index] = exc.at(index)
    return errors
