"""Tests for the amortization engine and balance reconciler."""

import copy
import time

import pytest

from mortgage_cashflow.engine.amortization import (
    generate_amortization_table,
    level_payment,
    round_to_cent,
    true_up_balances,
)
from mortgage_cashflow.engine.calculator import calculate_cashflow
from mortgage_cashflow.engine.prepayment import cpr_to_smm
from mortgage_cashflow.exceptions import (
    CalculationError,
    DeadlineExceededError,
    LoanValidationError,
)
from mortgage_cashflow.generators.loans import LoanBatchGenerator
from mortgage_cashflow.models.amortization import AmortizationTable
from mortgage_cashflow.models.loan import LoanInfo


def assert_schedule_invariants(table: AmortizationTable, loan: LoanInfo) -> None:
    n = loan.wam
    assert table.period == list(range(1, n + 1))
    for series in (
        table.beg_bal,
        table.interest,
        table.principal,
        table.sched_bal,
        table.prepay_amount_arr,
        table.end_bal,
    ):
        assert len(series) == n

    assert table.beg_bal[0] == pytest.approx(loan.face, abs=0.005)
    for i in range(n):
        assert table.sched_bal[i] == round_to_cent(table.beg_bal[i] - table.principal[i])
        assert table.end_bal[i] == max(
            round_to_cent(table.sched_bal[i] - table.prepay_amount_arr[i]), 0.0
        )
        assert table.principal[i] >= 0
        assert table.prepay_amount_arr[i] >= 0
        assert table.end_bal[i] >= 0
        if i + 1 < n:
            assert table.beg_bal[i + 1] == table.end_bal[i]
    assert table.end_bal[-1] == pytest.approx(0.0, abs=0.01)


class TestRounding:
    """Tests for cent rounding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(937.505, 937.51), (0.125, 0.13), (1.0049, 1.0), (-2.345, -2.35), (100.0, 100.0)],
    )
    def test_half_up(self, value: float, expected: float) -> None:
        """Ties round away from zero on the decimal representation."""
        assert round_to_cent(value) == expected


class TestLevelPayment:
    """Tests for the level payment formula."""

    def test_thirty_year(self) -> None:
        """$250k at 4.5% for 360 months pays $1,266.71."""
        assert round_to_cent(level_payment(250000.0, 0.045 / 12, 360)) == 1266.71

    def test_zero_rate(self) -> None:
        assert level_payment(12000.0, 0.0, 12) == 1000.0

    def test_single_period(self) -> None:
        assert level_payment(5000.0, 0.01, 1) == pytest.approx(5050.0)


class TestAmortizationTable:
    """Tests for generate_amortization_table."""

    def test_first_period(self, sample_loan: LoanInfo) -> None:
        """Month one of the reference loan."""
        table = calculate_cashflow(sample_loan)

        assert len(table) == 360
        assert table.beg_bal[0] == 250000.0
        assert table.interest[0] == 937.50
        assert table.principal[0] == 329.21
        assert table.sched_bal[0] == 249670.79
        assert table.prepay_amount_arr[0] == round_to_cent(cpr_to_smm(0.06) * 249670.79)

    def test_invariants_reference_loan(self, sample_loan: LoanInfo) -> None:
        assert_schedule_invariants(calculate_cashflow(sample_loan), sample_loan)

    def test_invariants_generated_loans(self, seed: int) -> None:
        """Schedule identities hold across a spread of random loans."""
        for loan in LoanBatchGenerator(seed=seed).generate_batch(40):
            assert_schedule_invariants(calculate_cashflow(loan), loan)

    def test_invariants_ladder(self) -> None:
        for loan in LoanBatchGenerator.ladder(30):
            assert_schedule_invariants(calculate_cashflow(loan), loan)

    def test_zero_coupon(self) -> None:
        """With no interest every payment is an equal slice of principal."""
        loan = LoanInfo(id="ZERO", wam=12, wac=0.0, face=12000.0)

        table = calculate_cashflow(loan)

        assert table.interest == [0.0] * 12
        assert table.principal == [1000.0] * 12
        assert table.end_bal[-1] == 0.0

    def test_single_period_loan(self) -> None:
        """A one-month loan repays everything at once."""
        loan = LoanInfo(id="ONE", wam=1, wac=6.0, face=10000.0, prepay_cpr=0.2)

        table = calculate_cashflow(loan)

        assert table.principal == [10000.0]
        assert table.interest == [50.0]
        assert table.prepay_amount_arr == [0.0]
        assert table.end_bal == [0.0]

    def test_no_prepayment_without_cpr(self) -> None:
        loan = LoanInfo(id="NOPP", wam=60, wac=5.0, face=30000.0)

        table = calculate_cashflow(loan)

        assert table.prepay_amount_arr == [0.0] * 60
        assert_schedule_invariants(table, loan)

    def test_high_prepayment_pays_off_early(self) -> None:
        """Fast prepayment retires the loan before term; later periods are zero."""
        loan = LoanInfo(id="FAST", wam=360, wac=4.0, face=100000.0, smm_arr=(0.5,) * 360)

        table = calculate_cashflow(loan)

        assert_schedule_invariants(table, loan)
        assert table.end_bal[30] == 0.0
        assert table.principal[-1] == 0.0

    def test_smm_vector_drives_prepayment(self) -> None:
        loan = LoanInfo(id="VEC", wam=3, wac=0.0, face=3000.0, smm_arr=(0.0, 0.5, 0.0))

        table = calculate_cashflow(loan)

        assert table.prepay_amount_arr == [0.0, 500.0, 0.0]
        assert table.principal == [1000.0, 1000.0, 500.0]
        assert table.end_bal[-1] == 0.0

    def test_delinquency_arrays_empty_by_default(self, sample_loan: LoanInfo) -> None:
        table = calculate_cashflow(sample_loan)

        assert table.delinq_arrays.is_empty()
        assert all(series == [] for series in table.delinq_arrays.buckets())

    def test_totals(self) -> None:
        loan = LoanInfo(id="TOT", wam=120, wac=5.0, face=80000.0, prepay_cpr=0.08)

        table = calculate_cashflow(loan)

        assert table.total_principal == pytest.approx(80000.0, abs=0.01)
        assert table.total_interest > 0

    def test_deterministic(self, sample_loan: LoanInfo) -> None:
        assert calculate_cashflow(sample_loan) == calculate_cashflow(sample_loan)

    def test_wrong_schedule_length(self, sample_loan: LoanInfo) -> None:
        with pytest.raises(CalculationError, match="expected 360"):
            generate_amortization_table(sample_loan, [0.0] * 12)

    def test_invalid_loan_rejected(self) -> None:
        with pytest.raises(LoanValidationError):
            calculate_cashflow(LoanInfo(id="BAD", wam=0, wac=5.0, face=1000.0))

    def test_deadline_exceeded(self, sample_loan: LoanInfo) -> None:
        """An expired deadline stops iteration."""
        with pytest.raises(DeadlineExceededError, match="LOAN001"):
            calculate_cashflow(sample_loan, deadline=time.monotonic() - 1)

    def test_future_deadline(self, sample_loan: LoanInfo) -> None:
        table = calculate_cashflow(sample_loan, deadline=time.monotonic() + 60)

        assert len(table) == 360


class TestTrueUp:
    """Tests for the final-period balance reconciler."""

    def _table(self, principal: float, end: float) -> AmortizationTable:
        return AmortizationTable(
            period=[1, 2],
            beg_bal=[200.0, 100.0],
            interest=[1.0, 0.5],
            principal=[100.0, principal],
            sched_bal=[100.0, round_to_cent(100.0 - principal)],
            prepay_amount_arr=[0.0, 0.0],
            end_bal=[100.0, end],
        )

    def test_absorbs_drift(self) -> None:
        """Residual balance is folded into the last principal payment."""
        table = self._table(principal=99.0, end=0.5)

        true_up_balances(table)

        assert table.principal[-1] == 100.0
        assert table.sched_bal[-1] == 0.0
        assert table.end_bal[-1] == 0.0

    def test_noop_when_balanced(self) -> None:
        table = self._table(principal=99.0, end=1.0)

        true_up_balances(table)

        assert table.principal[-1] == 99.0
        assert table.end_bal[-1] == 1.0

    def test_idempotent(self) -> None:
        """A second pass changes nothing."""
        table = self._table(principal=98.5, end=0.25)

        true_up_balances(table)
        once = copy.deepcopy(table)
        true_up_balances(table)

        assert table == once

    def test_empty_table(self) -> None:
        table = AmortizationTable()

        true_up_balances(table)

        assert len(table) == 0
