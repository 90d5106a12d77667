"""Tests for sink serialization helpers."""

from datetime import date, datetime, timezone
from decimal import Decimal

from mortgage_cashflow.engine.calculator import calculate_cashflow
from mortgage_cashflow.models.amortization import CashflowRecord, CashflowResult
from mortgage_cashflow.models.enums import DelinquencyState, PoolKind
from mortgage_cashflow.models.loan import LoanInfo
from mortgage_cashflow.sinks.serialization import (
    result_to_dict,
    serialize_value,
    to_dict,
    to_dict_fast,
)


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("123.45")) == 123.45

    def test_enum(self) -> None:
        assert serialize_value(DelinquencyState.DQ30) == "DQ30"
        assert serialize_value(PoolKind.PROCESS) == "process"

    def test_datetime(self) -> None:
        dt = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)

        assert serialize_value(dt) == "2024-01-15T10:30:00+00:00"

    def test_date(self) -> None:
        assert serialize_value(date(2024, 1, 15)) == "2024-01-15"

    def test_tuple_becomes_list(self) -> None:
        assert serialize_value((0.98, 0.02)) == [0.98, 0.02]

    def test_nested(self) -> None:
        value = {"rows": [(1, Decimal("2.5"))], "state": DelinquencyState.DEFAULT}

        assert serialize_value(value) == {"rows": [[1, 2.5]], "state": "DEFAULT"}

    def test_passthrough(self) -> None:
        assert serialize_value("text") == "text"
        assert serialize_value(None) is None
        assert serialize_value(7) == 7


class TestToDict:
    """Tests for to_dict and friends."""

    def test_loan(self) -> None:
        loan = LoanInfo(id="L1", wam=2, wac=5.0, face=100.0, smm_arr=(0.1, 0.2))

        data = to_dict(loan)

        assert data["id"] == "L1"
        assert data["static_dq"] is False
        assert data["smm_arr"] == [0.1, 0.2]
        assert data["performing_transition"] is None

    def test_fast_matches_deep_for_flat_dataclass(self) -> None:
        loan = LoanInfo(id="L1", wam=2, wac=5.0, face=100.0, dq30_transition=(1, 0, 0, 0, 0, 0, 0, 0))

        assert to_dict_fast(loan) == to_dict(loan)

    def test_record_layout(self) -> None:
        """Persisted documents hold the loan, the run date and the schedule."""
        loan = LoanInfo(id="L1", wam=3, wac=6.0, face=3000.0, static_dq=True)
        record = CashflowRecord(
            mortgage=loan,
            local_date=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
            amort_table=calculate_cashflow(loan),
        )

        data = to_dict(record)

        assert set(data) == {"mortgage", "local_date", "amort_table"}
        assert data["local_date"] == "2024-03-01T09:00:00+00:00"
        assert data["mortgage"]["face"] == 3000.0
        assert data["amort_table"]["period"] == [1, 2, 3]
        assert len(data["amort_table"]["delinq_arrays"]["perf_arr"]) == 3

    def test_plain_dict(self) -> None:
        assert to_dict({"a": Decimal("1.5")}) == {"a": 1.5}

    def test_other_object(self) -> None:
        assert to_dict(42) == {"value": "42"}


class TestResultToDict:
    """Tests for API result shape."""

    def test_success(self) -> None:
        loan = LoanInfo(id="L1", wam=2, wac=0.0, face=200.0)
        result = CashflowResult(loan_id="L1", index=0, cashflow=calculate_cashflow(loan))

        data = result_to_dict(result)

        assert data["loan_id"] == "L1"
        assert data["cashflow"]["principal"] == [100.0, 100.0]
        assert "error" not in data

    def test_error(self) -> None:
        result = CashflowResult(loan_id="L2", index=3, error="WAM must be between 1 and 480 months, got 0")

        assert result_to_dict(result) == {
            "loan_id": "L2",
            "index": 3,
            "error": "WAM must be between 1 and 480 months, got 0",
        }
