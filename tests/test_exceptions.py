"""Tests for the exception hierarchy."""

import pytest

from mortgage_cashflow.exceptions import (
    CalculationError,
    CashflowError,
    ConfigurationError,
    DeadlineExceededError,
    LoanValidationError,
    SinkError,
)


class TestHierarchy:
    """All errors share one base."""

    @pytest.mark.parametrize(
        "error_cls",
        [LoanValidationError, CalculationError, DeadlineExceededError, ConfigurationError, SinkError],
    )
    def test_base_class(self, error_cls: type) -> None:
        assert issubclass(error_cls, CashflowError)

    def test_deadline_is_calculation_error(self) -> None:
        with pytest.raises(CalculationError):
            raise DeadlineExceededError("too slow")


class TestLoanValidationError:
    """Tests for LoanValidationError."""

    def test_defaults(self) -> None:
        error = LoanValidationError("bad loan")

        assert str(error) == "bad loan"
        assert error.index is None
        assert error.loan_id is None

    def test_at_tags_index(self) -> None:
        """at() returns a copy; the original stays untagged."""
        error = LoanValidationError("WAM out of range", loan_id="L1")

        tagged = error.at(4)

        assert tagged.index == 4
        assert tagged.loan_id == "L1"
        assert tagged.message == "WAM out of range"
        assert error.index is None

    def test_to_dict(self) -> None:
        error = LoanValidationError("face value must be positive", index=2, loan_id="L9")

        assert error.to_dict() == {
            "error": "face value must be positive",
            "index": 2,
            "loan_id": "L9",
        }
