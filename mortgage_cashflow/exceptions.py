"""Custom exception hierarchy for mortgage-cashflow."""


class CashflowError(Exception):
    """Base exception for all mortgage-cashflow errors."""


class LoanValidationError(CashflowError):
    """Raised when a loan descriptor fails validation.

    Carries the position of the offending loan in its batch (when known)
    so callers can report which input was rejected.
    """

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        loan_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.index = index
        self.loan_id = loan_id

    def at(self, index: int) -> "LoanValidationError":
        """Return a copy of this error tagged with a batch index."""
        return LoanValidationError(self.message, index=index, loan_id=self.loan_id)

    def to_dict(self) -> dict:
        return {"error": self.message, "index": self.index, "loan_id": self.loan_id}


class CalculationError(CashflowError):
    """Raised when a cashflow calculation cannot complete."""


class DeadlineExceededError(CalculationError):
    """Raised when a calculation runs past its caller-supplied deadline."""


class ConfigurationError(CashflowError):
    """Raised when configuration is invalid or missing."""


class SinkError(CashflowError):
    """Raised when a sink operation fails."""
