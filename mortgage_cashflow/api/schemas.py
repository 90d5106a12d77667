"""Request and response schemas for the HTTP API."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from mortgage_cashflow.models.loan import LoanInfo


class LoanPayload(BaseModel):
    """One loan in a ``POST /loans`` body.

    Only JSON types are checked here; ranges are enforced by the engine's
    validator so that errors carry the loan's batch index.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique loan identifier")
    wam: int = Field(..., description="Remaining term in months")
    wac: float = Field(..., description="Annual coupon rate, percentage points")
    face: float = Field(..., description="Current principal balance")
    prepay_cpr: float = Field(0.0, description="Conditional prepayment rate as a decimal")
    static_dq: bool = Field(
        False,
        validation_alias=AliasChoices("static_dq", "staticdq"),
        description="Apply the delinquency transition model",
    )
    smm_arr: list[float] | None = Field(None, description="Per-period SMM, used when CPR is 0")
    performing_transition: list[float] | None = None
    dq30_transition: list[float] | None = None
    dq60_transition: list[float] | None = None
    dq90_transition: list[float] | None = None
    dq120_transition: list[float] | None = None
    dq150_transition: list[float] | None = None
    dq180_transition: list[float] | None = None
    default_transition: list[float] | None = None

    def to_loan(self) -> LoanInfo:
        return LoanInfo.from_dict(self.model_dump())


class BatchAccepted(BaseModel):
    """Response for an asynchronously dispatched batch."""

    message: str
    loan_count: int
    local_date: str


class BatchResults(BaseModel):
    """Response for a synchronously computed batch."""

    loan_count: int
    local_date: str
    results: list[dict]


class ErrorResponse(BaseModel):
    error: str
    index: int | None = None
    loan_id: str | None = None
