"""Loan descriptor model."""

from dataclasses import dataclass, fields

from mortgage_cashflow.models.enums import DelinquencyState

# Descriptor attribute holding the transition row for each source state
TRANSITION_FIELDS: dict[DelinquencyState, str] = {
    DelinquencyState.PERFORMING: "performing_transition",
    DelinquencyState.DQ30: "dq30_transition",
    DelinquencyState.DQ60: "dq60_transition",
    DelinquencyState.DQ90: "dq90_transition",
    DelinquencyState.DQ120: "dq120_transition",
    DelinquencyState.DQ150: "dq150_transition",
    DelinquencyState.DQ180: "dq180_transition",
    DelinquencyState.DEFAULT: "default_transition",
}


@dataclass(frozen=True)
class LoanInfo:
    """Static terms of a single loan.

    ``wac`` is an annual rate in percentage points (4.5 means 4.5%) and
    ``prepay_cpr`` is a decimal fraction (0.06 means 6% CPR).

    Each ``*_transition`` row gives the probability of moving from that
    delinquency state to each of the eight states, in
    :class:`DelinquencyState` order. Rows left as ``None`` fall back to the
    built-in roll-rate matrix.
    """

    id: str
    wam: int  # Remaining term in months
    wac: float  # Annual coupon, percentage points
    face: float  # Current principal balance
    prepay_cpr: float = 0.0
    static_dq: bool = False
    smm_arr: tuple[float, ...] | None = None  # Period-varying SMM, used when CPR is 0
    performing_transition: tuple[float, ...] | None = None
    dq30_transition: tuple[float, ...] | None = None
    dq60_transition: tuple[float, ...] | None = None
    dq90_transition: tuple[float, ...] | None = None
    dq120_transition: tuple[float, ...] | None = None
    dq150_transition: tuple[float, ...] | None = None
    dq180_transition: tuple[float, ...] | None = None
    default_transition: tuple[float, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "LoanInfo":
        """Build a descriptor from a JSON-style mapping.

        Unknown keys are ignored; sequences are frozen to tuples.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key == "staticdq":
                key = "static_dq"
            if key not in known:
                continue
            if isinstance(value, list):
                value = tuple(value)
            values[key] = value
        return cls(**values)

    def transition_rows(self) -> dict[DelinquencyState, tuple[float, ...] | None]:
        """Return the caller-supplied transition row for each source state."""
        return {state: getattr(self, name) for state, name in TRANSITION_FIELDS.items()}
