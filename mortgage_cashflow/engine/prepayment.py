"""CPR / SMM prepayment conversions."""

from mortgage_cashflow.models.loan import LoanInfo


def cpr_to_smm(cpr: float) -> float:
    """Convert an annual CPR to its single monthly mortality rate.

    SMM = 1 - (1 - CPR)^(1/12)
    """
    return 1.0 - (1.0 - cpr) ** (1.0 / 12.0)


def smm_to_cpr(smm: float) -> float:
    """Inverse of :func:`cpr_to_smm`: CPR = 1 - (1 - SMM)^12."""
    return 1.0 - (1.0 - smm) ** 12


def convert_cpr_to_smm(cpr: float, wam: int) -> list[float]:
    """Build a constant SMM schedule of ``wam`` periods.

    Prepayment speed is flat for the life of the loan. A zero CPR gives an
    all-zero schedule.

    Parameters
    ----------
    cpr : float
        Annual conditional prepayment rate as a decimal fraction.
    wam : int
        Number of periods.

    Returns
    -------
    list[float]
        SMM per period.
    """
    if cpr > 0:
        return [cpr_to_smm(cpr)] * wam
    return [0.0] * wam


def resolve_smm_schedule(loan: LoanInfo) -> list[float]:
    """Pick the prepayment schedule for a loan.

    A positive CPR always wins; otherwise a caller-supplied ``smm_arr`` is
    used as-is, and without one the schedule is all zeros.
    """
    if loan.prepay_cpr > 0 or loan.smm_arr is None:
        return convert_cpr_to_smm(loan.prepay_cpr, loan.wam)
    return [float(value) for value in loan.smm_arr]
