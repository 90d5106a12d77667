"""Cashflow calculation engine."""

from mortgage_cashflow.engine.amortization import (
    generate_amortization_table,
    level_payment,
    round_to_cent,
    true_up_balances,
)
from mortgage_cashflow.engine.calculator import calculate_cashflow
from mortgage_cashflow.engine.delinquency import (
    apply_delinquency_model,
    build_transition_matrix,
    default_transition_matrix,
)
from mortgage_cashflow.engine.prepayment import (
    convert_cpr_to_smm,
    cpr_to_smm,
    resolve_smm_schedule,
    smm_to_cpr,
)
from mortgage_cashflow.engine.validation import (
    collect_validation_errors,
    validate_batch,
    validate_loan,
)

__all__ = [
    "apply_delinquency_model",
    "build_transition_matrix",
    "calculate_cashflow",
    "collect_validation_errors",
    "convert_cpr_to_smm",
    "cpr_to_smm",
    "default_transition_matrix",
    "generate_amortization_table",
    "level_payment",
    "resolve_smm_schedule",
    "round_to_cent",
    "smm_to_cpr",
    "true_up_balances",
    "validate_batch",
    "validate_loan",
]
