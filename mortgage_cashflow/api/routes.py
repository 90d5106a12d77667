"""Loan endpoints."""

import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse

from mortgage_cashflow import __version__
from mortgage_cashflow.api.schemas import BatchAccepted, BatchResults, ErrorResponse, LoanPayload
from mortgage_cashflow.batch.orchestrator import BatchOrchestrator
from mortgage_cashflow.engine.validation import validate_batch
from mortgage_cashflow.models.amortization import CashflowRecord, CashflowResult
from mortgage_cashflow.models.enums import DispatchMode
from mortgage_cashflow.models.loan import LoanInfo
from mortgage_cashflow.sinks.base import ResultSink, local_now
from mortgage_cashflow.sinks.serialization import result_to_dict, to_dict_fast

logger = logging.getLogger(__name__)

router = APIRouter(tags=["loans"])

SERVICE_INFO = {
    "service": "mortgage-cashflow",
    "description": "Mortgage loan amortization calculation service",
    "version": __version__,
    "endpoints": {
        "GET /info": "Get service information and capabilities",
        "GET /health": "Liveness check",
        "GET /loans": "Retrieve list of processed loans",
        "POST /loans": "Submit loan data for amortization calculation",
    },
    "capabilities": [
        "Loan amortization schedule generation",
        "CPR to SMM conversion for prepayment modeling",
        "Concurrent loan processing under a worker limit",
        "Delinquency transition modeling",
        "JSON, console and Kafka result sinks",
    ],
    "loan_parameters": {
        "id": "Unique loan identifier (string)",
        "wam": "Weighted Average Maturity in months (integer)",
        "wac": "Weighted Average Coupon rate per annum as percentage (float)",
        "face": "Mortgage principal amount in dollars (float)",
        "prepay_cpr": "Conditional Prepayment Rate as decimal (float, optional)",
        "static_dq": "Apply the delinquency transition model (bool, optional, alias staticdq)",
        "smm_arr": "Per-period single monthly mortality, used when prepay_cpr is 0 (list, optional)",
    },
}


def persist_result(
    sink: ResultSink | None,
    loan: LoanInfo,
    result: CashflowResult,
    local_date: datetime,
) -> None:
    """Write a successful result to the sink, if one is configured."""
    if sink is None or not result.ok:
        return
    sink.write_result(CashflowRecord(mortgage=loan, local_date=local_date, amort_table=result.cashflow))


@router.get("/info")
def get_service_info():
    return SERVICE_INFO


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/loans")
def get_loans(request: Request):
    """Every loan accepted so far, oldest first."""
    return [to_dict_fast(loan) for loan in request.app.state.repository.list()]


@router.post(
    "/loans",
    response_model=BatchResults,
    responses={
        202: {"model": BatchAccepted},
        400: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
def request_cashflow(
    request: Request,
    loans: list[LoanPayload],
    background_tasks: BackgroundTasks,
    mode: DispatchMode = DispatchMode.SYNC,
    partial: bool = False,
):
    """Compute cashflows for a batch of loans.

    ``mode=sync`` answers with every schedule; ``mode=async`` answers 202 and
    persists schedules as they finish.
    """
    state = request.app.state
    orchestrator: BatchOrchestrator = state.orchestrator
    batch = [payload.to_loan() for payload in loans]
    local_date = local_now(state.config.timezone)
    timeout = state.config.workers.timeout_seconds

    logger.info("Received %d loans for processing (mode=%s)", len(batch), mode.value)

    if mode == DispatchMode.SYNC:
        results = orchestrator.run(batch, partial=partial, timeout=timeout)
        for loan, result in zip(batch, results):
            persist_result(state.sink, loan, result, local_date)
        state.repository.append(batch)
        return BatchResults(
            loan_count=len(batch),
            local_date=local_date.isoformat(),
            results=[result_to_dict(r) for r in results],
        )

    if not partial:
        validate_batch(batch, strict_transitions=orchestrator.strict_transitions)
    state.repository.append(batch)

    def on_result(loan: LoanInfo, result: CashflowResult) -> None:
        persist_result(state.sink, loan, result, local_date)

    background_tasks.add_task(
        orchestrator.submit, batch, on_result=on_result, partial=partial, timeout=timeout
    )

    body = BatchAccepted(
        message=f"Received {len(batch)} loans, amortization calculations started",
        loan_count=len(batch),
        local_date=local_date.isoformat(),
    )
    return JSONResponse(status_code=202, content=body.model_dump())
