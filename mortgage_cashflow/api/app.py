"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mortgage_cashflow import __version__
from mortgage_cashflow.api.routes import router
from mortgage_cashflow.batch.orchestrator import BatchOrchestrator
from mortgage_cashflow.batch.pool import WorkerPool
from mortgage_cashflow.config import CashflowConfig
from mortgage_cashflow.exceptions import (
    CalculationError,
    DeadlineExceededError,
    LoanValidationError,
    SinkError,
)
from mortgage_cashflow.sinks.base import ResultSink, build_sink
from mortgage_cashflow.store.loans import InMemoryLoanRepository, LoanRepository

logger = logging.getLogger(__name__)


def create_app(
    config: CashflowConfig | None = None,
    *,
    repository: LoanRepository | None = None,
    orchestrator: BatchOrchestrator | None = None,
    sink: ResultSink | None = None,
) -> FastAPI:
    """Build the service.

    Parameters
    ----------
    config : CashflowConfig | None
        Settings; defaults are used when omitted.
    repository : LoanRepository | None
        Store of accepted loans. A new in-memory store by default.
    orchestrator : BatchOrchestrator | None
        Batch runner. By default one is built over a pool sized by
        ``WORKER_LIMIT``.
    sink : ResultSink | None
        Result sink. By default the one selected by ``RESULT_SINK``.

    Returns
    -------
    FastAPI
        Application with the loan routes and error handlers registered.
    """
    config = config or CashflowConfig()
    owns_pool = orchestrator is None
    if orchestrator is None:
        pool = WorkerPool(config.workers.worker_limit, config.workers.pool_kind)
        orchestrator = BatchOrchestrator(pool, strict_transitions=config.strict_transitions)
    if sink is None:
        sink = build_sink(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Service starting: worker_limit=%d, pool=%s, sink=%s",
            orchestrator.pool.capacity,
            orchestrator.pool.kind.value,
            type(sink).__name__ if sink is not None else "none",
        )
        yield
        if owns_pool:
            orchestrator.pool.shutdown(wait=True)
        if sink is not None:
            sink.close()
        logger.info("Service stopped")

    app = FastAPI(
        title="mortgage-cashflow",
        description="Mortgage loan amortization calculation service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.repository = repository if repository is not None else InMemoryLoanRepository()
    app.state.orchestrator = orchestrator
    app.state.sink = sink

    app.include_router(router)
    _register_error_handlers(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.warning("Error binding request: %s", exc.errors())
        body_error = any(err.get("loc", ("",))[0] == "body" for err in exc.errors())
        message = "Invalid JSON" if body_error else "Invalid request parameters"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(LoanValidationError)
    async def invalid_loan(request: Request, exc: LoanValidationError):
        logger.warning("Rejected batch: loan %s at index %s: %s", exc.loan_id, exc.index, exc.message)
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(DeadlineExceededError)
    async def deadline_exceeded(request: Request, exc: DeadlineExceededError):
        logger.error("Batch timed out: %s", exc)
        return JSONResponse(status_code=504, content={"error": str(exc)})

    @app.exception_handler(CalculationError)
    async def calculation_failed(request: Request, exc: CalculationError):
        logger.error("Calculation failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(SinkError)
    async def sink_failed(request: Request, exc: SinkError):
        logger.error("Result sink failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
