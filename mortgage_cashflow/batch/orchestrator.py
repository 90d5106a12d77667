"""Batch orchestration: fan loans out to a worker pool, collect in order."""

from __future__ import annotations

import functools
import logging
import threading
import time
import uuid
from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Sequence

from mortgage_cashflow.batch.pool import WorkerPool
from mortgage_cashflow.engine.calculator import calculate_cashflow
from mortgage_cashflow.engine.validation import collect_validation_errors, validate_batch
from mortgage_cashflow.exceptions import CalculationError, CashflowError
from mortgage_cashflow.models.amortization import AmortizationTable, CashflowResult
from mortgage_cashflow.models.loan import LoanInfo

logger = logging.getLogger(__name__)

ResultCallback = Callable[[LoanInfo, CashflowResult], None]


@dataclass
class BatchHandle:
    """Tracks one dispatched batch.

    ``results`` is pre-sized to the batch length; each slot is written only
    for its own index. A loan counts as settled once its completion callbacks,
    including the pool slot release, have run.
    """

    batch_id: str
    loans: list[LoanInfo]
    results: list[CashflowResult | None]
    futures: list[Future | None]
    partial: bool = False
    submitted_at: datetime = field(default_factory=datetime.now)
    dispatched: int = 0
    settled: int = 0
    _settle: threading.Condition = field(default_factory=threading.Condition, repr=False)

    @property
    def loan_count(self) -> int:
        return len(self.loans)

    def done(self) -> bool:
        return all(f is None or f.done() for f in self.futures)

    def mark_settled(self) -> None:
        with self._settle:
            self.settled += 1
            self._settle.notify_all()

    def wait_settled(self, timeout: float | None = None) -> bool:
        """Block until every dispatched loan has settled."""
        with self._settle:
            return self._settle.wait_for(lambda: self.settled >= self.dispatched, timeout)

    def result_for(self, index: int) -> CashflowResult | None:
        """Build the result of a finished future.

        Returns None for a failed loan outside partial mode.
        """
        future = self.futures[index]
        loan = self.loans[index]
        exc = future.exception()
        if exc is None:
            return CashflowResult(loan_id=loan.id, index=index, cashflow=future.result())
        if self.partial:
            return CashflowResult(loan_id=loan.id, index=index, error=str(exc))
        return None

    def wait(self, timeout: float | None = None) -> list[CashflowResult]:
        """Block until every loan finishes and return results in input order.

        Raises
        ------
        CashflowError
            The first failure by input index, unless the batch runs in
            partial mode.
        TimeoutError
            If ``timeout`` elapses first.
        """
        limit = time.monotonic() + timeout if timeout is not None else None
        pending = [f for f in self.futures if f is not None]
        _, not_done = wait(pending, timeout=timeout)
        remaining = max(limit - time.monotonic(), 0.0) if limit is not None else None
        if not_done or not self.wait_settled(remaining):
            raise TimeoutError(
                f"Batch {self.batch_id}: {self.dispatched - self.settled} of {self.loan_count} loans still running"
            )

        if not self.partial:
            for index, future in enumerate(self.futures):
                exc = future.exception() if future is not None else None
                if exc is None:
                    continue
                if isinstance(exc, CashflowError):
                    raise exc
                raise CalculationError(
                    f"Calculation failed for loan {self.loans[index].id}: {exc}"
                ) from exc

        return list(self.results)


class BatchOrchestrator:
    """Run the cashflow calculation for a batch of loans under a worker cap.

    Parameters
    ----------
    pool : WorkerPool
        Pool bounding concurrency. Use ``WorkerPool(1)`` for deterministic
        sequential runs.
    calculate : Callable[..., AmortizationTable]
        Per-loan calculation; must accept ``deadline``,
        ``strict_transitions`` and ``carry_forward`` keyword arguments.
    strict_transitions : bool
        Reject transition rows that do not sum to 1.0.
    carry_forward : bool
        Use the carry-forward delinquency mode.
    """

    def __init__(
        self,
        pool: WorkerPool,
        *,
        calculate: Callable[..., AmortizationTable] = calculate_cashflow,
        strict_transitions: bool = False,
        carry_forward: bool = False,
    ) -> None:
        self.pool = pool
        self.calculate = calculate
        self.strict_transitions = strict_transitions
        self.carry_forward = carry_forward

    def run(
        self,
        loans: Sequence[LoanInfo],
        *,
        partial: bool = False,
        timeout: float | None = None,
    ) -> list[CashflowResult]:
        """Compute every loan and wait for the whole batch.

        Parameters
        ----------
        loans : Sequence[LoanInfo]
            Batch in caller order.
        partial : bool
            Report invalid or failed loans as error results instead of
            failing the batch.
        timeout : float | None
            Seconds allowed for the batch; calculations still iterating past
            it are abandoned.

        Returns
        -------
        list[CashflowResult]
            ``result[i]`` belongs to ``loans[i]``.
        """
        handle = self.submit(loans, partial=partial, timeout=timeout)
        return handle.wait()

    def submit(
        self,
        loans: Sequence[LoanInfo],
        *,
        on_result: ResultCallback | None = None,
        partial: bool = False,
        timeout: float | None = None,
    ) -> BatchHandle:
        """Validate and dispatch a batch without waiting for it.

        ``on_result`` is invoked once per finished loan, from the thread that
        completes it, with the loan and its result.

        Raises
        ------
        LoanValidationError
            In fail-fast mode, before anything is dispatched.
        """
        loans = list(loans)
        if partial:
            errors = collect_validation_errors(loans, strict_transitions=self.strict_transitions)
        else:
            validate_batch(loans, strict_transitions=self.strict_transitions)
            errors = {}

        handle = BatchHandle(
            batch_id=uuid.uuid4().hex,
            loans=loans,
            results=[None] * len(loans),
            futures=[None] * len(loans),
            partial=partial,
        )
        deadline = time.monotonic() + timeout if timeout is not None else None

        logger.info(
            "Dispatching batch %s: %d loans, %d rejected, capacity=%d",
            handle.batch_id,
            len(loans),
            len(errors),
            self.pool.capacity,
            extra={"extra": {"batch_id": handle.batch_id, "loan_count": len(loans)}},
        )

        for index, loan in enumerate(loans):
            if index in errors:
                result = CashflowResult(loan_id=loan.id, index=index, error=errors[index].message)
                handle.results[index] = result
                self._notify(on_result, loan, result)
                continue

            future = self.pool.submit(
                self.calculate,
                loan,
                deadline=deadline,
                strict_transitions=self.strict_transitions,
                carry_forward=self.carry_forward,
            )
            handle.futures[index] = future
            handle.dispatched += 1
            future.add_done_callback(functools.partial(self._collect, handle, index, on_result))

        return handle

    def _collect(
        self,
        handle: BatchHandle,
        index: int,
        on_result: ResultCallback | None,
        future: Future,
    ) -> None:
        loan = handle.loans[index]
        try:
            exc = future.exception()
            if exc is not None:
                logger.warning("Loan %s (index %d) failed: %s", loan.id, index, exc)

            result = handle.result_for(index)
            if result is None:
                return
            handle.results[index] = result
            self._notify(on_result, loan, result)
        finally:
            handle.mark_settled()

    @staticmethod
    def _notify(on_result: ResultCallback | None, loan: LoanInfo, result: CashflowResult) -> None:
        if on_result is None:
            return
        try:
            on_result(loan, result)
        except Exception:
            logger.exception("Result handler failed for loan %s", loan.id)
