"""Bounded-concurrency batch dispatch."""

from mortgage_cashflow.batch.orchestrator import BatchHandle, BatchOrchestrator
from mortgage_cashflow.batch.pool import WorkerPool

__all__ = ["BatchHandle", "BatchOrchestrator", "WorkerPool"]
