"""Fixed-capacity worker pool.

Wraps a ``concurrent.futures`` executor with a bounded semaphore so that at
most ``capacity`` tasks are in flight. The dispatching thread blocks in
:meth:`WorkerPool.submit` while every slot is taken; a slot is released by
the task's completion callback.

Usage::

    with WorkerPool(capacity=8) as pool:
        future = pool.submit(calculate_cashflow, loan)
        table = future.result()
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable

from mortgage_cashflow.models.enums import PoolKind

logger = logging.getLogger(__name__)


class WorkerPool:
    """Bounded pool of threads or processes.

    Parameters
    ----------
    capacity : int
        Maximum number of tasks running at once.
    kind : PoolKind | str
        ``"thread"`` (default) or ``"process"``. Process workers are capped
        at the CPU count; the slot limit still applies on top.
    """

    def __init__(self, capacity: int = 100, kind: PoolKind | str = PoolKind.THREAD) -> None:
        if capacity < 1:
            raise ValueError(f"Pool capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self.kind = PoolKind(kind)
        self._slots = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._active = 0
        self._peak = 0
        self._executor = self._create_executor()

    def _create_executor(self) -> Executor:
        if self.kind == PoolKind.PROCESS:
            workers = min(self.capacity, os.cpu_count() or 1)
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=self.capacity, thread_name_prefix="cashflow-worker")

    @property
    def active(self) -> int:
        """Tasks currently holding a slot."""
        with self._lock:
            return self._active

    @property
    def peak_active(self) -> int:
        """Highest number of slots held at once since creation."""
        with self._lock:
            return self._peak

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        """Run ``fn(*args, **kwargs)`` once a slot is free.

        Blocks the caller while all slots are in use.
        """
        self._slots.acquire()
        with self._lock:
            self._active += 1
            self._peak = max(self._peak, self._active)

        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except BaseException:
            self._release()
            raise

        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, _future: Future) -> None:
        self._release()

    def _release(self) -> None:
        with self._lock:
            self._active -= 1
        self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for running tasks."""
        logger.debug("Shutting down %s pool (capacity=%d)", self.kind.value, self.capacity)
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown(wait=True)
