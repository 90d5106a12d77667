"""Pytest configuration and fixtures."""

import threading
import time
from typing import Callable

import pytest

from mortgage_cashflow.config import CashflowConfig, OutputConfig, WorkerConfig
from mortgage_cashflow.models.amortization import CashflowRecord
from mortgage_cashflow.models.loan import LoanInfo


class RecordingSink:
    """In-memory result sink."""

    def __init__(self) -> None:
        self.records: list[CashflowRecord] = []
        self.closed = False
        self._lock = threading.Lock()

    def write_result(self, record: CashflowRecord) -> None:
        with self._lock:
            self.records.append(record)

    def close(self) -> None:
        self.closed = True


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until ``predicate`` holds or ``timeout`` elapses."""
    end = time.monotonic() + timeout
    while time.monotonic() < end:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_loan() -> LoanInfo:
    """30-year loan at 4.5% with 6% CPR."""
    return LoanInfo(id="LOAN001", wam=360, wac=4.5, face=250000.0, prepay_cpr=0.06)


@pytest.fixture
def dq_loan() -> LoanInfo:
    """Short loan with the delinquency model engaged."""
    return LoanInfo(id="LOAN002", wam=24, wac=6.0, face=50000.0, prepay_cpr=0.1, static_dq=True)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def config(tmp_path) -> CashflowConfig:
    """Config writing any output under the test's temp dir."""
    return CashflowConfig(
        workers=WorkerConfig(worker_limit=4),
        output=OutputConfig(output_dir=tmp_path / "output"),
    )
