"""Enumeration types for the cashflow domain."""

from enum import Enum


class DelinquencyState(str, Enum):
    """Delinquency buckets, in transition-matrix order."""

    PERFORMING = "PERFORMING"
    DQ30 = "DQ30"
    DQ60 = "DQ60"
    DQ90 = "DQ90"
    DQ120 = "DQ120"
    DQ150 = "DQ150"
    DQ180 = "DQ180"
    DEFAULT = "DEFAULT"


class PoolKind(str, Enum):
    THREAD = "thread"
    PROCESS = "process"


class DispatchMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"
