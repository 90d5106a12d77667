"""Sink protocol, factory and the run timestamp helper."""

import logging
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mortgage_cashflow.config import CashflowConfig
from mortgage_cashflow.models.amortization import CashflowRecord
from mortgage_cashflow.sinks.console import ConsoleSink
from mortgage_cashflow.sinks.json_file import JsonFileSink
from mortgage_cashflow.sinks.kafka import KafkaSink

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    """Anything that can persist a cashflow record."""

    def write_result(self, record: CashflowRecord): ...

    def close(self) -> None: ...


def local_now(timezone: str) -> datetime:
    """Current time in ``timezone``; falls back to local time if it is unknown."""
    try:
        return datetime.now(ZoneInfo(timezone))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using local time", timezone)
        return datetime.now().astimezone()


def build_sink(config: CashflowConfig) -> ResultSink | None:
    """Create the result sink selected by ``RESULT_SINK``.

    Returns None when persistence is disabled.
    """
    kind = config.output.result_sink
    if not config.output.persist_results or kind == "none":
        return None
    if kind == "console":
        return ConsoleSink(pretty=config.output.pretty_json)
    if kind == "kafka":
        return KafkaSink(config.kafka)
    return JsonFileSink(config.output.output_dir, pretty=config.output.pretty_json)
