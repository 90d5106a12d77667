"""Output sinks for persisting cashflow results."""

from mortgage_cashflow.sinks.base import ResultSink, build_sink, local_now
from mortgage_cashflow.sinks.console import ConsoleSink
from mortgage_cashflow.sinks.json_file import JsonFileSink
from mortgage_cashflow.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink", "ResultSink", "build_sink", "local_now"]
