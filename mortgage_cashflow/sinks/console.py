"""Console sink for debugging and the CLI."""

import json
import threading

from mortgage_cashflow.models.amortization import CashflowRecord
from mortgage_cashflow.sinks.serialization import to_dict


class ConsoleSink:
    """Output cashflow records to stdout."""

    def __init__(self, pretty: bool = True, max_records: int | None = None) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        max_records : int | None
            Maximum records to print (None for all).
        """
        self.pretty = pretty
        self.max_records = max_records
        self._count = 0
        self._lock = threading.Lock()

    def write_result(self, record: CashflowRecord) -> None:
        """Print one record, unless the print limit is reached."""
        data = to_dict(record)
        with self._lock:
            self._count += 1
            if self.max_records is not None and self._count > self.max_records:
                return
            if self.pretty:
                print(json.dumps(data, indent=2, ensure_ascii=False))
            else:
                print(json.dumps(data, ensure_ascii=False))

    def close(self) -> None:
        """Print summary."""
        with self._lock:
            count = self._count
        if self.max_records is not None and count > self.max_records:
            print(f"... and {count - self.max_records} more records")
        print(f"Console sink: {count} records")
