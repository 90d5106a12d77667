"""JSON file sink: one document per loan per batch."""

import json
import logging
import re
import threading
from pathlib import Path

from mortgage_cashflow.exceptions import SinkError
from mortgage_cashflow.models.amortization import CashflowRecord
from mortgage_cashflow.sinks.serialization import to_dict

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class JsonFileSink:
    """Write cashflow records to ``cashflow_<loan_id>_<timestamp>.json`` files."""

    def __init__(self, output_dir: str | Path, pretty: bool = True) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._count = 0
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def path_for(self, record: CashflowRecord, attempt: int = 0) -> Path:
        """File path for a record; loan ids are reduced to filename-safe characters.

        Retries after a name clash append ``_<attempt>`` before the extension.
        """
        safe_id = _UNSAFE_CHARS.sub("_", record.mortgage.id)
        stamp = record.local_date.strftime("%Y%m%d_%H%M%S")
        suffix = f"_{attempt}" if attempt else ""
        return self.output_dir / f"cashflow_{safe_id}_{stamp}{suffix}.json"

    def write_result(self, record: CashflowRecord) -> Path:
        """Write one record and return the file it went to.

        Existing files are never overwritten; ids that sanitize to the same
        name in the same second get a numbered suffix.
        """
        data = to_dict(record)
        attempt = 0

        while True:
            file_path = self.path_for(record, attempt)
            try:
                with open(file_path, "x", encoding="utf-8") as f:
                    if self.pretty:
                        json.dump(data, f, indent=2, ensure_ascii=False)
                    else:
                        json.dump(data, f, ensure_ascii=False)
            except FileExistsError:
                attempt += 1
                continue
            except OSError as exc:
                raise SinkError(f"Cannot write {file_path}: {exc}") from exc
            break

        with self._lock:
            self._count += 1
        logger.info("Cashflow data saved to: %s", file_path)
        return file_path

    def close(self) -> None:
        """Log summary."""
        logger.info("JSON files written to %s: %d records", self.output_dir, self.count)
