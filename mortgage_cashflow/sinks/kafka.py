"""Kafka sink for publishing cashflow records."""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from mortgage_cashflow.config import KafkaConfig
from mortgage_cashflow.exceptions import SinkError
from mortgage_cashflow.models.amortization import CashflowRecord
from mortgage_cashflow.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    start_time: float | None = None
    end_time: float | None = None

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0

    @property
    def throughput(self) -> float:
        """Calculate records per second achieved."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        duration = self.end_time - self.start_time
        return self.sent / duration if duration > 0 else 0.0


class KafkaSink:
    """Publish cashflow records to a Kafka topic, keyed by loan id."""

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.topic = config.topic
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()
        # produce() and delivery callbacks run on different worker threads
        self._lock = threading.Lock()

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def send(self, record: Any, key: str | None = None) -> None:
        """Send a single record to the configured topic."""
        value = json.dumps(to_dict(record), ensure_ascii=False).encode("utf-8")

        with self._lock:
            if self.stats.start_time is None:
                self.stats.start_time = time.time()
            try:
                self.producer.produce(
                    topic=self.topic,
                    key=key.encode("utf-8") if key else None,
                    value=value,
                    callback=self._delivery_callback,
                )
            except (BufferError, KafkaException) as exc:
                raise SinkError(f"Cannot produce to {self.topic}: {exc}") from exc
            self.stats.sent += 1
            self.producer.poll(0)

    def write_result(self, record: CashflowRecord) -> None:
        """Publish one cashflow record."""
        self.send(record, key=record.mortgage.id)

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        self.stats.end_time = time.time()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d, throughput=%.1f/sec",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
            self.stats.throughput,
        )
