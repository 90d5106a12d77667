"""Configuration management for mortgage-cashflow."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mortgage_cashflow.exceptions import ConfigurationError

POOL_KINDS = ("thread", "process")
RESULT_SINKS = ("file", "console", "kafka", "none")


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    host: str = "localhost"
    port: int = 8080


@dataclass
class WorkerConfig:
    """Batch dispatch configuration."""

    worker_limit: int = 100
    pool_kind: str = "thread"
    timeout_seconds: float | None = None


@dataclass
class OutputConfig:
    """Result persistence configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = True
    persist_results: bool = True
    result_sink: str = "file"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format_type: str = "standard"
    log_path: str = ""
    log_file: str = ""

    @property
    def log_file_path(self) -> Path | None:
        """Full path of the log file, or None when file logging is off."""
        if not self.log_file:
            return None
        return Path(self.log_path) / self.log_file


@dataclass
class KafkaConfig:
    """Kafka producer configuration for the result sink."""

    bootstrap_servers: str = "localhost:9092"
    topic: str = "mortgage.cashflows"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def read_config_file() -> dict[str, Any]:
    """Read the optional JSON config file.

    When ``OCP_ENV`` is set the file is ``$CONFIG_PATH/config.json`` and must
    exist; otherwise ``./config.json`` is used if present.

    Returns
    -------
    dict[str, Any]
        Parsed settings keyed by their environment variable names.
    """
    if os.getenv("OCP_ENV"):
        path = Path(os.getenv("CONFIG_PATH", "")) / "config.json"
        required = True
    else:
        path = Path("config.json")
        required = False

    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return data


@dataclass
class CashflowConfig:
    """Main configuration for mortgage-cashflow."""

    server: ServerConfig = field(default_factory=ServerConfig)
    workers: WorkerConfig = field(default_factory=WorkerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    timezone: str = "America/New_York"
    strict_transitions: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Reject settings the service cannot run with."""
        if self.workers.worker_limit < 1:
            raise ConfigurationError(
                f"WORKER_LIMIT must be a positive integer, got {self.workers.worker_limit}"
            )
        if self.workers.pool_kind not in POOL_KINDS:
            raise ConfigurationError(
                f"POOL_KIND must be one of {POOL_KINDS}, got {self.workers.pool_kind!r}"
            )
        if self.output.result_sink not in RESULT_SINKS:
            raise ConfigurationError(
                f"RESULT_SINK must be one of {RESULT_SINKS}, got {self.output.result_sink!r}"
            )
        timeout = self.workers.timeout_seconds
        if timeout is not None and timeout <= 0:
            raise ConfigurationError(f"CALC_TIMEOUT must be positive, got {timeout}")

    @classmethod
    def from_env(cls) -> "CashflowConfig":
        """Create config from environment variables layered over config.json."""
        file_values = read_config_file()

        def get(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is not None:
                return value
            if name in file_values:
                return str(file_values[name])
            return default

        try:
            server = ServerConfig(
                host=get("HOST", "localhost"),
                port=int(get("PORT", "8080")),
            )

            timeout = get("CALC_TIMEOUT", "")
            workers = WorkerConfig(
                worker_limit=int(get("WORKER_LIMIT", "100")),
                pool_kind=get("POOL_KIND", "thread"),
                timeout_seconds=float(timeout) if timeout else None,
            )

            output = OutputConfig(
                output_dir=Path(get("OUTPUT_DIR", "output")),
                pretty_json=_as_bool(get("PRETTY_JSON", "true")),
                persist_results=_as_bool(get("PERSIST_RESULTS", "true")),
                result_sink=get("RESULT_SINK", "file"),
            )

            log = LoggingConfig(
                level=get("LOG_LEVEL", "INFO"),
                format_type=get("LOG_FORMAT", "standard"),
                log_path=get("LOG_PATH", ""),
                log_file=get("LOG_FILE", ""),
            )

            kafka = KafkaConfig(
                bootstrap_servers=get("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
                topic=get("KAFKA_TOPIC", "mortgage.cashflows"),
                acks=get("KAFKA_ACKS", "all"),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid configuration value: {exc}") from exc

        return cls(
            server=server,
            workers=workers,
            output=output,
            logging=log,
            kafka=kafka,
            timezone=get("TIMEZONE", "America/New_York"),
            strict_transitions=_as_bool(get("STRICT_TRANSITIONS", "false")),
        )
