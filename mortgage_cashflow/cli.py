"""Command line entry point: serve the API, run a batch file, or generate loans."""

import argparse
import json
import logging
import sys
from pathlib import Path

from mortgage_cashflow.batch.orchestrator import BatchOrchestrator
from mortgage_cashflow.batch.pool import WorkerPool
from mortgage_cashflow.config import RESULT_SINKS, CashflowConfig
from mortgage_cashflow.exceptions import CashflowError, ConfigurationError, LoanValidationError
from mortgage_cashflow.generators.loans import LoanBatchGenerator
from mortgage_cashflow.logging import setup_logging
from mortgage_cashflow.models.amortization import CashflowRecord
from mortgage_cashflow.models.loan import LoanInfo
from mortgage_cashflow.sinks.base import build_sink, local_now
from mortgage_cashflow.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


def read_loans(path: Path) -> list[LoanInfo]:
    """Load a JSON array of loan objects."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CashflowError(f"Cannot read loans from {path}: {exc}") from exc

    if not isinstance(data, list):
        raise CashflowError(f"{path} must contain a JSON array of loans")

    loans = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise LoanValidationError("loan must be a JSON object", index=index)
        try:
            loans.append(LoanInfo.from_dict(item))
        except TypeError as exc:
            raise LoanValidationError(f"missing loan field: {exc}", index=index) from exc
    return loans


def loan_to_json(loan: LoanInfo) -> dict:
    return {key: value for key, value in to_dict(loan).items() if value is not None}


def cmd_serve(args: argparse.Namespace, config: CashflowConfig) -> int:
    import uvicorn

    from mortgage_cashflow.api.app import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info("Listening on %s:%d", host, port)
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)
    return 0


def cmd_calc(args: argparse.Namespace, config: CashflowConfig) -> int:
    loans = read_loans(args.file)
    local_date = local_now(config.timezone)

    with WorkerPool(config.workers.worker_limit, config.workers.pool_kind) as pool:
        orchestrator = BatchOrchestrator(pool, strict_transitions=config.strict_transitions)
        results = orchestrator.run(
            loans, partial=args.partial, timeout=config.workers.timeout_seconds
        )

    sink = build_sink(config)
    failed = 0
    try:
        for loan, result in zip(loans, results):
            if not result.ok:
                failed += 1
                logger.warning("Loan %s failed: %s", loan.id, result.error)
                continue
            if sink is not None:
                sink.write_result(
                    CashflowRecord(mortgage=loan, local_date=local_date, amort_table=result.cashflow)
                )
    finally:
        if sink is not None:
            sink.close()

    logger.info("Processed %d loans (%d failed)", len(loans), failed)
    return 1 if failed else 0


def cmd_generate(args: argparse.Namespace, config: CashflowConfig) -> int:
    if args.ladder:
        loans = LoanBatchGenerator.ladder(args.count)
    else:
        loans = list(LoanBatchGenerator(seed=args.seed).generate_batch(args.count))

    text = json.dumps([loan_to_json(loan) for loan in loans], indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %d loans to %s", len(loans), args.output)
    else:
        print(text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mortgage-cashflow",
        description="Mortgage loan amortization and cashflow projection",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT)")
    serve.set_defaults(handler=cmd_serve)

    calc = subparsers.add_parser("calc", help="Compute cashflows for a JSON batch file")
    calc.add_argument("file", type=Path, help="JSON array of loans")
    calc.add_argument("--workers", type=int, default=None, help="Override WORKER_LIMIT")
    calc.add_argument("--sink", choices=RESULT_SINKS, default=None, help="Override RESULT_SINK")
    calc.add_argument(
        "--partial",
        action="store_true",
        help="Report invalid loans instead of rejecting the batch",
    )
    calc.set_defaults(handler=cmd_calc)

    generate = subparsers.add_parser("generate", help="Emit a synthetic loan batch as JSON")
    generate.add_argument("count", type=int, help="Number of loans")
    generate.add_argument("--seed", type=int, default=None, help="Random seed")
    generate.add_argument("--ladder", action="store_true", help="Deterministic load-test ladder")
    generate.add_argument("--output", "-o", type=Path, default=None, help="Output file (default: stdout)")
    generate.set_defaults(handler=cmd_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = CashflowConfig.from_env()
        if getattr(args, "workers", None) is not None:
            config.workers.worker_limit = args.workers
        if getattr(args, "sink", None) is not None:
            config.output.result_sink = args.sink
        config.validate()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(
        level=args.log_level or config.logging.level,
        format_type=config.logging.format_type,
        log_file=config.logging.log_file_path,
    )

    try:
        return args.handler(args, config)
    except LoanValidationError as exc:
        print(json.dumps(exc.to_dict()), file=sys.stderr)
        return 1
    except CashflowError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
