#!/usr/bin/env python3
"""Benchmark batch cashflow throughput.

Measures:
- Loans per second across worker limits
- Peak concurrency actually reached by the pool
- Thread vs process pools

Usage:
    python scripts/benchmark.py
    python scripts/benchmark.py --scale 5000
    python scripts/benchmark.py --workers 1 4 16 100 --pool process
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mortgage_cashflow.batch import BatchOrchestrator, WorkerPool
from mortgage_cashflow.generators import LoanBatchGenerator
from mortgage_cashflow.models.loan import LoanInfo

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def get_memory_mb() -> float:
    """Get peak process memory usage in MB (0 where unsupported)."""
    try:
        import resource
    except ImportError:
        return 0.0
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return usage.ru_maxrss / 1024  # Linux reports in KiB


def benchmark_workers(loans: list[LoanInfo], workers: int, pool_kind: str) -> float:
    """Run one batch and print its throughput.

    Returns
    -------
    float
        Loans per second.
    """
    with WorkerPool(workers, pool_kind) as pool:
        orchestrator = BatchOrchestrator(pool)
        t0 = time.perf_counter()
        results = orchestrator.run(loans)
        elapsed = time.perf_counter() - t0
        peak = pool.peak_active

    periods = sum(len(r.cashflow) for r in results)
    rate = len(loans) / elapsed if elapsed > 0 else 0.0
    print(
        f"  W={workers:>4}  {len(loans):>8,} loans in {elapsed:.2f}s  "
        f"({rate:,.0f}/sec, {periods:,} periods, peak={peak})"
    )
    return rate


def main() -> None:
    """Run benchmarks."""
    parser = argparse.ArgumentParser(description="Benchmark mortgage-cashflow throughput")
    parser.add_argument("--scale", type=int, default=1000, help="Number of loans (default: 1000)")
    parser.add_argument(
        "--workers",
        type=int,
        nargs="+",
        default=[1, 4, 16, 100],
        help="Worker limits to compare (default: 1 4 16 100)",
    )
    parser.add_argument(
        "--pool",
        choices=["thread", "process"],
        default="thread",
        help="Executor kind (default: thread)",
    )
    parser.add_argument("--random", action="store_true", help="Use random loans instead of the ladder")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    print("=" * 60)
    print(f"  mortgage-cashflow Benchmark  |  scale={args.scale:,}  pool={args.pool}")
    print("=" * 60)

    if args.random:
        loans = list(LoanBatchGenerator(seed=args.seed).generate_batch(args.scale))
    else:
        loans = LoanBatchGenerator.ladder(args.scale)

    print("\n[1] Throughput by worker limit")
    rates = {w: benchmark_workers(loans, w, args.pool) for w in args.workers}

    best = max(rates, key=rates.get)
    print(f"\n  Best: W={best} ({rates[best]:,.0f}/sec)")
    print(f"  Peak memory: {get_memory_mb():,.0f} MB")

    print("\n" + "=" * 60)
    print("  Benchmark complete")
    print("=" * 60)


if __name__ == "__main__":
    main()
