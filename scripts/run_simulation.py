"""Run the slayer-task Monte Carlo simulation from the command line."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from slayer_core import (
    POLICIES,
    WorldEra,
    compute_simulation,
    format_report,
    load_start_point,
    save_start_point,
)

ERA_CHOICES = {era.value: era for era in WorldEra}


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate slayer-task progression under a policy.")
    parser.add_argument(
        "--policy",
        choices=sorted(POLICIES),
        default="minimize-lock",
        help="Decision policy to simulate (default: %(default)s).",
    )
    parser.add_argument(
        "--era",
        choices=sorted(ERA_CHOICES),
        default=WorldEra.LIMP_2026.value,
        help="World era selecting reward rates and the default start (default: %(default)s).",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=10_000,
        help="Number of independent replications (default: %(default)s).",
    )
    parser.add_argument("--seed", type=int, default=42, help="Root random seed (default: %(default)s).")
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run every replication in this process instead of a process pool.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of worker processes (default: CPU count).",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Per-replication action ceiling (default: library default).",
    )
    parser.add_argument(
        "--start",
        type=Path,
        default=None,
        help="JSON file with the starting character (default: the era's start).",
    )
    parser.add_argument(
        "--save-start",
        type=Path,
        default=None,
        help="Write the start point used to this JSON file.",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
        help="Logging verbosity (default: %(default)s).",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.runs <= 0:
        raise SystemExit("--runs must be positive")

    start = None
    if args.start is not None:
        try:
            start = load_start_point(args.start)
        except (OSError, ValueError) as exc:
            raise SystemExit(f"Cannot load start point {args.start}: {exc}") from exc

    extra = {} if args.max_steps is None else {"max_steps": args.max_steps}
    result = compute_simulation(
        args.policy,
        start=start,
        era=ERA_CHOICES[args.era],
        runs=args.runs,
        seed=args.seed,
        parallel=not args.sequential,
        max_workers=args.workers,
        **extra,
    )
    if args.save_start is not None:
        save_start_point(result.start, args.save_start)

    for line in format_report(result.report):
        print(line)
    print(f"Finished in {result.compute_seconds:.1f}s")


if __name__ == "__main__":
    main(sys.argv[1:])
