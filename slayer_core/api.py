"""High-level entry points used by the UI and the command line."""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Optional, Union

from .catalog import Catalog
from .cost import CostModel
from .data import DEFAULT_START_POINTS, StartPoint, WorldEra
from .models import MonteCarloReport
from .policies import Policy, policy_by_name
from .simulation import DEFAULT_MAX_STEPS, simulate_many


def default_start_point(era: WorldEra = WorldEra.LIMP_2026) -> StartPoint:
    """Return the historical starting character of ``era``."""

    return DEFAULT_START_POINTS[era]


@dataclass
class SimulationComputationResult:
    """Bundle containing the report and the inputs that produced it."""

    report: MonteCarloReport
    start: StartPoint
    policy_name: str
    era: WorldEra
    runs: int
    seed: int
    compute_seconds: float


def compute_simulation(
    policy: Union[str, Policy],
    start: Optional[StartPoint] = None,
    era: WorldEra = WorldEra.LIMP_2026,
    runs: int = 10_000,
    seed: int = 42,
    parallel: bool = True,
    max_workers: Optional[int] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    cost_model: Optional[CostModel] = None,
) -> SimulationComputationResult:
    """Run the Monte Carlo simulation for one policy and start point.

    Parameters
    ----------
    policy:
        Registered policy name or a policy instance.
    start:
        Starting character; defaults to the historical start of ``era``.
    era:
        World era selecting reward rates.
    runs:
        Number of independent replications.
    seed:
        Root seed; replication seeds are derived from it.
    parallel:
        Run replications in worker processes.
    max_workers:
        Optional cap on the worker count.
    max_steps:
        Per-replication action ceiling.
    cost_model:
        Optional override for the measured cost table.

    Returns
    -------
    SimulationComputationResult
        Aggregated report plus the inputs and the wall-clock compute time.

    Raises
    ------
    ValueError
        If the policy name is unknown or ``runs`` is not positive.
    """

    if runs <= 0:
        raise ValueError("runs must be positive")
    if isinstance(policy, str):
        policy = policy_by_name(policy)
    if start is None:
        start = default_start_point(era)

    start_time = perf_counter()
    report = simulate_many(
        start,
        policy,
        runs=runs,
        seed=seed,
        catalog=Catalog(era),
        cost_model=cost_model,
        max_steps=max_steps,
        parallel=parallel,
        max_workers=max_workers,
    )
    compute_seconds = perf_counter() - start_time

    return SimulationComputationResult(
        report=report,
        start=start,
        policy_name=policy.name,
        era=era,
        runs=runs,
        seed=seed,
        compute_seconds=compute_seconds,
    )
