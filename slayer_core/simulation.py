"""Run driver and Monte Carlo aggregation over independent replications."""

from __future__ import annotations

import copy
import logging
import math
import os
import random
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Final, Optional

import numpy as np

from .catalog import Catalog
from .cost import CostModel, Supplies
from .data import Creature, StartPoint, TaskGiver
from .errors import ContractViolation
from .models import Decision, MonteCarloReport, OrderStats, RunOutcome, RunResult, SlayerDrops
from .policies import Policy
from .tasks import TaskMachine, initial_state

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS: Final[int] = 2_000_000


def simulate_once(
    start: StartPoint,
    policy: Policy,
    rng: random.Random,
    catalog: Optional[Catalog] = None,
    cost_model: Optional[CostModel] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    trace: Optional[list[Decision]] = None,
) -> RunResult:
    """Drive one character from ``start`` until the policy ends the run.

    Parameters
    ----------
    start:
        Starting character and task slot.
    policy:
        Decision policy; policies with a mode field are mutated by the run.
    rng:
        Random source owned by this run.
    catalog:
        Catalog for the world era, defaults to the latest era.
    cost_model:
        Optional cost model override.
    max_steps:
        Number of applied actions after which the run is reported as
        :attr:`RunOutcome.STEP_LIMIT`.
    trace:
        When given, every applied decision is appended to it.
    """

    if max_steps <= 0:
        raise ValueError("max_steps must be positive")

    machine = TaskMachine(catalog, cost_model)
    catalog = machine.catalog
    state, progression = initial_state(start)
    steps = 0
    while True:
        verdict = policy.should_terminate(state, progression, catalog)
        if verdict is not None:
            outcome = RunOutcome.SUCCESS if verdict else RunOutcome.FAILURE
            return RunResult(outcome, state, progression, steps)
        if steps >= max_steps:
            logger.warning(
                "Run stopped after %d steps without a verdict (%s, %d points, streak %d)",
                steps,
                state.task_state,
                state.points,
                state.streak,
            )
            return RunResult(RunOutcome.STEP_LIMIT, state, progression, steps)

        decision = policy.select_action(state, progression, catalog)
        if trace is not None:
            trace.append(decision)
        machine.apply(state, progression, decision, rng)
        steps += 1


def replication_seeds(seed: int, runs: int) -> list[int]:
    """Return one independent integer seed per replication, in replication order."""

    children = np.random.SeedSequence(seed).spawn(runs)
    return [int(child.generate_state(1)[0]) for child in children]


def _resolve_max_workers(max_workers: Optional[int], runs: int) -> int:
    if runs <= 1:
        return 1
    if max_workers is None:
        return max(1, min(runs, os.cpu_count() or 1))
    return max(1, min(max_workers, runs))


def _chunk(items: list[Any], size: int) -> list[list[Any]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def _run_batch(
    start: StartPoint,
    policy: Policy,
    catalog: Catalog,
    cost_model: CostModel,
    max_steps: int,
    batch: Sequence[tuple[int, int]],
) -> list[RunResult]:
    """Run every ``(replication index, seed)`` pair of ``batch`` with a fresh policy copy."""

    results: list[RunResult] = []
    for index, seed in batch:
        try:
            result = simulate_once(
                start,
                copy.deepcopy(policy),
                random.Random(seed),
                catalog=catalog,
                cost_model=cost_model,
                max_steps=max_steps,
            )
        except ContractViolation:
            logger.error("Replication %d (seed %d) violated a task contract", index, seed)
            raise
        results.append(result)
    return results


def _run_batch_process(args: tuple[Any, ...]) -> list[RunResult]:
    return _run_batch(*args)


def run_replications(
    start: StartPoint,
    policy: Policy,
    runs: int,
    seed: int = 42,
    catalog: Optional[Catalog] = None,
    cost_model: Optional[CostModel] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    parallel: bool = True,
    max_workers: Optional[int] = None,
) -> list[RunResult]:
    """Run ``runs`` seeded replications and return their results in replication order.

    Replication ``i`` always uses the ``i``-th seed of :func:`replication_seeds`,
    so the results do not depend on ``parallel`` or the worker count.
    """

    if runs < 0:
        raise ValueError("runs must be non-negative")
    catalog = catalog if catalog is not None else Catalog()
    cost_model = cost_model if cost_model is not None else CostModel()
    indexed_seeds = list(enumerate(replication_seeds(seed, runs)))

    worker_count = _resolve_max_workers(max_workers, runs) if parallel else 1
    if worker_count == 1:
        return _run_batch(start, policy, catalog, cost_model, max_steps, indexed_seeds)

    batch_size = max(1, math.ceil(runs / (worker_count * 4)))
    batches = _chunk(indexed_seeds, batch_size)
    results: list[RunResult] = []
    with ProcessPoolExecutor(max_workers=worker_count) as pool:
        for batch_results in pool.map(
            _run_batch_process,
            [(start, policy, catalog, cost_model, max_steps, batch) for batch in batches],
        ):
            results.extend(batch_results)
    return results


def order_stats(values: Sequence[float]) -> OrderStats:
    """Return upper median, minimum, maximum and mean of ``values``."""

    if not values:
        return OrderStats()
    ordered = np.sort(np.asarray(values, dtype=float))
    return OrderStats(
        median=float(ordered[len(ordered) // 2]),
        minimum=float(ordered[0]),
        maximum=float(ordered[-1]),
        mean=float(ordered.mean()),
        count=len(ordered),
    )


def summarize_runs(results: Sequence[RunResult]) -> MonteCarloReport:
    """Reduce replication results into a :class:`MonteCarloReport`.

    Sums are order independent and order statistics are taken over sorted
    samples, so the report only depends on the set of results.
    """

    successes = [result for result in results if result.outcome is RunOutcome.SUCCESS]
    failures = [result for result in results if result.outcome is RunOutcome.FAILURE]
    step_limit_runs = len(results) - len(successes) - len(failures)

    drops = SlayerDrops()
    supplies = Supplies()
    kills: Counter[Creature] = Counter()
    tasks_received_total = 0
    for result in results:
        acc = result.slayer_state.accumulator
        drops = drops + acc.drops
        supplies = supplies + acc.supplies
        kills.update(acc.kills)
        tasks_received_total += acc.tasks_received

    tasks_done: Counter[tuple[TaskGiver, Creature]] = Counter()
    for result in successes:
        tasks_done.update(result.slayer_state.accumulator.tasks_done)
    average_tasks_done = {
        key: count / len(successes) for key, count in tasks_done.items()
    }

    success_hours = [result.slayer_state.accumulator.hours for result in successes]
    median_run: Optional[RunResult] = None
    if successes:
        ranked = sorted(
            range(len(successes)),
            key=lambda i: (success_hours[i], successes[i].steps, successes[i].slayer_state.points),
        )
        median_run = successes[ranked[len(ranked) // 2]]

    failure_max_points = order_stats(
        [r.slayer_state.accumulator.max_points for r in failures]
    )

    return MonteCarloReport(
        total_runs=len(results),
        successes=len(successes),
        failures=len(failures),
        step_limit_runs=step_limit_runs,
        tasks_received_total=tasks_received_total,
        success_tasks=order_stats(
            [r.slayer_state.accumulator.tasks_received for r in successes]
        ),
        failure_tasks=order_stats(
            [r.slayer_state.accumulator.tasks_received for r in failures]
        ),
        success_min_points=order_stats(
            [r.slayer_state.accumulator.min_points for r in successes]
        ),
        success_total_points=order_stats(
            [r.slayer_state.accumulator.total_points for r in successes]
        ),
        success_end_points=order_stats([r.slayer_state.points for r in successes]),
        success_hours=order_stats(success_hours),
        failure_hours=order_stats([r.slayer_state.accumulator.hours for r in failures]),
        failure_max_points=failure_max_points,
        max_points_locked=int(failure_max_points.maximum),
        drops=drops,
        supplies=supplies,
        kills=dict(kills),
        average_tasks_done=average_tasks_done,
        median_run=median_run,
        success_hours_sample=sorted(success_hours),
    )


def simulate_many(
    start: StartPoint,
    policy: Policy,
    runs: int = 10_000,
    seed: int = 42,
    catalog: Optional[Catalog] = None,
    cost_model: Optional[CostModel] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    parallel: bool = True,
    max_workers: Optional[int] = None,
) -> MonteCarloReport:
    """Run the Monte Carlo simulation and summarise it."""

    logger.info("Simulating %d runs of policy %s (seed %d)", runs, policy.name, seed)
    results = run_replications(
        start,
        policy,
        runs,
        seed=seed,
        catalog=catalog,
        cost_model=cost_model,
        max_steps=max_steps,
        parallel=parallel,
        max_workers=max_workers,
    )
    report = summarize_runs(results)
    if report.step_limit_runs:
        logger.warning(
            "%d of %d runs hit the step limit of %d", report.step_limit_runs, runs, max_steps
        )
    logger.info(
        "Finished: %d successes, %d failures out of %d runs",
        report.successes,
        report.failures,
        runs,
    )
    return report
