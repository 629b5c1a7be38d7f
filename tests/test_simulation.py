"""
Tests for the run driver, the Monte Carlo aggregator and the api entry point.
"""

import random
from dataclasses import dataclass, replace

import pytest

from conftest import make_state
from slayer_core.api import compute_simulation, default_start_point
from slayer_core.data import DEFAULT_START_POINTS, Creature, TaskGiver, WorldEra
from slayer_core.errors import ContractViolation
from slayer_core.models import Action, ActiveTask, Decision, RunOutcome, RunResult
from slayer_core.policies import MinimizeLockPolicy, SuperiorsPolicy
from slayer_core.report import format_report, hours_frame, kills_frame, tasks_done_frame
from slayer_core.simulation import (
    order_stats,
    replication_seeds,
    run_replications,
    simulate_many,
    simulate_once,
    summarize_runs,
)
from slayer_core.tasks import ProgressionState

START = DEFAULT_START_POINTS[WorldEra.LIMP_2026]


@dataclass
class AlwaysSkipPolicy:
    """Broken policy that point-skips regardless of the balance."""

    name: str = "always-skip"

    def should_terminate(self, state, progression, catalog):
        return None

    def select_action(self, state, progression, catalog):
        return Decision(Action.POINT_SKIP)


class ScriptedDraws:
    """Random source replaying fixed assignment draws; amounts take the range minimum."""

    def __init__(self, draws):
        self.draws = list(draws)

    def randrange(self, stop):
        value = self.draws.pop(0)
        assert 0 <= value < stop
        return value

    def randint(self, low, high):
        return low


class TestSimulateOnce:
    """Test a single replication."""

    def test_fixed_seed_is_deterministic(self):
        """Same seed, same action sequence and the same final triple."""
        first_trace, second_trace = [], []
        first = simulate_once(START, MinimizeLockPolicy(), random.Random(2024), trace=first_trace)
        second = simulate_once(
            START, MinimizeLockPolicy(), random.Random(2024), trace=second_trace
        )

        assert first_trace == second_trace
        assert (first.slayer_state.points, first.slayer_state.streak, first.outcome) == (
            second.slayer_state.points,
            second.slayer_state.streak,
            second.outcome,
        )
        assert first.steps == len(first_trace)

    def test_opening_moves(self):
        """Monkeys at 120 points are skipped, then Spria hands out the next task."""
        trace = []
        simulate_once(START, MinimizeLockPolicy(), random.Random(5), trace=trace)
        assert trace[0] == Decision(Action.POINT_SKIP)
        assert trace[1] == Decision(Action.NEW_ASSIGNMENT, TaskGiver.SPRIA)

    def test_scripted_run_golden(self):
        """Spria keeps handing out monkeys until the skip money runs out.

        Draw 44 is the first unit of cows in Spria's pool after monkeys, draw
        101 the first unit of monkeys after cows and 106 its last.
        """
        draws = ScriptedDraws([44, 101, 44, 101, 44, 101, 44, 106])
        trace = []
        result = simulate_once(START, MinimizeLockPolicy(), draws, trace=trace)

        skip = Decision(Action.POINT_SKIP)
        spria = Decision(Action.NEW_ASSIGNMENT, TaskGiver.SPRIA)
        complete = Decision(Action.COMPLETE)
        assert trace == [skip, spria, complete, spria] * 4
        assert (result.slayer_state.points, result.slayer_state.streak, result.outcome) == (
            0,
            5,
            RunOutcome.FAILURE,
        )
        assert result.steps == 16
        assert draws.draws == []

        acc = result.slayer_state.accumulator
        assert result.slayer_state.task_state == ActiveTask(Creature.MONKEYS, TaskGiver.SPRIA, 15)
        assert acc.tasks_done == {(TaskGiver.SPRIA, Creature.COWS): 4}
        assert acc.min_points == 0
        assert acc.max_points == 120
        assert result.progression.experience == 1_308_538 + 4 * 15 * 8

    def test_run_reaches_a_verdict(self):
        result = simulate_once(START, MinimizeLockPolicy(), random.Random(99))
        assert result.outcome in (RunOutcome.SUCCESS, RunOutcome.FAILURE)
        if result.success:
            assert result.slayer_state.points >= 1000
        else:
            assert result.slayer_state.points < 30

    def test_step_limit_reported(self):
        result = simulate_once(START, SuperiorsPolicy(), random.Random(1), max_steps=5)
        assert result.outcome is RunOutcome.STEP_LIMIT
        assert result.steps == 5

    def test_invalid_step_limit(self):
        with pytest.raises(ValueError):
            simulate_once(START, MinimizeLockPolicy(), random.Random(1), max_steps=0)

    def test_contract_violation_aborts_run(self):
        with pytest.raises(ContractViolation):
            simulate_once(START, AlwaysSkipPolicy(), random.Random(1))


class TestAggregation:
    """Test the Monte Carlo aggregator."""

    def test_replication_seeds(self):
        seeds = replication_seeds(42, 8)
        assert seeds == replication_seeds(42, 8)
        assert seeds[:4] == replication_seeds(42, 4)
        assert len(set(seeds)) == 8
        assert seeds != replication_seeds(43, 8)

    def test_order_stats_upper_median(self):
        stats = order_stats([4, 1, 3, 2])
        assert stats.median == 3
        assert stats.minimum == 1
        assert stats.maximum == 4
        assert stats.mean == pytest.approx(2.5)
        assert stats.count == 4
        assert order_stats([]).count == 0

    def test_success_path_statistics(self):
        """A start one Vannaka task away from the target produces successful runs."""
        near_goal = replace(
            START,
            streak=8,
            points=970,
            task_state=ActiveTask(Creature.COWS, TaskGiver.SPRIA, 10),
        )
        report = simulate_many(near_goal, MinimizeLockPolicy(), runs=20, seed=7, parallel=False)

        assert report.successes > 0
        assert report.median_run is not None
        median_hours = report.median_run.slayer_state.accumulator.hours
        assert median_hours == pytest.approx(report.success_hours.median)
        assert report.success_hours.minimum <= median_hours <= report.success_hours.maximum
        assert report.success_end_points.minimum >= 1000
        assert report.average_tasks_done[(TaskGiver.SPRIA, Creature.COWS)] >= 1.0

        hours = hours_frame(report)
        assert not hours.empty
        assert hours["probability"].sum() == pytest.approx(1.0)
        tasks = tasks_done_frame(report)
        spria_cows = tasks[
            (tasks["giver"] == TaskGiver.SPRIA.value) & (tasks["creature"] == Creature.COWS.value)
        ]
        assert len(spria_cows) == 1

    def test_failure_max_points(self):
        """Peak balances of failed runs get their own order statistics."""

        def finished(outcome, peak, end):
            state = make_state(points=peak)
            state.points = end
            return RunResult(outcome, state, ProgressionState(experience=0), steps=10)

        report = summarize_runs(
            [
                finished(RunOutcome.FAILURE, 150, 0),
                finished(RunOutcome.SUCCESS, 1200, 1200),
                finished(RunOutcome.FAILURE, 400, 10),
            ]
        )
        stats = report.failure_max_points
        assert stats.count == 2
        assert stats.minimum == 150
        assert stats.maximum == 400
        assert stats.median == 400
        assert report.max_points_locked == 400
        assert summarize_runs([]).max_points_locked == 0

    def test_sequential_and_parallel_agree(self):
        """Execution mode does not change the aggregate."""
        sequential = simulate_many(START, MinimizeLockPolicy(), runs=6, seed=3, parallel=False)
        parallel = simulate_many(
            START, MinimizeLockPolicy(), runs=6, seed=3, parallel=True, max_workers=2
        )
        assert sequential == parallel

    def test_reduction_ignores_order(self):
        results = run_replications(START, MinimizeLockPolicy(), 5, seed=8, parallel=False)
        forward = summarize_runs(results)
        backward = summarize_runs(list(reversed(results)))
        assert forward.success_tasks == backward.success_tasks
        assert forward.success_hours == backward.success_hours
        assert forward.drops == backward.drops
        assert forward.kills == backward.kills
        assert forward.median_run == backward.median_run

    def test_outcomes_partition_runs(self):
        report = simulate_many(
            START, SuperiorsPolicy(), runs=3, seed=1, parallel=False, max_steps=50
        )
        assert report.total_runs == 3
        assert report.successes + report.failures + report.step_limit_runs == 3

    def test_contract_violation_is_not_a_failure(self):
        """Broken policies raise out of the aggregator instead of counting as failures."""
        with pytest.raises(ContractViolation):
            simulate_many(START, AlwaysSkipPolicy(), runs=3, seed=1, parallel=False)

    def test_policy_state_not_shared(self):
        policy = SuperiorsPolicy()
        run_replications(START, policy, 2, seed=4, parallel=False, max_steps=200)
        assert policy == SuperiorsPolicy()


class TestApiAndReport:
    """Test the high-level entry point and report rendering."""

    def test_compute_simulation(self):
        result = compute_simulation("minimize-lock", runs=4, seed=11, parallel=False)
        assert result.policy_name == "minimize-lock"
        assert result.start == default_start_point(WorldEra.LIMP_2026)
        assert result.report.total_runs == 4
        assert result.compute_seconds >= 0

    def test_compute_simulation_rejects_bad_input(self):
        with pytest.raises(ValueError):
            compute_simulation("minimize-lock", runs=0)
        with pytest.raises(ValueError):
            compute_simulation("unknown", runs=1)

    def test_report_rendering(self):
        report = simulate_many(START, MinimizeLockPolicy(), runs=8, seed=21, parallel=False)
        lines = format_report(report)
        assert lines[0].startswith("All drops")
        assert any(line.startswith("Number of successes") for line in lines)

        assert list(tasks_done_frame(report).columns) == ["giver", "creature", "average_tasks"]
        assert list(kills_frame(report).columns) == ["creature", "kills"]
        hours = hours_frame(report)
        if report.successes:
            assert hours["probability"].sum() == pytest.approx(1.0)
        else:
            assert hours.empty
