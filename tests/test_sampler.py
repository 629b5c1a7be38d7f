"""
Tests for the weighted assignment sampler.

Statistical checks use fixed seeds and tolerances several standard errors wide.
"""

import random
from collections import Counter

import pytest

from conftest import make_state
from slayer_core.data import Assignment, Creature, TaskGiver
from slayer_core.errors import NoEligibleAssignment
from slayer_core.models import CompletedTask
from slayer_core.tasks import ProgressionState, sample_assignment


class TestSampleAssignment:
    """Test the discrete inverse-CDF sampler."""

    def test_frequencies_converge_to_weights(self, catalog, late_progression):
        """Observed frequency approaches weight / total weight."""
        candidates = catalog.eligible_offerings(TaskGiver.TURAEL, late_progression)
        total = sum(a.weight for a in candidates)
        rng = random.Random(7)
        draws = 100_000
        counts = Counter(sample_assignment(rng, candidates).creature for _ in range(draws))

        assert set(counts) == {a.creature for a in candidates}
        for assignment in candidates:
            expected = assignment.weight / total
            observed = counts[assignment.creature] / draws
            assert abs(observed - expected) < 0.006

    def test_zero_weight_entry_never_drawn(self):
        candidates = [
            Assignment(Creature.COWS, (1, 1), 0),
            Assignment(Creature.RATS, (1, 1), 3),
            Assignment(Creature.BIRDS, (1, 1), 0),
        ]
        rng = random.Random(3)
        drawn = {sample_assignment(rng, candidates).creature for _ in range(2_000)}
        assert drawn == {Creature.RATS}

    def test_boundary_draws(self):
        """The first and last units of the weight line map to the outer entries."""

        class FixedDraw:
            def __init__(self, value):
                self.value = value

            def randrange(self, stop):
                assert 0 <= self.value < stop
                return self.value

        candidates = [
            Assignment(Creature.COWS, (1, 1), 2),
            Assignment(Creature.RATS, (1, 1), 3),
        ]
        assert sample_assignment(FixedDraw(0), candidates).creature is Creature.COWS
        assert sample_assignment(FixedDraw(1), candidates).creature is Creature.COWS
        assert sample_assignment(FixedDraw(2), candidates).creature is Creature.RATS
        assert sample_assignment(FixedDraw(4), candidates).creature is Creature.RATS

    def test_empty_candidates_rejected(self, rng):
        with pytest.raises(NoEligibleAssignment):
            sample_assignment(rng, [])
        with pytest.raises(NoEligibleAssignment):
            sample_assignment(rng, [Assignment(Creature.COWS, (1, 1), 0)])

    def test_invalid_assignment_rejected(self):
        with pytest.raises(ValueError):
            Assignment(Creature.COWS, (10, 5), 1)
        with pytest.raises(ValueError):
            Assignment(Creature.COWS, (1, 5), -1)


class TestAssignSupport:
    """Test the support of repeated assignments through the task machine."""

    @pytest.mark.parametrize("giver", [TaskGiver.TURAEL, TaskGiver.VANNAKA])
    def test_support_matches_eligible_set(self, machine, catalog, late_progression, giver):
        """Every eligible creature except the just-finished one shows up, nothing else does."""
        last = Creature.KALPHITE
        expected = {
            a.creature
            for a in catalog.eligible_offerings(giver, late_progression)
            if a.creature is not last
        }
        rng = random.Random(11)
        seen = set()
        state = make_state()
        for _ in range(20_000):
            state.task_state = CompletedTask(last)
            machine.assign(state, late_progression, giver, rng)
            seen.add(state.task_state.creature)
        assert seen == expected

    def test_beginner_support(self, machine, catalog):
        """Level and quest gates keep gated creatures out of the draw."""
        beginner = ProgressionState(experience=0)
        rng = random.Random(5)
        state = make_state()
        seen = set()
        for _ in range(10_000):
            state.task_state = CompletedTask(Creature.MONKEYS)
            machine.assign(state, beginner, TaskGiver.TURAEL, rng)
            seen.add(state.task_state.creature)
        assert Creature.LIZARDS not in seen
        assert Creature.SOURHOGS not in seen
        assert Creature.MONKEYS not in seen
        assert Creature.COWS in seen

    def test_amount_within_range(self, machine, late_progression):
        rng = random.Random(2)
        state = make_state()
        ranges = {a.creature: a.amount for a in machine.catalog.offerings(TaskGiver.VANNAKA)}
        for _ in range(2_000):
            state.task_state = CompletedTask(Creature.MONKEYS)
            machine.assign(state, late_progression, TaskGiver.VANNAKA, rng)
            low, high = ranges[state.task_state.creature]
            assert low <= state.task_state.amount <= high
