"""
Tests for the catalog lookups, start-point JSON helpers and the level table.
"""

import pytest

from slayer_core.catalog import Catalog
from slayer_core.data import (
    DEFAULT_START_POINTS,
    EXP_FOR_LEVEL,
    Creature,
    Quest,
    TaskGiver,
    WorldEra,
    level_for_exp,
    load_start_point,
    save_start_point,
    start_point_from_dict,
    start_point_to_dict,
)
from slayer_core.models import CompletedTask
from slayer_core.tasks import ProgressionState


def eligible_weight(catalog, giver, progression):
    return sum(a.weight for a in catalog.eligible_offerings(giver, progression))


class TestLevels:
    """Test the experience to level lookup."""

    def test_level_boundaries(self):
        """Levels change exactly at the table thresholds."""
        assert level_for_exp(0) == 1
        assert level_for_exp(82) == 1
        assert level_for_exp(83) == 2
        assert level_for_exp(13_034_431) == 99
        assert level_for_exp(200_000_000) == 99

    def test_known_thresholds(self):
        """A few well-known thresholds of the standard table."""
        assert len(EXP_FOR_LEVEL) == 99
        assert EXP_FOR_LEVEL[74] == 1_210_421  # level 75
        assert level_for_exp(1_308_538) == 75

    def test_negative_experience_rejected(self):
        with pytest.raises(ValueError):
            level_for_exp(-1)


class TestCatalog:
    """Test giver offerings and gating."""

    @pytest.mark.parametrize(
        "giver,expected",
        [
            (TaskGiver.TURAEL, 172),
            (TaskGiver.VANNAKA, 322),
            (TaskGiver.CHAELDAR, 350),
        ],
    )
    def test_full_list_weight_totals(self, catalog, giver, expected):
        """Unfiltered weights of each giver's list."""
        assert sum(a.weight for a in catalog.offerings(giver)) == expected

    @pytest.mark.parametrize(
        "giver,expected",
        [
            (TaskGiver.TURAEL, 156),
            (TaskGiver.VANNAKA, 169),
            (TaskGiver.CHAELDAR, 131),
        ],
    )
    def test_lost_city_weight_totals(self, catalog, giver, expected):
        """Level 75 with only Lost City done."""
        progression = ProgressionState(
            experience=1_308_538, prerequisites=frozenset({Quest.LOST_CITY})
        )
        assert eligible_weight(catalog, giver, progression) == expected

    def test_turael_weight_totals(self, catalog):
        """Filtered weight totals follow level and quest gates."""
        priest = ProgressionState(
            experience=1_308_538,
            prerequisites=frozenset({Quest.LOST_CITY, Quest.PRIEST_IN_PERIL}),
        )
        beginner = ProgressionState(experience=0)

        assert eligible_weight(catalog, TaskGiver.TURAEL, priest) == 172
        assert eligible_weight(catalog, TaskGiver.TURAEL, beginner) == 124

    def test_spria_adds_sourhogs(self, catalog, late_progression):
        """Spria offers Turael's list plus sourhogs once Porcine is done."""
        assert eligible_weight(catalog, TaskGiver.SPRIA, late_progression) == 162
        assert not catalog.can_assign(TaskGiver.TURAEL, Creature.SOURHOGS)
        assert catalog.can_assign(TaskGiver.SPRIA, Creature.SOURHOGS)

    def test_exclude_removes_creature(self, catalog, late_progression):
        offerings = catalog.eligible_offerings(
            TaskGiver.TURAEL, late_progression, exclude=(Creature.COWS,)
        )
        assert Creature.COWS not in {a.creature for a in offerings}
        everything = catalog.eligible_offerings(TaskGiver.TURAEL, late_progression)
        assert len(offerings) == len(everything) - 1

    def test_can_assign_ignores_gates(self, catalog):
        """can_assign only checks the list, would_offer also checks gates."""
        beginner = ProgressionState(experience=0)
        assert catalog.can_assign(TaskGiver.TURAEL, Creature.BANSHEES)
        assert not catalog.would_offer(TaskGiver.TURAEL, Creature.BANSHEES, beginner)
        assert not catalog.can_assign(TaskGiver.TURAEL, Creature.HELLHOUNDS)

    def test_giver_access(self, catalog):
        beginner = ProgressionState(experience=0)
        porcine = ProgressionState(
            experience=0, prerequisites=frozenset({Quest.PORCINE_OF_INTEREST})
        )
        assert catalog.can_visit(TaskGiver.TURAEL, beginner)
        assert catalog.can_visit(TaskGiver.VANNAKA, beginner)
        assert not catalog.can_visit(TaskGiver.SPRIA, beginner)
        assert catalog.can_visit(TaskGiver.SPRIA, porcine)
        assert not catalog.can_visit(TaskGiver.CHAELDAR, porcine)

    def test_reward_rates_by_era(self):
        assert Catalog(WorldEra.LIMP_2024).reward_rate(TaskGiver.VANNAKA) == 4
        assert Catalog(WorldEra.LIMP_2026).reward_rate(TaskGiver.VANNAKA) == 8
        assert Catalog(WorldEra.LIMP_2026).reward_rate(TaskGiver.TURAEL) == 0
        assert Catalog(WorldEra.LIMP_2026).reward_rate(TaskGiver.CHAELDAR) == 10

    def test_gate_for(self, catalog):
        assert catalog.gate_for(Creature.LIZARDS) == (22, None)
        assert catalog.skip_giver is TaskGiver.TURAEL


class TestStartPointJson:
    """Test the start-point JSON helpers."""

    def test_round_trip(self, tmp_path):
        """Saving and loading a start point preserves it."""
        start = DEFAULT_START_POINTS[WorldEra.LIMP_2026]
        path = tmp_path / "start.json"
        save_start_point(start, path)
        assert load_start_point(path) == start

    def test_completed_task_round_trip(self):
        start = start_point_from_dict(
            {
                "experience": 100,
                "task": {"creature": "Cows"},
                "task_active": False,
                "prerequisites_done": ["LOST_CITY"],
            }
        )
        assert start.task_state == CompletedTask(Creature.COWS)
        assert start.prerequisites_done == frozenset({Quest.LOST_CITY})
        assert start_point_from_dict(start_point_to_dict(start)) == start

    def test_unknown_creature_rejected(self):
        with pytest.raises(ValueError):
            start_point_from_dict(
                {"experience": 0, "task": {"creature": "DRAGONS", "giver": "TURAEL", "amount": 5}}
            )

    def test_missing_field_rejected(self):
        with pytest.raises(ValueError):
            start_point_from_dict({"task": {"creature": "COWS", "giver": "TURAEL", "amount": 5}})

    def test_negative_points_rejected(self):
        with pytest.raises(ValueError):
            start_point_from_dict(
                {
                    "experience": 0,
                    "points": -5,
                    "task": {"creature": "COWS", "giver": "TURAEL", "amount": 5},
                }
            )
