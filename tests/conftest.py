"""
Pytest configuration and shared fixtures for the slayer simulator tests.
"""

import os
import random
import sys

import pytest

# Add parent directory to path to import modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from slayer_core.catalog import Catalog
from slayer_core.cost import CostModel
from slayer_core.data import Creature, Quest, TaskGiver, WorldEra
from slayer_core.models import ActiveTask, CompletedTask
from slayer_core.tasks import ProgressionState, RunAccumulator, SlayerState, TaskMachine

LATE_EXPERIENCE = 1_308_538  # level 75


@pytest.fixture
def catalog():
    """Catalog for the latest world era."""
    return Catalog(WorldEra.LIMP_2026)


@pytest.fixture
def machine(catalog):
    """Task machine over the default cost table."""
    return TaskMachine(catalog, CostModel())


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def late_progression():
    """Level 75 character with every giver unlocked."""
    return ProgressionState(
        experience=LATE_EXPERIENCE,
        prerequisites=frozenset(
            {Quest.LOST_CITY, Quest.PORCINE_OF_INTEREST, Quest.DRAGON_SLAYER}
        ),
    )


@pytest.fixture
def storage_progression(late_progression):
    """Late character with task storage unlocked."""
    late_progression.storage_unlocked = True
    return late_progression


def make_state(points=0, streak=0, task=None, stored=None):
    """Build a slayer state with a fresh accumulator."""
    return SlayerState(
        points=points,
        streak=streak,
        task_state=task if task is not None else CompletedTask(Creature.MONKEYS),
        stored_task=stored,
        accumulator=RunAccumulator(min_points=points, max_points=points),
    )


def active(creature, giver=TaskGiver.TURAEL, amount=20):
    return ActiveTask(creature, giver, amount)
