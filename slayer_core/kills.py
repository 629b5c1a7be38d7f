"""Kill-batch resolution: the per-kill stochastic loop and its batch fast path."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from .cost import MonsterCost
from .data import (
    BRACELET_PROC_CHANCE,
    ETERNAL_GEM_CHANCE,
    STAFF_ROLL_DIVISOR,
    SUPERIOR_SPAWN_CHANCE,
)
from .models import SlayerDrops


@dataclass
class KillOutcome:
    """What finishing one task's kills produced."""

    kills: int = 0
    experience: int = 0
    slaughter_charges: int = 0
    expeditious_charges: int = 0
    superiors: int = 0
    drops: SlayerDrops = field(default_factory=SlayerDrops)


def batch_kills(amount: int, exp_per_kill: int) -> KillOutcome:
    """Resolve ``amount`` kills in one step with no random effects."""

    return KillOutcome(kills=amount, experience=amount * exp_per_kill)


def roll_superior_drop(rng: random.Random, drop_rate: float, drops: SlayerDrops) -> None:
    """Roll the superior drop table once and record any hit in ``drops``."""

    main_roll = rng.random()
    if main_roll < drop_rate:
        staff_roll = rng.random()
        if staff_roll < 1.0 / STAFF_ROLL_DIVISOR:
            drops.dust_battlestaff += 1
        elif staff_roll < 2.0 / STAFF_ROLL_DIVISOR:
            drops.mist_battlestaff += 1
        else:
            drops.imbued_heart += 1
    elif main_roll < 2.0 * drop_rate:
        if rng.random() < ETERNAL_GEM_CHANCE:
            drops.eternal_gem += 1


def simulate_kills(
    rng: random.Random,
    amount: int,
    exp_per_kill: int,
    cost: MonsterCost,
) -> KillOutcome:
    """Resolve a task kill by kill.

    Per kill the slaughter bracelet is rolled first, then the expeditious
    bracelet, then the superior spawn; every active roll happens on every kill.
    A superior counts as one extra kill toward the task but is not added to
    the kill count or experience.
    """

    outcome = KillOutcome()
    superior_rate = cost.superior_drop_rate
    kills_left = amount
    while kills_left > 0:
        outcome.kills += 1
        outcome.experience += exp_per_kill

        if cost.use_bracelet_of_slaughter and rng.random() < BRACELET_PROC_CHANCE:
            outcome.slaughter_charges += 1
            kills_left += 1
        if cost.use_expeditious_bracelet and rng.random() < BRACELET_PROC_CHANCE:
            outcome.expeditious_charges += 1
            kills_left -= 1

        if superior_rate is not None and rng.random() < SUPERIOR_SPAWN_CHANCE:
            outcome.superiors += 1
            kills_left = max(kills_left - 1, 0)
            roll_superior_drop(rng, superior_rate, outcome.drops)

        kills_left = max(kills_left - 1, 0)
    return outcome
