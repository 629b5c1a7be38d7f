"""Read-only lookups over the creature and task-giver tables for one world era."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional

from .data import (
    CREATURE_INFO,
    GIVER_ASSIGNMENTS,
    GIVER_REQUIREMENTS,
    REWARD_RATES,
    SKIP_GIVER,
    Assignment,
    Creature,
    CreatureInfo,
    Quest,
    TaskGiver,
    WorldEra,
)

if TYPE_CHECKING:
    from .tasks import ProgressionState


class Catalog:
    """Creature gates, giver offerings, and reward rates for a world era."""

    def __init__(self, era: WorldEra = WorldEra.LIMP_2026) -> None:
        self.era = era
        self._reward_rates = REWARD_RATES[era]
        self._creature_sets = {
            giver: frozenset(assignment.creature for assignment in assignments)
            for giver, assignments in GIVER_ASSIGNMENTS.items()
        }

    def __repr__(self) -> str:
        return f"Catalog(era={self.era})"

    @property
    def skip_giver(self) -> TaskGiver:
        """Return the zero-point giver that may replace an active task."""

        return SKIP_GIVER

    def info(self, creature: Creature) -> CreatureInfo:
        return CREATURE_INFO[creature]

    def gate_for(self, creature: Creature) -> tuple[int, Optional[Quest]]:
        """Return the minimum level and quest a creature is gated behind."""

        info = CREATURE_INFO[creature]
        return info.min_level, info.requires_quest

    def offerings(self, giver: TaskGiver) -> tuple[Assignment, ...]:
        return GIVER_ASSIGNMENTS[giver]

    def reward_rate(self, giver: TaskGiver) -> int:
        return self._reward_rates[giver]

    def giver_requirement(self, giver: TaskGiver) -> Optional[Quest]:
        return GIVER_REQUIREMENTS[giver]

    def can_assign(self, giver: TaskGiver, creature: Creature) -> bool:
        """Return True when ``creature`` appears on the giver's list, ignoring gates."""

        return creature in self._creature_sets[giver]

    def melee_killable(self, creature: Creature) -> bool:
        return CREATURE_INFO[creature].melee_killable

    def exp_per_kill(self, creature: Creature) -> int:
        return CREATURE_INFO[creature].hitpoints

    def can_visit(self, giver: TaskGiver, progression: ProgressionState) -> bool:
        requirement = GIVER_REQUIREMENTS[giver]
        return requirement is None or requirement in progression.prerequisites

    def is_eligible(self, assignment: Assignment, progression: ProgressionState) -> bool:
        """Return True when the progression state satisfies every gate of ``assignment``."""

        min_level, creature_quest = self.gate_for(assignment.creature)
        if progression.level < min_level:
            return False
        for quest in (creature_quest, assignment.prerequisite):
            if quest is not None and quest not in progression.prerequisites:
                return False
        return True

    def would_offer(
        self, giver: TaskGiver, creature: Creature, progression: ProgressionState
    ) -> bool:
        """Return True when ``giver`` could hand ``creature`` to this character."""

        return any(
            assignment.creature == creature and self.is_eligible(assignment, progression)
            for assignment in GIVER_ASSIGNMENTS[giver]
        )

    def eligible_offerings(
        self,
        giver: TaskGiver,
        progression: ProgressionState,
        exclude: Iterable[Creature] = (),
    ) -> list[Assignment]:
        """Return the giver's offerings passing every gate, minus ``exclude``."""

        excluded = frozenset(exclude)
        return [
            assignment
            for assignment in GIVER_ASSIGNMENTS[giver]
            if assignment.creature not in excluded and self.is_eligible(assignment, progression)
        ]
