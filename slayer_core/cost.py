"""Time and supply cost modelling for task-givers and creatures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Final, Optional

from .data import Creature, TaskGiver

GAME_TICK_SECONDS: Final[float] = 0.6
RUN_SPEEDUP: Final[float] = 1.5  # running half of the time
STORE_TASK_SECONDS: Final[float] = 20.0
UNSTORE_TASK_SECONDS: Final[float] = 20.0

DEFAULT_TRAVEL_STEPS: Final[int] = 100
DEFAULT_SECONDS_PER_KILL: Final[float] = 30.0

# Seconds needed to gather one unit of each supply.
SUPPLY_GATHER_SECONDS: Final[dict[str, float]] = {
    "expeditious_bracelet_charges": 4.0,
    "bracelet_of_slaughter_charges": 4.0,
    "games_necklace_charges": 6.0,
    "dueling_ring_charges": 5.0,
    "necklace_of_passage_charges": 6.0,
    "chronicle_charges": 3.0,
    "skull_sceptre_charges": 10.0,
    "giantsoul_amulet_charges": 10.0,
    "law_runes": 1.0,
}


@dataclass
class Supplies:
    """Consumable resources spent during a run."""

    expeditious_bracelet_charges: int = 0
    bracelet_of_slaughter_charges: int = 0
    games_necklace_charges: int = 0
    dueling_ring_charges: int = 0
    necklace_of_passage_charges: int = 0
    chronicle_charges: int = 0
    skull_sceptre_charges: int = 0
    giantsoul_amulet_charges: int = 0
    law_runes: int = 0

    def __add__(self, other: Supplies) -> Supplies:
        return Supplies(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def time_to_gather(self) -> float:
        """Return the seconds spent restocking these supplies."""

        return sum(
            getattr(self, f.name) * SUPPLY_GATHER_SECONDS[f.name] for f in fields(self)
        )


@dataclass(frozen=True)
class MonsterCost:
    """Measured travel and kill cost of a creature task."""

    travel_steps: int = DEFAULT_TRAVEL_STEPS
    seconds_per_kill: float = DEFAULT_SECONDS_PER_KILL
    travel_supplies: Supplies = field(default_factory=Supplies)
    superior_drop_rate: Optional[float] = None
    use_expeditious_bracelet: bool = False
    use_bracelet_of_slaughter: bool = False

    def travel_seconds(self) -> float:
        return self.travel_steps * GAME_TICK_SECONDS / RUN_SPEEDUP

    def task_seconds(self, kills: int) -> float:
        return self.travel_seconds() + self.seconds_per_kill * kills

    @property
    def needs_per_kill_rolls(self) -> bool:
        return (
            self.superior_drop_rate is not None
            or self.use_expeditious_bracelet
            or self.use_bracelet_of_slaughter
        )


UNMEASURED_MONSTER: Final[MonsterCost] = MonsterCost()

_C = Creature

MONSTER_COSTS: Final[dict[Creature, MonsterCost]] = {
    _C.BATS: MonsterCost(306, 3.3, Supplies(chronicle_charges=1)),
    _C.BEARS: MonsterCost(112, 8.3, Supplies(law_runes=1)),
    _C.BIRDS: MonsterCost(14, 2.2, Supplies(chronicle_charges=1)),
    _C.CAVE_BUGS: MonsterCost(190, 3.1, Supplies(law_runes=1)),
    _C.CAVE_CRAWLERS: MonsterCost(
        190, 7.6, Supplies(law_runes=1), superior_drop_rate=1.0 / 166.2
    ),
    _C.CAVE_SLIMES: MonsterCost(190, 8.7, Supplies(law_runes=1)),
    _C.COWS: MonsterCost(66, 3.4, Supplies(law_runes=1)),
    _C.DOGS: MonsterCost(120, 8.9),
    _C.DWARVES: MonsterCost(100, 7.6, Supplies(skull_sceptre_charges=1)),
    _C.GHOSTS: MonsterCost(200, 7.3, Supplies(skull_sceptre_charges=1)),
    _C.GOBLINS: MonsterCost(32, 2.6, Supplies(law_runes=1)),
    _C.ICEFIENDS: MonsterCost(140, 5.5, Supplies(law_runes=1)),
    _C.KALPHITE: MonsterCost(60, 10.5),
    _C.LIZARDS: MonsterCost(108, 4.7),
    _C.MINOTAURS: MonsterCost(44, 3.8, Supplies(skull_sceptre_charges=1)),
    _C.PYREFIENDS: MonsterCost(
        150, 6.0, Supplies(law_runes=1), superior_drop_rate=1.0 / 157.6
    ),
    _C.RATS: MonsterCost(20, 2.6, Supplies(law_runes=1)),
    _C.SCORPIONS: MonsterCost(66, 5.2, Supplies(dueling_ring_charges=1)),
    _C.SKELETONS: MonsterCost(100, 8.1, Supplies(skull_sceptre_charges=1)),
    # TODO: re-measure sourhog kill speed, 8 s is an estimate
    _C.SOURHOGS: MonsterCost(72, 8.0, Supplies(skull_sceptre_charges=1)),
    _C.SPIDERS: MonsterCost(76, 3.0, Supplies(law_runes=1)),
    _C.WOLVES: MonsterCost(40, 3.8, Supplies(skull_sceptre_charges=1)),
    _C.ZOMBIES: MonsterCost(104, 8.3, Supplies(skull_sceptre_charges=1)),
}

GIVER_VISIT_COSTS: Final[dict[TaskGiver, tuple[float, Supplies]]] = {
    TaskGiver.TURAEL: (16.0, Supplies(games_necklace_charges=1)),
    TaskGiver.SPRIA: (34.0, Supplies(necklace_of_passage_charges=1)),
    TaskGiver.VANNAKA: (60.0, Supplies(skull_sceptre_charges=1)),
    TaskGiver.CHAELDAR: (49.0, Supplies(law_runes=1)),
}


class CostModel:
    """Lookup of creature and task-giver costs.

    The model only feeds the run accumulator; decisions never read it.
    """

    def __init__(self, monster_costs: Optional[Mapping[Creature, MonsterCost]] = None) -> None:
        """Initialise the model, overlaying ``monster_costs`` on the measured table."""

        self._monster_costs = dict(MONSTER_COSTS)
        if monster_costs is not None:
            self._monster_costs.update(monster_costs)

    def cost_of_creature(self, creature: Creature) -> MonsterCost:
        """Return the cost profile of ``creature``, falling back to the default."""

        return self._monster_costs.get(creature, UNMEASURED_MONSTER)

    def cost_of_giver(self, giver: TaskGiver) -> tuple[float, Supplies]:
        """Return the seconds and supplies spent visiting ``giver``."""

        return GIVER_VISIT_COSTS[giver]
