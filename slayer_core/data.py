"""Domain constants, catalog tables, start-point helpers, and shared enums."""

from __future__ import annotations

import json
import math
from bisect import bisect_right
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final, Optional

from .models import ActiveTask, CompletedTask, TaskState


class Creature(Enum):
    ABERRANT_SPECTRES = "Aberrant spectres"
    ABYSSAL_DEMONS = "Abyssal demons"
    ANKOUS = "Ankous"
    AVIANSIE = "Aviansie"
    BANSHEES = "Banshees"
    BASILISKS = "Basilisks"
    BATS = "Bats"
    BEARS = "Bears"
    BIRDS = "Birds"
    BLACK_DEMONS = "Black demons"
    BLOODVELD = "Bloodveld"
    BLUE_DRAGONS = "Blue dragons"
    BRINE_RATS = "Brine rats"
    CAVE_BUGS = "Cave bugs"
    CAVE_CRAWLERS = "Cave crawlers"
    CAVE_HORRORS = "Cave horrors"
    CAVE_KRAKEN = "Cave kraken"
    CAVE_SLIMES = "Cave slimes"
    COCKATRICE = "Cockatrice"
    COWS = "Cows"
    CRABS = "Crabs"
    CRAWLING_HANDS = "Crawling hands"
    CROCODILES = "Crocodiles"
    CUSTODIAN_STALKER = "Custodian stalkers"
    DAGANNOTH = "Dagannoth"
    DUST_DEVILS = "Dust devils"
    DOGS = "Dogs"
    DWARVES = "Dwarves"
    ELVES = "Elves"
    FEVER_SPIDERS = "Fever spiders"
    FIRE_GIANTS = "Fire giants"
    FOSSIL_ISLAND_WYVERNS = "Fossil Island wyverns"
    GARGOYLES = "Gargoyles"
    GHOSTS = "Ghosts"
    GHOULS = "Ghouls"
    GOBLINS = "Goblins"
    GREATER_DEMONS = "Greater demons"
    HARPIE_BUG_SWARMS = "Harpie bug swarms"
    HELLHOUNDS = "Hellhounds"
    HILL_GIANTS = "Hill giants"
    HOBGOBLINS = "Hobgoblins"
    ICEFIENDS = "Icefiends"
    ICE_GIANTS = "Ice giants"
    ICE_WARRIORS = "Ice warriors"
    INFERNAL_MAGES = "Infernal mages"
    JELLIES = "Jellies"
    JUNGLE_HORRORS = "Jungle horrors"
    KALPHITE = "Kalphite"
    KURASK = "Kurask"
    LESSER_DEMONS = "Lesser demons"
    LESSER_NAGUA = "Lesser Nagua"
    LIZARDMEN = "Lizardmen"
    LIZARDS = "Lizards"
    MINOTAURS = "Minotaurs"
    MOGRES = "Mogres"
    MOLANISKS = "Molanisks"
    MONKEYS = "Monkeys"
    MOSS_GIANTS = "Moss giants"
    MUTATED_ZYGOMITES = "Mutated zygomites"
    NECHRYAEL = "Nechryael"
    OGRES = "Ogres"
    OTHERWORLDLY_BEINGS = "Otherworldly beings"
    PYREFIENDS = "Pyrefiends"
    RATS = "Rats"
    SCORPIONS = "Scorpions"
    SEA_SNAKES = "Sea snakes"
    SHADES = "Shades"
    SHADOW_WARRIORS = "Shadow warriors"
    SKELETAL_WYVERNS = "Skeletal wyverns"
    SKELETONS = "Skeletons"
    SOURHOGS = "Sourhogs"
    SPIDERS = "Spiders"
    SPIRITUAL_CREATURES = "Spiritual creatures"
    TERROR_DOGS = "Terror dogs"
    TROLLS = "Trolls"
    TUROTH = "Turoth"
    TZHAAR = "TzHaar"
    VAMPYRES = "Vampyres"
    WARPED_CREATURES = "Warped creatures"
    WEREWOLVES = "Werewolves"
    WOLVES = "Wolves"
    WYRMS = "Wyrms"
    ZOMBIES = "Zombies"


class Quest(Enum):
    ACTUAL_VAMPYRE_SLAYER = "Actual Vampyre Slayer"
    CABIN_FEVER = "Cabin Fever"
    DEATH_PLATEAU = "Death Plateau"
    DEATH_TO_THE_DORGESHUUN = "Death to the Dorgeshuun"
    DESERT_TREASURE = "Desert Treasure"
    DRAGON_SLAYER = "Dragon Slayer"
    ELEMENTAL_WORKSHOP = "Elemental Workshop"
    HAUNTED_MINE = "Haunted Mine"
    HORROR_FROM_THE_DEEP = "Horror from the Deep"
    HOT_STUFF = "Hot Stuff"
    LOST_CITY = "Lost City"
    LEGENDS_QUEST = "Legends' Quest"
    OLAFS_QUEST = "Olaf's Quest"
    PERILOUS_MOONS = "Perilous Moons"
    PORCINE_OF_INTEREST = "Porcine of Interest"
    PRIEST_IN_PERIL = "Priest in Peril"
    REGICIDE = "Regicide"
    REPTILE_GOT_RIPPED = "Reptile Got Ripped"
    RUM_DEAL = "Rum Deal"
    SHADOWS_OF_CUSTODIA = "Shadows of Custodia"
    SKIPPY_AND_THE_MOGRES = "Skippy and the Mogres"
    ROYAL_TROUBLE = "Royal Trouble"
    WARPED_REALITY = "Warped Reality"
    WATCH_THE_BIRDIE = "Watch the Birdie"


class TaskGiver(Enum):
    TURAEL = "Turael"
    SPRIA = "Spria"
    VANNAKA = "Vannaka"
    CHAELDAR = "Chaeldar"


class WorldEra(Enum):
    """Balance snapshot the simulation runs against."""

    LIMP_2024 = "Limp2024"
    LIMP_2025 = "Limp2025"
    LIMP_2026 = "Limp2026"


@dataclass(frozen=True)
class CreatureInfo:
    """Static gating and reward attributes of a creature."""

    min_level: int
    hitpoints: int
    melee_killable: bool = False
    requires_quest: Optional[Quest] = None


@dataclass(frozen=True)
class Assignment:
    """One weighted entry of a task-giver's offering list.

    ``amount`` is an inclusive ``(low, high)`` range.
    """

    creature: Creature
    amount: tuple[int, int]
    weight: int
    prerequisite: Optional[Quest] = None

    def __post_init__(self) -> None:
        low, high = self.amount
        if not 0 < low <= high:
            raise ValueError(f"Invalid amount range {self.amount} for {self.creature.name}")
        if self.weight < 0:
            raise ValueError(f"Negative weight for {self.creature.name}")


# ---- Experience -------------------------------------------------------------

MAX_LEVEL: Final[int] = 99


def _build_exp_table() -> list[int]:
    """Return the experience threshold for levels 1..99 (index 0 is level 1)."""

    thresholds = [0]
    points = 0
    for level in range(1, MAX_LEVEL):
        points += math.floor(level + 300 * 2 ** (level / 7))
        thresholds.append(points // 4)
    return thresholds


EXP_FOR_LEVEL: Final[list[int]] = _build_exp_table()


def level_for_exp(exp: int) -> int:
    """Return the level reached with ``exp`` experience."""

    if exp < 0:
        raise ValueError("Experience cannot be negative.")
    return bisect_right(EXP_FOR_LEVEL, exp)


# ---- Rules ------------------------------------------------------------------

POINT_SKIP_COST: Final[int] = 30
STORAGE_UNLOCK_COST: Final[int] = 500
STREAK_BONUS_MIN: Final[int] = 5
# Checked in order; the first modulus dividing the streak wins.
STREAK_MULTIPLIERS: Final[tuple[tuple[int, int], ...]] = (
    (1000, 50),
    (250, 35),
    (100, 25),
    (50, 15),
    (10, 5),
)
BRACELET_PROC_CHANCE: Final[float] = 0.25
SUPERIOR_SPAWN_CHANCE: Final[float] = 1.0 / 200.0
STAFF_ROLL_DIVISOR: Final[float] = 2.286
ETERNAL_GEM_CHANCE: Final[float] = 1.0 / 8.0


def streak_multiplier(streak: int) -> int:
    """Return the reward multiplier for the task completing ``streak``."""

    for modulus, multiplier in STREAK_MULTIPLIERS:
        if streak % modulus == 0:
            return multiplier
    return 1


# ---- Creatures --------------------------------------------------------------

_C = Creature

CREATURE_INFO: Final[dict[Creature, CreatureInfo]] = {
    _C.ABERRANT_SPECTRES: CreatureInfo(60, 90),
    _C.ABYSSAL_DEMONS: CreatureInfo(85, 150),
    _C.ANKOUS: CreatureInfo(1, 60, melee_killable=True),
    _C.AVIANSIE: CreatureInfo(1, 70),
    _C.BANSHEES: CreatureInfo(15, 22),
    _C.BASILISKS: CreatureInfo(40, 75),
    _C.BATS: CreatureInfo(1, 32, melee_killable=True),
    _C.BEARS: CreatureInfo(1, 27, melee_killable=True),
    _C.BIRDS: CreatureInfo(1, 3, melee_killable=True),
    _C.BLACK_DEMONS: CreatureInfo(1, 157),
    _C.BLOODVELD: CreatureInfo(50, 120),
    _C.BLUE_DRAGONS: CreatureInfo(1, 105),
    _C.BRINE_RATS: CreatureInfo(47, 50),
    _C.CAVE_BUGS: CreatureInfo(7, 5, melee_killable=True),
    _C.CAVE_CRAWLERS: CreatureInfo(10, 22, melee_killable=True),
    _C.CAVE_HORRORS: CreatureInfo(58, 55),
    _C.CAVE_KRAKEN: CreatureInfo(87, 125),
    _C.CAVE_SLIMES: CreatureInfo(17, 25, melee_killable=True),
    _C.COCKATRICE: CreatureInfo(25, 37),
    _C.COWS: CreatureInfo(1, 8, melee_killable=True),
    _C.CRABS: CreatureInfo(1, 60),
    _C.CRAWLING_HANDS: CreatureInfo(5, 16),
    _C.CROCODILES: CreatureInfo(1, 62, melee_killable=True),
    _C.CUSTODIAN_STALKER: CreatureInfo(1, 160),
    _C.DAGANNOTH: CreatureInfo(1, 70),
    _C.DUST_DEVILS: CreatureInfo(65, 105),
    _C.DOGS: CreatureInfo(1, 49, melee_killable=True),
    _C.DWARVES: CreatureInfo(1, 16, melee_killable=True),
    _C.ELVES: CreatureInfo(1, 90),
    _C.FEVER_SPIDERS: CreatureInfo(42, 40),
    _C.FIRE_GIANTS: CreatureInfo(1, 111),
    _C.FOSSIL_ISLAND_WYVERNS: CreatureInfo(66, 200),
    _C.GARGOYLES: CreatureInfo(75, 105),
    _C.GHOSTS: CreatureInfo(1, 25, melee_killable=True),
    _C.GHOULS: CreatureInfo(1, 50),
    _C.GOBLINS: CreatureInfo(1, 5, melee_killable=True),
    _C.GREATER_DEMONS: CreatureInfo(1, 87),
    _C.HARPIE_BUG_SWARMS: CreatureInfo(33, 25),
    _C.HELLHOUNDS: CreatureInfo(1, 116),
    _C.HILL_GIANTS: CreatureInfo(1, 35, melee_killable=True),
    _C.HOBGOBLINS: CreatureInfo(1, 29, melee_killable=True),
    _C.ICEFIENDS: CreatureInfo(1, 15, melee_killable=True),
    _C.ICE_GIANTS: CreatureInfo(1, 70, melee_killable=True),
    _C.ICE_WARRIORS: CreatureInfo(1, 59, melee_killable=True),
    _C.INFERNAL_MAGES: CreatureInfo(45, 60),
    _C.JELLIES: CreatureInfo(52, 75),
    _C.JUNGLE_HORRORS: CreatureInfo(1, 45),
    _C.KALPHITE: CreatureInfo(1, 40, melee_killable=True),
    _C.KURASK: CreatureInfo(70, 97),
    _C.LESSER_DEMONS: CreatureInfo(1, 81),
    _C.LESSER_NAGUA: CreatureInfo(48, 100),
    _C.LIZARDMEN: CreatureInfo(1, 60),
    _C.LIZARDS: CreatureInfo(22, 25, melee_killable=True),
    _C.MINOTAURS: CreatureInfo(1, 10, melee_killable=True),
    _C.MOGRES: CreatureInfo(32, 48),
    _C.MOLANISKS: CreatureInfo(39, 52),
    _C.MONKEYS: CreatureInfo(1, 6),
    _C.MOSS_GIANTS: CreatureInfo(1, 60, melee_killable=True),
    _C.MUTATED_ZYGOMITES: CreatureInfo(57, 65),
    _C.NECHRYAEL: CreatureInfo(80, 105),
    _C.OGRES: CreatureInfo(1, 60),
    _C.OTHERWORLDLY_BEINGS: CreatureInfo(1, 66),
    _C.PYREFIENDS: CreatureInfo(30, 45, melee_killable=True),
    _C.RATS: CreatureInfo(1, 5, melee_killable=True),
    _C.SCORPIONS: CreatureInfo(1, 17, melee_killable=True),
    _C.SEA_SNAKES: CreatureInfo(40, 50),
    _C.SHADES: CreatureInfo(1, 60),
    _C.SHADOW_WARRIORS: CreatureInfo(1, 67),
    _C.SKELETAL_WYVERNS: CreatureInfo(72, 210),
    _C.SKELETONS: CreatureInfo(1, 29, melee_killable=True),
    _C.SOURHOGS: CreatureInfo(1, 45, melee_killable=True),
    _C.SPIDERS: CreatureInfo(1, 5, melee_killable=True),
    _C.SPIRITUAL_CREATURES: CreatureInfo(63, 76),
    _C.TERROR_DOGS: CreatureInfo(40, 62),
    _C.TROLLS: CreatureInfo(1, 90, melee_killable=True),
    _C.TUROTH: CreatureInfo(55, 76),
    _C.TZHAAR: CreatureInfo(1, 90),
    _C.VAMPYRES: CreatureInfo(1, 60),
    _C.WARPED_CREATURES: CreatureInfo(56, 120),
    _C.WEREWOLVES: CreatureInfo(1, 100),
    _C.WOLVES: CreatureInfo(1, 34, melee_killable=True),
    _C.WYRMS: CreatureInfo(62, 130),
    _C.ZOMBIES: CreatureInfo(1, 22, melee_killable=True),
}

# ---- Assignment tables ------------------------------------------------------

_Q = Quest

TURAEL_ASSIGNMENTS: Final[tuple[Assignment, ...]] = (
    Assignment(_C.BANSHEES, (15, 30), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.BATS, (15, 30), 7),
    Assignment(_C.BEARS, (10, 20), 7),
    Assignment(_C.BIRDS, (15, 30), 6),
    Assignment(_C.CAVE_BUGS, (10, 30), 8),
    Assignment(_C.CAVE_CRAWLERS, (15, 30), 8),
    Assignment(_C.CAVE_SLIMES, (10, 20), 8),
    Assignment(_C.COWS, (15, 30), 8),
    Assignment(_C.CRAWLING_HANDS, (15, 30), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.DOGS, (15, 30), 7),
    Assignment(_C.DWARVES, (10, 25), 7),
    Assignment(_C.GHOSTS, (15, 30), 7),
    Assignment(_C.GOBLINS, (15, 30), 7),
    Assignment(_C.ICEFIENDS, (15, 20), 8),
    Assignment(_C.KALPHITE, (15, 30), 6),
    Assignment(_C.LIZARDS, (15, 30), 8),
    Assignment(_C.MINOTAURS, (10, 20), 7),
    Assignment(_C.MONKEYS, (15, 30), 6),
    Assignment(_C.RATS, (15, 30), 7),
    Assignment(_C.SCORPIONS, (15, 30), 7),
    Assignment(_C.SKELETONS, (15, 30), 7),
    Assignment(_C.SPIDERS, (15, 30), 6),
    Assignment(_C.WOLVES, (15, 30), 7),
    Assignment(_C.ZOMBIES, (15, 30), 7),
)

# Turael's list plus sourhogs.
SPRIA_ASSIGNMENTS: Final[tuple[Assignment, ...]] = tuple(
    sorted(
        TURAEL_ASSIGNMENTS
        + (Assignment(_C.SOURHOGS, (15, 25), 6, _Q.PORCINE_OF_INTEREST),),
        key=lambda assignment: assignment.creature.name,
    )
)

VANNAKA_ASSIGNMENTS: Final[tuple[Assignment, ...]] = (
    Assignment(_C.ABERRANT_SPECTRES, (40, 90), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.ABYSSAL_DEMONS, (40, 90), 5, _Q.PRIEST_IN_PERIL),
    Assignment(_C.ANKOUS, (25, 35), 7),
    Assignment(_C.BASILISKS, (40, 90), 8),
    Assignment(_C.BLOODVELD, (40, 90), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.BLUE_DRAGONS, (40, 90), 7, _Q.DRAGON_SLAYER),
    Assignment(_C.BRINE_RATS, (40, 90), 7, _Q.OLAFS_QUEST),
    Assignment(_C.COCKATRICE, (40, 90), 8),
    Assignment(_C.CRABS, (40, 90), 6),
    Assignment(_C.CROCODILES, (40, 90), 6),
    Assignment(_C.DAGANNOTH, (40, 90), 7, _Q.HORROR_FROM_THE_DEEP),
    Assignment(_C.DUST_DEVILS, (40, 90), 8, _Q.DESERT_TREASURE),
    Assignment(_C.ELVES, (30, 70), 7, _Q.REGICIDE),
    Assignment(_C.FEVER_SPIDERS, (30, 90), 7, _Q.RUM_DEAL),
    Assignment(_C.FIRE_GIANTS, (40, 90), 7),
    Assignment(_C.GARGOYLES, (40, 90), 5, _Q.PRIEST_IN_PERIL),
    Assignment(_C.GHOULS, (10, 40), 7, _Q.PRIEST_IN_PERIL),
    Assignment(_C.HARPIE_BUG_SWARMS, (40, 90), 8),
    Assignment(_C.HELLHOUNDS, (30, 60), 7),
    Assignment(_C.HILL_GIANTS, (40, 90), 7),
    Assignment(_C.HOBGOBLINS, (40, 90), 7),
    Assignment(_C.ICE_GIANTS, (30, 80), 7),
    Assignment(_C.ICE_WARRIORS, (40, 90), 7),
    Assignment(_C.INFERNAL_MAGES, (40, 90), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.JELLIES, (40, 90), 8),
    Assignment(_C.JUNGLE_HORRORS, (40, 90), 8, _Q.CABIN_FEVER),
    Assignment(_C.KALPHITE, (40, 90), 7),
    Assignment(_C.KURASK, (40, 90), 7),
    Assignment(_C.LESSER_DEMONS, (40, 90), 7),
    Assignment(_C.LESSER_NAGUA, (40, 90), 4),
    Assignment(_C.MOGRES, (40, 90), 7, _Q.SKIPPY_AND_THE_MOGRES),
    Assignment(_C.MOLANISKS, (39, 50), 7, _Q.DEATH_TO_THE_DORGESHUUN),
    Assignment(_C.MOSS_GIANTS, (40, 90), 7),
    Assignment(_C.NECHRYAEL, (40, 90), 5, _Q.PRIEST_IN_PERIL),
    Assignment(_C.OGRES, (40, 90), 7),
    Assignment(_C.OTHERWORLDLY_BEINGS, (40, 90), 8, _Q.LOST_CITY),
    Assignment(_C.PYREFIENDS, (40, 90), 8),
    Assignment(_C.SEA_SNAKES, (40, 90), 6, _Q.ROYAL_TROUBLE),
    Assignment(_C.SHADES, (40, 90), 6),
    Assignment(_C.SHADOW_WARRIORS, (40, 90), 8, _Q.LEGENDS_QUEST),
    Assignment(_C.SPIRITUAL_CREATURES, (40, 90), 8, _Q.DEATH_PLATEAU),
    Assignment(_C.TERROR_DOGS, (20, 45), 6, _Q.HAUNTED_MINE),
    Assignment(_C.TROLLS, (40, 90), 7),
    Assignment(_C.TUROTH, (30, 90), 8),
    Assignment(_C.VAMPYRES, (10, 20), 7, _Q.ACTUAL_VAMPYRE_SLAYER),
    Assignment(_C.WEREWOLVES, (30, 60), 7, _Q.PRIEST_IN_PERIL),
)

CHAELDAR_ASSIGNMENTS: Final[tuple[Assignment, ...]] = (
    Assignment(_C.ABERRANT_SPECTRES, (70, 130), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.ABYSSAL_DEMONS, (70, 130), 12, _Q.PRIEST_IN_PERIL),
    Assignment(_C.AVIANSIE, (70, 130), 9),
    Assignment(_C.BANSHEES, (70, 130), 5, _Q.PRIEST_IN_PERIL),
    Assignment(_C.BASILISKS, (70, 130), 7),
    Assignment(_C.BLACK_DEMONS, (70, 130), 10),
    Assignment(_C.BLOODVELD, (70, 130), 8, _Q.PRIEST_IN_PERIL),
    Assignment(_C.BLUE_DRAGONS, (70, 130), 8, _Q.DRAGON_SLAYER),
    Assignment(_C.BRINE_RATS, (70, 130), 7, _Q.OLAFS_QUEST),
    Assignment(_C.CAVE_HORRORS, (70, 130), 10, _Q.CABIN_FEVER),
    Assignment(_C.CAVE_KRAKEN, (30, 50), 12),
    Assignment(_C.CUSTODIAN_STALKER, (70, 130), 8, _Q.SHADOWS_OF_CUSTODIA),
    Assignment(_C.DAGANNOTH, (70, 130), 11, _Q.HORROR_FROM_THE_DEEP),
    Assignment(_C.DUST_DEVILS, (70, 130), 9, _Q.DESERT_TREASURE),
    Assignment(_C.ELVES, (70, 130), 8, _Q.REGICIDE),
    Assignment(_C.FEVER_SPIDERS, (70, 130), 7, _Q.RUM_DEAL),
    Assignment(_C.FIRE_GIANTS, (70, 130), 12),
    Assignment(_C.FOSSIL_ISLAND_WYVERNS, (10, 20), 7),
    Assignment(_C.GARGOYLES, (70, 130), 11, _Q.PRIEST_IN_PERIL),
    Assignment(_C.GREATER_DEMONS, (70, 130), 9),
    Assignment(_C.HARPIE_BUG_SWARMS, (70, 130), 6),
    Assignment(_C.JELLIES, (70, 130), 10),
    Assignment(_C.JUNGLE_HORRORS, (70, 130), 10, _Q.CABIN_FEVER),
    Assignment(_C.KALPHITE, (70, 130), 9),
    Assignment(_C.KURASK, (70, 130), 12),
    Assignment(_C.LESSER_DEMONS, (70, 130), 9),
    Assignment(_C.LESSER_NAGUA, (70, 130), 4, _Q.PERILOUS_MOONS),
    Assignment(_C.LIZARDMEN, (50, 90), 8, _Q.REPTILE_GOT_RIPPED),
    Assignment(_C.MUTATED_ZYGOMITES, (8, 15), 7, _Q.LOST_CITY),
    Assignment(_C.NECHRYAEL, (70, 130), 12, _Q.PRIEST_IN_PERIL),
    Assignment(_C.SHADES, (70, 130), 11, _Q.PRIEST_IN_PERIL),
    Assignment(_C.SHADOW_WARRIORS, (70, 130), 8, _Q.LEGENDS_QUEST),
    Assignment(_C.SKELETAL_WYVERNS, (10, 20), 7, _Q.ELEMENTAL_WORKSHOP),
    Assignment(_C.SPIRITUAL_CREATURES, (70, 130), 12, _Q.DEATH_PLATEAU),
    Assignment(_C.TROLLS, (70, 130), 11, _Q.DEATH_PLATEAU),
    Assignment(_C.TUROTH, (70, 130), 10),
    Assignment(_C.TZHAAR, (90, 150), 8),
    Assignment(_C.VAMPYRES, (80, 120), 6, _Q.PRIEST_IN_PERIL),
    Assignment(_C.WARPED_CREATURES, (70, 130), 6, _Q.WARPED_REALITY),
    Assignment(_C.WYRMS, (60, 120), 6),
)

GIVER_ASSIGNMENTS: Final[dict[TaskGiver, tuple[Assignment, ...]]] = {
    TaskGiver.TURAEL: TURAEL_ASSIGNMENTS,
    TaskGiver.SPRIA: SPRIA_ASSIGNMENTS,
    TaskGiver.VANNAKA: VANNAKA_ASSIGNMENTS,
    TaskGiver.CHAELDAR: CHAELDAR_ASSIGNMENTS,
}

GIVER_REQUIREMENTS: Final[dict[TaskGiver, Optional[Quest]]] = {
    TaskGiver.TURAEL: None,
    TaskGiver.SPRIA: Quest.PORCINE_OF_INTEREST,
    TaskGiver.VANNAKA: None,
    TaskGiver.CHAELDAR: Quest.LOST_CITY,
}

REWARD_RATES: Final[dict[WorldEra, dict[TaskGiver, int]]] = {
    WorldEra.LIMP_2024: {
        TaskGiver.TURAEL: 0,
        TaskGiver.SPRIA: 0,
        TaskGiver.VANNAKA: 4,
        TaskGiver.CHAELDAR: 10,
    },
    WorldEra.LIMP_2025: {
        TaskGiver.TURAEL: 0,
        TaskGiver.SPRIA: 0,
        TaskGiver.VANNAKA: 4,
        TaskGiver.CHAELDAR: 10,
    },
    WorldEra.LIMP_2026: {
        TaskGiver.TURAEL: 0,
        TaskGiver.SPRIA: 0,
        TaskGiver.VANNAKA: 8,
        TaskGiver.CHAELDAR: 10,
    },
}

# Turael is the only giver that hands out a new task over an active one.
SKIP_GIVER: Final[TaskGiver] = TaskGiver.TURAEL


# ---- Start points -----------------------------------------------------------


@dataclass(frozen=True)
class StartPoint:
    """Character snapshot a run starts from."""

    experience: int
    prerequisites_done: frozenset[Quest]
    streak: int
    points: int
    task_state: TaskState
    storage_unlocked: bool = False


DEFAULT_START_POINTS: Final[dict[WorldEra, StartPoint]] = {
    WorldEra.LIMP_2024: StartPoint(
        experience=168_538,
        prerequisites_done=frozenset({Quest.PORCINE_OF_INTEREST}),
        streak=0,
        points=0,
        task_state=ActiveTask(Creature.HELLHOUNDS, TaskGiver.VANNAKA, 40),
    ),
    WorldEra.LIMP_2025: StartPoint(
        experience=1_308_538,
        prerequisites_done=frozenset({Quest.LOST_CITY, Quest.PORCINE_OF_INTEREST}),
        streak=1,
        points=120,
        task_state=ActiveTask(Creature.MONKEYS, TaskGiver.TURAEL, 20),
    ),
    WorldEra.LIMP_2026: StartPoint(
        experience=1_308_538,
        prerequisites_done=frozenset(
            {Quest.LOST_CITY, Quest.PORCINE_OF_INTEREST, Quest.DRAGON_SLAYER}
        ),
        streak=1,
        points=120,
        task_state=ActiveTask(Creature.MONKEYS, TaskGiver.TURAEL, 20),
    ),
}


def _enum_by_name(enum_cls: type[Enum], name: object) -> Enum:
    """Resolve an enum member from its member name or display value."""

    if isinstance(name, str):
        if name in enum_cls.__members__:
            return enum_cls[name]
        for member in enum_cls:
            if member.value == name:
                return member
    raise ValueError(f"Unknown {enum_cls.__name__} '{name}'")


def start_point_to_dict(start: StartPoint) -> dict[str, object]:
    """Return a JSON-compatible representation of ``start``."""

    task: dict[str, object] = {"creature": start.task_state.creature.name}
    if isinstance(start.task_state, ActiveTask):
        task["giver"] = start.task_state.giver.name
        task["amount"] = start.task_state.amount
    return {
        "experience": start.experience,
        "prerequisites_done": sorted(quest.name for quest in start.prerequisites_done),
        "streak": start.streak,
        "points": start.points,
        "task": task,
        "task_active": isinstance(start.task_state, ActiveTask),
        "storage_unlocked": start.storage_unlocked,
    }


def start_point_from_dict(raw: Mapping[str, object]) -> StartPoint:
    """Build a :class:`StartPoint` from JSON-compatible data.

    Raises
    ------
    ValueError
        If a field is missing, negative, or names an unknown enum member.
    """

    try:
        task = raw["task"]
        if not isinstance(task, Mapping):
            raise ValueError("'task' must be an object")
        creature = _enum_by_name(Creature, task["creature"])
        task_state: TaskState
        if raw.get("task_active", True):
            amount = int(task["amount"])
            if amount <= 0:
                raise ValueError("An active task needs a positive amount.")
            task_state = ActiveTask(creature, _enum_by_name(TaskGiver, task["giver"]), amount)
        else:
            task_state = CompletedTask(creature)
        quests = frozenset(
            _enum_by_name(Quest, name) for name in raw.get("prerequisites_done", [])
        )
        start = StartPoint(
            experience=int(raw["experience"]),
            prerequisites_done=quests,
            streak=int(raw.get("streak", 0)),
            points=int(raw.get("points", 0)),
            task_state=task_state,
            storage_unlocked=bool(raw.get("storage_unlocked", False)),
        )
    except KeyError as exc:
        raise ValueError(f"Start point is missing field {exc}") from exc
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed start point: {exc}") from exc

    if start.experience < 0 or start.streak < 0 or start.points < 0:
        raise ValueError("Experience, streak and points must be non-negative.")
    return start


def load_start_point(path: str | Path) -> StartPoint:
    """Load a start point from the given JSON file."""

    raw_data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw_data, Mapping):
        raise ValueError("Start point file must contain a JSON object.")
    return start_point_from_dict(raw_data)


def save_start_point(start: StartPoint, path: str | Path) -> None:
    """Persist ``start`` as JSON."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps(start_point_to_dict(start), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
