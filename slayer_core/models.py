"""Dataclasses shared across the task machine, policies, and simulation modules."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .cost import Supplies
    from .data import Creature, TaskGiver
    from .tasks import ProgressionState, SlayerState


@dataclass(frozen=True)
class ActiveTask:
    """Task currently being worked on."""

    creature: Creature
    giver: TaskGiver
    amount: int


@dataclass(frozen=True)
class CompletedTask:
    """Slot after a task was finished, skipped, or stored.

    The creature is remembered because a giver never hands out the creature
    that was just finished.
    """

    creature: Creature


TaskState = Union[ActiveTask, CompletedTask]


class Action(Enum):
    COMPLETE = "complete"
    POINT_SKIP = "point_skip"
    NEW_ASSIGNMENT = "new_assignment"
    UNLOCK_STORAGE = "unlock_storage"
    STORE = "store"
    UNSTORE = "unstore"


@dataclass(frozen=True)
class Decision:
    """Action chosen by a policy; ``giver`` is set only for new assignments."""

    action: Action
    giver: Optional[TaskGiver] = None

    def __post_init__(self) -> None:
        if (self.action is Action.NEW_ASSIGNMENT) != (self.giver is not None):
            raise ValueError("Only NEW_ASSIGNMENT decisions carry a task-giver.")


@dataclass
class SlayerDrops:
    """Counts of rare superior drops."""

    dust_battlestaff: int = 0
    mist_battlestaff: int = 0
    imbued_heart: int = 0
    eternal_gem: int = 0

    def __add__(self, other: SlayerDrops) -> SlayerDrops:
        return SlayerDrops(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def has_every_drop(self) -> bool:
        return all(getattr(self, f.name) > 0 for f in fields(self))

    def total(self) -> int:
        return sum(getattr(self, f.name) for f in fields(self))


class RunOutcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    STEP_LIMIT = "step_limit"


@dataclass
class RunResult:
    """Final state of one replication."""

    outcome: RunOutcome
    slayer_state: SlayerState
    progression: ProgressionState
    steps: int

    @property
    def success(self) -> bool:
        return self.outcome is RunOutcome.SUCCESS


@dataclass
class OrderStats:
    """Order statistics over a sample; all zero for an empty sample."""

    median: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    mean: float = 0.0
    count: int = 0


@dataclass
class MonteCarloReport:
    """Aggregated Monte Carlo metrics for one policy and start point."""

    total_runs: int
    successes: int
    failures: int
    step_limit_runs: int
    tasks_received_total: int
    success_tasks: OrderStats
    failure_tasks: OrderStats
    success_min_points: OrderStats
    success_total_points: OrderStats
    success_end_points: OrderStats
    success_hours: OrderStats
    failure_hours: OrderStats
    failure_max_points: OrderStats
    max_points_locked: int
    drops: SlayerDrops
    supplies: Supplies
    kills: dict[Creature, int]
    average_tasks_done: dict[tuple[TaskGiver, Creature], float]
    median_run: Optional[RunResult]
    success_hours_sample: list[float] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        return self.successes / self.total_runs if self.total_runs > 0 else 0.0

    @property
    def average_tasks_received(self) -> float:
        return self.tasks_received_total / self.total_runs if self.total_runs > 0 else 0.0
