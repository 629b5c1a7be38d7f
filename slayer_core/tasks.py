"""Task slot state machine: weighted assignment, completion, skips, and storage."""

from __future__ import annotations

import random
from bisect import bisect_right
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import accumulate
from typing import Optional

from .catalog import Catalog
from .cost import STORE_TASK_SECONDS, UNSTORE_TASK_SECONDS, CostModel, Supplies
from .data import (
    POINT_SKIP_COST,
    STORAGE_UNLOCK_COST,
    STREAK_BONUS_MIN,
    Assignment,
    Creature,
    Quest,
    StartPoint,
    TaskGiver,
    level_for_exp,
    streak_multiplier,
)
from .errors import (
    ContractViolation,
    GiverLocked,
    InsufficientPoints,
    InvalidSkip,
    NoActiveTask,
    NoEligibleAssignment,
    StorageEmpty,
    StorageLocked,
    StorageOccupied,
    TaskStillActive,
)
from .kills import KillOutcome, batch_kills, simulate_kills
from .models import Action, ActiveTask, CompletedTask, Decision, SlayerDrops, TaskState


@dataclass
class ProgressionState:
    """Gating attributes of the character; every field only ever moves forward."""

    experience: int
    prerequisites: frozenset[Quest] = frozenset()
    storage_unlocked: bool = False
    level: int = field(init=False)

    def __post_init__(self) -> None:
        self.level = level_for_exp(self.experience)

    def gain_experience(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Experience gains must be non-negative.")
        self.experience += amount
        self.level = level_for_exp(self.experience)


@dataclass
class RunAccumulator:
    """Append-only statistics of one run."""

    total_points: int = 0
    min_points: int = 0
    max_points: int = 0
    tasks_started: Counter[tuple[TaskGiver, Creature]] = field(default_factory=Counter)
    tasks_done: Counter[tuple[TaskGiver, Creature]] = field(default_factory=Counter)
    kills: Counter[Creature] = field(default_factory=Counter)
    stored_tasks: int = 0
    unstored_tasks: int = 0
    superiors: int = 0
    elapsed_seconds: float = 0.0
    supplies: Supplies = field(default_factory=Supplies)
    drops: SlayerDrops = field(default_factory=SlayerDrops)

    @property
    def tasks_received(self) -> int:
        return sum(self.tasks_started.values())

    @property
    def tasks_completed(self) -> int:
        return sum(self.tasks_done.values())

    def time_spent(self) -> float:
        """Return total seconds, including the time to gather used supplies."""

        return self.elapsed_seconds + self.supplies.time_to_gather()

    @property
    def hours(self) -> float:
        return self.time_spent() / 3600.0

    def note_points(self, points: int) -> None:
        self.min_points = min(self.min_points, points)
        self.max_points = max(self.max_points, points)


@dataclass
class SlayerState:
    """Reward points, streak, the live task slot, and the storage slot."""

    points: int = 0
    streak: int = 0
    task_state: TaskState = field(default_factory=lambda: CompletedTask(Creature.MONKEYS))
    stored_task: Optional[ActiveTask] = None
    accumulator: RunAccumulator = field(default_factory=RunAccumulator)

    @property
    def active_task(self) -> Optional[ActiveTask]:
        return self.task_state if isinstance(self.task_state, ActiveTask) else None


def initial_state(start: StartPoint) -> tuple[SlayerState, ProgressionState]:
    """Build fresh run state from a start point."""

    progression = ProgressionState(
        experience=start.experience,
        prerequisites=frozenset(start.prerequisites_done),
        storage_unlocked=start.storage_unlocked,
    )
    state = SlayerState(
        points=start.points,
        streak=start.streak,
        task_state=start.task_state,
        accumulator=RunAccumulator(min_points=start.points, max_points=start.points),
    )
    return state, progression


def sample_assignment(rng: random.Random, candidates: Sequence[Assignment]) -> Assignment:
    """Draw one assignment with probability ``weight / total_weight``.

    Draws ``u`` uniformly from ``[0, total)`` and returns the first entry whose
    running weight sum is strictly greater than ``u``.
    """

    cumulative = list(accumulate(assignment.weight for assignment in candidates))
    total = cumulative[-1] if cumulative else 0
    if total <= 0:
        raise NoEligibleAssignment("No assignment with positive weight is available.")
    draw = rng.randrange(total)
    return candidates[bisect_right(cumulative, draw)]


class TaskMachine:
    """Applies task operations to a :class:`SlayerState`.

    Every operation checks its preconditions and raises a
    :class:`~slayer_core.errors.ContractViolation` subclass when they fail.
    """

    def __init__(self, catalog: Optional[Catalog] = None, cost_model: Optional[CostModel] = None) -> None:
        self.catalog = catalog if catalog is not None else Catalog()
        self.cost_model = cost_model if cost_model is not None else CostModel()

    def assign(
        self,
        state: SlayerState,
        progression: ProgressionState,
        giver: TaskGiver,
        rng: random.Random,
    ) -> Assignment:
        """Request a new task from ``giver``.

        Over an active task this is a reroll: only the skip giver may do it, only
        for a creature it would never offer itself, and it resets the streak.
        """

        catalog = self.catalog
        if not catalog.can_visit(giver, progression):
            raise GiverLocked(
                f"{giver.value} requires {catalog.giver_requirement(giver).value}"
            )

        current = state.task_state
        rerolling = isinstance(current, ActiveTask)
        if rerolling:
            if giver is not catalog.skip_giver:
                raise InvalidSkip(f"Can only reroll at {catalog.skip_giver.value}, not {giver.value}")
            if catalog.would_offer(giver, current.creature, progression):
                raise InvalidSkip(f"Cannot reroll a {current.creature.value} task at {giver.value}")

        candidates = catalog.eligible_offerings(giver, progression, exclude=(current.creature,))
        assignment = sample_assignment(rng, candidates)
        low, high = assignment.amount
        amount = rng.randint(low, high)

        # State is only touched once the draw succeeded.
        if rerolling:
            state.streak = 0
        acc = state.accumulator
        acc.tasks_started[(giver, assignment.creature)] += 1
        seconds, supplies = self.cost_model.cost_of_giver(giver)
        acc.elapsed_seconds += seconds
        acc.supplies = acc.supplies + supplies

        state.task_state = ActiveTask(assignment.creature, giver, amount)
        return assignment

    def complete(
        self,
        state: SlayerState,
        progression: ProgressionState,
        rng: random.Random,
    ) -> KillOutcome:
        """Finish the active task and pay out experience and streak points."""

        task = state.task_state
        if not isinstance(task, ActiveTask):
            raise NoActiveTask("Cannot complete a task when none is active.")

        state.streak += 1
        acc = state.accumulator
        acc.tasks_done[(task.giver, task.creature)] += 1

        cost = self.cost_model.cost_of_creature(task.creature)
        exp_per_kill = self.catalog.exp_per_kill(task.creature)
        if cost.needs_per_kill_rolls:
            outcome = simulate_kills(rng, task.amount, exp_per_kill, cost)
        else:
            outcome = batch_kills(task.amount, exp_per_kill)

        acc.kills[task.creature] += outcome.kills
        acc.superiors += outcome.superiors
        acc.drops = acc.drops + outcome.drops
        acc.supplies = acc.supplies + cost.travel_supplies + Supplies(
            bracelet_of_slaughter_charges=outcome.slaughter_charges,
            expeditious_bracelet_charges=outcome.expeditious_charges,
        )
        acc.elapsed_seconds += cost.task_seconds(outcome.kills)
        progression.gain_experience(outcome.experience)

        if state.streak >= STREAK_BONUS_MIN:
            awarded = self.catalog.reward_rate(task.giver) * streak_multiplier(state.streak)
            state.points += awarded
            acc.total_points += awarded
            acc.note_points(state.points)

        state.task_state = CompletedTask(task.creature)
        return outcome

    def skip(self, state: SlayerState) -> None:
        """Pay :data:`POINT_SKIP_COST` points to drop the active task."""

        task = state.task_state
        if not isinstance(task, ActiveTask):
            raise NoActiveTask("Cannot point-skip when no task is active.")
        if state.points < POINT_SKIP_COST:
            raise InsufficientPoints(
                f"Point skip needs {POINT_SKIP_COST} points, have {state.points}"
            )
        state.points -= POINT_SKIP_COST
        state.accumulator.note_points(state.points)
        state.task_state = CompletedTask(task.creature)

    def store(self, state: SlayerState, progression: ProgressionState) -> None:
        """Park the active task in the storage slot."""

        if not progression.storage_unlocked:
            raise StorageLocked("Task storage is not unlocked.")
        task = state.task_state
        if not isinstance(task, ActiveTask):
            raise NoActiveTask("Cannot store a task when none is active.")
        if state.stored_task is not None:
            raise StorageOccupied("A task is already stored.")
        state.stored_task = task
        state.task_state = CompletedTask(task.creature)
        state.accumulator.stored_tasks += 1
        state.accumulator.elapsed_seconds += STORE_TASK_SECONDS

    def unstore(self, state: SlayerState) -> None:
        """Bring the stored task back into the live slot."""

        if state.stored_task is None:
            raise StorageEmpty("No task is stored.")
        if isinstance(state.task_state, ActiveTask):
            raise TaskStillActive("Cannot unstore over an active task.")
        state.task_state = state.stored_task
        state.stored_task = None
        state.accumulator.unstored_tasks += 1
        state.accumulator.elapsed_seconds += UNSTORE_TASK_SECONDS

    def unlock_storage(self, state: SlayerState, progression: ProgressionState) -> None:
        """Spend :data:`STORAGE_UNLOCK_COST` points on the task storage feature."""

        if progression.storage_unlocked:
            raise StorageLocked("Task storage is already unlocked.")
        if state.points < STORAGE_UNLOCK_COST:
            raise InsufficientPoints(
                f"Unlocking storage needs {STORAGE_UNLOCK_COST} points, have {state.points}"
            )
        state.points -= STORAGE_UNLOCK_COST
        state.accumulator.note_points(state.points)
        progression.storage_unlocked = True

    def apply(
        self,
        state: SlayerState,
        progression: ProgressionState,
        decision: Decision,
        rng: random.Random,
    ) -> None:
        """Dispatch a policy decision to the matching operation."""

        action = decision.action
        if action is Action.COMPLETE:
            self.complete(state, progression, rng)
        elif action is Action.POINT_SKIP:
            self.skip(state)
        elif action is Action.NEW_ASSIGNMENT:
            self.assign(state, progression, decision.giver, rng)
        elif action is Action.UNLOCK_STORAGE:
            self.unlock_storage(state, progression)
        elif action is Action.STORE:
            self.store(state, progression)
        elif action is Action.UNSTORE:
            self.unstore(state)
        else:  # pragma: no cover - Action is a closed enum
            raise ContractViolation(f"Unknown action {action}")
