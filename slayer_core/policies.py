"""Decision policies: which task action to take next and when a run is over."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional, Protocol

from .catalog import Catalog
from .data import POINT_SKIP_COST, STORAGE_UNLOCK_COST, Creature, TaskGiver
from .errors import InsufficientPoints
from .models import Action, ActiveTask, Decision
from .tasks import ProgressionState, SlayerState

COMPLETE: Final[Decision] = Decision(Action.COMPLETE)
POINT_SKIP: Final[Decision] = Decision(Action.POINT_SKIP)
UNLOCK_STORAGE: Final[Decision] = Decision(Action.UNLOCK_STORAGE)
STORE: Final[Decision] = Decision(Action.STORE)
UNSTORE: Final[Decision] = Decision(Action.UNSTORE)


def assign_from(giver: TaskGiver) -> Decision:
    return Decision(Action.NEW_ASSIGNMENT, giver)


class Policy(Protocol):
    """Strategy driving one run.

    ``should_terminate`` returns True for success, False for a permanently
    stuck run and None to keep going. ``select_action`` is only called after
    ``should_terminate`` returned None and must return a legal decision.
    """

    name: str

    def should_terminate(
        self, state: SlayerState, progression: ProgressionState, catalog: Catalog
    ) -> Optional[bool]:
        ...

    def select_action(
        self, state: SlayerState, progression: ProgressionState, catalog: Catalog
    ) -> Decision:
        ...


def is_stuck(
    state: SlayerState,
    progression: ProgressionState,
    catalog: Catalog,
    storage_usable: bool = True,
) -> bool:
    """Return True when the active task can be neither finished nor discarded.

    The task is unkillable, there are not enough points to skip it, the skip
    giver could hand out the same creature, and storage cannot take it.
    """

    task = state.task_state
    if not isinstance(task, ActiveTask):
        return False
    if catalog.melee_killable(task.creature) or state.points >= POINT_SKIP_COST:
        return False
    if not catalog.can_assign(catalog.skip_giver, task.creature):
        return False
    if not storage_usable:
        return True
    return not progression.storage_unlocked or state.stored_task is not None


def _paid_skip(state: SlayerState) -> Decision:
    if state.points < POINT_SKIP_COST:
        raise InsufficientPoints("Ran out of points; the run should have stopped already.")
    return POINT_SKIP


@dataclass
class MinimizeLockPolicy:
    """Complete whatever can be killed and keep enough points to skip the rest.

    Tasks the skip giver could also assign are point-skipped, everything else
    unkillable is rerolled for free. Points come from Vannaka on the first half
    of every ten-task block once the streak bonus applies, and Spria otherwise.
    """

    target_points: int = 1000
    name: str = "minimize-lock"

    def should_terminate(
        self, state: SlayerState, progression: ProgressionState, catalog: Catalog
    ) -> Optional[bool]:
        if isinstance(state.task_state, ActiveTask):
            if is_stuck(state, progression, catalog, storage_usable=False):
                return False
            return None
        if state.points >= self.target_points:
            return True
        return None

    def select_action(
        self, state: SlayerState, progression: ProgressionState, catalog: Catalog
    ) -> Decision:
        task = state.task_state
        if isinstance(task, ActiveTask):
            if catalog.melee_killable(task.creature):
                return COMPLETE
            if catalog.can_assign(catalog.skip_giver, task.creature):
                return _paid_skip(state)
            return assign_from(catalog.skip_giver)

        next_streak = state.streak + 1
        if next_streak >= 5 and next_streak % 10 <= 4:
            return assign_from(TaskGiver.VANNAKA)
        if catalog.can_visit(TaskGiver.SPRIA, progression):
            return assign_from(TaskGiver.SPRIA)
        return assign_from(catalog.skip_giver)


class SuperiorsMode(Enum):
    ACCUMULATE_POINTS = "accumulate_points"
    GET_SUPERIORS = "get_superiors"


ACCUMULATE_VANNAKA_TASKS: Final[frozenset[Creature]] = frozenset(
    {
        Creature.ANKOUS,
        Creature.CROCODILES,
        Creature.ICE_GIANTS,
        Creature.ICE_WARRIORS,
        Creature.HILL_GIANTS,
        Creature.HOBGOBLINS,
        Creature.KALPHITE,
        Creature.MOSS_GIANTS,
        Creature.PYREFIENDS,
        Creature.TROLLS,
    }
)
SUPERIOR_VANNAKA_TASKS: Final[frozenset[Creature]] = frozenset(
    {Creature.KALPHITE, Creature.PYREFIENDS}
)


@dataclass
class SuperiorsPolicy:
    """Farm superior drops, alternating between earning and spending points.

    Storage is unlocked first. Afterwards the policy earns points on quick
    Turael tasks with a Vannaka task every tenth completion until it holds more
    than ``farm_above`` points, then takes only Vannaka tasks, completing the
    ones with superior drops, until it falls below ``accumulate_below``.
    The run succeeds once every superior drop was seen.
    """

    mode: SuperiorsMode = SuperiorsMode.ACCUMULATE_POINTS
    farm_above: int = 1000
    accumulate_below: int = 500
    unlock_at: int = 620
    vannaka_skip_reserve: int = 120
    name: str = "superiors"

    def __post_init__(self) -> None:
        if self.accumulate_below >= self.farm_above:
            raise ValueError("accumulate_below must be lower than farm_above")
        if self.unlock_at < STORAGE_UNLOCK_COST:
            raise ValueError(f"unlock_at must be at least {STORAGE_UNLOCK_COST}")

    def should_terminate(
        self, state: SlayerState, progression: ProgressionState, catalog: Catalog
    ) -> Optional[bool]:
        if state.accumulator.drops.has_every_drop():
            return True
        if is_stuck(state, progression, catalog):
            return False
        return None

    def update_mode(self, points: int) -> SuperiorsMode:
        if self.mode is SuperiorsMode.ACCUMULATE_POINTS and points > self.farm_above:
            self.mode = SuperiorsMode.GET_SUPERIORS
        elif self.mode is SuperiorsMode.GET_SUPERIORS and points < self.accumulate_below:
            self.mode = SuperiorsMode.ACCUMULATE_POINTS
        return self.mode

    def select_action(
        self, state: SlayerState, progression: ProgressionState, catalog: Catalog
    ) -> Decision:
        if not progression.storage_unlocked:
            if state.points >= self.unlock_at:
                return UNLOCK_STORAGE
            return MinimizeLockPolicy().select_action(state, progression, catalog)

        accumulating = self.update_mode(state.points) is SuperiorsMode.ACCUMULATE_POINTS
        task = state.task_state
        if isinstance(task, ActiveTask):
            return self._handle_active(task, state, catalog, accumulating)

        if accumulating:
            next_giver = TaskGiver.VANNAKA if (state.streak + 1) % 10 == 0 else catalog.skip_giver
        else:
            next_giver = TaskGiver.VANNAKA
        if self._should_unstore(state, catalog, next_giver):
            return UNSTORE
        return assign_from(next_giver)

    def _handle_active(
        self, task: ActiveTask, state: SlayerState, catalog: Catalog, accumulating: bool
    ) -> Decision:
        creature = task.creature
        if catalog.melee_killable(creature):
            if task.giver is not TaskGiver.VANNAKA:
                return COMPLETE
            wanted = ACCUMULATE_VANNAKA_TASKS if accumulating else SUPERIOR_VANNAKA_TASKS
            if creature in wanted:
                return COMPLETE
            if accumulating and state.points >= self.vannaka_skip_reserve:
                return POINT_SKIP
            return assign_from(catalog.skip_giver)

        if catalog.can_assign(catalog.skip_giver, creature):
            if state.stored_task is None:
                return STORE
            return _paid_skip(state)
        if accumulating and state.points > self.vannaka_skip_reserve:
            return POINT_SKIP
        return assign_from(catalog.skip_giver)

    def _should_unstore(self, state: SlayerState, catalog: Catalog, next_giver: TaskGiver) -> bool:
        # A killable creature left as the last task would block that giver from
        # offering it again; park a bad stored task there instead.
        stored = state.stored_task
        if stored is None:
            return False
        last = state.task_state.creature
        return (
            catalog.melee_killable(last)
            and catalog.can_assign(next_giver, last)
            and not catalog.melee_killable(stored.creature)
            and catalog.can_assign(next_giver, stored.creature)
        )


POLICIES: Final[dict[str, type]] = {
    MinimizeLockPolicy.name: MinimizeLockPolicy,
    SuperiorsPolicy.name: SuperiorsPolicy,
}


def policy_by_name(name: str) -> Policy:
    """Instantiate a registered policy with its default settings.

    Raises
    ------
    ValueError
        If ``name`` is not a registered policy.
    """

    try:
        policy_cls = POLICIES[name]
    except KeyError as exc:
        known = ", ".join(sorted(POLICIES))
        raise ValueError(f"Unknown policy '{name}' (expected one of: {known})") from exc
    return policy_cls()
