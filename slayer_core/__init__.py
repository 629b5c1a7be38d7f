"""Monte Carlo simulator for slayer-task progression under decision policies."""

from .api import SimulationComputationResult, compute_simulation, default_start_point
from .catalog import Catalog
from .cost import CostModel, MonsterCost, Supplies
from .data import (
    DEFAULT_START_POINTS,
    Creature,
    Quest,
    StartPoint,
    TaskGiver,
    WorldEra,
    load_start_point,
    save_start_point,
)
from .errors import ContractViolation
from .models import (
    Action,
    ActiveTask,
    CompletedTask,
    Decision,
    MonteCarloReport,
    OrderStats,
    RunOutcome,
    RunResult,
    SlayerDrops,
)
from .policies import POLICIES, MinimizeLockPolicy, SuperiorsMode, SuperiorsPolicy, policy_by_name
from .report import format_report, hours_frame, kills_frame, tasks_done_frame
from .simulation import DEFAULT_MAX_STEPS, simulate_many, simulate_once, summarize_runs
from .tasks import ProgressionState, SlayerState, TaskMachine

__all__ = [
    "Action",
    "ActiveTask",
    "Catalog",
    "CompletedTask",
    "ContractViolation",
    "CostModel",
    "Creature",
    "DEFAULT_MAX_STEPS",
    "DEFAULT_START_POINTS",
    "Decision",
    "MinimizeLockPolicy",
    "MonsterCost",
    "MonteCarloReport",
    "OrderStats",
    "POLICIES",
    "ProgressionState",
    "Quest",
    "RunOutcome",
    "RunResult",
    "SimulationComputationResult",
    "SlayerDrops",
    "SlayerState",
    "StartPoint",
    "SuperiorsMode",
    "SuperiorsPolicy",
    "Supplies",
    "TaskGiver",
    "TaskMachine",
    "WorldEra",
    "compute_simulation",
    "default_start_point",
    "format_report",
    "hours_frame",
    "kills_frame",
    "load_start_point",
    "policy_by_name",
    "save_start_point",
    "simulate_many",
    "simulate_once",
    "summarize_runs",
    "tasks_done_frame",
]
