"""Exceptions raised when a caller breaks a task-machine contract.

These mark bugs in a policy or caller and abort the replication; a run that
simply gets stuck is reported through :class:`~slayer_core.models.RunOutcome`
instead.
"""

from __future__ import annotations


class ContractViolation(RuntimeError):
    """A task-machine operation was called outside its preconditions."""


class InvalidSkip(ContractViolation):
    """New assignment requested over an active task the giver cannot replace."""


class NoActiveTask(ContractViolation):
    """Operation needs an active task but the slot is completed."""


class TaskStillActive(ContractViolation):
    """Operation needs a completed slot but a task is active."""


class InsufficientPoints(ContractViolation):
    """Not enough reward points for a skip or unlock."""


class StorageLocked(ContractViolation):
    """Task storage used before it was unlocked, or unlocked twice."""


class StorageOccupied(ContractViolation):
    """A task is already stored."""


class StorageEmpty(ContractViolation):
    """No task is stored."""


class GiverLocked(ContractViolation):
    """The task-giver's access prerequisite is not met."""


class NoEligibleAssignment(ContractViolation):
    """Every offering of the giver is gated out or just completed."""
