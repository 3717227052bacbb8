"""Task scheduler: owns the in-flight timed tasks of a settlement."""

import logging
from typing import Iterable, List, Optional

from .models import Task

logger = logging.getLogger(__name__)

GATHER = "gather"
BUILD = "build"
TRAIN_VILLAGER = "train_villager"
TRAIN_MILITARY = "train_military"
RESEARCH = "research"
ADVANCE_AGE = "advance_age"
UPGRADE_BUILDING = "upgrade_building"


def make_task_id(now: int, kind: str, discriminator: str) -> str:
    """Build a task id that stays unique for same-millisecond requests."""
    return f"{now}-{kind}-{discriminator}"


def progress(task: Task, now: int) -> float:
    """Fraction of the task's duration that has elapsed, clamped to [0, 1]."""
    if task.duration <= 0:
        return 1.0
    return min(1.0, max(0.0, (now - task.start_time) / task.duration))


class TaskScheduler:
    """Keeps the active task list and hands out due tasks.

    Tasks are inert records; nothing runs in the background. The host
    polls `due_tasks` on its own cadence and calls `resolve` once per
    task. The scheduler works on the list it is given, so the host's
    state tree stays the single owner of the tasks.
    """

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.tasks = tasks if tasks is not None else []

    def find(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def by_kind(self, kind: str) -> List[Task]:
        return [t for t in self.tasks if t.kind == kind]

    def owner_of(self, building_id: str) -> Optional[Task]:
        """The active task that occupies a building instance, if any."""
        return next((t for t in self.tasks if t.owner_building_id() == building_id), None)

    def gather_task_for(self, node_id: str) -> Optional[Task]:
        return next(
            (t for t in self.tasks if t.kind == GATHER and t.payload.get("resource_node_id") == node_id),
            None,
        )

    def schedule(self, task: Task):
        """Append a new task. Ids must be unique."""
        if self.find(task.id) is not None:
            raise ValueError(f"Duplicate task id: {task.id}")
        self.tasks.append(task)
        logger.debug(f"Scheduled {task.kind} task {task.id} for {task.duration}ms")

    def schedule_all(self, tasks: Iterable[Task]):
        for task in tasks:
            self.schedule(task)

    def replace(self, task: Task):
        """Swap an existing task record for an updated copy."""
        for index, existing in enumerate(self.tasks):
            if existing.id == task.id:
                self.tasks[index] = task
                return
        raise KeyError(task.id)

    def due_tasks(self, now: int) -> List[Task]:
        """Tasks whose deadline has passed. Gather tasks are never due."""
        return [t for t in self.tasks if t.kind != GATHER and t.due_at <= now]

    def resolve(self, task_id: str) -> Optional[Task]:
        """Remove a task for resolution. A second call for the same id is a no-op."""
        task = self.find(task_id)
        if task is None:
            return None
        self.tasks.remove(task)
        return task

    def cancel(self, task_id: str) -> Optional[Task]:
        """Remove a task without granting its effects."""
        task = self.find(task_id)
        if task is None:
            return None
        self.tasks.remove(task)
        logger.info(f"Cancelled {task.kind} task {task.id}")
        return task
