"""Aggregate task counts and completion rates."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Sequence

from studypal.services.stats_helpers import percentage, round_half_up, utc_day_start
from studypal.services.task_snapshots import TaskSnapshot
from studypal.services.weekly_progress import DayBucket


@dataclass(frozen=True)
class TaskTotals:
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    focus_hours: float


def is_overdue(task: TaskSnapshot, today: datetime | date) -> bool:
    """Open task whose due date falls before the start of ``today`` (UTC)."""
    if task.is_completed or task.due_date is None:
        return False
    return task.due_date < utc_day_start(today)


def compute_totals(snapshots: Iterable[TaskSnapshot], today: datetime | date) -> TaskTotals:
    snapshots = list(snapshots)
    total = len(snapshots)
    completed = sum(1 for task in snapshots if task.is_completed)
    overdue = sum(1 for task in snapshots if is_overdue(task, today))
    focus_hours = round_half_up(sum(task.estimated_hours for task in snapshots), 1)

    return TaskTotals(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=total - completed,
        overdue_tasks=overdue,
        focus_hours=focus_hours,
    )


def completion_rate(totals: TaskTotals) -> float:
    return percentage(totals.completed_tasks, totals.total_tasks)


def weekly_completion_rate(buckets: Sequence[DayBucket]) -> float:
    """Completions in the window relative to tasks due in the window."""
    completed = sum(bucket.completed for bucket in buckets)
    planned = sum(bucket.planned for bucket in buckets)
    return percentage(completed, planned)
