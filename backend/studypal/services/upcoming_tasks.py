"""Nearest open deadlines."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from studypal.services.task_snapshots import TaskSnapshot
from studypal.services.task_totals import is_overdue

DEFAULT_UPCOMING_LIMIT = 4


@dataclass(frozen=True)
class UpcomingTask:
    id: Any
    title: str
    course: Optional[str]
    due_date: datetime
    priority: str
    status: str
    estimated_hours: float
    overdue: bool


def select_upcoming_tasks(
    snapshots: Iterable[TaskSnapshot],
    today: datetime | date,
    limit: int = DEFAULT_UPCOMING_LIMIT,
) -> List[UpcomingTask]:
    """Open tasks with a due date, soonest first, capped at ``limit``.

    Tasks without a due date never appear. Ties keep their input order.
    """
    if limit <= 0:
        return []

    candidates = [task for task in snapshots if not task.is_completed and task.due_date is not None]
    candidates.sort(key=lambda task: task.due_date)

    return [
        UpcomingTask(
            id=task.id,
            title=task.title,
            course=task.course,
            due_date=task.due_date,
            priority=task.priority,
            status=task.status,
            estimated_hours=task.estimated_hours,
            overdue=is_overdue(task, today),
        )
        for task in candidates[:limit]
    ]
