"""Normalize stored task rows into immutable snapshots for the stats engine.

All tolerance for messy data lives here: hours stored as free text, dates
stored as strings or naive timestamps, unknown status values. Everything
downstream can rely on clean, timezone-aware values.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Sequence
from uuid import UUID

from studypal.services.task_store import COMPLETED_STATUS, TaskStore

logger = logging.getLogger(__name__)

TASK_STATUSES = ("pending", "in_progress", COMPLETED_STATUS)
TASK_PRIORITIES = ("low", "medium", "high")
DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"


@dataclass(frozen=True)
class TaskSnapshot:
    id: Any
    title: str
    course: Optional[str]
    priority: str
    status: str
    due_date: Optional[datetime]
    estimated_hours: float
    completed_at: Optional[datetime]

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED_STATUS


def _field(row: Any, name: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def parse_instant(value: Any) -> Optional[datetime]:
    """Coerce a stored date value to an aware UTC datetime, or None if unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        # Naive timestamps (SQLite, legacy rows) are stored in UTC.
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _coerce_hours(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        hours = float(value)
    elif isinstance(value, str):
        try:
            hours = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(hours) or hours < 0:
        return None
    return hours


def parse_hours(value: Any) -> float:
    """Coerce an estimated-hours value to a non-negative float, defaulting to 0."""
    hours = _coerce_hours(value)
    return hours if hours is not None else 0.0


def _choice(value: Any, allowed: Sequence[str], default: str) -> str:
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in allowed:
            return normalized
    return default


def resolve_completed_at(row: Any, status: str, completion_history: Iterable[Any] = ()) -> Optional[datetime]:
    """Pick the completion instant for a task.

    The newest history event moving the task into ``completed`` wins. Without
    one, a task whose current status is completed falls back to its last
    modification time.
    """
    latest: Optional[datetime] = None
    # Current status is not consulted here: a task reopened after finishing
    # still earns day credit for the completion it logged.
    for event in completion_history:
        to_status = _choice(_field(event, "to_status", COMPLETED_STATUS), TASK_STATUSES, "")
        if to_status != COMPLETED_STATUS:
            continue
        changed_at = parse_instant(_field(event, "changed_at"))
        if changed_at and (latest is None or changed_at > latest):
            latest = changed_at

    if latest is not None:
        return latest
    if status == COMPLETED_STATUS:
        return parse_instant(_field(row, "updated_at"))
    return None


def build_task_snapshot(row: Any, completion_history: Iterable[Any] = ()) -> TaskSnapshot:
    """Build one snapshot from an ORM row or a plain mapping."""
    task_id = _field(row, "id")
    raw_hours = _field(row, "estimated_hours")
    raw_due = _field(row, "due_date")
    raw_status = _field(row, "status")

    hours = _coerce_hours(raw_hours)
    if hours is None:
        if raw_hours not in (None, ""):
            logger.debug("Task %s has unusable estimated_hours %r; using 0", task_id, raw_hours)
        hours = 0.0

    due_date = parse_instant(raw_due)
    if raw_due not in (None, "") and due_date is None:
        logger.debug("Task %s has unparseable due_date %r; treating as absent", task_id, raw_due)

    status = _choice(raw_status, TASK_STATUSES, DEFAULT_STATUS)
    if raw_status is not None and status != raw_status:
        logger.debug("Task %s has unexpected status %r; using %s", task_id, raw_status, status)

    return TaskSnapshot(
        id=task_id,
        title=_field(row, "title") or "",
        course=_field(row, "course"),
        priority=_choice(_field(row, "priority"), TASK_PRIORITIES, DEFAULT_PRIORITY),
        status=status,
        due_date=due_date,
        estimated_hours=hours,
        completed_at=resolve_completed_at(row, status, completion_history),
    )


def build_task_snapshots(
    rows: Iterable[Any],
    history_by_task: Optional[Mapping[Any, Iterable[Any]]] = None,
) -> List[TaskSnapshot]:
    history_by_task = history_by_task or {}
    return [build_task_snapshot(row, history_by_task.get(_field(row, "id"), ())) for row in rows]


def load_task_snapshots(store: TaskStore, user_id: UUID) -> List[TaskSnapshot]:
    """Fetch a user's tasks plus completion history and normalize them.

    Raises TaskStoreUnavailableError if either query fails.
    """
    rows = store.list_tasks_for_user(user_id)
    history = store.list_completion_history(row.id for row in rows)
    return build_task_snapshots(rows, history)
