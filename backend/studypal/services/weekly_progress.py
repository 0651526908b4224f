"""Seven-day trailing activity window."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from studypal.services.stats_helpers import round_half_up, utc_day_start
from studypal.services.task_snapshots import TaskSnapshot

WINDOW_DAYS = 7
# Fixed English labels so output does not depend on the server locale.
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class DayBucket:
    date: datetime
    label: str
    completed: int
    planned: int
    study_minutes: int


def _same_day(moment: Optional[datetime], day: date) -> bool:
    return moment is not None and utc_day_start(moment).date() == day


def build_weekly_progress(snapshots: Iterable[TaskSnapshot], today: datetime | date) -> List[DayBucket]:
    """Bucket completions, due dates and study minutes into the last seven UTC days.

    Buckets run oldest first and the last one is ``today``.
    """
    snapshots = list(snapshots)
    today_start = utc_day_start(today)

    buckets: List[DayBucket] = []
    for offset in range(WINDOW_DAYS - 1, -1, -1):
        day_start = today_start - timedelta(days=offset)
        day = day_start.date()

        finished = [task for task in snapshots if _same_day(task.completed_at, day)]
        planned = sum(1 for task in snapshots if _same_day(task.due_date, day))
        minutes = sum(int(round_half_up(task.estimated_hours * 60)) for task in finished)

        buckets.append(
            DayBucket(
                date=day_start,
                label=WEEKDAY_LABELS[day.weekday()],
                completed=len(finished),
                planned=planned,
                study_minutes=minutes,
            )
        )
    return buckets
