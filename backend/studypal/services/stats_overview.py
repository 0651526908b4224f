"""Compose the stats overview returned by ``GET /stats/overview``."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional
from uuid import UUID

from studypal.services.gamification import GamificationState, compute_gamification
from studypal.services.streaks import StreakState, compute_streak
from studypal.services.task_snapshots import TaskSnapshot, load_task_snapshots
from studypal.services.task_store import TaskStore
from studypal.services.task_totals import TaskTotals, completion_rate, compute_totals, weekly_completion_rate
from studypal.services.upcoming_tasks import DEFAULT_UPCOMING_LIMIT, UpcomingTask, select_upcoming_tasks
from studypal.services.weekly_progress import DayBucket, build_weekly_progress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsOverview:
    totals: TaskTotals
    completion_rate: float
    weekly_completion_rate: float
    weekly_focus_minutes: int
    weekly_progress: List[DayBucket]
    streak_days: int
    streak: StreakState
    upcoming_tasks: List[UpcomingTask]
    gamification: GamificationState


def build_stats_overview(
    snapshots: Iterable[TaskSnapshot],
    today: datetime | date,
    *,
    upcoming_limit: int = DEFAULT_UPCOMING_LIMIT,
) -> StatsOverview:
    """Run every aggregation over one snapshot list. Pure; no I/O."""
    snapshots = list(snapshots)

    weekly_progress = build_weekly_progress(snapshots, today)
    streak = compute_streak(weekly_progress)
    totals = compute_totals(snapshots, today)
    upcoming = select_upcoming_tasks(snapshots, today, limit=upcoming_limit)
    weekly_completed = sum(bucket.completed for bucket in weekly_progress)
    gamification = compute_gamification(totals.completed_tasks, streak, weekly_completed)

    return StatsOverview(
        totals=totals,
        completion_rate=completion_rate(totals),
        weekly_completion_rate=weekly_completion_rate(weekly_progress),
        weekly_focus_minutes=sum(bucket.study_minutes for bucket in weekly_progress),
        weekly_progress=weekly_progress,
        streak_days=streak.current,
        streak=streak,
        upcoming_tasks=upcoming,
        gamification=gamification,
    )


def get_stats_overview(
    store: TaskStore,
    user_id: UUID,
    *,
    as_of: Optional[datetime] = None,
    upcoming_limit: int = DEFAULT_UPCOMING_LIMIT,
) -> StatsOverview:
    """Load a user's tasks and build their overview as of ``as_of`` (default: now, UTC).

    Raises TaskStoreUnavailableError when the task data cannot be read.
    """
    reference = as_of or datetime.now(timezone.utc)
    snapshots = load_task_snapshots(store, user_id)
    logger.debug("Building stats overview for user %s from %d tasks", user_id, len(snapshots))
    return build_stats_overview(snapshots, reference, upcoming_limit=upcoming_limit)
