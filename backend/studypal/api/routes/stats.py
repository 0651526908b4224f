"""Stats overview API routes."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from studypal.api.schemas.stats import (
    DayProgress,
    GamificationPayload,
    StatsOverviewResponse,
    StreakPayload,
    TotalsPayload,
    UpcomingTaskPayload,
)
from studypal.core.config import settings
from studypal.db.deps import get_db
from studypal.observability.metrics import log_metric
from studypal.observability.tracing import trace
from studypal.services.stats_overview import StatsOverview, get_stats_overview
from studypal.services.task_store import TaskStore, TaskStoreUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stats/overview", response_model=StatsOverviewResponse, tags=["stats"])
def get_overview(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID"),
    as_of: Optional[datetime] = Query(default=None, description="Reference time; defaults to now"),
    db: Session = Depends(get_db),
) -> StatsOverviewResponse:
    """Return weekly progress, streaks, totals, upcoming tasks and XP for a user."""
    request_id = getattr(http_request.state, "request_id", None)
    start_time = datetime.now(timezone.utc)

    try:
        with trace(
            "stats.overview",
            metadata={
                "route": "/stats/overview",
                "as_of": as_of.isoformat() if as_of else None,
            },
            user_id=str(user_id),
            request_id=request_id,
        ):
            overview = get_stats_overview(
                TaskStore(db),
                user_id,
                as_of=as_of,
                upcoming_limit=settings.upcoming_tasks_limit,
            )
    except TaskStoreUnavailableError as exc:
        logger.warning("Stats overview unavailable for user %s: %s", user_id, exc)
        log_metric("stats.overview.unavailable", 1, metadata={"user_id": str(user_id)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Task data is temporarily unavailable",
        ) from exc

    latency_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    log_metric("stats.overview.success", 1, metadata={"user_id": str(user_id)})
    log_metric("stats.overview.tasks_count", overview.totals.total_tasks, metadata={"user_id": str(user_id)})
    log_metric("stats.overview.latency_ms", latency_ms, metadata={"user_id": str(user_id)})

    return _serialize_overview(overview, request_id or "")


def _serialize_overview(overview: StatsOverview, request_id: str) -> StatsOverviewResponse:
    totals = overview.totals
    streak = overview.streak
    gamification = overview.gamification

    return StatsOverviewResponse(
        totals=TotalsPayload(
            total_tasks=totals.total_tasks,
            completed_tasks=totals.completed_tasks,
            pending_tasks=totals.pending_tasks,
            overdue_tasks=totals.overdue_tasks,
            focus_hours=totals.focus_hours,
        ),
        completion_rate=overview.completion_rate,
        weekly_completion_rate=overview.weekly_completion_rate,
        weekly_focus_minutes=overview.weekly_focus_minutes,
        weekly_progress=[
            DayProgress(
                date=bucket.date,
                label=bucket.label,
                completed=bucket.completed,
                planned=bucket.planned,
                study_minutes=bucket.study_minutes,
            )
            for bucket in overview.weekly_progress
        ],
        streak_days=overview.streak_days,
        streak=StreakPayload(
            current=streak.current,
            longest=streak.longest,
            last_missed_day=streak.last_missed_day,
        ),
        upcoming_tasks=[
            UpcomingTaskPayload(
                id=task.id,
                title=task.title,
                course=task.course,
                due_date=task.due_date,
                priority=task.priority,
                status=task.status,
                estimated_hours=task.estimated_hours,
                overdue=task.overdue,
            )
            for task in overview.upcoming_tasks
        ],
        gamification=GamificationPayload(
            xp=gamification.xp,
            level=gamification.level,
            xp_per_completion=gamification.xp_per_completion,
            xp_per_level=gamification.xp_per_level,
            xp_into_level=gamification.xp_into_level,
            xp_to_next_level=gamification.xp_to_next_level,
            progress_percent=gamification.progress_percent,
            achievements=list(gamification.achievements),
        ),
        request_id=request_id,
    )
