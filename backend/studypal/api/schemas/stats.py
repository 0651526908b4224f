"""Schemas for the stats overview endpoint."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TotalsPayload(CamelModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    focus_hours: float


class DayProgress(CamelModel):
    date: datetime
    label: str
    completed: int
    planned: int
    study_minutes: int


class StreakPayload(CamelModel):
    current: int
    longest: int
    last_missed_day: Optional[datetime]


class UpcomingTaskPayload(CamelModel):
    id: UUID
    title: str
    course: Optional[str]
    due_date: datetime
    priority: str
    status: str
    estimated_hours: float
    overdue: bool


class GamificationPayload(CamelModel):
    xp: int
    level: int
    xp_per_completion: int
    xp_per_level: int
    xp_into_level: int
    xp_to_next_level: int
    progress_percent: int
    achievements: List[str]


class StatsOverviewResponse(CamelModel):
    totals: TotalsPayload
    completion_rate: float
    weekly_completion_rate: float
    weekly_focus_minutes: int
    weekly_progress: List[DayProgress]
    streak_days: int
    streak: StreakPayload
    upcoming_tasks: List[UpcomingTaskPayload]
    gamification: GamificationPayload
    request_id: str
