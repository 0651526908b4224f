"""XP, levels and achievement badges derived from completed work."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Tuple

from studypal.services.stats_helpers import round_half_up
from studypal.services.streaks import StreakState

XP_PER_COMPLETION = 60
XP_PER_LEVEL = 600
FALLBACK_ACHIEVEMENT = "Keep the momentum going!"


@dataclass(frozen=True)
class AchievementContext:
    completed_tasks: int
    weekly_completed: int
    streak: StreakState


AchievementRule = Tuple[Callable[[AchievementContext], bool], Callable[[AchievementContext], str]]

# Evaluated in order; every matching rule contributes one badge.
ACHIEVEMENT_RULES: Tuple[AchievementRule, ...] = (
    (lambda ctx: ctx.streak.current >= 3, lambda ctx: f"🔥 {ctx.streak.current}-day streak"),
    (lambda ctx: ctx.weekly_completed >= 5, lambda ctx: "✅ Closed 5+ tasks this week"),
    (lambda ctx: ctx.completed_tasks >= 15, lambda ctx: "🏅 Completed 15 tasks overall"),
)


@dataclass(frozen=True)
class GamificationState:
    xp: int
    level: int
    xp_into_level: int
    xp_to_next_level: int
    progress_percent: int
    achievements: List[str] = field(default_factory=list)
    xp_per_completion: int = XP_PER_COMPLETION
    xp_per_level: int = XP_PER_LEVEL


def evaluate_achievements(context: AchievementContext) -> List[str]:
    earned = [message(context) for predicate, message in ACHIEVEMENT_RULES if predicate(context)]
    return earned or [FALLBACK_ACHIEVEMENT]


def compute_gamification(completed_tasks: int, streak: StreakState, weekly_completed: int) -> GamificationState:
    xp = max(completed_tasks, 0) * XP_PER_COMPLETION
    xp_into_level = xp % XP_PER_LEVEL
    # A level boundary leaves a full fresh level to earn.
    xp_to_next_level = XP_PER_LEVEL - xp_into_level

    context = AchievementContext(
        completed_tasks=completed_tasks,
        weekly_completed=weekly_completed,
        streak=streak,
    )
    return GamificationState(
        xp=xp,
        level=xp // XP_PER_LEVEL + 1,
        xp_into_level=xp_into_level,
        xp_to_next_level=xp_to_next_level,
        progress_percent=int(round_half_up(xp_into_level / XP_PER_LEVEL * 100)),
        achievements=evaluate_achievements(context),
    )
