"""Completion streaks over the weekly window."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from studypal.services.weekly_progress import DayBucket


@dataclass(frozen=True)
class StreakState:
    current: int
    longest: int
    last_missed_day: Optional[datetime]


def compute_streak(buckets: Sequence[DayBucket]) -> StreakState:
    """Derive streaks from day buckets ordered oldest first.

    ``longest`` is the best run anywhere in the window, ``current`` only the
    unbroken run that ends on the last bucket.
    """
    longest = 0
    running = 0
    last_missed: Optional[datetime] = None
    for bucket in buckets:
        if bucket.completed == 0:
            last_missed = bucket.date
            longest = max(longest, running)
            running = 0
        else:
            running += 1
    longest = max(longest, running)

    current = 0
    for bucket in reversed(buckets):
        if bucket.completed == 0:
            break
        current += 1

    return StreakState(current=current, longest=longest, last_missed_day=last_missed)
