"""Rounding and calendar-day helpers shared by the stats services."""
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero, unlike the built-in banker's ``round``."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(value: float, total: float) -> float:
    """Share of ``value`` in ``total`` as a percent with one decimal, 0 for an empty total."""
    if not total:
        return 0.0
    return min(100.0, max(0.0, round_half_up(value / total * 100, 1)))


def utc_day_start(moment: datetime | date) -> datetime:
    """Midnight UTC of the calendar day containing ``moment``.

    Naive datetimes are read as UTC; plain dates map to their own midnight.
    """
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        day = moment.astimezone(timezone.utc).date()
    else:
        day = moment
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
