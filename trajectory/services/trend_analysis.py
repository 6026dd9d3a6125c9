"""
XP trend analysis

Splits the lookback window into two halves of daily XP totals and compares
their averages with a 10% tolerance around the first half.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional
import logging

from trajectory import config
from trajectory.exceptions import ValidationError
from trajectory.models.analytics import Trend
from trajectory.models.progression import XpHistoryEntry

logger = logging.getLogger(__name__)

MIN_DATA_POINTS = 3
STABILITY_THRESHOLD = 0.1


def analyze_trend(
    history: Iterable[XpHistoryEntry],
    lookback_days: int = config.TREND_LOOKBACK_DAYS,
    current_date: Optional[date] = None,
) -> Trend:
    """Direction of XP change over the last lookback_days"""
    if history is None or current_date is None:
        raise ValidationError("History and current date are required", field="current_date")
    if lookback_days <= 0:
        raise ValidationError("Lookback days must be positive", field="lookback_days", value=lookback_days)

    start_date = current_date - timedelta(days=lookback_days)
    recent = [entry for entry in history if start_date <= entry.entry_date <= current_date]

    if len(recent) < MIN_DATA_POINTS:
        return Trend.STABLE

    daily_xp: List[int] = [0] * lookback_days
    for entry in recent:
        days_ago = (current_date - entry.entry_date).days
        index = lookback_days - 1 - days_ago
        if 0 <= index < lookback_days:
            daily_xp[index] += entry.xp_change

    first_size = lookback_days // 2
    second_size = lookback_days - first_size
    first_average = sum(daily_xp[:first_size]) / first_size if first_size else 0.0
    second_average = sum(daily_xp[first_size:]) / second_size

    difference = second_average - first_average
    threshold = abs(first_average) * STABILITY_THRESHOLD

    logger.debug(
        f"Trend over {lookback_days} days: first half avg {first_average:.1f}, "
        f"second half avg {second_average:.1f}"
    )

    if difference > threshold:
        return Trend.IMPROVING
    if difference < -threshold:
        return Trend.DECLINING
    return Trend.STABLE
