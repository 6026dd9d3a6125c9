"""
Streak System

Derives a habit's current and longest streak from its check history.

Rules:
- Consecutive DONE days extend the streak
- A gap of more than one day between DONE checks starts a new streak
- A MISSED check resets the current streak to 0
- The streak is only alive if the last check is DONE and at most one day old
"""

from datetime import date
from typing import Iterable
import logging

from trajectory.exceptions import ValidationError
from trajectory.models.analytics import HabitStreak
from trajectory.models.progression import Habit, HabitCheck, HabitCheckResult

logger = logging.getLogger(__name__)


def calculate_streak(habit: Habit, checks: Iterable[HabitCheck], current_date: date) -> HabitStreak:
    """
    Calculate streak info for one habit

    Args:
        habit: Habit to compute the streak for (other habits' checks are ignored)
        checks: Check history, any order
        current_date: Reference date deciding whether the streak is still alive

    Returns:
        HabitStreak with current/longest lengths and the live streak's start date
    """
    if habit is None or checks is None or current_date is None:
        raise ValidationError("Habit, checks and current date are required", field="habit")

    relevant = sorted(
        (check for check in checks if check.habit == habit),
        key=lambda check: check.check_date,
    )
    if not relevant:
        return HabitStreak(habit=habit, current_streak=0, longest_streak=0)

    current = 0
    longest = 0
    current_start = None
    previous = None

    for check in relevant:
        if check.result == HabitCheckResult.DONE:
            if current == 0:
                current = 1
                current_start = check.check_date
            else:
                gap = (check.check_date - previous.check_date).days
                if gap == 1:
                    current += 1
                elif gap > 1:
                    longest = max(longest, current)
                    current = 1
                    current_start = check.check_date
                # gap == 0: same-day duplicate, ignored
        else:
            longest = max(longest, current)
            current = 0
            current_start = None
        previous = check

    longest = max(longest, current)

    last = relevant[-1]
    if last.result == HabitCheckResult.MISSED or (current_date - last.check_date).days > 1:
        current = 0
        current_start = None

    return HabitStreak(
        habit=habit,
        current_streak=current,
        longest_streak=longest,
        streak_start_date=current_start,
    )
