"""
Goal consistency and progress

Consistency score (0-100) = activity score (0-50) + gap score (0-50):
- activity score = min(50, 50 x active_days / days_since_goal_start)
- gap score = 50 - 5 x average gap length (floored at 0); only gaps longer
  than one day count
"""

from datetime import date
from typing import Iterable, List
import logging

from trajectory.exceptions import ValidationError
from trajectory.models.analytics import GoalConsistency
from trajectory.models.progression import Goal, GoalNote

logger = logging.getLogger(__name__)

MAX_ACTIVITY_SCORE = 50.0
MAX_GAP_SCORE = 50.0
GAP_DAY_PENALTY = 5.0


def calculate_consistency(goal: Goal, notes: Iterable[GoalNote], current_date: date) -> GoalConsistency:
    """Score how regularly notes were added to a goal"""
    if goal is None or notes is None or current_date is None:
        raise ValidationError("Goal, notes and current date are required", field="goal")

    relevant: List[GoalNote] = sorted(
        (note for note in notes if note.goal == goal),
        key=lambda note: note.note_date,
    )
    if not relevant:
        return GoalConsistency(
            goal=goal,
            consistency_score=0.0,
            active_days=0,
            total_notes=0,
            average_gap_days=0.0,
        )

    total_gap_days = 0
    gap_count = 0
    for previous, current in zip(relevant, relevant[1:]):
        days_between = (current.note_date - previous.note_date).days
        if days_between > 1:
            total_gap_days += days_between - 1
            gap_count += 1

    average_gap = total_gap_days / gap_count if gap_count else 0.0

    days_since_start = max(1, (current_date - goal.start_date).days)
    active_days = len(relevant)

    activity_score = min(MAX_ACTIVITY_SCORE, active_days / days_since_start * MAX_ACTIVITY_SCORE)
    gap_score = MAX_GAP_SCORE
    if average_gap > 0:
        gap_score = max(0.0, MAX_GAP_SCORE - average_gap * GAP_DAY_PENALTY)

    return GoalConsistency(
        goal=goal,
        consistency_score=activity_score + gap_score,
        active_days=active_days,
        total_notes=len(relevant),
        average_gap_days=average_gap,
    )


def calculate_accumulated_points(notes: Iterable[GoalNote]) -> int:
    return sum(note.points for note in notes)


def calculate_goal_progress(goal: Goal, accumulated_points: int) -> float:
    """Percent of total progress points reached, clamped to 0-100"""
    if accumulated_points < 0:
        raise ValidationError(
            "Accumulated points cannot be negative",
            field="accumulated_points",
            value=accumulated_points,
        )
    progress = accumulated_points / goal.total_progress_points * 100.0
    return min(100.0, max(0.0, progress))
