"""
Behavior drift detection

Compares behavior snapshots taken at least 14 days apart and classifies
the long-horizon movement as IMPROVEMENT, DECLINE, BURNOUT or STAGNATION.

Metric changes:
- averageDailyXp: percent change
- habitCompletionRate, streakStability, burnoutRiskScore, goalEngagementRate: point change
- activeGoalCount: absolute change
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence
import logging

from trajectory import config
from trajectory.exceptions import ValidationError
from trajectory.gamification.ledger import UserLedger
from trajectory.gamification.streak_system import calculate_streak
from trajectory.models.analytics import (
    BehaviorSnapshot,
    DriftEvent,
    DriftSeverity,
    DriftType,
)
from trajectory.models.progression import HabitCheckResult
from trajectory.services.burnout_detection import detect_burnout
from trajectory.services.trend_analysis import analyze_trend

logger = logging.getLogger(__name__)

MIN_CHANGE_THRESHOLD = 10.0
MIN_DAYS_FOR_DRIFT = 14
BURNOUT_CHANGE_THRESHOLD = 15.0
COMPLETION_CHANGE_THRESHOLD = 5.0
STAGNATION_FACTOR = 1.5
HIGH_SEVERITY_CHANGE = 30.0
MEDIUM_SEVERITY_CHANGE = 15.0

OUTLOOK = {
    DriftType.IMPROVEMENT: "This suggests positive behavioral momentum.",
    DriftType.DECLINE: "This may indicate a need for intervention to prevent further decline.",
    DriftType.BURNOUT: "Burnout indicators suggest the need to reduce effort intensity.",
    DriftType.STAGNATION: "Stagnation suggests the need for new challenges or goals to re-energize progress.",
}


# ============================================================================
# Drift Detection
# ============================================================================

def detect_drift(
    earlier: BehaviorSnapshot,
    later: BehaviorSnapshot,
    detection_date: date,
) -> Optional[DriftEvent]:
    """
    Classify the change between two snapshots

    Returns None when the snapshots are under 14 days apart or no metric
    moved by at least 10 (percent or points).
    """
    if earlier is None or later is None or detection_date is None:
        raise ValidationError("Both snapshots and a detection date are required", field="snapshot")

    days_between = (later.snapshot_date - earlier.snapshot_date).days
    if days_between < MIN_DAYS_FOR_DRIFT:
        return None

    changes = calculate_metric_changes(earlier, later)
    if not any(abs(change) >= MIN_CHANGE_THRESHOLD for change in changes.values()):
        return None

    drift_type = _classify(changes)
    severity = _severity(changes)
    explanation = _explain(drift_type, severity, changes, days_between)

    logger.info(f"Detected {drift_type.value} drift ({severity.value}) over {days_between} days")

    return DriftEvent(
        drift_type=drift_type,
        severity=severity,
        earlier=earlier,
        later=later,
        detected_on=detection_date,
        metric_changes=changes,
        explanation=explanation,
        days_between=days_between,
    )


def detect_drift_over_time(snapshots: Sequence[BehaviorSnapshot], detection_date: date) -> List[DriftEvent]:
    """Drift events between each consecutive pair of snapshots"""
    if not snapshots or len(snapshots) < 2:
        return []

    events = []
    for earlier, later in zip(snapshots, snapshots[1:]):
        event = detect_drift(earlier, later, detection_date)
        if event is not None:
            events.append(event)
    return events


def calculate_metric_changes(earlier: BehaviorSnapshot, later: BehaviorSnapshot) -> Dict[str, float]:
    if earlier.average_daily_xp > 0:
        xp_change = (later.average_daily_xp - earlier.average_daily_xp) / earlier.average_daily_xp * 100.0
    else:
        xp_change = 100.0 if later.average_daily_xp > 0 else 0.0

    return {
        "averageDailyXp": xp_change,
        "habitCompletionRate": later.habit_completion_rate - earlier.habit_completion_rate,
        "streakStability": later.streak_stability - earlier.streak_stability,
        "burnoutRiskScore": later.burnout_risk_score - earlier.burnout_risk_score,
        "activeGoalCount": float(later.active_goal_count - earlier.active_goal_count),
        "goalEngagementRate": later.goal_engagement_rate - earlier.goal_engagement_rate,
    }


def _classify(changes: Dict[str, float]) -> DriftType:
    xp_change = changes["averageDailyXp"]
    burnout_change = changes["burnoutRiskScore"]
    completion_change = changes["habitCompletionRate"]

    if burnout_change >= BURNOUT_CHANGE_THRESHOLD and burnout_change > abs(xp_change):
        return DriftType.BURNOUT
    if xp_change > MIN_CHANGE_THRESHOLD and completion_change > COMPLETION_CHANGE_THRESHOLD:
        return DriftType.IMPROVEMENT
    if xp_change < -MIN_CHANGE_THRESHOLD and completion_change < -COMPLETION_CHANGE_THRESHOLD:
        return DriftType.DECLINE
    if max(abs(change) for change in changes.values()) < MIN_CHANGE_THRESHOLD * STAGNATION_FACTOR:
        return DriftType.STAGNATION
    if xp_change < 0 and completion_change < 0:
        return DriftType.DECLINE
    return DriftType.IMPROVEMENT


def _severity(changes: Dict[str, float]) -> DriftSeverity:
    largest = max(abs(change) for change in changes.values())
    if largest >= HIGH_SEVERITY_CHANGE:
        return DriftSeverity.HIGH
    if largest >= MEDIUM_SEVERITY_CHANGE:
        return DriftSeverity.MEDIUM
    return DriftSeverity.LOW


def _explain(drift_type: DriftType, severity: DriftSeverity, changes: Dict[str, float], days: int) -> str:
    parts = [
        f"Detected {drift_type.value.lower()} drift ({severity.value.lower()} severity) over {days} days."
    ]

    key_changes = []
    xp_change = changes["averageDailyXp"]
    if abs(xp_change) >= MIN_CHANGE_THRESHOLD:
        direction = "increased" if xp_change > 0 else "decreased"
        key_changes.append(f"average daily XP {direction} by {abs(xp_change):.1f}%")

    completion_change = changes["habitCompletionRate"]
    if abs(completion_change) >= COMPLETION_CHANGE_THRESHOLD:
        if completion_change > 0:
            key_changes.append(f"habit completion rate improved by +{completion_change:.1f} points")
        else:
            key_changes.append(f"habit completion rate declined by {abs(completion_change):.1f} points")

    burnout_change = changes["burnoutRiskScore"]
    if abs(burnout_change) >= MIN_CHANGE_THRESHOLD:
        if burnout_change > 0:
            key_changes.append(f"burnout risk increased by +{burnout_change:.1f} points")
        else:
            key_changes.append(f"burnout risk decreased by {abs(burnout_change):.1f} points")

    if key_changes:
        parts.append(f"Key changes: {'; '.join(key_changes)}.")

    parts.append(OUTLOOK[drift_type])
    return " ".join(parts)


# ============================================================================
# Snapshot Building
# ============================================================================

def build_behavior_snapshot(
    ledger: UserLedger,
    current_date: date,
    window_days: int = config.SIMULATION_WINDOW_DAYS,
) -> BehaviorSnapshot:
    """
    Aggregate a ledger's trailing window into a BehaviorSnapshot

    - average daily XP: mean gained XP over days with gains
    - habit completion rate: DONE share of checks in the window
    - streak stability: mean current/longest streak ratio over habits
    - burnout risk: current burnout warning severity
    - active goals: goals whose target date has not passed
    - goal engagement: share of active goals with a note in the window
    """
    if ledger is None or current_date is None:
        raise ValidationError("Ledger and current date are required", field="ledger")
    if window_days <= 0:
        raise ValidationError("Window must be positive", field="window_days", value=window_days)

    window_start = current_date - timedelta(days=window_days)
    logs = [log for log in ledger.activity_logs() if window_start < log.log_date <= current_date]

    gained = [log.xp_gained for log in logs if log.xp_gained > 0]
    average_daily_xp = sum(gained) / len(gained) if gained else 0.0

    checks = [check for log in logs for check in log.habit_checks]
    done = sum(1 for check in checks if check.result == HabitCheckResult.DONE)
    completion_rate = done / len(checks) * 100.0 if checks else 0.0

    all_checks = ledger.all_habit_checks()
    ratios = []
    for habit in ledger.all_habits():
        streak = calculate_streak(habit, all_checks, current_date)
        if streak.longest_streak > 0:
            ratios.append(streak.current_streak / streak.longest_streak)
    streak_stability = sum(ratios) / len(ratios) * 100.0 if ratios else 0.0

    history = ledger.xp_history()
    trend = analyze_trend(history, config.TREND_LOOKBACK_DAYS, current_date)
    warning = detect_burnout(trend, history, ledger.state.activity_logs, ledger.daily_limit, current_date)

    active_goals = [goal for goal in ledger.goals.list_goals() if goal.is_active(current_date)]
    engaged = sum(
        1 for goal in active_goals
        if any(window_start < note.note_date <= current_date for note in ledger.goals.get_goal_notes(goal))
    )
    engagement_rate = engaged / len(active_goals) * 100.0 if active_goals else 0.0

    return BehaviorSnapshot(
        snapshot_date=current_date,
        average_daily_xp=average_daily_xp,
        habit_completion_rate=completion_rate,
        streak_stability=streak_stability,
        burnout_risk_score=float(warning.severity),
        active_goal_count=len(active_goals),
        goal_engagement_rate=engagement_rate,
    )
