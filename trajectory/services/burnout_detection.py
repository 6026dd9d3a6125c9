"""
Burnout detection

Sums independent risk contributions (capped at 100):
- Declining XP trend: +30
- DECAY-sourced XP loss in the last 7 days: +25
- Daily cap hit on >= 70% of active days in the last 14 days: +20
- Declining trend and capped on more than half the lookback days: +25

The warning is active once severity reaches 30.
"""

from datetime import date, timedelta
from typing import Iterable, List, Mapping, Optional, Union
import logging

from trajectory import config
from trajectory.exceptions import ValidationError
from trajectory.models.analytics import BurnoutWarning, Trend
from trajectory.models.progression import DailyActivityLog, XpHistoryEntry, XpSource

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 14
RECENT_DECAY_DAYS = 7
CAP_FREQUENCY_THRESHOLD = 0.7
WARNING_THRESHOLD = 30
MAX_SEVERITY = 100

DECLINING_TREND_WEIGHT = 30
RECENT_DECAY_WEIGHT = 25
CAP_FREQUENCY_WEIGHT = 20
OVERWORK_DECLINE_WEIGHT = 25


def _logs_by_date(
    activity_logs: Union[Mapping[date, DailyActivityLog], Iterable[DailyActivityLog]]
) -> Mapping[date, DailyActivityLog]:
    if isinstance(activity_logs, Mapping):
        return activity_logs
    return {log.log_date: log for log in activity_logs}


def detect_burnout(
    trend: Trend,
    history: Iterable[XpHistoryEntry],
    activity_logs: Union[Mapping[date, DailyActivityLog], Iterable[DailyActivityLog]],
    daily_limit: int = config.DAILY_XP_LIMIT,
    current_date: Optional[date] = None,
) -> BurnoutWarning:
    """
    Assess burnout risk from trend, decay history and cap saturation

    Args:
        trend: XP trend over the lookback window
        history: Applied XP changes (including DECAY entries)
        activity_logs: Daily logs, as a date mapping or any iterable of logs
        daily_limit: Daily XP cap the logs were recorded under
        current_date: Reference date

    Returns:
        BurnoutWarning with ordered risk factors and severity 0-100
    """
    if trend is None or history is None or activity_logs is None or current_date is None:
        raise ValidationError("Trend, history, activity logs and current date are required", field="trend")
    if daily_limit <= 0:
        raise ValidationError("Daily XP limit must be positive", field="daily_limit", value=daily_limit)

    risk_factors: List[str] = []
    severity = 0

    if trend == Trend.DECLINING:
        risk_factors.append(f"XP trend is declining over the last {LOOKBACK_DAYS} days")
        severity += DECLINING_TREND_WEIGHT

    decay_start = current_date - timedelta(days=RECENT_DECAY_DAYS)
    if any(
        entry.source == XpSource.DECAY and decay_start <= entry.entry_date <= current_date
        for entry in history
    ):
        risk_factors.append(f"Inactivity decay triggered in the last {RECENT_DECAY_DAYS} days")
        severity += RECENT_DECAY_WEIGHT

    logs = _logs_by_date(activity_logs)
    active_days = 0
    cap_days = 0
    for offset in range(LOOKBACK_DAYS, -1, -1):
        log = logs.get(current_date - timedelta(days=offset))
        if log is not None and log.xp_gained > 0:
            active_days += 1
            if log.xp_gained >= daily_limit:
                cap_days += 1

    if active_days > 0:
        cap_frequency = cap_days / active_days
        if cap_frequency >= CAP_FREQUENCY_THRESHOLD:
            risk_factors.append(
                f"Daily XP cap reached on {cap_frequency * 100:.0f}% of active days (potential overwork)"
            )
            severity += CAP_FREQUENCY_WEIGHT

    if trend == Trend.DECLINING and cap_days > LOOKBACK_DAYS // 2:
        risk_factors.append("High activity period followed by decline (possible burnout)")
        severity += OVERWORK_DECLINE_WEIGHT

    severity = min(MAX_SEVERITY, severity)
    is_active = severity >= WARNING_THRESHOLD

    if is_active:
        logger.warning(f"Burnout warning active (severity {severity}): {'; '.join(risk_factors)}")

    return BurnoutWarning(is_active=is_active, risk_factors=tuple(risk_factors), severity=severity)
