"""Unit tests for burnout detection"""
from datetime import timedelta

import pytest

from trajectory.exceptions import ValidationError
from trajectory.models.analytics import Trend
from trajectory.models.progression import DailyActivityLog, XpHistoryEntry, XpSource
from trajectory.services.burnout_detection import detect_burnout


def _logs(today, xp_by_days_ago):
    return {
        today - timedelta(days=d): DailyActivityLog(log_date=today - timedelta(days=d), xp_gained=xp)
        for d, xp in xp_by_days_ago.items()
    }


def _decay(day):
    return XpHistoryEntry(entry_date=day, xp_change=-40, source=XpSource.DECAY)


def test_no_signals(today):
    """Test a calm history gives no warning"""
    warning = detect_burnout(Trend.STABLE, [], _logs(today, {1: 40, 0: 50}), 100, today)

    assert warning.is_active is False
    assert warning.severity == 0
    assert warning.risk_factors == ()


def test_declining_alone_triggers_warning(today):
    """Test a declining trend alone reaches the threshold of 30"""
    warning = detect_burnout(Trend.DECLINING, [], {}, 100, today)

    assert warning.is_active is True
    assert warning.severity == 30
    assert len(warning.risk_factors) == 1


def test_recent_decay_alone_is_below_threshold(today):
    """Test recent decay adds 25, not enough on its own"""
    warning = detect_burnout(Trend.STABLE, [_decay(today - timedelta(days=2))], {}, 100, today)

    assert warning.severity == 25
    assert warning.is_active is False


def test_old_decay_ignored(today):
    warning = detect_burnout(Trend.STABLE, [_decay(today - timedelta(days=8))], {}, 100, today)
    assert warning.severity == 0


def test_cap_frequency(today):
    """Test hitting the cap on >= 70% of active days adds 20"""
    logs = _logs(today, {3: 100, 2: 100, 1: 100, 0: 50})

    warning = detect_burnout(Trend.STABLE, [], logs, 100, today)

    assert warning.severity == 20
    assert "75%" in warning.risk_factors[0]


def test_all_signals_capped_at_100(today):
    """Test every contribution together: 30 + 25 + 20 + 25"""
    logs = _logs(today, {d: 100 for d in range(0, 10)})
    history = [_decay(today - timedelta(days=1))]

    warning = detect_burnout(Trend.DECLINING, history, logs, 100, today)

    assert warning.severity == 100
    assert warning.is_active is True
    assert len(warning.risk_factors) == 4


def test_accepts_iterable_of_logs(today):
    logs = list(_logs(today, {2: 100, 1: 100, 0: 100}).values())
    warning = detect_burnout(Trend.STABLE, [], logs, 100, today)
    assert warning.severity == 20


def test_invalid_arguments(today):
    with pytest.raises(ValidationError):
        detect_burnout(None, [], {}, 100, today)
    with pytest.raises(ValidationError):
        detect_burnout(Trend.STABLE, [], {}, 0, today)
