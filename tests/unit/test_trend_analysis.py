"""Unit tests for XP trend analysis"""
from datetime import timedelta

import pytest

from trajectory.exceptions import ValidationError
from trajectory.models.analytics import Trend
from trajectory.models.progression import XpHistoryEntry, XpSource
from trajectory.services.trend_analysis import analyze_trend


def _history(today, xp_by_days_ago):
    return [
        XpHistoryEntry(entry_date=today - timedelta(days=d), xp_change=xp, source=XpSource.HABIT)
        for d, xp in xp_by_days_ago.items()
    ]


def test_too_few_points_is_stable(today):
    """Test fewer than three entries defaults to STABLE"""
    history = _history(today, {1: 100, 0: 5})
    assert analyze_trend(history, 14, today) == Trend.STABLE


def test_improving(today):
    """Test a busier second half is IMPROVING"""
    history = _history(today, {12: 10, 10: 10, 3: 50, 2: 50, 1: 50})
    assert analyze_trend(history, 14, today) == Trend.IMPROVING


def test_declining(today):
    """Test a quieter second half is DECLINING"""
    history = _history(today, {13: 60, 12: 60, 11: 60, 2: 10})
    assert analyze_trend(history, 14, today) == Trend.DECLINING


def test_within_tolerance_is_stable(today):
    """Test a change within 10% of the first half is STABLE"""
    history = _history(today, {13: 100, 12: 100, 3: 105, 2: 100})
    assert analyze_trend(history, 14, today) == Trend.STABLE


def test_entries_outside_window_ignored(today):
    history = _history(today, {40: 500, 30: 500, 20: 500})
    assert analyze_trend(history, 14, today) == Trend.STABLE


def test_decay_counts_as_negative_xp(today):
    """Test DECAY losses pull the recent half down"""
    history = _history(today, {13: 40, 12: 40, 11: 40})
    history.append(XpHistoryEntry(entry_date=today, xp_change=-50, source=XpSource.DECAY))
    assert analyze_trend(history, 14, today) == Trend.DECLINING


@pytest.mark.parametrize("lookback", [0, -3])
def test_invalid_lookback(today, lookback):
    with pytest.raises(ValidationError):
        analyze_trend([], lookback, today)


def test_requires_current_date():
    with pytest.raises(ValidationError):
        analyze_trend([], 14)
