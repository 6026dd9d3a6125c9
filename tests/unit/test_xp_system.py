"""Unit tests for XP System (trajectory/gamification/xp_system.py)"""
import pytest

from trajectory.exceptions import ValidationError
from trajectory.gamification.xp_system import (
    calculate_level,
    calculate_level_from_xp,
    calculate_habit_transaction,
    get_xp_required_for_level,
)
from trajectory.models.progression import Habit, HabitCheckResult, UserStats, XpSource, XpTransaction


# ============================================================================
# Level Curve Tests
# ============================================================================

@pytest.mark.parametrize("total_xp,expected_level", [
    (0, 1),
    (99, 1),
    (100, 2),
    (249, 2),
    (250, 3),
    (474, 3),
    (475, 4),
])
def test_calculate_level_thresholds(total_xp, expected_level):
    """Test level thresholds 100, 250, 475"""
    assert calculate_level(total_xp) == expected_level


def test_calculate_level_is_non_decreasing():
    """Test more XP never lowers the level"""
    levels = [calculate_level(xp) for xp in range(0, 5000, 37)]
    assert levels == sorted(levels)


def test_calculate_level_negative_xp():
    """Test negative XP is rejected"""
    with pytest.raises(ValidationError):
        calculate_level(-1)


def test_xp_required_for_level():
    """Test cumulative thresholds"""
    assert get_xp_required_for_level(1) == 0
    assert get_xp_required_for_level(2) == 100
    assert get_xp_required_for_level(3) == 250
    assert get_xp_required_for_level(4) == 475


def test_calculate_level_from_xp_progress():
    """Test level progress breakdown"""
    info = calculate_level_from_xp(300)

    assert info["current_level"] == 3
    assert info["xp_in_current_level"] == 50
    assert info["xp_to_next_level"] == 175
    assert info["total_xp_for_next_level"] == 475


# ============================================================================
# Habit Transaction Tests
# ============================================================================

@pytest.mark.parametrize("difficulty,expected", [(1, 10), (3, 30), (5, 50)])
def test_done_reward(difficulty, expected):
    """Test DONE rewards 10 XP per difficulty"""
    tx = calculate_habit_transaction(Habit(name="H", difficulty=difficulty), HabitCheckResult.DONE)
    assert tx.amount == expected
    assert tx.source == XpSource.HABIT


@pytest.mark.parametrize("difficulty,expected", [(1, -15), (2, -30), (3, -15), (5, -25)])
def test_missed_penalty(difficulty, expected):
    """Test easy habits are penalized harder than hard ones"""
    tx = calculate_habit_transaction(Habit(name="H", difficulty=difficulty), HabitCheckResult.MISSED)
    assert tx.amount == expected
    assert tx.is_loss


# ============================================================================
# UserStats Tests
# ============================================================================

def test_apply_transaction_recomputes_level():
    """Test level follows total XP"""
    stats = UserStats.create_new().apply_transaction(XpTransaction(amount=260, reason="bulk"))
    assert stats.total_xp == 260
    assert stats.level == 3


def test_apply_transaction_floors_at_zero():
    """Test XP never goes negative"""
    stats = UserStats(total_xp=10, level=1).apply_transaction(XpTransaction(amount=-30, reason="Missed"))
    assert stats.total_xp == 0
    assert stats.level == 1


def test_stats_level_must_match_xp():
    """Test stats with a level that disagrees with total XP are rejected"""
    with pytest.raises(ValueError):
        UserStats(total_xp=500, level=1)
    assert UserStats(total_xp=500, level=4).level == 4


def test_transaction_requires_reason():
    """Test blank reasons are rejected"""
    with pytest.raises(ValueError):
        XpTransaction(amount=10, reason="  ")
