"""Unit tests for the XP ledger (trajectory/gamification/ledger.py)"""
from datetime import timedelta

import pytest

from trajectory.exceptions import (
    DuplicateNoteError,
    DuplicateRewardError,
    RecordNotFoundError,
    ValidationError,
)
from trajectory.gamification.decay import XpDecayCalculator
from trajectory.gamification.ledger import UserLedger
from trajectory.models.progression import Habit, HabitCheckResult, UserStats, XpSource

DONE = HabitCheckResult.DONE
MISSED = HabitCheckResult.MISSED


# ============================================================================
# Habit Checks
# ============================================================================

class TestHabitChecks:
    """Test rewards, penalties and anti-cheat for habits"""

    def test_done_rewards_xp(self, ledger, run_habit, today):
        """Test DONE grants difficulty x 10"""
        result = ledger.check_habit(run_habit, today, DONE)

        assert result.transaction.amount == 30
        assert result.user_stats.total_xp == 30
        assert ledger.user_stats.total_xp == 30
        assert result.activity_log.xp_gained == 30
        assert len(result.activity_log.habit_checks) == 1

    def test_duplicate_done_rejected(self, ledger, run_habit, today):
        """Test a habit cannot be rewarded twice on one date"""
        ledger.check_habit(run_habit, today, DONE)

        with pytest.raises(DuplicateRewardError) as exc_info:
            ledger.check_habit(run_habit, today, DONE)

        assert exc_info.value.entity == "Run"
        assert ledger.user_stats.total_xp == 30
        assert len(ledger.get_activity_log(today).habit_checks) == 1

    def test_duplicate_done_allowed_on_another_date(self, ledger, run_habit, today):
        """Test the conflict is scoped to one date"""
        ledger.check_habit(run_habit, today - timedelta(days=1), DONE)
        ledger.check_habit(run_habit, today, DONE)

        assert ledger.user_stats.total_xp == 60

    def test_missed_after_done_is_recorded(self, ledger, run_habit, today):
        """Test a MISSED re-check is recorded and penalized"""
        ledger.check_habit(run_habit, today, DONE)
        result = ledger.check_habit(run_habit, today, MISSED)

        assert result.transaction.amount == -15
        assert ledger.user_stats.total_xp == 15
        assert len(result.activity_log.habit_checks) == 2
        # Penalties never reduce the gained total the cap is measured on
        assert result.activity_log.xp_gained == 30

    def test_missed_penalty_floors_at_zero(self, ledger, read_habit, today):
        """Test total XP never goes negative"""
        result = ledger.check_habit(read_habit, today, MISSED)

        assert result.transaction.amount == -30
        assert result.user_stats.total_xp == 0

    def test_missing_arguments(self, ledger, run_habit, today):
        """Test None arguments are invalid input"""
        with pytest.raises(ValidationError):
            ledger.check_habit(None, today, DONE)
        with pytest.raises(ValidationError):
            ledger.check_habit(run_habit, None, DONE)

    def test_plain_string_result(self, ledger, run_habit, today):
        """Test a plain result value is accepted and credited to the ledger stats"""
        result = ledger.check_habit(run_habit, today, "DONE")

        assert result.transaction.amount == 30
        assert ledger.user_stats.total_xp == 30
        assert result.activity_log.habit_checks[0].result == DONE

    def test_unknown_result_leaves_state_untouched(self, ledger, run_habit, days_ago, today):
        """Test an unknown result is rejected before decay or history are written"""
        ledger.check_habit(run_habit, days_ago(31), DONE, user_stats=UserStats(total_xp=1000, level=5))
        history_before = ledger.xp_history()
        stats_before = ledger.user_stats

        with pytest.raises(ValidationError) as exc_info:
            ledger.check_habit(run_habit, today, "BOGUS")

        assert exc_info.value.field == "result"
        assert ledger.xp_history() == history_before
        assert ledger.user_stats == stats_before
        assert ledger.last_activity_date == days_ago(31)

    def test_history_records_applied_transactions(self, ledger, run_habit, today):
        """Test applied transactions land in the XP history"""
        ledger.check_habit(run_habit, today, DONE)

        history = ledger.xp_history()
        assert len(history) == 1
        assert history[0].xp_change == 30
        assert history[0].source == XpSource.HABIT


# ============================================================================
# Daily Cap
# ============================================================================

class TestDailyCap:
    """Test the 100 XP daily gain ceiling"""

    def test_third_reward_clamped(self, ledger, today):
        """Test 30/40/40 becomes 30/40/30"""
        first = ledger.check_habit(Habit(name="A", difficulty=3), today, DONE)
        second = ledger.check_habit(Habit(name="B", difficulty=4), today, DONE)
        third = ledger.check_habit(Habit(name="C", difficulty=4), today, DONE)

        assert [first.transaction.amount, second.transaction.amount, third.transaction.amount] == [30, 40, 30]
        assert "capped from 40 to 30 due to daily limit" in third.transaction.reason
        assert ledger.get_activity_log(today).xp_gained == 100
        assert ledger.user_stats.total_xp == 100

    def test_reward_after_cap_is_zero(self, ledger, today):
        """Test rewards past the cap are recorded with 0 XP"""
        for name in ("A", "B"):
            ledger.check_habit(Habit(name=name, difficulty=5), today, DONE)

        result = ledger.check_habit(Habit(name="C", difficulty=2), today, DONE)

        assert result.transaction.amount == 0
        assert result.transaction.reason.startswith("Daily XP cap reached (100 XP).")
        assert len(result.activity_log.habit_checks) == 3
        assert ledger.user_stats.total_xp == 100

    def test_penalties_not_capped(self, ledger, today):
        """Test penalties apply even when the cap is reached"""
        for name in ("A", "B"):
            ledger.check_habit(Habit(name=name, difficulty=5), today, DONE)

        result = ledger.check_habit(Habit(name="C", difficulty=1), today, MISSED)

        assert result.transaction.amount == -15
        assert ledger.user_stats.total_xp == 85

    def test_custom_daily_limit(self, today):
        """Test a ledger built with a smaller limit"""
        ledger = UserLedger(user_id="1", daily_limit=25)
        result = ledger.check_habit(Habit(name="A", difficulty=3), today, DONE)
        assert result.transaction.amount == 25


# ============================================================================
# Decay Integration
# ============================================================================

class TestDecayOnCheck:
    """Test decay is applied before the first check after a gap"""

    def test_decay_applied_before_reward(self, ledger, days_ago, today):
        """Test inactivity decay precedes the habit transaction"""
        start_stats = UserStats(total_xp=1000, level=5)
        ledger.check_habit(Habit(name="A", difficulty=1), days_ago(6), DONE, user_stats=start_stats)
        # 1010 XP going into a 6-day gap
        result = ledger.check_habit(Habit(name="A", difficulty=1), today, DONE)

        assert result.decay_transaction is not None
        assert result.decay_transaction.amount == -(50 + 48 + 45)
        assert result.user_stats.total_xp == 1010 - 143 + 10

        sources = [entry.source for entry in ledger.xp_history()]
        assert sources == [XpSource.HABIT, XpSource.DECAY, XpSource.HABIT]

    def test_no_decay_within_threshold(self, ledger, run_habit, days_ago, today):
        ledger.check_habit(run_habit, days_ago(3), DONE)
        result = ledger.check_habit(run_habit, today, DONE)
        assert result.decay_transaction is None

    def test_backdated_check_does_not_decay(self, ledger, run_habit, days_ago, today):
        """Test checks for earlier dates neither decay nor move last activity back"""
        ledger.check_habit(run_habit, today, DONE)
        result = ledger.check_habit(run_habit, days_ago(10), DONE)

        assert result.decay_transaction is None
        assert ledger.last_activity_date == today

    def test_custom_decay_calculator(self, days_ago, today):
        ledger = UserLedger(user_id="1", decay_calculator=XpDecayCalculator(1, 0.5))
        ledger.check_habit(Habit(name="A", difficulty=5), days_ago(2), DONE)
        result = ledger.check_habit(Habit(name="A", difficulty=5), today, DONE)
        assert result.decay_transaction.amount == -25


# ============================================================================
# Goal Notes
# ============================================================================

class TestGoalNotes:
    """Test goal notes, per-goal cap and shared daily cap"""

    def test_note_grants_requested_xp(self, ledger, goal, today):
        ledger.add_goal(goal)
        result = ledger.add_goal_note(goal, today, "Studied verbs", 8)

        assert result.transaction.amount == 8
        assert result.transaction.source == XpSource.GOAL
        assert result.note.points == 8
        assert ledger.user_stats.total_xp == 8
        assert ledger.get_activity_log(today).xp_gained == 8

    def test_per_goal_cap(self, ledger, goal, today):
        """Test goal XP is limited to 10 per goal per day"""
        ledger.add_goal(goal)
        result = ledger.add_goal_note(goal, today, "Long session", 25)

        assert result.transaction.amount == 10
        assert result.note.points == 10
        assert "requested 25, capped due to daily limits" in result.transaction.reason

    def test_shared_daily_cap(self, ledger, goal, today):
        """Test goal XP draws on the same daily budget as habits"""
        ledger.add_goal(goal)
        for name in ("A", "B"):
            ledger.check_habit(Habit(name=name, difficulty=5), today, DONE)

        result = ledger.add_goal_note(goal, today, "Still noting", 5)

        assert result.transaction.amount == 0
        assert result.note.points == 0
        assert "XP capped at 0" in result.transaction.reason
        assert ledger.user_stats.total_xp == 100

    def test_goal_xp_reduces_habit_capacity(self, ledger, goal, today):
        ledger.add_goal(goal)
        ledger.add_goal_note(goal, today, "Note", 10)
        ledger.check_habit(Habit(name="A", difficulty=5), today, DONE)
        result = ledger.check_habit(Habit(name="B", difficulty=5), today, DONE)

        assert result.transaction.amount == 40
        assert ledger.get_activity_log(today).xp_gained == 100

    def test_duplicate_note_rejected(self, ledger, goal, today):
        ledger.add_goal(goal)
        ledger.add_goal_note(goal, today, "First", 5)

        with pytest.raises(DuplicateNoteError):
            ledger.add_goal_note(goal, today, "Second", 5)

        assert ledger.user_stats.total_xp == 5

    def test_unknown_goal(self, ledger, goal, today):
        with pytest.raises(RecordNotFoundError):
            ledger.add_goal_note(goal, today, "Note", 5)

    @pytest.mark.parametrize("text,xp", [("", 5), ("   ", 5), ("ok", -1)])
    def test_invalid_note_input(self, ledger, goal, today, text, xp):
        ledger.add_goal(goal)
        with pytest.raises(ValidationError):
            ledger.add_goal_note(goal, today, text, xp)

    def test_duplicate_goal_title(self, ledger, goal):
        ledger.add_goal(goal)
        with pytest.raises(ValidationError):
            ledger.add_goal(goal)

    def test_progress(self, ledger, goal, days_ago, today):
        ledger.add_goal(goal)
        ledger.add_goal_note(goal, days_ago(1), "Day one", 10)
        ledger.add_goal_note(goal, today, "Day two", 10)

        assert ledger.goals.get_accumulated_points(goal) == 20
        assert ledger.goals.calculate_progress(goal) == 20.0
        assert [n.note_date for n in ledger.all_goal_notes()] == [days_ago(1), today]

    def test_notes_do_not_trigger_decay(self, ledger, goal, days_ago, today):
        """Test goal notes leave last activity untouched"""
        ledger.add_goal(goal)
        ledger.add_goal_note(goal, today, "Note", 5)
        assert ledger.last_activity_date is None
