"""
AnalyticsService - Ledger Analytics

Wires the pure analytics calculators to one user's ledger.
Every call recomputes from the ledger's current state; nothing is cached.
"""

import logging
from datetime import date
from typing import Any, Dict

from trajectory import config
from trajectory.gamification.ledger import UserLedger
from trajectory.gamification.streak_system import calculate_streak
from trajectory.gamification.xp_system import calculate_level_from_xp
from trajectory.models.analytics import BurnoutWarning, GoalConsistency, HabitStreak, Trend
from trajectory.services.burnout_detection import detect_burnout
from trajectory.services.goal_consistency import calculate_consistency
from trajectory.services.trend_analysis import analyze_trend

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Service for ledger analytics.

    Responsibilities:
    - Streaks for every habit the user has checked
    - Consistency for every registered goal
    - XP trend and burnout warning
    - Combined summary for dashboards
    """

    def __init__(self, ledger: UserLedger):
        """
        Initialize AnalyticsService.

        Args:
            ledger: The user's ledger (read only)
        """
        self.ledger = ledger
        logger.debug(f"AnalyticsService initialized for user {ledger.user_id}")

    def calculate_all_habit_streaks(self, current_date: date) -> Dict[str, HabitStreak]:
        """Streak per habit name"""
        checks = self.ledger.all_habit_checks()
        return {
            habit.name: calculate_streak(habit, checks, current_date)
            for habit in self.ledger.all_habits()
        }

    def calculate_all_goal_consistency(self, current_date: date) -> Dict[str, GoalConsistency]:
        """Consistency per goal title"""
        notes = self.ledger.all_goal_notes()
        return {
            goal.title: calculate_consistency(goal, notes, current_date)
            for goal in self.ledger.goals.list_goals()
        }

    def analyze_xp_trend(
        self,
        current_date: date,
        lookback_days: int = config.TREND_LOOKBACK_DAYS,
    ) -> Trend:
        return analyze_trend(self.ledger.xp_history(), lookback_days, current_date)

    def detect_burnout(self, current_date: date) -> BurnoutWarning:
        trend = self.analyze_xp_trend(current_date)
        return detect_burnout(
            trend,
            self.ledger.xp_history(),
            self.ledger.state.activity_logs,
            self.ledger.daily_limit,
            current_date,
        )

    def generate_summary(self, current_date: date) -> Dict[str, Any]:
        """
        Combined analytics snapshot.

        Returns:
            {
                'total_xp': int,
                'level': dict (see calculate_level_from_xp),
                'xp_trend': str,
                'burnout_warning': BurnoutWarning,
                'habit_streaks': {name: HabitStreak},
                'goal_consistency': {title: GoalConsistency},
                'goal_progress': {title: float}
            }
        """
        stats = self.ledger.user_stats
        summary = {
            "total_xp": stats.total_xp,
            "level": calculate_level_from_xp(stats.total_xp),
            "xp_trend": self.analyze_xp_trend(current_date).value,
            "burnout_warning": self.detect_burnout(current_date),
            "habit_streaks": self.calculate_all_habit_streaks(current_date),
            "goal_consistency": self.calculate_all_goal_consistency(current_date),
            "goal_progress": {
                goal.title: self.ledger.goals.calculate_progress(goal)
                for goal in self.ledger.goals.list_goals()
            },
        }
        logger.info(
            f"Analytics summary for user {self.ledger.user_id}: "
            f"{summary['total_xp']} XP, trend {summary['xp_trend']}"
        )
        return summary
