"""
SimulationInput builder

Aggregates a ledger's trailing window (default 30 days, both ends inclusive)
into the snapshot the simulation runs on.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Optional

from trajectory import config
from trajectory.exceptions import ValidationError
from trajectory.gamification.ledger import UserLedger
from trajectory.gamification.streak_system import calculate_streak
from trajectory.models.progression import HabitCheckResult, UserStats
from trajectory.models.simulation import DIFFICULTY_LEVELS, SimulationInput
from trajectory.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

DEFAULT_CONSISTENCY_SCORE = 50.0


class SimulationInputBuilder:
    """Builds SimulationInput from ledger state"""

    def __init__(self, window_days: int = config.SIMULATION_WINDOW_DAYS):
        if window_days <= 0:
            raise ValidationError("Window must be positive", field="window_days", value=window_days)
        self.window_days = window_days

    def build(
        self,
        ledger: UserLedger,
        years_to_simulate: int,
        current_date: date,
        user_stats: Optional[UserStats] = None,
    ) -> SimulationInput:
        """
        Build the simulation snapshot

        Args:
            ledger: The user's ledger
            years_to_simulate: Horizon, 1-5
            current_date: End of the trailing window
            user_stats: Stats to project from (defaults to the ledger's own)
        """
        if ledger is None or current_date is None:
            raise ValidationError("Ledger and current date are required", field="ledger")
        if years_to_simulate is None or not 1 <= years_to_simulate <= 5:
            raise ValidationError(
                "Years to simulate must be between 1 and 5",
                field="years_to_simulate",
                value=years_to_simulate,
            )

        start_date = current_date - timedelta(days=self.window_days)
        stats = ledger.user_stats if user_stats is None else user_stats

        simulation_input = SimulationInput(
            current_stats=stats,
            habits_consistency_score=self._consistency(ledger, start_date, current_date),
            average_daily_effort=self._average_daily_effort(ledger, start_date, current_date),
            difficulty_distribution=self._difficulty_distribution(ledger),
            active_goals=tuple(g for g in ledger.goals.list_goals() if g.is_active(current_date)),
            burnout_warning=AnalyticsService(ledger).detect_burnout(current_date),
            active_days_last_month=self._active_days(ledger, start_date, current_date),
            average_streak_length=self._average_streak(ledger, current_date),
            years_to_simulate=years_to_simulate,
        )
        logger.debug(f"Built simulation input for user {ledger.user_id}: {simulation_input}")
        return simulation_input

    @staticmethod
    def _consistency(ledger: UserLedger, start: date, end: date) -> float:
        """DONE share of checks in the window; neutral 50 without data"""
        checks = [c for c in ledger.all_habit_checks() if start <= c.check_date <= end]
        if not checks:
            return DEFAULT_CONSISTENCY_SCORE
        done = sum(1 for c in checks if c.result == HabitCheckResult.DONE)
        return done * 100.0 / len(checks)

    @staticmethod
    def _average_daily_effort(ledger: UserLedger, start: date, end: date) -> float:
        """Mean net XP over days that ended positive"""
        by_date: Dict[date, int] = defaultdict(int)
        for entry in ledger.xp_history():
            if start <= entry.entry_date <= end:
                by_date[entry.entry_date] += entry.xp_change

        positive = [xp for xp in by_date.values() if xp > 0]
        return sum(positive) / len(positive) if positive else 0.0

    @staticmethod
    def _difficulty_distribution(ledger: UserLedger) -> Dict[int, int]:
        distribution = {difficulty: 0 for difficulty in DIFFICULTY_LEVELS}
        for habit in ledger.all_habits():
            distribution[habit.difficulty] += 1
        return distribution

    @staticmethod
    def _active_days(ledger: UserLedger, start: date, end: date) -> int:
        return sum(
            1 for log in ledger.activity_logs()
            if start <= log.log_date <= end and log.xp_gained > 0
        )

    @staticmethod
    def _average_streak(ledger: UserLedger, current_date: date) -> float:
        habits = ledger.all_habits()
        if not habits:
            return 0.0
        checks = ledger.all_habit_checks()
        streaks = [calculate_streak(habit, checks, current_date) for habit in habits]
        return sum(s.current_streak for s in streaks) / len(streaks)
