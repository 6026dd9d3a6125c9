"""
Gamification core for trajectory

This package owns every XP movement:
- XP and leveling curve
- Inactivity decay
- Habit and goal ledgers with daily caps and anti-cheat rules
- Habit streaks
"""

from trajectory.gamification.xp_system import calculate_level, calculate_level_from_xp, get_xp_required_for_level
from trajectory.gamification.decay import XpDecayCalculator
from trajectory.gamification.ledger import UserLedger
from trajectory.gamification.ledger_store import ledger_registry
from trajectory.gamification.streak_system import calculate_streak

__all__ = [
    "calculate_level",
    "calculate_level_from_xp",
    "get_xp_required_for_level",
    "XpDecayCalculator",
    "UserLedger",
    "ledger_registry",
    "calculate_streak",
]
