"""
XP and Leveling System

Pure calculators for level progression and habit rewards.

Leveling Curve:
- Level 1 covers [0, 100)
- Each next level needs 1.5x the previous requirement (truncated to int)
- Thresholds accumulate: level 2 at 100, level 3 at 250, level 4 at 475, ...

XP Award Rules:
- Habit DONE: difficulty x 10
- Habit MISSED, difficulty <= 2: -15 x difficulty
- Habit MISSED, difficulty >= 3: -5 x difficulty (effort already invested)
"""

from typing import Dict
import logging

from trajectory.exceptions import ValidationError
from trajectory.models.progression import (
    Habit,
    HabitCheckResult,
    XpSource,
    XpTransaction,
)

logger = logging.getLogger(__name__)

BASE_XP_REQUIREMENT = 100
LEVEL_MULTIPLIER = 1.5

REWARD_PER_DIFFICULTY = 10
EASY_MISS_PENALTY = 15
HARD_MISS_PENALTY = 5
EASY_DIFFICULTY_MAX = 2


def _level_walk(total_xp: int) -> Dict[str, int]:
    """Walk the curve until the next threshold exceeds total_xp"""
    level = 1
    level_start = 0
    requirement = BASE_XP_REQUIREMENT

    while total_xp >= level_start + requirement:
        level_start += requirement
        level += 1
        requirement = int(requirement * LEVEL_MULTIPLIER)

    return {"level": level, "level_start": level_start, "requirement": requirement}


def calculate_level(total_xp: int) -> int:
    """Level reached with total_xp; non-decreasing and always >= 1"""
    if total_xp < 0:
        raise ValidationError("XP cannot be negative", field="total_xp", value=total_xp)
    return _level_walk(total_xp)["level"]


def get_xp_required_for_level(level: int) -> int:
    """Total XP needed to reach a level (0 for level 1)"""
    if level < 1:
        raise ValidationError("Level must be at least 1", field="level", value=level)

    total = 0
    requirement = BASE_XP_REQUIREMENT
    for _ in range(1, level):
        total += requirement
        requirement = int(requirement * LEVEL_MULTIPLIER)
    return total


def calculate_level_from_xp(total_xp: int) -> Dict[str, int]:
    """
    Calculate level and progress from total XP

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int,
            'total_xp_for_next_level': int
        }
    """
    if total_xp < 0:
        raise ValidationError("XP cannot be negative", field="total_xp", value=total_xp)

    walk = _level_walk(total_xp)
    xp_in_level = total_xp - walk["level_start"]

    return {
        "current_level": walk["level"],
        "xp_in_current_level": xp_in_level,
        "xp_to_next_level": walk["requirement"] - xp_in_level,
        "total_xp_for_next_level": walk["level_start"] + walk["requirement"],
    }


def calculate_habit_transaction(habit: Habit, result: HabitCheckResult) -> XpTransaction:
    """Base reward or penalty for resolving a habit, before any cap"""
    if habit is None or result is None:
        raise ValidationError("Habit and result are required", field="habit" if habit is None else "result")

    difficulty = habit.difficulty

    if result == HabitCheckResult.DONE:
        return XpTransaction(
            amount=difficulty * REWARD_PER_DIFFICULTY,
            reason=f"Completed habit '{habit.name}' (difficulty {difficulty})",
            source=XpSource.HABIT,
        )

    if difficulty <= EASY_DIFFICULTY_MAX:
        penalty = -EASY_MISS_PENALTY * difficulty
    else:
        penalty = -HARD_MISS_PENALTY * difficulty

    return XpTransaction(
        amount=penalty,
        reason=f"Missed habit '{habit.name}' (difficulty {difficulty})",
        source=XpSource.HABIT,
    )
