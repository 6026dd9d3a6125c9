"""Pydantic models for streaks, consistency, burnout and behavior drift"""
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from trajectory.models.progression import Goal, Habit


class HabitStreak(BaseModel):
    """Current and longest run of consecutive DONE days for a habit"""
    model_config = ConfigDict(frozen=True)

    habit: Habit
    current_streak: int = Field(ge=0)
    longest_streak: int = Field(ge=0)
    streak_start_date: Optional[date] = None

    @model_validator(mode='after')
    def longest_covers_current(self) -> 'HabitStreak':
        if self.longest_streak < self.current_streak:
            raise ValueError(
                f"Longest streak ({self.longest_streak}) cannot be shorter than "
                f"current streak ({self.current_streak})"
            )
        return self


class GoalConsistency(BaseModel):
    """Regularity score of a goal's notes"""
    model_config = ConfigDict(frozen=True)

    goal: Goal
    consistency_score: float = Field(ge=0, le=100)
    active_days: int = Field(ge=0)
    total_notes: int = Field(ge=0)
    average_gap_days: float = Field(ge=0)


class Trend(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"


class BurnoutWarning(BaseModel):
    """Composite burnout risk; active once severity reaches the threshold"""
    model_config = ConfigDict(frozen=True)

    is_active: bool
    risk_factors: Tuple[str, ...] = ()
    severity: int = Field(default=0, ge=0, le=100)

    @classmethod
    def none(cls) -> "BurnoutWarning":
        return cls(is_active=False)


class BehaviorSnapshot(BaseModel):
    """Point-in-time aggregate of a user's behavior"""
    model_config = ConfigDict(frozen=True)

    snapshot_date: date
    average_daily_xp: float = Field(ge=0)
    habit_completion_rate: float = Field(ge=0, le=100)
    streak_stability: float = Field(ge=0, le=100)
    burnout_risk_score: float = Field(ge=0, le=100)
    active_goal_count: int = Field(ge=0)
    goal_engagement_rate: float = Field(ge=0, le=100)


class DriftType(str, Enum):
    IMPROVEMENT = "IMPROVEMENT"
    DECLINE = "DECLINE"
    BURNOUT = "BURNOUT"
    STAGNATION = "STAGNATION"


class DriftSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class DriftEvent(BaseModel):
    """Classified change between two snapshots"""
    model_config = ConfigDict(frozen=True)

    drift_type: DriftType
    severity: DriftSeverity
    earlier: BehaviorSnapshot
    later: BehaviorSnapshot
    detected_on: date
    metric_changes: Dict[str, float]
    explanation: str
    days_between: int = Field(ge=0)
