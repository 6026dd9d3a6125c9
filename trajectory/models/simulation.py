"""Pydantic models for multi-year trajectory simulation"""
from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from trajectory.models.analytics import BurnoutWarning
from trajectory.models.progression import Goal, UserStats

DIFFICULTY_LEVELS = (1, 2, 3, 4, 5)


class BurnoutRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class IncomeRange(BaseModel):
    """Projected yearly income band"""
    model_config = ConfigDict(frozen=True)

    low_estimate: int = Field(ge=0)
    expected_estimate: int = Field(ge=0)
    high_estimate: int = Field(ge=0)

    @model_validator(mode='after')
    def ordered(self) -> 'IncomeRange':
        if not self.low_estimate <= self.expected_estimate <= self.high_estimate:
            raise ValueError(
                f"Income range must satisfy low <= expected <= high, got "
                f"{self.low_estimate}/{self.expected_estimate}/{self.high_estimate}"
            )
        return self


class YearlyProjection(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=1)
    projected_xp: int = Field(ge=0)
    projected_level: int = Field(ge=1)
    skill_growth_index: float = Field(ge=0, le=100)
    xp_growth_rate: float


class SimulationInput(BaseModel):
    """
    Snapshot of a user's recent behavior used to seed a simulation

    difficulty_distribution maps difficulty (1-5) to the number of habits at
    that difficulty; missing levels are filled with 0.
    """
    model_config = ConfigDict(frozen=True)

    current_stats: UserStats
    habits_consistency_score: float = Field(ge=0, le=100)
    average_daily_effort: float = Field(ge=0)
    difficulty_distribution: Dict[int, int] = Field(default_factory=dict)
    active_goals: Tuple[Goal, ...] = ()
    burnout_warning: BurnoutWarning = Field(default_factory=BurnoutWarning.none)
    active_days_last_month: int = Field(ge=0, le=31)
    average_streak_length: float = Field(ge=0)
    years_to_simulate: int = Field(ge=1, le=5)

    @field_validator('difficulty_distribution')
    @classmethod
    def validate_distribution(cls, v: Dict[int, int]) -> Dict[int, int]:
        """Only difficulties 1-5 with non-negative counts"""
        for difficulty, count in v.items():
            if difficulty not in DIFFICULTY_LEVELS:
                raise ValueError(f"Invalid difficulty: {difficulty}. Must be 1-5")
            if count < 0:
                raise ValueError(f"Habit count for difficulty {difficulty} cannot be negative")
        return {d: v.get(d, 0) for d in DIFFICULTY_LEVELS}

    @property
    def total_habits(self) -> int:
        return sum(self.difficulty_distribution.values())

    def with_changes(self, **changes: Any) -> "SimulationInput":
        """Validated copy with some fields replaced"""
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return SimulationInput(**values)


class SimulationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    yearly_projections: Tuple[YearlyProjection, ...] = Field(min_length=1)
    average_skill_growth_index: float = Field(ge=0, le=100)
    burnout_risk: BurnoutRisk
    income_range: IncomeRange
    emigration_probability: float = Field(ge=0, le=100)
    explanation: str

    @field_validator('explanation')
    @classmethod
    def validate_explanation(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Simulation explanation cannot be blank")
        return v

    @property
    def final_projection(self) -> YearlyProjection:
        return self.yearly_projections[-1]
