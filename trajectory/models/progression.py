"""Pydantic models for the XP ledger"""
from datetime import date
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class HabitCheckResult(str, Enum):
    """Outcome of resolving a habit on a date"""
    DONE = "DONE"
    MISSED = "MISSED"


class XpSource(str, Enum):
    """Where an XP change came from"""
    HABIT = "HABIT"
    GOAL = "GOAL"
    DECAY = "DECAY"


class XpTransaction(BaseModel):
    """Signed XP change with a human-readable reason"""
    model_config = ConfigDict(frozen=True)

    amount: int
    reason: str
    source: XpSource = XpSource.HABIT

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, v: str) -> str:
        """Reason is mandatory"""
        if not v or not v.strip():
            raise ValueError("Transaction reason cannot be blank")
        return v

    @property
    def is_no_op(self) -> bool:
        return self.amount == 0

    @property
    def is_gain(self) -> bool:
        return self.amount > 0

    @property
    def is_loss(self) -> bool:
        return self.amount < 0

    def with_amount(self, amount: int, reason: str) -> "XpTransaction":
        """Copy of this transaction with a new amount and reason (same source)"""
        return XpTransaction(amount=amount, reason=reason, source=self.source)


class UserStats(BaseModel):
    """Accumulated XP and the level derived from it"""
    model_config = ConfigDict(frozen=True)

    total_xp: int = Field(ge=0)
    level: int = Field(ge=1)

    @model_validator(mode='after')
    def level_matches_xp(self) -> 'UserStats':
        from trajectory.gamification.xp_system import calculate_level

        expected = calculate_level(self.total_xp)
        if self.level != expected:
            raise ValueError(f"Level {self.level} does not match {self.total_xp} XP (expected {expected})")
        return self

    @classmethod
    def create_new(cls) -> "UserStats":
        return cls(total_xp=0, level=1)

    def apply_transaction(self, transaction: XpTransaction) -> "UserStats":
        """
        Derive new stats from a transaction

        Total XP is floored at 0 and the level is recomputed from the new total.
        """
        # Import here to avoid circular dependencies
        from trajectory.gamification.xp_system import calculate_level

        new_total = max(0, self.total_xp + transaction.amount)
        return UserStats(total_xp=new_total, level=calculate_level(new_total))


class Habit(BaseModel):
    """Recurring activity; equal by name and difficulty"""
    model_config = ConfigDict(frozen=True)

    name: str
    difficulty: int = Field(ge=1, le=5)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Habit name cannot be blank")
        return v


class HabitCheck(BaseModel):
    """A habit resolved as DONE or MISSED on a date"""
    model_config = ConfigDict(frozen=True)

    habit: Habit
    check_date: date
    result: HabitCheckResult


class DailyActivityLog(BaseModel):
    """
    Per-date record of gained XP and recorded checks

    xp_gained only counts gains (habit rewards and goal XP), never penalties,
    so it is the figure the daily cap is enforced against.
    """
    model_config = ConfigDict(frozen=True)

    log_date: date
    xp_gained: int = Field(default=0, ge=0)
    habit_checks: Tuple[HabitCheck, ...] = ()

    @classmethod
    def empty(cls, log_date: date) -> "DailyActivityLog":
        return cls(log_date=log_date)

    def add_habit_check(self, check: HabitCheck, xp: int) -> "DailyActivityLog":
        """Record a check; only a positive xp adds to the gained total"""
        if check.check_date != self.log_date:
            raise ValueError(
                f"Check date {check.check_date} does not match log date {self.log_date}"
            )
        gained = self.xp_gained + xp if xp > 0 else self.xp_gained
        return DailyActivityLog(
            log_date=self.log_date,
            xp_gained=gained,
            habit_checks=self.habit_checks + (check,),
        )

    def add_xp(self, amount: int) -> "DailyActivityLog":
        """Add goal XP to the day's gained total"""
        if amount < 0:
            raise ValueError(f"XP amount cannot be negative: {amount}")
        return DailyActivityLog(
            log_date=self.log_date,
            xp_gained=self.xp_gained + amount,
            habit_checks=self.habit_checks,
        )

    def has_habit_been_done(self, habit: Habit) -> bool:
        return any(
            check.habit == habit and check.result == HabitCheckResult.DONE
            for check in self.habit_checks
        )


class Goal(BaseModel):
    """Long-running objective tracked through daily notes"""
    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    start_date: date
    target_date: date
    importance: int = Field(ge=1, le=5)
    total_progress_points: int = Field(gt=0)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Goal title cannot be blank")
        return v

    @model_validator(mode='after')
    def target_after_start(self) -> 'Goal':
        if self.target_date <= self.start_date:
            raise ValueError(
                f"Target date {self.target_date} must be after start date {self.start_date}"
            )
        return self

    def is_overdue(self, current_date: date) -> bool:
        return current_date > self.target_date

    def is_active(self, current_date: date) -> bool:
        return self.target_date >= current_date


class GoalNote(BaseModel):
    """Dated progress note on a goal (at most one per goal per day)"""
    model_config = ConfigDict(frozen=True)

    goal: Goal
    note_date: date
    text: str
    points: int = Field(ge=0)


class XpHistoryEntry(BaseModel):
    """Applied XP change, kept for trend and burnout analysis"""
    model_config = ConfigDict(frozen=True)

    entry_date: date
    xp_change: int
    source: XpSource
