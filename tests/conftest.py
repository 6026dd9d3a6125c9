"""Global test fixtures and utilities for trajectory tests"""
import pytest
from datetime import date, timedelta

from trajectory.gamification.ledger import UserLedger
from trajectory.models.analytics import BurnoutWarning
from trajectory.models.progression import Goal, Habit, UserStats
from trajectory.models.simulation import (
    BurnoutRisk,
    IncomeRange,
    SimulationInput,
    SimulationResult,
    YearlyProjection,
)


# ============================================================================
# Date Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Fixed reference date so tests never depend on the wall clock"""
    return date(2024, 6, 15)


@pytest.fixture
def days_ago(today):
    """Helper returning the date n days before today"""
    def _days_ago(n: int) -> date:
        return today - timedelta(days=n)
    return _days_ago


# ============================================================================
# Ledger Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "123456789"


@pytest.fixture
def ledger(test_user_id):
    """Fresh ledger with default limits (100 daily, 10 per goal)"""
    return UserLedger(user_id=test_user_id)


@pytest.fixture
def run_habit():
    """Difficulty-3 habit worth 30 XP"""
    return Habit(name="Run", difficulty=3)


@pytest.fixture
def read_habit():
    """Difficulty-2 habit worth 20 XP"""
    return Habit(name="Read", difficulty=2)


@pytest.fixture
def goal(today):
    """Active goal started ten days ago"""
    return Goal(
        title="Learn Spanish",
        description="Reach B1",
        start_date=today - timedelta(days=10),
        target_date=today + timedelta(days=90),
        importance=3,
        total_progress_points=100,
    )


# ============================================================================
# Simulation Fixtures
# ============================================================================

@pytest.fixture
def make_simulation_input():
    """Factory for SimulationInput with moderate defaults"""
    def _make(**overrides) -> SimulationInput:
        values = dict(
            current_stats=UserStats(total_xp=500, level=4),
            habits_consistency_score=60.0,
            average_daily_effort=50.0,
            difficulty_distribution={2: 1, 3: 2, 4: 1},
            active_goals=(),
            burnout_warning=BurnoutWarning.none(),
            active_days_last_month=22,
            average_streak_length=5.0,
            years_to_simulate=3,
        )
        values.update(overrides)
        return SimulationInput(**values)
    return _make


@pytest.fixture
def simulation_input(make_simulation_input):
    """Default moderate simulation input"""
    return make_simulation_input()


@pytest.fixture
def make_simulation_result():
    """Factory for hand-built SimulationResults (one projection per skill index)"""
    def _make(skills, growth_rates=None, burnout_risk=BurnoutRisk.LOW, average=None, **overrides) -> SimulationResult:
        growth_rates = growth_rates or [0.0] * len(skills)
        projections = tuple(
            YearlyProjection(
                year=i + 1,
                projected_xp=1000 * (i + 1),
                projected_level=5 + i,
                skill_growth_index=skill,
                xp_growth_rate=rate,
            )
            for i, (skill, rate) in enumerate(zip(skills, growth_rates))
        )
        values = dict(
            yearly_projections=projections,
            average_skill_growth_index=sum(skills) / len(skills) if average is None else average,
            burnout_risk=burnout_risk,
            income_range=IncomeRange(low_estimate=80000, expected_estimate=100000, high_estimate=130000),
            emigration_probability=40.0,
            explanation="Hand-built result",
        )
        values.update(overrides)
        return SimulationResult(**values)
    return _make
