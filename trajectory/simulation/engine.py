"""
Future Simulation Engine

Projects a user's XP, level and skill growth over 1-5 years from a
SimulationInput snapshot, then derives burnout risk, an income band and an
emigration probability.

Base yearly XP:
    effort x consistency multiplier x (1 + difficulty bonus) x (1 + streak bonus)
    x (1 + goal bonus) x active days per year

Each year the running yearly XP is multiplied by a cumulative diminishing-returns
factor and, once burnout sets in, by 0.6 for the rest of the horizon.
"""

import logging
from typing import List, Optional

from trajectory.gamification.xp_system import calculate_level
from trajectory.models.simulation import (
    BurnoutRisk,
    IncomeRange,
    SimulationInput,
    SimulationResult,
    YearlyProjection,
)
from trajectory.monitoring.metrics import track_simulation
from trajectory.simulation.explanation import SimulationExplanationGenerator

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.0
ACTIVE_DAYS_REALISM = 0.85
CONSISTENCY_MULTIPLIER_MIN = 0.5
CONSISTENCY_MULTIPLIER_MAX = 1.2
DIMINISHING_RETURNS_FACTOR = 0.85
BURNOUT_REDUCTION_FACTOR = 0.6
BURNOUT_RISK_THRESHOLD = 0.6

MAX_DIFFICULTY_BONUS = 0.15
MAX_STREAK_BONUS = 0.3
MAX_GOAL_COUNT_BONUS = 0.05
MAX_GOAL_IMPORTANCE_BONUS = 0.05

INCOME_PER_LEVEL = 30000
EMIGRATION_INCOME_THRESHOLD = 80000


class FutureSimulationService:
    """Deterministic multi-year trajectory simulation"""

    def __init__(self, explanation_generator: Optional[SimulationExplanationGenerator] = None):
        self.explanation_generator = explanation_generator or SimulationExplanationGenerator()

    def simulate(self, simulation_input: SimulationInput) -> SimulationResult:
        """
        Run the simulation

        Never fails on a valid SimulationInput; degenerate inputs (no effort,
        no goals) produce flat projections.
        """
        with track_simulation() as labels:
            base_yearly_xp = self.calculate_base_yearly_xp(simulation_input)
            projections = self._project_years(simulation_input, base_yearly_xp)

            average_skill = sum(p.skill_growth_index for p in projections) / len(projections)
            burnout_risk = self._overall_burnout_risk(simulation_input, projections)
            income_range = self._project_income(projections[-1])
            emigration = self._emigration_probability(projections[-1], income_range, simulation_input)

            draft = SimulationResult(
                yearly_projections=tuple(projections),
                average_skill_growth_index=average_skill,
                burnout_risk=burnout_risk,
                income_range=income_range,
                emigration_probability=emigration,
                explanation="Pending explanation",
            )
            explanation = self.explanation_generator.generate_explanation(
                draft, simulation_input.habits_consistency_score
            )
            labels["burnout_risk"] = burnout_risk.value

        logger.info(
            f"Simulated {simulation_input.years_to_simulate} years: final XP "
            f"{projections[-1].projected_xp}, level {projections[-1].projected_level}, "
            f"burnout risk {burnout_risk.value}"
        )
        return draft.model_copy(update={"explanation": explanation})

    # ------------------------------------------------------------------
    # Base rate
    # ------------------------------------------------------------------

    def calculate_base_yearly_xp(self, simulation_input: SimulationInput) -> float:
        daily_xp = simulation_input.average_daily_effort
        daily_xp *= self._consistency_multiplier(simulation_input.habits_consistency_score)
        daily_xp *= 1.0 + self._difficulty_bonus(simulation_input)
        daily_xp *= 1.0 + min(simulation_input.average_streak_length / 30.0, MAX_STREAK_BONUS)
        daily_xp *= 1.0 + self._goal_bonus(simulation_input)

        active_ratio = min(simulation_input.active_days_last_month / 30.0, 1.0)
        active_days_per_year = DAYS_PER_YEAR * active_ratio * ACTIVE_DAYS_REALISM

        return daily_xp * active_days_per_year

    @staticmethod
    def _consistency_multiplier(consistency: float) -> float:
        """Linear map of 0-100 onto [0.5, 1.2]"""
        return CONSISTENCY_MULTIPLIER_MIN + (
            CONSISTENCY_MULTIPLIER_MAX - CONSISTENCY_MULTIPLIER_MIN
        ) * consistency / 100.0

    @staticmethod
    def _difficulty_bonus(simulation_input: SimulationInput) -> float:
        """0% at average difficulty <= 2, up to 15% at 5"""
        total = simulation_input.total_habits
        if total == 0:
            return 0.0
        weighted = sum(
            difficulty * count
            for difficulty, count in simulation_input.difficulty_distribution.items()
        ) / total
        return max(0.0, (weighted - 2) / 3.0) * MAX_DIFFICULTY_BONUS

    @staticmethod
    def _goal_bonus(simulation_input: SimulationInput) -> float:
        goals = simulation_input.active_goals
        if not goals:
            return 0.0
        average_importance = sum(goal.importance for goal in goals) / len(goals)
        count_bonus = min(len(goals) / 10.0, MAX_GOAL_COUNT_BONUS)
        importance_bonus = (average_importance - 1) / 4.0 * MAX_GOAL_IMPORTANCE_BONUS
        return count_bonus + importance_bonus

    # ------------------------------------------------------------------
    # Yearly loop
    # ------------------------------------------------------------------

    def _project_years(self, simulation_input: SimulationInput, base_yearly_xp: float) -> List[YearlyProjection]:
        projections = []
        total_xp = simulation_input.current_stats.total_xp
        yearly_xp = base_yearly_xp
        # Product of every multiplier applied so far; growth is measured against it
        # so a zero base rate still yields a defined growth figure.
        cumulative_factor = 1.0
        diminishing = 1.0
        burnout = simulation_input.burnout_warning.is_active
        goal_count = len(simulation_input.active_goals)

        for year in range(1, simulation_input.years_to_simulate + 1):
            yearly_xp *= diminishing
            cumulative_factor *= diminishing
            diminishing *= DIMINISHING_RETURNS_FACTOR

            if burnout or self.yearly_burnout_risk(simulation_input, year) > BURNOUT_RISK_THRESHOLD:
                yearly_xp *= BURNOUT_REDUCTION_FACTOR
                cumulative_factor *= BURNOUT_REDUCTION_FACTOR
                burnout = True

            growth_rate = (cumulative_factor - 1.0) * 100.0
            total_xp += int(yearly_xp)

            projections.append(YearlyProjection(
                year=year,
                projected_xp=total_xp,
                projected_level=calculate_level(total_xp),
                skill_growth_index=self._skill_growth_index(
                    yearly_xp, simulation_input.habits_consistency_score, goal_count
                ),
                xp_growth_rate=growth_rate,
            ))
            logger.debug(f"Year {year}: +{int(yearly_xp)} XP, growth {growth_rate:.1f}%, burnout={burnout}")

        return projections

    @staticmethod
    def yearly_burnout_risk(simulation_input: SimulationInput, year: int) -> float:
        """
        Heuristic burnout probability (0-1) for a simulated year

        Re-derived from the same input every year: overexertion (+0.3),
        more than three habits at difficulty >= 4 (+0.2), an active warning
        (+0.3) and +0.1 per elapsed year.
        """
        risk = 0.0
        if simulation_input.habits_consistency_score > 80 and simulation_input.average_daily_effort > 100:
            risk += 0.3
        high_difficulty = sum(
            count for difficulty, count in simulation_input.difficulty_distribution.items()
            if difficulty >= 4
        )
        if high_difficulty > 3:
            risk += 0.2
        if simulation_input.burnout_warning.is_active:
            risk += 0.3
        risk += (year - 1) * 0.1
        return min(risk, 1.0)

    @staticmethod
    def _skill_growth_index(yearly_xp: float, consistency: float, goal_count: int) -> float:
        xp_part = min(yearly_xp / 50.0, 50.0)
        consistency_part = consistency / 100.0 * 30.0
        goal_part = min(goal_count * 5.0, 20.0)
        return xp_part + consistency_part + goal_part

    # ------------------------------------------------------------------
    # Derived outputs
    # ------------------------------------------------------------------

    def _overall_burnout_risk(
        self,
        simulation_input: SimulationInput,
        projections: List[YearlyProjection],
    ) -> BurnoutRisk:
        risk = self.yearly_burnout_risk(simulation_input, simulation_input.years_to_simulate)
        if simulation_input.burnout_warning.is_active:
            risk += 0.2

        declining_growth = (
            len(projections) >= 2
            and projections[-1].xp_growth_rate < projections[-2].xp_growth_rate - 10
        )

        if risk >= 0.7 or declining_growth:
            return BurnoutRisk.HIGH
        if risk >= 0.4:
            return BurnoutRisk.MEDIUM
        return BurnoutRisk.LOW

    @staticmethod
    def _project_income(final_year: YearlyProjection) -> IncomeRange:
        """Level-based income scaled by a skill multiplier in [0.8, 1.5]"""
        base_income = INCOME_PER_LEVEL * final_year.projected_level
        skill_multiplier = 0.8 + final_year.skill_growth_index / 100.0 * 0.7
        expected = int(base_income * skill_multiplier)
        return IncomeRange(
            low_estimate=int(expected * 0.8),
            expected_estimate=expected,
            high_estimate=int(expected * 1.3),
        )

    @staticmethod
    def _emigration_probability(
        final_year: YearlyProjection,
        income_range: IncomeRange,
        simulation_input: SimulationInput,
    ) -> float:
        probability = final_year.skill_growth_index / 100.0 * 40.0
        expected = income_range.expected_estimate
        if expected > EMIGRATION_INCOME_THRESHOLD:
            probability += min((expected - EMIGRATION_INCOME_THRESHOLD) / 50000.0 * 30.0, 30.0)
        probability += simulation_input.habits_consistency_score / 100.0 * 20.0
        return min(probability, 100.0)
