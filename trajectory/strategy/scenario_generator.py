"""
Scenario generator

Turns recommendations into what-if SimulationInputs. Each RecommendationType
maps to a pure mutation function in SCENARIO_MUTATIONS; a mutation returns a
new validated input and records a human-readable note per changed field.

Selection rules:
- Only recommendations with priority >= 70 are considered
- The top three (by priority) each get their own scenario
- When two or more qualify, a combined scenario applies their mutations in
  priority order, each recommendation type once
"""

import logging
from typing import Callable, Dict, List, Optional

from trajectory.exceptions import ValidationError
from trajectory.models.analytics import BurnoutWarning
from trajectory.models.simulation import SimulationInput
from trajectory.models.strategy import (
    GeneratedScenario,
    Recommendation,
    RecommendationType,
    ScenarioImpactSummary,
)
from trajectory.simulation.engine import FutureSimulationService
from trajectory.strategy.scenario_evaluation import ScenarioEvaluationService

logger = logging.getLogger(__name__)

SCENARIO_PRIORITY_THRESHOLD = 70.0
MAX_SCENARIOS = 3
COMBINED_SCENARIO_NAME = "Combined Strategy Scenario"

Mutation = Callable[[SimulationInput, Dict[str, str]], SimulationInput]


# ==========================================
# Mutations
# ==========================================

def _shift_high_difficulty_to_medium(distribution: Dict[int, int]) -> Optional[int]:
    """Move one habit from difficulty 5 (else 4) to 3; returns the level moved"""
    for difficulty in (5, 4):
        if distribution.get(difficulty, 0) > 0:
            distribution[difficulty] -= 1
            distribution[3] = distribution.get(3, 0) + 1
            return difficulty
    return None


def reduce_burnout_risk(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    effort = simulation_input.average_daily_effort
    new_effort = effort * 0.75
    changes["averageDailyEffort"] = f"Reduced from {effort:.1f} to {new_effort:.1f} (25% reduction)"

    days = simulation_input.active_days_last_month
    new_days = min(days, max(18, int(days * 0.9)))
    changes["activeDaysLastMonth"] = f"Reduced from {days} to {new_days} days"

    distribution = dict(simulation_input.difficulty_distribution)
    shifted = _shift_high_difficulty_to_medium(distribution)
    if shifted is not None:
        changes["difficultyDistribution"] = (
            f"Reduced one difficulty-{shifted} habit, added one difficulty-3 habit"
        )

    changes["burnoutWarning"] = "Assumed improvement after reducing effort"

    return simulation_input.with_changes(
        average_daily_effort=new_effort,
        active_days_last_month=new_days,
        difficulty_distribution=distribution,
        burnout_warning=BurnoutWarning.none(),
    )


def improve_consistency(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    consistency = simulation_input.habits_consistency_score
    new_consistency = min(100.0, consistency * 1.18)
    changes["habitsConsistencyScore"] = f"Improved from {consistency:.1f}% to {new_consistency:.1f}%"

    days = simulation_input.active_days_last_month
    new_days = max(days, min(30, days + 3))
    changes["activeDaysLastMonth"] = f"Increased from {days} to {new_days} days"

    streak = simulation_input.average_streak_length
    new_streak = streak * 1.25
    changes["averageStreakLength"] = f"Improved from {streak:.1f} to {new_streak:.1f} days"

    return simulation_input.with_changes(
        habits_consistency_score=new_consistency,
        active_days_last_month=new_days,
        average_streak_length=new_streak,
    )


def add_goal_focus(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    # New goals cannot be invented here, so their pull on engagement is modeled instead
    consistency = simulation_input.habits_consistency_score
    new_consistency = min(100.0, consistency * 1.12)
    effort = simulation_input.average_daily_effort
    new_effort = effort * 1.10

    changes["activeGoals"] = "Added 1-2 new goals (simulated by improved engagement)"
    changes["habitsConsistencyScore"] = (
        f"Improved from {consistency:.1f}% to {new_consistency:.1f}% (goal-driven)"
    )
    changes["averageDailyEffort"] = f"Increased from {effort:.1f} to {new_effort:.1f} (goal-driven)"

    return simulation_input.with_changes(
        habits_consistency_score=new_consistency,
        average_daily_effort=new_effort,
    )


def adjust_habit_difficulty(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    distribution = dict(simulation_input.difficulty_distribution)
    shifted = _shift_high_difficulty_to_medium(distribution)
    if shifted is None:
        return simulation_input

    changes["difficultyDistribution"] = f"Reduced one difficulty-{shifted}, added one difficulty-3"
    return simulation_input.with_changes(difficulty_distribution=distribution)


def add_habits_for_growth(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    distribution = dict(simulation_input.difficulty_distribution)
    distribution[3] = distribution.get(3, 0) + 1
    changes["difficultyDistribution"] = "Added one difficulty-3 habit"

    effort = simulation_input.average_daily_effort
    new_effort = effort * 1.15
    changes["averageDailyEffort"] = f"Increased from {effort:.1f} to {new_effort:.1f} (new habit)"

    return simulation_input.with_changes(
        difficulty_distribution=distribution,
        average_daily_effort=new_effort,
    )


def balance_effort(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    effort = simulation_input.average_daily_effort
    new_effort = effort * 0.92
    consistency = simulation_input.habits_consistency_score
    new_consistency = min(100.0, consistency * 1.10)
    days = simulation_input.active_days_last_month
    new_days = min(days, max(20, days - 2))

    changes["averageDailyEffort"] = f"Reduced from {effort:.1f} to {new_effort:.1f} (balanced)"
    changes["habitsConsistencyScore"] = (
        f"Improved from {consistency:.1f}% to {new_consistency:.1f}% (balanced)"
    )
    changes["activeDaysLastMonth"] = f"Adjusted from {days} to {new_days} days (balanced)"

    return simulation_input.with_changes(
        average_daily_effort=new_effort,
        habits_consistency_score=new_consistency,
        active_days_last_month=new_days,
    )


def optimize_strategy(simulation_input: SimulationInput, changes: Dict[str, str]) -> SimulationInput:
    consistency = simulation_input.habits_consistency_score
    new_consistency = min(100.0, consistency * 1.10)
    effort = simulation_input.average_daily_effort
    new_effort = effort * 1.05

    changes["habitsConsistencyScore"] = f"Improved from {consistency:.1f}% to {new_consistency:.1f}%"
    changes["averageDailyEffort"] = f"Optimized from {effort:.1f} to {new_effort:.1f}"

    return simulation_input.with_changes(
        habits_consistency_score=new_consistency,
        average_daily_effort=new_effort,
    )


SCENARIO_MUTATIONS: Dict[RecommendationType, Mutation] = {
    RecommendationType.REDUCE_BURNOUT_RISK: reduce_burnout_risk,
    RecommendationType.IMPROVE_CONSISTENCY: improve_consistency,
    RecommendationType.ADD_GOAL_FOCUS: add_goal_focus,
    RecommendationType.ADJUST_HABIT_DIFFICULTY: adjust_habit_difficulty,
    RecommendationType.ADD_HABITS_FOR_GROWTH: add_habits_for_growth,
    RecommendationType.BALANCE_EFFORT: balance_effort,
    RecommendationType.OPTIMIZE_STRATEGY: optimize_strategy,
}

SCENARIO_NAMES: Dict[RecommendationType, str] = {
    RecommendationType.REDUCE_BURNOUT_RISK: "Reduced Burnout Risk Scenario",
    RecommendationType.IMPROVE_CONSISTENCY: "Improved Consistency Scenario",
    RecommendationType.ADD_GOAL_FOCUS: "Goal-Focused Scenario",
    RecommendationType.ADJUST_HABIT_DIFFICULTY: "Balanced Difficulty Scenario",
    RecommendationType.ADD_HABITS_FOR_GROWTH: "Growth-Oriented Scenario",
    RecommendationType.BALANCE_EFFORT: "Balanced Effort Scenario",
    RecommendationType.OPTIMIZE_STRATEGY: "Optimized Strategy Scenario",
}


def build_rationale(recommendations: List[Recommendation], changes: Dict[str, str]) -> str:
    parts = []
    for recommendation in recommendations:
        parts.append(
            f"This scenario applies the recommendation: {recommendation.description}. "
            f"{recommendation.reason}"
        )
    if changes:
        parts.append(
            "The following changes were made: "
            + "; ".join(f"{field}: {note}" for field, note in changes.items())
            + "."
        )
    benefits = " ".join(f"{r.expected_benefit}." for r in recommendations)
    parts.append(f"Expected benefit: {benefits}")
    return " ".join(parts)


# ==========================================
# Service
# ==========================================

class ScenarioGeneratorService:
    """
    Generates and evaluates what-if scenarios from recommendations

    Responsibilities:
    - Selecting the recommendations worth simulating
    - Applying their mutations to the base input
    - Ranking scenarios by simulated XP improvement
    """

    def __init__(
        self,
        simulation_service: Optional[FutureSimulationService] = None,
        evaluation_service: Optional[ScenarioEvaluationService] = None,
    ):
        """
        Args:
            simulation_service: Engine used for the base run and each scenario
            evaluation_service: Builds impact summaries; defaults to one sharing
                the simulation service
        """
        self.simulation_service = simulation_service or FutureSimulationService()
        self.evaluation_service = evaluation_service or ScenarioEvaluationService(self.simulation_service)

    def generate_scenarios(
        self,
        base_input: SimulationInput,
        recommendations: List[Recommendation],
    ) -> List[GeneratedScenario]:
        if base_input is None:
            raise ValidationError("Base input is required", field="base_input")

        selected = sorted(
            (r for r in recommendations if r.priority_score >= SCENARIO_PRIORITY_THRESHOLD),
            key=lambda r: r.priority_score,
            reverse=True,
        )[:MAX_SCENARIOS]

        scenarios = [self.generate_scenario(base_input, [r]) for r in selected]

        if len(selected) >= 2:
            scenarios.append(self.generate_scenario(base_input, selected, name=COMBINED_SCENARIO_NAME))

        logger.info(
            f"Generated {len(scenarios)} scenarios from {len(recommendations)} recommendations "
            f"({len(selected)} above priority {SCENARIO_PRIORITY_THRESHOLD:.0f})"
        )
        return scenarios

    def generate_scenario(
        self,
        base_input: SimulationInput,
        recommendations: List[Recommendation],
        name: Optional[str] = None,
    ) -> GeneratedScenario:
        """Apply each recommendation type's mutation in order, once per type"""
        if not recommendations:
            raise ValidationError("At least one recommendation is required", field="recommendations")

        changes: Dict[str, str] = {}
        modified = base_input
        applied_types = set()
        for recommendation in recommendations:
            if recommendation.type in applied_types:
                continue
            applied_types.add(recommendation.type)
            modified = SCENARIO_MUTATIONS[recommendation.type](modified, changes)

        scenario_name = name or SCENARIO_NAMES[recommendations[0].type]
        logger.debug(f"Scenario '{scenario_name}' changes: {changes}")

        return GeneratedScenario(
            name=scenario_name,
            applied_recommendations=tuple(recommendations),
            modified_input=modified,
            rationale=build_rationale(recommendations, changes),
            parameter_changes=changes,
        )

    def generate_and_evaluate_scenarios(
        self,
        base_input: SimulationInput,
        recommendations: List[Recommendation],
    ) -> List[ScenarioImpactSummary]:
        """Generate scenarios, simulate them and rank by XP improvement (highest first)"""
        scenarios = self.generate_scenarios(base_input, recommendations)
        if not scenarios:
            return []

        base_result = self.simulation_service.simulate(base_input)
        summaries = self.evaluation_service.evaluate_scenarios(base_input, base_result, scenarios)
        summaries.sort(key=lambda s: s.xp_improvement, reverse=True)
        return summaries
