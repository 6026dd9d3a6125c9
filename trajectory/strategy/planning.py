"""
PlanningService - Five-Year Plan

Runs the full pipeline for one user: ledger snapshot -> simulation ->
recommendations -> scenarios, and condenses it into a plan with a summary,
an action plan and yearly milestones.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from trajectory.exceptions import ValidationError
from trajectory.gamification.ledger import UserLedger
from trajectory.models.simulation import SimulationResult
from trajectory.models.strategy import Recommendation, ScenarioImpactSummary
from trajectory.services.analytics_service import AnalyticsService
from trajectory.simulation.engine import FutureSimulationService
from trajectory.simulation.input_builder import SimulationInputBuilder
from trajectory.strategy.recommendations import StrategyRecommendationService
from trajectory.strategy.scenario_generator import ScenarioGeneratorService

logger = logging.getLogger(__name__)

TOP_RECOMMENDATIONS = 5
BEST_SCENARIOS = 3


class PlanningService:
    """
    Service for multi-year plans.

    Responsibilities:
    - Building the simulation input from a user's ledger
    - Running the base simulation
    - Ranking recommendations and what-if scenarios
    - Writing the plan summary, action plan and milestones
    """

    def __init__(
        self,
        input_builder: Optional[SimulationInputBuilder] = None,
        simulation_service: Optional[FutureSimulationService] = None,
        recommendation_service: Optional[StrategyRecommendationService] = None,
        scenario_generator: Optional[ScenarioGeneratorService] = None,
    ):
        """
        Initialize PlanningService.

        Args:
            input_builder: Builds SimulationInput from a ledger
            simulation_service: Forecasting engine
            recommendation_service: Advice rules
            scenario_generator: What-if scenario generation and evaluation
        """
        self.input_builder = input_builder or SimulationInputBuilder()
        self.simulation_service = simulation_service or FutureSimulationService()
        self.recommendation_service = recommendation_service or StrategyRecommendationService()
        self.scenario_generator = scenario_generator or ScenarioGeneratorService(self.simulation_service)

    def build_plan(self, ledger: UserLedger, current_date: date, years: int = 5) -> Dict[str, Any]:
        """
        Build a plan for the ledger's user.

        Args:
            ledger: The user's ledger
            current_date: Date the plan is made on
            years: Horizon, 1-5

        Returns:
            {
                'current_status': dict (see AnalyticsService.generate_summary),
                'base_simulation': SimulationResult,
                'top_recommendations': list[Recommendation],
                'best_scenarios': list[ScenarioImpactSummary],
                'projected_improvement': float,  # mean XP % of best scenarios
                'summary': str,
                'action_plan': str,
                'key_milestones': list[str]
            }
        """
        if years is None or not 1 <= years <= 5:
            raise ValidationError("Years must be between 1 and 5", field="years", value=years)

        current_status = AnalyticsService(ledger).generate_summary(current_date)
        base_input = self.input_builder.build(ledger, years, current_date)
        base_result = self.simulation_service.simulate(base_input)

        recommendations = self.recommendation_service.generate_recommendations(base_result)
        scenarios = self.scenario_generator.generate_and_evaluate_scenarios(base_input, recommendations)

        top_recommendations = recommendations[:TOP_RECOMMENDATIONS]
        best_scenarios = scenarios[:BEST_SCENARIOS]
        projected_improvement = (
            sum(s.xp_improvement for s in best_scenarios) / len(best_scenarios)
            if best_scenarios else 0.0
        )

        logger.info(
            f"Built {years}-year plan for user {ledger.user_id}: "
            f"{len(recommendations)} recommendations, {len(scenarios)} scenarios, "
            f"projected improvement {projected_improvement:.1f}%"
        )

        return {
            'current_status': current_status,
            'base_simulation': base_result,
            'top_recommendations': top_recommendations,
            'best_scenarios': best_scenarios,
            'projected_improvement': projected_improvement,
            'summary': self._summary(current_status, base_result, len(recommendations)),
            'action_plan': self._action_plan(top_recommendations, best_scenarios),
            'key_milestones': self._milestones(base_result),
        }

    @staticmethod
    def _summary(current_status: Dict[str, Any], result: SimulationResult, recommendation_count: int) -> str:
        final_year = result.final_projection
        level = current_status['level']['current_level']
        return (
            f"Current Status: Level {level} with {current_status['total_xp']} XP. "
            f"Projected: Level {final_year.projected_level} with {final_year.projected_xp} XP "
            f"in {len(result.yearly_projections)} years. "
            f"Generated {recommendation_count} strategic recommendations. "
            f"Burnout Risk: {result.burnout_risk.value}."
        )

    @staticmethod
    def _action_plan(recommendations: List[Recommendation], scenarios: List[ScenarioImpactSummary]) -> str:
        lines = ["Action Plan:", ""]

        if recommendations:
            lines.append("Priority Actions:")
            for index, recommendation in enumerate(recommendations[:3], start=1):
                lines.append(f"{index}. {recommendation.description}")
                lines.append(f"   Reason: {recommendation.reason}")
            lines.append("")

        if scenarios:
            lines.append("Best Improvement Scenarios:")
            for index, summary in enumerate(scenarios[:2], start=1):
                lines.append(f"{index}. {summary.scenario.name}")
                lines.append(f"   Expected XP Improvement: {summary.xp_improvement:.0f}%")
                lines.append(f"   Rationale: {summary.scenario.rationale}")

        return "\n".join(lines)

    @staticmethod
    def _milestones(result: SimulationResult) -> List[str]:
        milestones = [
            f"Year {p.year}: Reach Level {p.projected_level} with {p.projected_xp} XP "
            f"(Skill Growth: {p.skill_growth_index:.1f}/100)"
            for p in result.yearly_projections
        ]
        income = result.income_range
        if income.expected_estimate > 0:
            milestones.append(
                f"Income Projection: ${income.low_estimate} - ${income.high_estimate} "
                f"(Expected: ${income.expected_estimate})"
            )
        return milestones
