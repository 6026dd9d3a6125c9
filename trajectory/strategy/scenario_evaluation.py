"""
Scenario evaluation

Re-simulates each generated scenario and compares it to the base run:
- xp_improvement: % change of final-year XP
- skill_growth_improvement: % change of the average skill growth index
- skill_growth_delta: the same change in index points
- burnout tier movement, expected income delta and emigration probability delta

Percent changes against a zero base are 100 when the new value is positive,
otherwise 0.
"""

import logging
from typing import List, Optional

from trajectory.exceptions import ValidationError
from trajectory.models.simulation import BurnoutRisk, SimulationInput, SimulationResult
from trajectory.models.strategy import (
    BurnoutRiskChange,
    GeneratedScenario,
    ScenarioImpactSummary,
)
from trajectory.simulation.engine import FutureSimulationService

logger = logging.getLogger(__name__)

BURNOUT_RISK_ORDER = {
    BurnoutRisk.LOW: 0,
    BurnoutRisk.MEDIUM: 1,
    BurnoutRisk.HIGH: 2,
}


def percent_change(base: float, new: float) -> float:
    """Relative change in percent, with a zero base mapped to 100 or 0"""
    if base == 0:
        return 100.0 if new > 0 else 0.0
    return (new - base) / base * 100.0


def burnout_risk_change(base: BurnoutRisk, improved: BurnoutRisk) -> BurnoutRiskChange:
    difference = BURNOUT_RISK_ORDER[improved] - BURNOUT_RISK_ORDER[base]
    if difference < 0:
        return BurnoutRiskChange.IMPROVED
    if difference > 0:
        return BurnoutRiskChange.WORSENED
    return BurnoutRiskChange.UNCHANGED


class ScenarioEvaluationService:
    """
    Compares scenario simulations against a base simulation

    Responsibilities:
    - Running the forecasting engine on each modified input
    - Building ScenarioImpactSummary objects
    - Writing the impact description
    """

    def __init__(self, simulation_service: Optional[FutureSimulationService] = None):
        """
        Args:
            simulation_service: Engine used to re-simulate scenarios
        """
        self.simulation_service = simulation_service or FutureSimulationService()

    def evaluate_scenarios(
        self,
        base_input: SimulationInput,
        base_result: SimulationResult,
        scenarios: List[GeneratedScenario],
    ) -> List[ScenarioImpactSummary]:
        """
        Simulate every scenario and summarize its impact

        Summaries are returned in scenario order. An empty scenario list
        yields an empty result.
        """
        if base_input is None:
            raise ValidationError("Base input is required", field="base_input")
        if base_result is None:
            raise ValidationError("Base result is required", field="base_result")

        summaries = []
        for scenario in scenarios:
            improved_result = self.simulation_service.simulate(scenario.modified_input)
            summary = self.summarize(scenario, base_result, improved_result)
            logger.info(
                f"Scenario '{scenario.name}': XP {summary.xp_improvement:+.1f}%, "
                f"skill {summary.skill_growth_delta:+.1f} points, "
                f"burnout {summary.burnout_risk_change.value}"
            )
            summaries.append(summary)

        return summaries

    def summarize(
        self,
        scenario: GeneratedScenario,
        base_result: SimulationResult,
        improved_result: SimulationResult,
    ) -> ScenarioImpactSummary:
        base_final = base_result.final_projection
        improved_final = improved_result.final_projection

        xp_improvement = percent_change(base_final.projected_xp, improved_final.projected_xp)
        skill_improvement = percent_change(
            base_result.average_skill_growth_index,
            improved_result.average_skill_growth_index,
        )

        return ScenarioImpactSummary(
            scenario=scenario,
            base_result=base_result,
            improved_result=improved_result,
            xp_improvement=xp_improvement,
            skill_growth_improvement=skill_improvement,
            skill_growth_delta=(
                improved_result.average_skill_growth_index - base_result.average_skill_growth_index
            ),
            burnout_risk_change=burnout_risk_change(base_result.burnout_risk, improved_result.burnout_risk),
            income_projection_delta=(
                improved_result.income_range.expected_estimate - base_result.income_range.expected_estimate
            ),
            emigration_probability_change=(
                improved_result.emigration_probability - base_result.emigration_probability
            ),
            impact_description=self._describe(base_result, improved_result, xp_improvement, skill_improvement),
        )

    @staticmethod
    def _describe(
        base_result: SimulationResult,
        improved_result: SimulationResult,
        xp_improvement: float,
        skill_improvement: float,
    ) -> str:
        base_final = base_result.final_projection
        improved_final = improved_result.final_projection

        parts = [
            f"Final XP: {base_final.projected_xp} → {improved_final.projected_xp} "
            f"({xp_improvement:.1f}% improvement)."
        ]

        if improved_final.projected_level != base_final.projected_level:
            parts.append(
                f"Level progression: {base_final.projected_level} → {improved_final.projected_level}."
            )

        parts.append(
            f"Skill growth index: {base_result.average_skill_growth_index:.1f} → "
            f"{improved_result.average_skill_growth_index:.1f} ({skill_improvement:.1f}% improvement)."
        )

        if improved_result.burnout_risk != base_result.burnout_risk:
            parts.append(
                f"Burnout risk: {base_result.burnout_risk.value} → {improved_result.burnout_risk.value}."
            )

        base_income = base_result.income_range.expected_estimate
        improved_income = improved_result.income_range.expected_estimate
        if improved_income != base_income:
            parts.append(
                f"Expected income: ${base_income} → ${improved_income} "
                f"({percent_change(base_income, improved_income):.1f}% improvement)."
            )

        return " ".join(parts)
