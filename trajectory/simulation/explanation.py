"""Human-readable explanation of a simulation result"""

import logging
from typing import List

from trajectory.models.simulation import BurnoutRisk, SimulationResult, YearlyProjection

logger = logging.getLogger(__name__)

BURNOUT_TEXT = {
    BurnoutRisk.LOW: (
        "Burnout risk is LOW. Your current activity patterns are sustainable. "
        "You're maintaining a healthy balance between effort and rest."
    ),
    BurnoutRisk.MEDIUM: (
        "Burnout risk is MEDIUM. Monitor your activity levels and ensure adequate rest. "
        "Consider slightly reducing intensity or frequency if you feel overwhelmed."
    ),
    BurnoutRisk.HIGH: (
        "Burnout risk is HIGH. Your current trajectory suggests unsustainable effort levels. "
        "Strongly consider: (1) Reducing daily activity intensity, (2) Taking regular breaks, "
        "(3) Focusing on consistency over intensity."
    ),
}


class SimulationExplanationGenerator:
    """Builds the sectioned free-text explanation attached to a SimulationResult"""

    def generate_explanation(self, result: SimulationResult, consistency_score: float) -> str:
        sections = [
            self._overview(result.yearly_projections, consistency_score),
            self._xp_trajectory(result.yearly_projections),
            self._skill_growth(result.average_skill_growth_index),
            "=== Burnout Risk Assessment ===\n" + BURNOUT_TEXT[result.burnout_risk],
            self._income(result),
            self._emigration(result.emigration_probability),
        ]
        return "\n\n".join(sections)

    @staticmethod
    def _overview(projections: List[YearlyProjection], consistency_score: float) -> str:
        start_level = projections[0].projected_level
        end_level = projections[-1].projected_level
        increase = end_level - start_level

        text = (
            "=== Simulation Overview ===\n"
            f"Based on your current consistency score of {consistency_score:.1f}%, "
            f"you're projected to reach Level {end_level} over the next {len(projections)} years "
            f"(from Level {start_level}, a +{increase} level increase)."
        )
        if increase > 5:
            text += " This indicates strong growth potential."
        elif increase < 2:
            text += " Growth is modest; consider increasing activity consistency."
        else:
            text += " Growth is steady and sustainable."
        return text

    @staticmethod
    def _xp_trajectory(projections: List[YearlyProjection]) -> str:
        lines = ["=== XP Trajectory ==="]
        for projection in projections:
            line = f"Year {projection.year}: {projection.projected_xp} XP (Level {projection.projected_level})"
            rate = projection.xp_growth_rate
            if rate < -10:
                line += " [Declining growth - burnout risk increasing]"
            elif rate < 0:
                line += " [Growth slowing]"
            elif rate > 50:
                line += " [Strong growth]"
            elif rate > 20:
                line += " [Healthy growth]"
            lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def _skill_growth(average: float) -> str:
        if average >= 70:
            verdict = ("indicating exceptional growth potential. "
                       "You're on track to develop strong expertise in your areas of focus.")
        elif average >= 50:
            verdict = ("showing solid progress. "
                       "Continued consistency will lead to significant skill development.")
        elif average >= 30:
            verdict = ("indicating moderate growth. "
                       "Consider increasing goal engagement to accelerate skill development.")
        else:
            verdict = ("suggesting slow growth. "
                       "Focus on completing more challenging goals and maintaining better consistency.")
        return f"=== Skill Growth Analysis ===\nYour skill growth index is {average:.1f}/100, {verdict}"

    @staticmethod
    def _income(result: SimulationResult) -> str:
        income = result.income_range
        return (
            "=== Income Projection ===\n"
            "Based on skill growth and level progression:\n"
            f"  Low estimate: ${income.low_estimate}/year (25th percentile)\n"
            f"  Expected: ${income.expected_estimate}/year (50th percentile)\n"
            f"  High estimate: ${income.high_estimate}/year (75th percentile)\n"
            "\nNote: These are probabilistic estimates based on skill level progression. "
            "Actual income depends on many factors including location, industry, and market conditions."
        )

    @staticmethod
    def _emigration(probability: float) -> str:
        if probability >= 70:
            label = "HIGH"
            text = ("High skill growth combined with income potential suggests strong motivation "
                    "to seek opportunities in markets with better compensation or opportunities.")
        elif probability >= 40:
            label = "MODERATE"
            text = ("Moderate likelihood of seeking opportunities abroad, especially if local market "
                    "conditions don't align with skill growth.")
        else:
            label = "LOW"
            text = ("Lower probability suggests current trajectory may be sustainable locally, "
                    "or skill growth may not yet be at levels that typically drive emigration decisions.")
        return f"=== Emigration Probability ===\nEmigration probability: {probability:.1f}% ({label})\n{text}"
