"""
Strategy recommendations

Reads a SimulationResult and produces prioritized advice. Rules are grouped
by concern (burnout, skill growth, XP growth, consistency, goal engagement);
the combined list is sorted by priority, highest first.
"""

import logging
from typing import List

from trajectory.exceptions import ValidationError
from trajectory.models.simulation import BurnoutRisk, SimulationResult
from trajectory.models.strategy import (
    Recommendation,
    RecommendationImpact,
    RecommendationType,
)

logger = logging.getLogger(__name__)


class StrategyRecommendationService:
    """Turns simulation output into recommendations"""

    def generate_recommendations(self, result: SimulationResult) -> List[Recommendation]:
        if result is None:
            raise ValidationError("Simulation result is required", field="result")

        recommendations: List[Recommendation] = []
        self._burnout(result, recommendations)
        self._skill_growth(result, recommendations)
        self._xp_growth(result, recommendations)
        self._consistency(result, recommendations)
        self._goal_engagement(result, recommendations)

        recommendations.sort(key=lambda r: r.priority_score, reverse=True)
        logger.info(
            f"Generated {len(recommendations)} recommendations "
            f"({', '.join(r.type.value for r in recommendations) or 'none'})"
        )
        return recommendations

    @staticmethod
    def _burnout(result: SimulationResult, recommendations: List[Recommendation]) -> None:
        if result.burnout_risk == BurnoutRisk.HIGH:
            recommendations.append(Recommendation(
                type=RecommendationType.REDUCE_BURNOUT_RISK,
                description="Reduce daily effort intensity and habit difficulty to prevent burnout",
                reason=("Your simulation shows HIGH burnout risk. "
                        "Current trajectory suggests unsustainable effort levels."),
                expected_benefit="Lower burnout risk, improved sustainability, and better long-term growth potential",
                risk_note="May temporarily slow XP growth, but prevents future decline from burnout",
                impact=RecommendationImpact.HIGH,
                priority_score=90.0,
            ))
            if result.yearly_projections[0].skill_growth_index > 60:
                recommendations.append(Recommendation(
                    type=RecommendationType.ADJUST_HABIT_DIFFICULTY,
                    description="Consider reducing difficulty of 1-2 habits from high (4-5) to medium (3) difficulty",
                    reason="High skill growth combined with burnout risk suggests too much intensity",
                    expected_benefit="Maintains growth momentum while reducing stress and burnout risk",
                    risk_note="May slightly reduce XP per habit, but improves consistency and sustainability",
                    impact=RecommendationImpact.MEDIUM,
                    priority_score=75.0,
                ))
        elif result.burnout_risk == BurnoutRisk.MEDIUM:
            recommendations.append(Recommendation(
                type=RecommendationType.BALANCE_EFFORT,
                description="Balance your effort levels - consider taking 1-2 rest days per week",
                reason=("Your simulation indicates MEDIUM burnout risk. "
                        "Current patterns may lead to increased risk over time"),
                expected_benefit="Prevents escalation to high burnout risk while maintaining growth",
                risk_note="Requires discipline to balance activity and rest",
                impact=RecommendationImpact.MEDIUM,
                priority_score=60.0,
            ))

    @staticmethod
    def _skill_growth(result: SimulationResult, recommendations: List[Recommendation]) -> None:
        average = result.average_skill_growth_index
        projections = result.yearly_projections

        if average < 30.0:
            recommendations.append(Recommendation(
                type=RecommendationType.ADD_GOAL_FOCUS,
                description="Focus on goal completion and add 1-2 medium-difficulty goals",
                reason=(f"Your average skill growth index is {average:.1f}/100, indicating slow skill "
                        "development. Goals drive deeper skill growth than habits alone."),
                expected_benefit=("Significant increase in skill growth index, better career trajectory, "
                                  "higher income potential"),
                risk_note="Requires dedicated time and focus on goal completion",
                impact=RecommendationImpact.HIGH,
                priority_score=85.0,
            ))
            if average < 20.0:
                recommendations.append(Recommendation(
                    type=RecommendationType.ADD_HABITS_FOR_GROWTH,
                    description="Add 1-2 medium-difficulty (3) habits to increase daily skill practice",
                    reason="Very low skill growth suggests insufficient daily practice",
                    expected_benefit="Increases daily XP gain and skill development rate",
                    risk_note="Be careful not to add too many habits at once - start with 1-2",
                    impact=RecommendationImpact.MEDIUM,
                    priority_score=70.0,
                ))
        elif average < 50.0:
            recommendations.append(Recommendation(
                type=RecommendationType.OPTIMIZE_STRATEGY,
                description="Your skill growth is moderate. Consider balancing habits and goals better",
                reason=f"Skill growth index of {average:.1f}/100 suggests room for optimization",
                expected_benefit="Potential to increase skill growth by 20-30% with better habit-goal balance",
                risk_note="May require adjusting current routines",
                impact=RecommendationImpact.MEDIUM,
                priority_score=50.0,
            ))

        if len(projections) >= 2 and (
            projections[-1].skill_growth_index < projections[0].skill_growth_index - 10
        ):
            recommendations.append(Recommendation(
                type=RecommendationType.ADD_GOAL_FOCUS,
                description="Add new goals or increase goal complexity to prevent skill plateau",
                reason="Skill growth is declining over time, indicating a plateau risk",
                expected_benefit="New challenging goals can re-energize growth trajectory",
                risk_note="Requires setting and committing to new objectives",
                impact=RecommendationImpact.HIGH,
                priority_score=80.0,
            ))

    @staticmethod
    def _xp_growth(result: SimulationResult, recommendations: List[Recommendation]) -> None:
        projections = result.yearly_projections
        if len(projections) < 2:
            return

        first, last = projections[0], projections[-1]
        if last.xp_growth_rate < -10.0:
            recommendations.append(Recommendation(
                type=RecommendationType.IMPROVE_CONSISTENCY,
                description=("Focus on consistency rather than intensity. Complete habits more regularly, "
                             "even if it means lower difficulty"),
                reason=(f"XP growth rate is declining ({last.xp_growth_rate:.1f}%), "
                        "suggesting inconsistent effort"),
                expected_benefit="Improved consistency leads to more sustainable and predictable growth",
                risk_note="May require discipline to maintain daily routines",
                impact=RecommendationImpact.HIGH,
                priority_score=85.0,
            ))

        if first.xp_growth_rate < 5.0 and last.xp_growth_rate < 5.0:
            recommendations.append(Recommendation(
                type=RecommendationType.IMPROVE_CONSISTENCY,
                description="Increase consistency by committing to 1-2 core habits daily",
                reason="XP growth is very slow, likely due to low consistency or infrequent activity",
                expected_benefit="Higher consistency will accelerate XP growth and skill development",
                risk_note="Start small - focus on 1-2 habits you can complete daily",
                impact=RecommendationImpact.HIGH,
                priority_score=75.0,
            ))

    @staticmethod
    def _consistency(result: SimulationResult, recommendations: List[Recommendation]) -> None:
        if result.burnout_risk == BurnoutRisk.LOW and result.average_skill_growth_index < 60.0:
            recommendations.append(Recommendation(
                type=RecommendationType.IMPROVE_CONSISTENCY,
                description=("Focus on maintaining consistent daily activity - "
                             "even small daily actions compound over time"),
                reason="Low burnout risk with moderate growth suggests consistency is the limiting factor",
                expected_benefit="Consistency will accelerate growth without increasing burnout risk",
                risk_note="Requires building strong daily routines",
                impact=RecommendationImpact.MEDIUM,
                priority_score=55.0,
            ))

    @staticmethod
    def _goal_engagement(result: SimulationResult, recommendations: List[Recommendation]) -> None:
        projections = result.yearly_projections
        first = projections[0]

        if first.skill_growth_index < 40.0 and result.average_skill_growth_index < 40.0:
            recommendations.append(Recommendation(
                type=RecommendationType.ADD_GOAL_FOCUS,
                description="Set 1-2 challenging long-term goals with clear milestones",
                reason=("Low skill growth suggests insufficient goal engagement. "
                        "Goals provide direction and deeper learning"),
                expected_benefit="Goals drive focused skill development and higher XP gains from meaningful progress",
                risk_note="Goals require commitment and regular progress tracking",
                impact=RecommendationImpact.HIGH,
                priority_score=70.0,
            ))

        if len(projections) >= 2 and projections[1].skill_growth_index < first.skill_growth_index - 5:
            recommendations.append(Recommendation(
                type=RecommendationType.ADD_GOAL_FOCUS,
                description="Refresh your goals regularly - add new challenging goals as you complete existing ones",
                reason="Skill growth is declining over time, suggesting need for new objectives and challenges",
                expected_benefit="New goals provide fresh motivation and prevent skill plateau",
                risk_note="Requires ongoing goal-setting and commitment",
                impact=RecommendationImpact.MEDIUM,
                priority_score=60.0,
            ))
