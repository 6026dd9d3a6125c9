"""
Recommendation effectiveness

Post-hoc comparison of what a scenario predicted against what actually
happened after the user followed the recommendation.

Score (0-100):
    60% XP match    = 100 - |expected XP % - actual XP %|
    40% skill match = 100 - |expected avg skill index - actual avg skill index|
each clamped to [0, 100]. Actual XP % is measured against the same base run
the prediction was made from.

Deviation severity uses max(|XP deviation|, |skill deviation| x 10):
    < 5 NONE, < 15 LOW, < 30 MEDIUM, < 50 HIGH, otherwise CRITICAL
"""

import logging
from typing import List, Tuple

from trajectory.exceptions import ValidationError
from trajectory.models.simulation import SimulationResult
from trajectory.models.strategy import (
    BurnoutRiskChange,
    DeviationReport,
    DeviationSeverity,
    EffectivenessEvaluation,
    LearningSignal,
    RecommendationOutcome,
    ScenarioImpactSummary,
)
from trajectory.strategy.scenario_evaluation import percent_change

logger = logging.getLogger(__name__)

XP_WEIGHT = 0.6
SKILL_WEIGHT = 0.4
SKILL_DEVIATION_SCALE = 10.0

SEVERITY_BREAKPOINTS: Tuple[Tuple[float, DeviationSeverity], ...] = (
    (5.0, DeviationSeverity.NONE),
    (15.0, DeviationSeverity.LOW),
    (30.0, DeviationSeverity.MEDIUM),
    (50.0, DeviationSeverity.HIGH),
)

CONFIDENCE_ADJUSTMENT = {
    DeviationSeverity.NONE: 20.0,
    DeviationSeverity.LOW: 10.0,
    DeviationSeverity.MEDIUM: 0.0,
    DeviationSeverity.HIGH: -10.0,
    DeviationSeverity.CRITICAL: -20.0,
}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def actual_xp_improvement(expected_impact: ScenarioImpactSummary, actual_result: SimulationResult) -> float:
    """XP % change of the observed result over the prediction's base run"""
    return percent_change(
        expected_impact.base_result.final_projection.projected_xp,
        actual_result.final_projection.projected_xp,
    )


def severity_for(max_deviation: float) -> DeviationSeverity:
    for limit, severity in SEVERITY_BREAKPOINTS:
        if max_deviation < limit:
            return severity
    return DeviationSeverity.CRITICAL


class RecommendationEffectivenessService:
    """Scores followed recommendations against their predicted impact"""

    def evaluate_effectiveness(
        self,
        expected_impact: ScenarioImpactSummary,
        actual_result: SimulationResult,
    ) -> EffectivenessEvaluation:
        if expected_impact is None:
            raise ValidationError("Expected impact is required", field="expected_impact")
        if actual_result is None:
            raise ValidationError("Actual result is required", field="actual_result")

        actual_xp = actual_xp_improvement(expected_impact, actual_result)
        score = self.calculate_effectiveness_score(expected_impact, actual_result, actual_xp)

        outcome = RecommendationOutcome(
            recommendation=expected_impact.scenario.applied_recommendations[0],
            expected_impact=expected_impact,
            actual_result=actual_result,
            effectiveness_score=score,
        )
        report = self.analyze_deviations(expected_impact, actual_result, actual_xp)
        signals = self._learning_signals(expected_impact, actual_result, report, score, actual_xp)

        logger.info(
            f"Recommendation {outcome.recommendation.type.value} effectiveness {score:.1f}, "
            f"deviation {report.severity.value}, signals: "
            f"{', '.join(s.value for s in signals) or 'none'}"
        )

        return EffectivenessEvaluation(
            outcome=outcome,
            deviation_report=report,
            learning_signals=tuple(signals),
            explanation=self._explain(outcome, report, signals),
            confidence_level=_clamp(70.0 + CONFIDENCE_ADJUSTMENT[report.severity]),
        )

    @staticmethod
    def calculate_effectiveness_score(
        expected_impact: ScenarioImpactSummary,
        actual_result: SimulationResult,
        actual_xp: float,
    ) -> float:
        xp_match = _clamp(100.0 - abs(expected_impact.xp_improvement - actual_xp))
        skill_match = _clamp(
            100.0 - abs(
                expected_impact.improved_result.average_skill_growth_index
                - actual_result.average_skill_growth_index
            )
        )
        return _clamp(xp_match * XP_WEIGHT + skill_match * SKILL_WEIGHT)

    @staticmethod
    def analyze_deviations(
        expected_impact: ScenarioImpactSummary,
        actual_result: SimulationResult,
        actual_xp: float,
    ) -> DeviationReport:
        xp_deviation = actual_xp - expected_impact.xp_improvement
        skill_deviation = (
            actual_result.average_skill_growth_index
            - expected_impact.improved_result.average_skill_growth_index
        )
        scaled_skill = abs(skill_deviation * SKILL_DEVIATION_SCALE)

        most_affected = "XP Growth" if abs(xp_deviation) > scaled_skill else "Skill Growth"
        severity = severity_for(max(abs(xp_deviation), scaled_skill))

        analysis = [f"Deviation severity: {severity.value}."]
        if abs(xp_deviation) > 5.0:
            if xp_deviation > 0:
                analysis.append(f"XP improvement exceeded expectations by +{xp_deviation:.1f}%.")
            else:
                analysis.append(f"XP improvement fell short by {abs(xp_deviation):.1f}%.")
        if abs(skill_deviation) > 2.0:
            if skill_deviation > 0:
                analysis.append(f"Skill growth exceeded expectations by +{skill_deviation:.1f} points.")
            else:
                analysis.append(f"Skill growth fell short by {abs(skill_deviation):.1f} points.")
        analysis.append(f"Most affected metric: {most_affected}.")

        return DeviationReport(
            xp_deviation=xp_deviation,
            skill_growth_deviation=skill_deviation,
            deviation_analysis=" ".join(analysis),
            severity=severity,
            most_affected_metric=most_affected,
        )

    @staticmethod
    def _learning_signals(
        expected_impact: ScenarioImpactSummary,
        actual_result: SimulationResult,
        report: DeviationReport,
        score: float,
        actual_xp: float,
    ) -> List[LearningSignal]:
        signals: List[LearningSignal] = []
        expected_xp = expected_impact.xp_improvement

        if score < 50.0:
            if actual_xp < expected_xp - 10.0 and report.severity in (
                DeviationSeverity.HIGH, DeviationSeverity.CRITICAL
            ):
                signals.append(LearningSignal.OVER_OPTIMISTIC_RECOMMENDATION)
                signals.append(LearningSignal.LOW_USER_COMPLIANCE)
            signals.append(LearningSignal.INCORRECT_MODEL_ASSUMPTION)
        elif score > 80.0:
            if actual_xp > expected_xp + 10.0:
                signals.append(LearningSignal.RECOMMENDATION_WAS_CONSERVATIVE)
        elif report.severity == DeviationSeverity.MEDIUM:
            signals.append(LearningSignal.EXTERNAL_FACTORS_INFLUENCE)

        # Predicted a burnout tier move that never happened
        if (
            expected_impact.burnout_risk_change != BurnoutRiskChange.UNCHANGED
            and actual_result.burnout_risk == expected_impact.base_result.burnout_risk
            and LearningSignal.INCORRECT_MODEL_ASSUMPTION not in signals
        ):
            signals.append(LearningSignal.INCORRECT_MODEL_ASSUMPTION)

        return signals

    @staticmethod
    def _explain(
        outcome: RecommendationOutcome,
        report: DeviationReport,
        signals: List[LearningSignal],
    ) -> str:
        score = outcome.effectiveness_score
        parts = [
            f"Effectiveness Score: {score:.1f}/100.",
            f"The recommendation '{outcome.recommendation.description}'",
        ]

        if score >= 70.0:
            parts.append("performed well, with actual results closely matching expectations.")
        elif score >= 50.0:
            parts.append("performed moderately, with some deviation from expected outcomes.")
        else:
            parts.append("performed below expectations, with significant deviation from predicted results.")

        if report.severity != DeviationSeverity.NONE:
            parts.append(report.deviation_analysis)

        if signals:
            parts.append(
                "Key insights: " + "; ".join(s.value.lower().replace("_", " ") for s in signals) + "."
            )

        return " ".join(parts)
