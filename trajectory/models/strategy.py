"""Pydantic models for recommendations, scenarios and effectiveness tracking"""
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

from trajectory.models.simulation import SimulationInput, SimulationResult


class RecommendationType(str, Enum):
    REDUCE_BURNOUT_RISK = "REDUCE_BURNOUT_RISK"
    IMPROVE_CONSISTENCY = "IMPROVE_CONSISTENCY"
    ADD_GOAL_FOCUS = "ADD_GOAL_FOCUS"
    ADJUST_HABIT_DIFFICULTY = "ADJUST_HABIT_DIFFICULTY"
    ADD_HABITS_FOR_GROWTH = "ADD_HABITS_FOR_GROWTH"
    BALANCE_EFFORT = "BALANCE_EFFORT"
    OPTIMIZE_STRATEGY = "OPTIMIZE_STRATEGY"


class RecommendationImpact(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Recommendation(BaseModel):
    """Actionable advice derived from a simulation result"""
    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    description: str = Field(min_length=1)
    reason: str
    expected_benefit: str
    risk_note: str = ""
    impact: RecommendationImpact
    priority_score: float = Field(ge=0, le=100)


class GeneratedScenario(BaseModel):
    """What-if simulation input produced by applying one or more recommendations"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    applied_recommendations: Tuple[Recommendation, ...] = Field(min_length=1)
    modified_input: SimulationInput
    rationale: str
    parameter_changes: Dict[str, str] = Field(default_factory=dict)


class BurnoutRiskChange(str, Enum):
    IMPROVED = "IMPROVED"
    WORSENED = "WORSENED"
    UNCHANGED = "UNCHANGED"


class ScenarioImpactSummary(BaseModel):
    """Comparison of a scenario's simulation against the base simulation"""
    model_config = ConfigDict(frozen=True)

    scenario: GeneratedScenario
    base_result: SimulationResult
    improved_result: SimulationResult
    xp_improvement: float
    skill_growth_improvement: float
    skill_growth_delta: float
    burnout_risk_change: BurnoutRiskChange
    income_projection_delta: int
    emigration_probability_change: float
    impact_description: str


class DeviationSeverity(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class DeviationReport(BaseModel):
    """How far an observed outcome strayed from its prediction"""
    model_config = ConfigDict(frozen=True)

    xp_deviation: float
    skill_growth_deviation: float
    deviation_analysis: str
    severity: DeviationSeverity
    most_affected_metric: str


class LearningSignal(str, Enum):
    OVER_OPTIMISTIC_RECOMMENDATION = "OVER_OPTIMISTIC_RECOMMENDATION"
    LOW_USER_COMPLIANCE = "LOW_USER_COMPLIANCE"
    INCORRECT_MODEL_ASSUMPTION = "INCORRECT_MODEL_ASSUMPTION"
    RECOMMENDATION_WAS_CONSERVATIVE = "RECOMMENDATION_WAS_CONSERVATIVE"
    EXTERNAL_FACTORS_INFLUENCE = "EXTERNAL_FACTORS_INFLUENCE"


class RecommendationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    recommendation: Recommendation
    expected_impact: ScenarioImpactSummary
    actual_result: SimulationResult
    effectiveness_score: float = Field(ge=0, le=100)


class EffectivenessEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: RecommendationOutcome
    deviation_report: DeviationReport
    learning_signals: Tuple[LearningSignal, ...] = ()
    explanation: str = Field(min_length=1)
    confidence_level: float = Field(ge=0, le=100)
