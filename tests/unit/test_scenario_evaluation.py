"""Unit tests for scenario evaluation"""
import pytest

from trajectory.exceptions import ValidationError
from trajectory.models.simulation import BurnoutRisk
from trajectory.models.strategy import (
    BurnoutRiskChange,
    GeneratedScenario,
    Recommendation,
    RecommendationImpact,
    RecommendationType,
)
from trajectory.simulation.engine import FutureSimulationService
from trajectory.strategy.scenario_evaluation import (
    ScenarioEvaluationService,
    burnout_risk_change,
    percent_change,
)

RECOMMENDATION = Recommendation(
    type=RecommendationType.IMPROVE_CONSISTENCY,
    description="Complete habits daily",
    reason="Low consistency",
    expected_benefit="Steadier growth",
    impact=RecommendationImpact.HIGH,
    priority_score=85.0,
)


def _scenario(modified_input, name="Test Scenario"):
    return GeneratedScenario(
        name=name,
        applied_recommendations=(RECOMMENDATION,),
        modified_input=modified_input,
        rationale="Test rationale",
    )


class TestHelpers:
    """Test percent and burnout comparisons"""

    @pytest.mark.parametrize("base,new,expected", [
        (100, 150, 50.0),
        (200, 100, -50.0),
        (0, 10, 100.0),
        (0, 0, 0.0),
    ])
    def test_percent_change(self, base, new, expected):
        assert percent_change(base, new) == pytest.approx(expected)

    def test_burnout_risk_change(self):
        assert burnout_risk_change(BurnoutRisk.HIGH, BurnoutRisk.LOW) == BurnoutRiskChange.IMPROVED
        assert burnout_risk_change(BurnoutRisk.LOW, BurnoutRisk.MEDIUM) == BurnoutRiskChange.WORSENED
        assert burnout_risk_change(BurnoutRisk.MEDIUM, BurnoutRisk.MEDIUM) == BurnoutRiskChange.UNCHANGED


class TestEvaluateScenarios:
    """Test scenario re-simulation and impact summaries"""

    def test_unchanged_input_has_no_impact(self, simulation_input):
        """Test a scenario equal to the base shows zero change"""
        engine = FutureSimulationService()
        base_result = engine.simulate(simulation_input)

        [summary] = ScenarioEvaluationService(engine).evaluate_scenarios(
            simulation_input, base_result, [_scenario(simulation_input)]
        )

        assert summary.xp_improvement == 0.0
        assert summary.skill_growth_delta == 0.0
        assert summary.burnout_risk_change == BurnoutRiskChange.UNCHANGED
        assert summary.income_projection_delta == 0
        assert "Level progression" not in summary.impact_description
        assert "Burnout risk" not in summary.impact_description

    def test_improved_scenario(self, make_simulation_input, simulation_input):
        engine = FutureSimulationService()
        base_result = engine.simulate(simulation_input)
        improved = make_simulation_input(habits_consistency_score=90.0, active_days_last_month=28)

        [summary] = ScenarioEvaluationService(engine).evaluate_scenarios(
            simulation_input, base_result, [_scenario(improved)]
        )

        assert summary.xp_improvement > 0
        assert summary.skill_growth_delta > 0
        assert summary.impact_description.startswith(
            f"Final XP: {base_result.final_projection.projected_xp} → "
        )

    def test_summaries_keep_scenario_order(self, make_simulation_input, simulation_input):
        engine = FutureSimulationService()
        base_result = engine.simulate(simulation_input)
        scenarios = [
            _scenario(make_simulation_input(habits_consistency_score=30.0), "Worse"),
            _scenario(make_simulation_input(habits_consistency_score=90.0), "Better"),
        ]

        summaries = ScenarioEvaluationService(engine).evaluate_scenarios(simulation_input, base_result, scenarios)

        assert [s.scenario.name for s in summaries] == ["Worse", "Better"]
        assert summaries[0].xp_improvement < 0 < summaries[1].xp_improvement

    def test_empty_scenarios(self, simulation_input):
        engine = FutureSimulationService()
        base_result = engine.simulate(simulation_input)
        assert ScenarioEvaluationService(engine).evaluate_scenarios(simulation_input, base_result, []) == []

    def test_missing_base(self, simulation_input):
        service = ScenarioEvaluationService()
        with pytest.raises(ValidationError):
            service.evaluate_scenarios(simulation_input, None, [])
        with pytest.raises(ValidationError):
            service.evaluate_scenarios(None, None, [])
