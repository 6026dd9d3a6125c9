"""Unit tests for simulation explanations"""
from trajectory.models.simulation import BurnoutRisk
from trajectory.simulation.engine import FutureSimulationService

SECTIONS = [
    "=== Simulation Overview ===",
    "=== XP Trajectory ===",
    "=== Skill Growth Analysis ===",
    "=== Burnout Risk Assessment ===",
    "=== Income Projection ===",
    "=== Emigration Probability ===",
]


def test_sections_in_order(simulation_input):
    explanation = FutureSimulationService().simulate(simulation_input).explanation

    positions = [explanation.index(section) for section in SECTIONS]
    assert positions == sorted(positions)


def test_one_line_per_year(make_simulation_input):
    result = FutureSimulationService().simulate(make_simulation_input(years_to_simulate=4))

    for projection in result.yearly_projections:
        assert f"Year {projection.year}: {projection.projected_xp} XP" in result.explanation


def test_overview_mentions_consistency(make_simulation_input):
    result = FutureSimulationService().simulate(make_simulation_input(habits_consistency_score=62.5))
    assert "consistency score of 62.5%" in result.explanation


def test_burnout_text_matches_tier(make_simulation_input):
    result = FutureSimulationService().simulate(make_simulation_input(years_to_simulate=1))

    assert result.burnout_risk == BurnoutRisk.LOW
    assert "Burnout risk is LOW" in result.explanation


def test_flat_projection_is_modest(make_simulation_input):
    """Test a flat trajectory is described as modest growth"""
    result = FutureSimulationService().simulate(make_simulation_input(average_daily_effort=0.0))

    assert "Growth is modest" in result.explanation
    assert "suggesting slow growth" in result.explanation
