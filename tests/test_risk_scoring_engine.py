"""
Tests for the failure risk scoring engine and the cost model

Run with: pytest tests/test_risk_scoring_engine.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

import maintenance_cost_engine
from fleet_models import MachineClass, RiskTier
from risk_scoring_engine import (
    RiskScorer,
    classify_tier,
    remaining_useful_life,
    score,
    suggested_schedule,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# TEST: RULES
# ═══════════════════════════════════════════════════════════════════════════════


class TestRiskRules:
    """Weighted threshold rules"""

    def test_nominal_sample_scores_zero(self, sample_factory):
        result = score(sample_factory(), MachineClass.CNC_MILL, NOW)
        assert result.failure_probability == 0
        assert result.risk_tier == RiskTier.HEALTHY
        assert result.contributing_factors == ()

    @pytest.mark.parametrize(
        "overrides,expected,factor",
        [
            ({"temperature": 85.1}, 35, "High Temperature Threshold Exceeded"),
            ({"vibration": 0.81}, 40, "Excessive Vibration Detected"),
            ({"pressure": 140.5}, 25, "Abnormal Pressure Variance"),
            ({"rpm": 1199.0}, 15, "RPM Underperformance"),
        ],
    )
    def test_single_rule_weights(self, sample_factory, overrides, expected, factor):
        result = score(sample_factory(**overrides), MachineClass.INDUSTRIAL_PUMP, NOW)
        assert result.failure_probability == expected
        assert result.contributing_factors == (factor,)

    def test_thresholds_are_strict(self, sample_factory):
        """Values exactly at a limit do not trip it"""
        sample = sample_factory(temperature=85.0, vibration=0.8, pressure=140.0, rpm=1200.0)
        assert score(sample, MachineClass.CNC_MILL, NOW).failure_probability == 0

    def test_weights_are_additive(self, sample_factory):
        sample = sample_factory(temperature=90.0, pressure=150.0)
        result = score(sample, MachineClass.CNC_MILL, NOW)
        assert result.failure_probability == 60
        assert result.contributing_factors == (
            "High Temperature Threshold Exceeded",
            "Abnormal Pressure Variance",
        )

    def test_total_clamped_to_99(self, sample_factory):
        sample = sample_factory(temperature=90.0, vibration=0.9, pressure=150.0, rpm=1000.0)
        result = score(sample, MachineClass.CNC_MILL, NOW)
        assert result.failure_probability == 99
        assert len(result.contributing_factors) == 4

    def test_machine_class_does_not_change_score(self, sample_factory):
        sample = sample_factory(vibration=0.9)
        probabilities = {
            RiskScorer().score(sample, cls, NOW).failure_probability for cls in MachineClass
        }
        assert probabilities == {40}


# ═══════════════════════════════════════════════════════════════════════════════
# TEST: TIERS, RUL, SCHEDULE
# ═══════════════════════════════════════════════════════════════════════════════


class TestTierAndLife:
    @pytest.mark.parametrize(
        "probability,tier",
        [
            (0, RiskTier.HEALTHY),
            (30, RiskTier.HEALTHY),
            (31, RiskTier.WARNING),
            (75, RiskTier.WARNING),
            (76, RiskTier.CRITICAL),
            (99, RiskTier.CRITICAL),
        ],
    )
    def test_tier_boundaries(self, probability, tier):
        assert classify_tier(probability) == tier

    def test_tier_is_monotonic(self):
        order = [RiskTier.HEALTHY, RiskTier.WARNING, RiskTier.CRITICAL]
        ranks = [order.index(classify_tier(p)) for p in range(100)]
        assert ranks == sorted(ranks)

    def test_rul_linear_below_critical(self):
        assert remaining_useful_life(0, RiskTier.HEALTHY) == 500
        assert remaining_useful_life(40, RiskTier.WARNING) == 300
        assert remaining_useful_life(75, RiskTier.WARNING) == 125

    def test_rul_collapses_when_critical(self):
        assert remaining_useful_life(80, RiskTier.CRITICAL) == 10
        assert remaining_useful_life(90, RiskTier.CRITICAL) == 5
        # floor((100-99) * 0.5) == 0, floored to one hour
        assert remaining_useful_life(99, RiskTier.CRITICAL) == 1

    def test_schedule_is_seventy_percent_of_rul(self):
        assert suggested_schedule(500, NOW) == NOW + timedelta(hours=350)
        assert suggested_schedule(1, NOW) == NOW + timedelta(hours=1)
        assert suggested_schedule(0, NOW) == NOW + timedelta(hours=1)


# ═══════════════════════════════════════════════════════════════════════════════
# TEST: COST MODEL
# ═══════════════════════════════════════════════════════════════════════════════


class TestCostModel:
    def test_base_values_per_class(self):
        assert MachineClass.TURBINE_GENERATOR.base_value == 500000
        assert MachineClass.CNC_MILL.base_value == 150000
        assert MachineClass.INDUSTRIAL_PUMP.base_value == 80000
        assert MachineClass.CONVEYOR_MOTOR.base_value == 80000

    def test_zero_probability_has_no_savings(self):
        impact = maintenance_cost_engine.cost(MachineClass.TURBINE_GENERATOR, 0)
        assert impact.breakdown_cost == 0
        assert impact.preventive_cost == 75000
        assert impact.potential_savings == 0

    def test_preventive_cost_independent_of_probability(self):
        low = maintenance_cost_engine.cost(MachineClass.INDUSTRIAL_PUMP, 10)
        high = maintenance_cost_engine.cost(MachineClass.INDUSTRIAL_PUMP, 90)
        assert low.preventive_cost == high.preventive_cost == 12000

    def test_savings_invariant_for_all_inputs(self):
        for machine_class in MachineClass:
            for probability in range(100):
                impact = maintenance_cost_engine.cost(machine_class, probability)
                assert impact.potential_savings == max(
                    0, impact.breakdown_cost - impact.preventive_cost
                )
                for value in (
                    impact.breakdown_cost,
                    impact.preventive_cost,
                    impact.potential_savings,
                ):
                    assert isinstance(value, int)
                    assert value >= 0


# ═══════════════════════════════════════════════════════════════════════════════
# TEST: WORKED EXAMPLE
# ═══════════════════════════════════════════════════════════════════════════════


def test_overloaded_mill_end_to_end(sample_factory):
    """All four rules on a mill: clamp, critical RUL, 1h schedule, cost"""
    sample = sample_factory(temperature=90, vibration=0.9, pressure=150, rpm=1000)

    assessment = score(sample, MachineClass.CNC_MILL, NOW)
    assert assessment.failure_probability == 99
    assert assessment.risk_tier == RiskTier.CRITICAL
    assert assessment.remaining_useful_life_hours == 1
    assert assessment.suggested_schedule == NOW + timedelta(hours=1)

    impact = maintenance_cost_engine.cost(MachineClass.CNC_MILL, 99)
    assert impact.breakdown_cost == 371250
    assert impact.preventive_cost == 22500
    assert impact.potential_savings == 348750
