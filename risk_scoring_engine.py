"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                    FAILURE RISK SCORING ENGINE v1.2                            ║
║                        Machine Fleet Monitor                                   ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║  Purpose: Turn one telemetry sample into an explainable failure risk          ║
║                                                                                ║
║  Strategy: deterministic weighted thresholds                                   ║
║  - Every exceeded threshold adds its weight and names a contributing factor   ║
║  - Weights are additive, total clamped to 99                                   ║
║  - Tier, remaining useful life and maintenance window follow from the total   ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional

from fleet_models import MachineClass, RiskAssessment, RiskTier, Sample, utc_now

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# THRESHOLDS
# ═══════════════════════════════════════════════════════════════════════════════

# Evaluated in this order; factor order in the assessment follows it
RISK_RULES = [
    {
        "channel": "temperature",
        "direction": "above",
        "limit": 85.0,  # °C
        "weight": 35,
        "factor": "High Temperature Threshold Exceeded",
    },
    {
        "channel": "vibration",
        "direction": "above",
        "limit": 0.8,  # mm/s
        "weight": 40,
        "factor": "Excessive Vibration Detected",
    },
    {
        "channel": "pressure",
        "direction": "above",
        "limit": 140.0,  # PSI
        "weight": 25,
        "factor": "Abnormal Pressure Variance",
    },
    {
        "channel": "rpm",
        "direction": "below",
        "limit": 1200.0,
        "weight": 15,
        "factor": "RPM Underperformance",
    },
]

MAX_PROBABILITY = 99

# Strict lower bounds, checked highest first
CRITICAL_ABOVE = 75
WARNING_ABOVE = 30

RUL_HOURS_PER_POINT = 5.0
CRITICAL_RUL_HOURS_PER_POINT = 0.5
SCHEDULE_RUL_FRACTION = 0.7


def classify_tier(probability: int) -> RiskTier:
    """Map failure probability to a risk tier"""
    if probability > CRITICAL_ABOVE:
        return RiskTier.CRITICAL
    if probability > WARNING_ABOVE:
        return RiskTier.WARNING
    return RiskTier.HEALTHY


def remaining_useful_life(probability: int, tier: RiskTier) -> int:
    """
    Estimated hours until failure.

    Once critical the estimate collapses ten times faster, but never below 1h.
    """
    headroom = 100 - probability
    if tier == RiskTier.CRITICAL:
        return max(1, math.floor(headroom * CRITICAL_RUL_HOURS_PER_POINT))
    return max(0, math.floor(headroom * RUL_HOURS_PER_POINT))


def suggested_schedule(rul_hours: int, now: datetime) -> datetime:
    """Maintenance window at 70% of the remaining life, at least one hour out"""
    offset_hours = max(1, math.floor(rul_hours * SCHEDULE_RUL_FRACTION))
    return now + timedelta(hours=offset_hours)


def _exceeds(rule: dict, sample: Sample) -> bool:
    value = getattr(sample, rule["channel"])
    if rule["direction"] == "above":
        return value > rule["limit"]
    return value < rule["limit"]


class RiskScorer:
    """
    Rule-based failure scoring

    The machine class is accepted for symmetry with the cost model; the
    current rule set is the same for every class.
    """

    def __init__(self, rules: Optional[List[dict]] = None):
        self.rules = rules or RISK_RULES

    def score(
        self,
        sample: Sample,
        machine_class: MachineClass,
        now: Optional[datetime] = None,
    ) -> RiskAssessment:
        now = now or utc_now()
        total = 0
        factors = []

        for rule in self.rules:
            if _exceeds(rule, sample):
                total += rule["weight"]
                factors.append(rule["factor"])

        probability = min(total, MAX_PROBABILITY)
        tier = classify_tier(probability)
        rul = remaining_useful_life(probability, tier)

        return RiskAssessment(
            failure_probability=probability,
            risk_tier=tier,
            remaining_useful_life_hours=rul,
            suggested_schedule=suggested_schedule(rul, now),
            contributing_factors=tuple(factors),
        )


def score(
    sample: Sample, machine_class: MachineClass, now: Optional[datetime] = None
) -> RiskAssessment:
    """Quick function to score a sample with the default rules"""
    return RiskScorer().score(sample, machine_class, now)
