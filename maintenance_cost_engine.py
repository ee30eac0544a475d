"""
Maintenance Cost Engine - Breakdown vs. preventive cost projection

Translates failure probability into money:
- breakdown_cost: expected cost of running to failure
- preventive_cost: planned maintenance, independent of risk
- potential_savings: what acting now saves (never negative)

All figures are whole currency units; the currency is up to the deployment.
"""

import math

from fleet_models import CostImpact, MachineClass

# Running to failure costs 2.5x the machine's value, scaled by probability
BREAKDOWN_MULTIPLIER = 2.5
PREVENTIVE_FRACTION = 0.15


def cost(machine_class: MachineClass, probability: int) -> CostImpact:
    """
    Project maintenance economics for a machine.

    Args:
        machine_class: Machine family (selects the base value)
        probability: Failure probability 0-99

    Returns:
        CostImpact with non-negative integer figures
    """
    base_value = machine_class.base_value
    breakdown_cost = math.floor(base_value * (probability / 100) * BREAKDOWN_MULTIPLIER)
    preventive_cost = math.floor(base_value * PREVENTIVE_FRACTION)

    return CostImpact(
        breakdown_cost=breakdown_cost,
        preventive_cost=preventive_cost,
        potential_savings=max(0, breakdown_cost - preventive_cost),
    )
