"""
Fleet Seed - Demo machine catalogue and initial telemetry history

Builds the 25-machine demo plant. Each machine gets 21 one-minute-spaced
samples around its class baseline, skewed hotter and shakier for machines
seeded as warning/critical, and is scored once so the dashboard has a
risk picture before the first tick.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional

import maintenance_cost_engine
from fleet_models import MachineClass, RiskTier, Sample, utc_now
from fleet_state import DEFAULT_HISTORY_CAPACITY, FleetState
from risk_scoring_engine import RiskScorer

logger = logging.getLogger(__name__)

SEED_SAMPLES = 21

# Offsets applied to the whole seed history by seed status
SEED_OFFSETS = {
    RiskTier.HEALTHY: {"temperature": 0.0, "vibration": 0.0},
    RiskTier.WARNING: {"temperature": 10.0, "vibration": 0.3},
    RiskTier.CRITICAL: {"temperature": 20.0, "vibration": 0.6},
}

# (id, name, class, location, seed status)
DEFAULT_FLEET = [
    ("MCH-001", "Precision Mill X1", MachineClass.CNC_MILL, "Floor A", RiskTier.HEALTHY),
    ("MCH-002", "Pressure Pump P2", MachineClass.INDUSTRIAL_PUMP, "Line 2", RiskTier.WARNING),
    ("MCH-003", "Gen Turbine T4", MachineClass.TURBINE_GENERATOR, "Sector 4", RiskTier.CRITICAL),
    ("MCH-004", "Belt Motor B12", MachineClass.CONVEYOR_MOTOR, "Yard B", RiskTier.HEALTHY),
    ("MCH-005", "Lathe Pro Z5", MachineClass.CNC_MILL, "Floor A", RiskTier.WARNING),
    ("MCH-006", "Coolant Pump CP1", MachineClass.INDUSTRIAL_PUMP, "East Wing", RiskTier.HEALTHY),
    ("MCH-007", "Aux Turbine T7", MachineClass.TURBINE_GENERATOR, "Backup St.", RiskTier.HEALTHY),
    ("MCH-008", "Sorter Motor S1", MachineClass.CONVEYOR_MOTOR, "Sorting 1", RiskTier.WARNING),
    ("MCH-009", "Master Mill M1", MachineClass.CNC_MILL, "Floor B", RiskTier.CRITICAL),
    ("MCH-010", "Supply Pump SP9", MachineClass.INDUSTRIAL_PUMP, "Cooling Twr", RiskTier.HEALTHY),
    ("MCH-011", "Sorter Motor S2", MachineClass.CONVEYOR_MOTOR, "Sorting 2", RiskTier.HEALTHY),
    ("MCH-012", "Precision Lathe L1", MachineClass.CNC_MILL, "Lab X", RiskTier.HEALTHY),
    ("MCH-013", "Grid Gen G2", MachineClass.TURBINE_GENERATOR, "Power Grid", RiskTier.WARNING),
    ("MCH-014", "Flow Pump FP4", MachineClass.INDUSTRIAL_PUMP, "Dynamics Lab", RiskTier.HEALTHY),
    ("MCH-015", "Loader Belt LB1", MachineClass.CONVEYOR_MOTOR, "Loading Bay", RiskTier.WARNING),
    ("MCH-016", "Tooling Mill TM6", MachineClass.CNC_MILL, "Tool Room", RiskTier.HEALTHY),
    ("MCH-017", "Waste Pump WP2", MachineClass.INDUSTRIAL_PUMP, "Water Trt.", RiskTier.WARNING),
    ("MCH-018", "Main Substation T1", MachineClass.TURBINE_GENERATOR, "Main Sub.", RiskTier.HEALTHY),
    ("MCH-019", "Packager Belt PB3", MachineClass.CONVEYOR_MOTOR, "Packaging 1", RiskTier.HEALTHY),
    ("MCH-020", "Heavy Mill HM1", MachineClass.CNC_MILL, "Heavy Floor", RiskTier.WARNING),
    ("MCH-021", "Hydraulic Pump HP7", MachineClass.INDUSTRIAL_PUMP, "Hydra St.", RiskTier.HEALTHY),
    ("MCH-022", "Warehouse Belt WB1", MachineClass.CONVEYOR_MOTOR, "Whouse A", RiskTier.HEALTHY),
    ("MCH-023", "Steam Turbine ST5", MachineClass.TURBINE_GENERATOR, "Steam Plant", RiskTier.WARNING),
    ("MCH-024", "Proto Mill PM9", MachineClass.CNC_MILL, "Proto Wing", RiskTier.HEALTHY),
    ("MCH-025", "Fuel Pump FP1", MachineClass.INDUSTRIAL_PUMP, "Fuel Inj.", RiskTier.CRITICAL),
]


def generate_initial_history(
    machine_class: MachineClass,
    seed_status: RiskTier = RiskTier.HEALTHY,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[Sample]:
    """
    Generate seed telemetry, oldest first, ending at `now`.

    Returns:
        SEED_SAMPLES samples spaced one minute apart
    """
    now = now or utc_now()
    rng = rng or random.Random()
    offsets = SEED_OFFSETS[seed_status]
    base_temp = machine_class.baseline_temperature + offsets["temperature"]

    history = []
    for minutes_ago in range(SEED_SAMPLES - 1, -1, -1):
        history.append(
            Sample(
                temperature=base_temp + rng.random() * 10 - 5,
                vibration=0.1 + offsets["vibration"] + rng.random() * 0.4,
                pressure=90 + rng.random() * 30,
                rpm=1500 + rng.random() * 200,
                operating_hours=1200 - minutes_ago,
                timestamp=now - timedelta(minutes=minutes_ago),
            )
        )
    return history


def build_default_fleet(
    history_capacity: int = DEFAULT_HISTORY_CAPACITY,
    seed: Optional[int] = None,
    catalogue=None,
) -> FleetState:
    """
    Create a FleetState populated with the demo catalogue.

    Args:
        history_capacity: Ring buffer size per machine
        seed: Random seed for reproducible seed histories
        catalogue: Override for DEFAULT_FLEET (same tuple layout)
    """
    rng = random.Random(seed)
    scorer = RiskScorer()
    fleet = FleetState(history_capacity=history_capacity)
    now = utc_now()

    for machine_id, name, machine_class, location, seed_status in (
        catalogue or DEFAULT_FLEET
    ):
        history = generate_initial_history(machine_class, seed_status, now, rng)
        assessment = scorer.score(history[-1], machine_class, now)
        fleet.add_machine(
            machine_id=machine_id,
            name=name,
            machine_class=machine_class,
            location=location,
            history=history,
            assessment=assessment,
            cost=maintenance_cost_engine.cost(
                machine_class, assessment.failure_probability
            ),
        )

    logger.info(f"✅ Seeded fleet with {len(fleet)} machines")
    return fleet
