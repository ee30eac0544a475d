"""
Pytest Configuration for Machine Fleet Monitor Tests

Shared factories for samples, snapshots and a stubbed service container.
"""

import os
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from unittest.mock import MagicMock

from fleet_models import (
    CostImpact,
    MachineClass,
    MaintenanceRecommendation,
    RiskAssessment,
    Sample,
)
from fleet_state import FleetState, MachineSnapshot
from risk_scoring_engine import classify_tier, remaining_useful_life

FIXED_NOW = datetime(2026, 1, 15, 8, 0, tzinfo=timezone.utc)


def make_sample(
    temperature=60.0,
    vibration=0.2,
    pressure=100.0,
    rpm=1600.0,
    operating_hours=1200.0,
    timestamp=FIXED_NOW,
):
    return Sample(
        temperature=temperature,
        vibration=vibration,
        pressure=pressure,
        rpm=rpm,
        operating_hours=operating_hours,
        timestamp=timestamp,
    )


def make_snapshot(
    probability: int,
    machine_id: str = "MCH-TEST",
    machine_class: MachineClass = MachineClass.CNC_MILL,
    potential_savings: int = 0,
) -> MachineSnapshot:
    """Snapshot with an arbitrary probability (not necessarily reachable by rules)"""
    tier = classify_tier(probability)
    return MachineSnapshot(
        machine_id=machine_id,
        name=f"Test Machine {machine_id}",
        machine_class=machine_class,
        location="Test Bay",
        sample=make_sample(),
        assessment=RiskAssessment(
            failure_probability=probability,
            risk_tier=tier,
            remaining_useful_life_hours=remaining_useful_life(probability, tier),
            suggested_schedule=FIXED_NOW,
        ),
        cost=CostImpact(
            breakdown_cost=potential_savings,
            preventive_cost=0,
            potential_savings=potential_savings,
        ),
    )


@pytest.fixture
def sample_factory():
    return make_sample


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def recommendation():
    return MaintenanceRecommendation(
        summary="Spindle bearing wear",
        root_cause="Lubrication starvation on the main spindle bearing",
        urgency="immediate",
        steps=["Stop the spindle", "Inspect bearing", "Replace bearing"],
        parts_needed=["Spindle bearing 7014"],
    )


@pytest.fixture
def stub_analyzer(recommendation):
    """AI collaborator stand-in returning a fixed recommendation"""
    analyzer = MagicMock()
    analyzer.analyze_machine.return_value = recommendation
    analyzer.generate_fleet_report.return_value = "Fleet report text"
    analyzer.ask_machine_chat.return_value = "Machine answer"
    analyzer.ask_fleet_assistant.return_value = "Fleet answer"
    analyzer.deep_diagnostic.return_value = "Diagnostic text"
    return analyzer


@pytest.fixture
def single_machine_fleet():
    """FleetState with one healthy CNC mill"""
    from risk_scoring_engine import score
    import maintenance_cost_engine

    fleet = FleetState(history_capacity=20)
    seed = make_sample()
    assessment = score(seed, MachineClass.CNC_MILL, FIXED_NOW)
    fleet.add_machine(
        machine_id="MCH-001",
        name="Precision Mill X1",
        machine_class=MachineClass.CNC_MILL,
        location="Floor A",
        history=[seed],
        assessment=assessment,
        cost=maintenance_cost_engine.cost(MachineClass.CNC_MILL, 0),
    )
    return fleet


@pytest.fixture
def container(stub_analyzer):
    """Service container with a seeded fleet and stubbed collaborators"""
    from alert_service import NotificationDispatcher
    from fleet_seed import build_default_fleet
    from service_container import ServiceContainer

    sms = MagicMock()
    sms.config.is_configured.return_value = False
    built = ServiceContainer.build(
        fleet=build_default_fleet(seed=42),
        ai=stub_analyzer,
        dispatcher=NotificationDispatcher(sms_service=sms, endpoint=""),
        interval_seconds=3600,
    )
    yield built
    built.alert_engine.shutdown()
    built.dispatcher.shutdown()


@pytest.fixture
def api_client(container):
    """TestClient bound to the stubbed container (scheduler not started)"""
    from fastapi.testclient import TestClient

    from main import app

    app.state.container = container
    with TestClient(app) as client:
        yield client
    app.state.container = None
