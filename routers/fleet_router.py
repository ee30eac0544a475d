"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                         FLEET ROUTER v1.2.0                                    ║
║                  Fleet Summary, Machine Detail & Logs                          ║
╚═══════════════════════════════════════════════════════════════════════════════╝

Endpoints:
- GET /fleet - Fleet summary with per-machine risk
- GET /machines/{machine_id} - Full machine detail (history + maintenance log)
- DELETE /machines/{machine_id} - Decommission a machine
- POST /machines/{machine_id}/logs - Append a maintenance log entry
- POST /machines/{machine_id}/analysis - AI root-cause analysis
- POST /machines/{machine_id}/diagnostic - Extended-thinking diagnosis
- POST /machines/{machine_id}/chat - Ask about one machine
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from fleet_models import MaintenanceRecommendation, RiskTier, utc_now
from fleet_state import MachineNotFoundError, MachineSnapshot
from service_container import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Fleet"])


class SensorReading(BaseModel):
    temperature: float
    vibration: float
    pressure: float
    rpm: float
    operating_hours: float
    timestamp: datetime


class RiskAssessmentModel(BaseModel):
    failure_probability: int
    risk_tier: RiskTier
    remaining_useful_life_hours: int
    suggested_schedule: datetime
    contributing_factors: List[str]


class CostImpactModel(BaseModel):
    breakdown_cost: int
    preventive_cost: int
    potential_savings: int


class MaintenanceLogModel(BaseModel):
    id: str
    timestamp: datetime
    operator: str
    action: str
    notes: str


class MachineSummary(BaseModel):
    """Machine status as shown on a fleet card"""

    id: str
    name: str
    type: str
    location: str
    status: RiskTier
    sensor_data: SensorReading
    assessment: RiskAssessmentModel
    cost_impact: CostImpactModel


class MachineDetail(MachineSummary):
    history: List[SensorReading]
    logs: List[MaintenanceLogModel]


class FleetSummary(BaseModel):
    """Fleet-wide summary statistics"""

    total_machines: int
    healthy_count: int
    warning_count: int
    critical_count: int
    total_potential_savings: int
    machines: List[MachineSummary]
    timestamp: datetime


class MaintenanceLogRequest(BaseModel):
    action: str = Field(..., min_length=1)
    notes: str = ""
    operator: str = "System"


class ChatRequest(BaseModel):
    query: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    answer: str


class DiagnosticResponse(BaseModel):
    machine_id: str
    diagnostic: str


def _matches(snapshot: MachineSnapshot, status: Optional[RiskTier], search: Optional[str]) -> bool:
    if status and snapshot.risk_tier != status:
        return False
    if search:
        needle = search.lower()
        return (
            needle in snapshot.name.lower()
            or needle in snapshot.machine_class.value.lower()
        )
    return True


def _get_snapshot(container: ServiceContainer, machine_id: str) -> MachineSnapshot:
    try:
        return container.fleet.get(machine_id)
    except MachineNotFoundError:
        raise HTTPException(status_code=404, detail=f"Machine {machine_id} not found")


@router.get("/fleet", response_model=FleetSummary)
def get_fleet_summary(
    status: Optional[RiskTier] = Query(None, description="Filter by risk tier"),
    search: Optional[str] = Query(None, description="Match on name or machine type"),
    container: ServiceContainer = Depends(get_container),
):
    """
    Get fleet-wide summary statistics.

    Counts and savings cover the whole fleet; the machine list honours
    the status/search filters.
    """
    snapshots = container.fleet.snapshots()
    counts = {tier: 0 for tier in RiskTier}
    for snapshot in snapshots:
        counts[snapshot.risk_tier] += 1

    return {
        "total_machines": len(snapshots),
        "healthy_count": counts[RiskTier.HEALTHY],
        "warning_count": counts[RiskTier.WARNING],
        "critical_count": counts[RiskTier.CRITICAL],
        "total_potential_savings": sum(s.cost.potential_savings for s in snapshots),
        "machines": [
            s.to_dict(include_history=False)
            for s in snapshots
            if _matches(s, status, search)
        ],
        "timestamp": utc_now(),
    }


@router.get("/machines/{machine_id}", response_model=MachineDetail)
def get_machine(machine_id: str, container: ServiceContainer = Depends(get_container)):
    """Full machine detail including sensor history and maintenance log"""
    return _get_snapshot(container, machine_id).to_dict()


@router.post(
    "/machines/{machine_id}/logs",
    response_model=MaintenanceLogModel,
    status_code=201,
)
def add_maintenance_log(
    machine_id: str,
    request: MaintenanceLogRequest,
    container: ServiceContainer = Depends(get_container),
):
    """Append an operator maintenance entry"""
    try:
        entry = container.fleet.append_maintenance_log(
            machine_id, request.action, request.notes, request.operator
        )
    except MachineNotFoundError:
        raise HTTPException(status_code=404, detail=f"Machine {machine_id} not found")
    return entry.to_dict()


@router.post(
    "/machines/{machine_id}/analysis", response_model=MaintenanceRecommendation
)
def analyze_machine(machine_id: str, container: ServiceContainer = Depends(get_container)):
    """AI root-cause analysis (falls back to generic advice when unavailable)"""
    snapshot = _get_snapshot(container, machine_id)
    return container.ai.analyze_machine(snapshot)


@router.post("/machines/{machine_id}/diagnostic", response_model=DiagnosticResponse)
def deep_diagnostic(machine_id: str, container: ServiceContainer = Depends(get_container)):
    """Extended-thinking diagnosis (slow; returns an error line instead of failing)"""
    snapshot = _get_snapshot(container, machine_id)
    return {
        "machine_id": machine_id,
        "diagnostic": container.ai.deep_diagnostic(snapshot),
    }


@router.post("/machines/{machine_id}/chat", response_model=ChatResponse)
def machine_chat(
    machine_id: str,
    request: ChatRequest,
    container: ServiceContainer = Depends(get_container),
):
    snapshot = _get_snapshot(container, machine_id)
    return {"answer": container.ai.ask_machine_chat(request.query, snapshot)}


@router.delete("/machines/{machine_id}", status_code=204)
def remove_machine(machine_id: str, container: ServiceContainer = Depends(get_container)):
    """Stop monitoring a machine; alerts already raised for it are kept"""
    try:
        container.remove_machine(machine_id)
    except MachineNotFoundError:
        raise HTTPException(status_code=404, detail=f"Machine {machine_id} not found")
