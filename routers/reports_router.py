"""
Reports Router - v1.2.0
AI fleet report and fleet assistant
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fleet_models import utc_now
from service_container import ServiceContainer, get_container

router = APIRouter(prefix="/api", tags=["Reports"])


class FleetReport(BaseModel):
    report: str
    machine_count: int
    generated_at: datetime


class AssistantRequest(BaseModel):
    query: str = Field(..., min_length=1)


class AssistantResponse(BaseModel):
    answer: str


@router.post("/reports/fleet", response_model=FleetReport)
def generate_fleet_report(container: ServiceContainer = Depends(get_container)):
    """Executive maintenance report over the current fleet state"""
    snapshots = container.fleet.snapshots()
    return {
        "report": container.ai.generate_fleet_report(snapshots),
        "machine_count": len(snapshots),
        "generated_at": utc_now(),
    }


@router.post("/assistant", response_model=AssistantResponse)
def ask_fleet_assistant(
    request: AssistantRequest, container: ServiceContainer = Depends(get_container)
):
    snapshots = container.fleet.snapshots()
    return {"answer": container.ai.ask_fleet_assistant(request.query, snapshots)}
