"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                         ALERTS ROUTER v1.2.0                                   ║
║                    Alert List & Read State                                     ║
╚═══════════════════════════════════════════════════════════════════════════════╝

Endpoints:
- GET /alerts - Recent alerts, newest first
- GET /alerts/unread-count - Badge counter
- POST /alerts/{alert_id}/read - Mark one alert read
- POST /alerts/read-all - Mark every alert read
- DELETE /alerts - Clear the list
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from fleet_models import AlertKind, AlertSeverity
from service_container import ServiceContainer, get_container

router = APIRouter(prefix="/api", tags=["Alerts"])


class Alert(BaseModel):
    """Alert model"""

    id: str
    machine_id: str
    machine_name: str
    kind: AlertKind
    severity: AlertSeverity
    message: str
    created_at: datetime
    read: bool = False


@router.get("/alerts", response_model=List[Alert])
def get_alerts(
    unread_only: bool = Query(False, description="Only unread alerts"),
    machine_id: Optional[str] = Query(None, description="Filter by machine ID"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    container: ServiceContainer = Depends(get_container),
):
    """Get recent alerts (the list keeps the 50 most recent)"""
    alerts = container.alerts.list(
        unread_only=unread_only, machine_id=machine_id, limit=limit
    )
    return [a.to_dict() for a in alerts]


@router.get("/alerts/unread-count")
def get_unread_count(container: ServiceContainer = Depends(get_container)):
    return {"unread": container.alerts.unread_count()}


@router.post("/alerts/read-all")
def mark_all_read(container: ServiceContainer = Depends(get_container)):
    return {"marked": container.alerts.mark_all_read()}


@router.post("/alerts/{alert_id}/read")
def mark_alert_read(alert_id: str, container: ServiceContainer = Depends(get_container)):
    if not container.alerts.mark_read(alert_id):
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found")
    return {"id": alert_id, "read": True}


@router.delete("/alerts")
def clear_alerts(container: ServiceContainer = Depends(get_container)):
    container.alerts.clear()
    return {"status": "cleared"}
