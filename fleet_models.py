"""
Fleet Data Models - Machines, telemetry, risk and alerts

Shared types for the machine fleet monitor:
- Sample: one immutable telemetry reading
- RiskAssessment / CostImpact: derived every tick, replaced wholesale
- Alert: produced by the alert engine, only the `read` flag ever changes
- MaintenanceRecommendation: structured output of the AI analysis call

Author: Fleet Monitor Team
Version: 1.2.0
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════


class MachineClass(str, Enum):
    """Machine families monitored by the fleet"""

    CNC_MILL = "CNC Mill"
    INDUSTRIAL_PUMP = "Industrial Pump"
    TURBINE_GENERATOR = "Turbine Generator"
    CONVEYOR_MOTOR = "Conveyor Motor"

    @property
    def baseline_temperature(self) -> float:
        """Nominal operating temperature (°C)"""
        return MACHINE_CLASS_PROFILES[self]["baseline_temperature"]

    @property
    def base_value(self) -> int:
        """Replacement/economic value used by the cost model"""
        return MACHINE_CLASS_PROFILES[self]["base_value"]


MACHINE_CLASS_PROFILES = {
    MachineClass.CNC_MILL: {"baseline_temperature": 65.0, "base_value": 150000},
    MachineClass.INDUSTRIAL_PUMP: {"baseline_temperature": 55.0, "base_value": 80000},
    MachineClass.TURBINE_GENERATOR: {
        "baseline_temperature": 85.0,
        "base_value": 500000,
    },
    MachineClass.CONVEYOR_MOTOR: {"baseline_temperature": 55.0, "base_value": 80000},
}


class RiskTier(str, Enum):
    """Risk classification derived from failure probability"""

    HEALTHY = "healthy"  # Green - operating normally
    WARNING = "warning"  # Yellow - monitor closely
    CRITICAL = "critical"  # Red - immediate attention needed


class AlertSeverity(str, Enum):
    """Alert severity levels"""

    LOW = "low"  # Informational
    MEDIUM = "medium"  # Tier transition
    HIGH = "high"  # Failure predicted - SMS goes out


class AlertKind(str, Enum):
    """Types of alerts"""

    THRESHOLD_EXCEEDED = "threshold_exceeded"
    FAILURE_PREDICTED = "failure_predicted"
    MAINTENANCE_DUE = "maintenance_due"


# ═══════════════════════════════════════════════════════════════════════════════
# DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Sample:
    """A single telemetry reading"""

    temperature: float  # °C
    vibration: float  # mm/s
    pressure: float  # PSI
    rpm: float
    operating_hours: float
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": round(self.temperature, 2),
            "vibration": round(self.vibration, 3),
            "pressure": round(self.pressure, 2),
            "rpm": round(self.rpm, 1),
            "operating_hours": round(self.operating_hours, 2),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Failure risk for one sample"""

    failure_probability: int  # 0-99
    risk_tier: RiskTier
    remaining_useful_life_hours: int
    suggested_schedule: datetime
    contributing_factors: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "failure_probability": self.failure_probability,
            "risk_tier": self.risk_tier.value,
            "remaining_useful_life_hours": self.remaining_useful_life_hours,
            "suggested_schedule": self.suggested_schedule.isoformat(),
            "contributing_factors": list(self.contributing_factors),
        }


@dataclass(frozen=True)
class CostImpact:
    """Projected economics of running to failure vs. maintaining now"""

    breakdown_cost: int
    preventive_cost: int
    potential_savings: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "breakdown_cost": self.breakdown_cost,
            "preventive_cost": self.preventive_cost,
            "potential_savings": self.potential_savings,
        }


@dataclass(frozen=True)
class MaintenanceLogEntry:
    """Operator-entered maintenance record"""

    id: str
    timestamp: datetime
    operator: str
    action: str
    notes: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "operator": self.operator,
            "action": self.action,
            "notes": self.notes,
        }


@dataclass
class Alert:
    """Alert data structure"""

    machine_id: str
    machine_name: str
    kind: AlertKind
    severity: AlertSeverity
    message: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:9])
    created_at: datetime = field(default_factory=utc_now)
    read: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "machine_id": self.machine_id,
            "machine_name": self.machine_name,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "read": self.read,
        }


class MaintenanceRecommendation(BaseModel):
    """
    Structured maintenance advice for one machine.

    Used as the JSON response schema of the AI analysis call and as the
    deterministic fallback when that call fails.
    """

    summary: str = Field(..., description="One-paragraph situation summary")
    root_cause: str = Field(..., description="Most likely root cause")
    urgency: str = Field(..., description="low, medium, high or immediate")
    steps: List[str] = Field(default_factory=list, description="Ordered actions")
    parts_needed: List[str] = Field(
        default_factory=list, description="Spare parts to stage"
    )
