"""
Fleet State - Per-machine telemetry, risk and maintenance records

The store is owned explicitly (created by the caller and handed to the
scheduler), keyed by machine id. Each record has its own lock so a commit
(new sample + assessment + cost + tier) is seen by readers as one step,
and machines never block each other.

Readers get MachineSnapshot copies; nothing outside this module touches a
live record.

Author: Fleet Monitor Team
Version: 1.2.0
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from fleet_models import (
    CostImpact,
    MachineClass,
    MaintenanceLogEntry,
    RiskAssessment,
    RiskTier,
    Sample,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 20


class MachineNotFoundError(KeyError):
    """Raised when a machine id does not resolve to a fleet record"""

    def __init__(self, machine_id: str):
        super().__init__(machine_id)
        self.machine_id = machine_id

    def __str__(self) -> str:
        return f"Machine not found: {self.machine_id}"


class SampleHistory:
    """
    Fixed-capacity ring buffer of samples.

    Slots are allocated once; an append past capacity overwrites the oldest
    slot. Iteration is chronological (oldest first).
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._slots: List[Optional[Sample]] = [None] * capacity
        self._start = 0
        self._size = 0

    def append(self, sample: Sample) -> None:
        end = (self._start + self._size) % self.capacity
        self._slots[end] = sample
        if self._size < self.capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self.capacity

    def extend(self, samples) -> None:
        for sample in samples:
            self.append(sample)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Sample]:
        for offset in range(self._size):
            yield self._slots[(self._start + offset) % self.capacity]

    def latest(self) -> Optional[Sample]:
        if not self._size:
            return None
        return self._slots[(self._start + self._size - 1) % self.capacity]

    def to_list(self) -> List[Sample]:
        return list(self)


@dataclass(frozen=True)
class MachineSnapshot:
    """Consistent read-only view of one machine at its last commit"""

    machine_id: str
    name: str
    machine_class: MachineClass
    location: str
    sample: Sample
    assessment: RiskAssessment
    cost: CostImpact
    history: Tuple[Sample, ...] = ()
    logs: Tuple[MaintenanceLogEntry, ...] = ()

    @property
    def risk_tier(self) -> RiskTier:
        return self.assessment.risk_tier

    @property
    def failure_probability(self) -> int:
        return self.assessment.failure_probability

    def to_dict(self, include_history: bool = True) -> Dict:
        data = {
            "id": self.machine_id,
            "name": self.name,
            "type": self.machine_class.value,
            "location": self.location,
            "status": self.assessment.risk_tier.value,
            "sensor_data": self.sample.to_dict(),
            "assessment": self.assessment.to_dict(),
            "cost_impact": self.cost.to_dict(),
        }
        if include_history:
            data["history"] = [s.to_dict() for s in self.history]
            data["logs"] = [entry.to_dict() for entry in self.logs]
        return data


@dataclass
class MachineRecord:
    """Live record for one machine (mutated only through FleetState)"""

    machine_id: str
    name: str
    machine_class: MachineClass
    location: str
    sample: Sample
    assessment: RiskAssessment
    cost: CostImpact
    history: SampleHistory
    logs: List[MaintenanceLogEntry] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def snapshot(self, include_history: bool = True) -> MachineSnapshot:
        with self.lock:
            return MachineSnapshot(
                machine_id=self.machine_id,
                name=self.name,
                machine_class=self.machine_class,
                location=self.location,
                sample=self.sample,
                assessment=self.assessment,
                cost=self.cost,
                history=tuple(self.history) if include_history else (),
                # Newest entry first, as operators read the log
                logs=tuple(reversed(self.logs)) if include_history else (),
            )


class FleetState:
    """Machine id -> MachineRecord store"""

    def __init__(self, history_capacity: int = DEFAULT_HISTORY_CAPACITY):
        self.history_capacity = history_capacity
        self._records: Dict[str, MachineRecord] = {}
        self._registry_lock = threading.Lock()

    # ───────────────────────────────────────────────────────────────────────────
    # REGISTRATION
    # ───────────────────────────────────────────────────────────────────────────

    def add_machine(
        self,
        machine_id: str,
        name: str,
        machine_class: MachineClass,
        location: str,
        history: List[Sample],
        assessment: RiskAssessment,
        cost: CostImpact,
    ) -> MachineSnapshot:
        """
        Register a machine with its seed history.

        The last sample of `history` becomes the current sample; only the most
        recent `history_capacity` samples are retained.
        """
        if not history:
            raise ValueError(f"Machine {machine_id} needs at least one sample")

        ring = SampleHistory(self.history_capacity)
        ring.extend(history)
        record = MachineRecord(
            machine_id=machine_id,
            name=name,
            machine_class=machine_class,
            location=location,
            sample=history[-1],
            assessment=assessment,
            cost=cost,
            history=ring,
        )
        with self._registry_lock:
            if machine_id in self._records:
                raise ValueError(f"Machine {machine_id} already registered")
            self._records[machine_id] = record
        return record.snapshot()

    def remove_machine(self, machine_id: str) -> None:
        with self._registry_lock:
            if self._records.pop(machine_id, None) is None:
                raise MachineNotFoundError(machine_id)

    # ───────────────────────────────────────────────────────────────────────────
    # READS
    # ───────────────────────────────────────────────────────────────────────────

    def _record(self, machine_id: str) -> MachineRecord:
        record = self._records.get(machine_id)
        if record is None:
            raise MachineNotFoundError(machine_id)
        return record

    def machine_ids(self) -> List[str]:
        with self._registry_lock:
            return list(self._records)

    def __contains__(self, machine_id: str) -> bool:
        return machine_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, machine_id: str, include_history: bool = True) -> MachineSnapshot:
        return self._record(machine_id).snapshot(include_history)

    def snapshots(self, include_history: bool = False) -> List[MachineSnapshot]:
        """Snapshots of every machine in registration order"""
        with self._registry_lock:
            records = list(self._records.values())
        return [record.snapshot(include_history) for record in records]

    # ───────────────────────────────────────────────────────────────────────────
    # WRITES
    # ───────────────────────────────────────────────────────────────────────────

    def commit(
        self,
        machine_id: str,
        sample: Sample,
        assessment: RiskAssessment,
        cost: CostImpact,
    ) -> MachineSnapshot:
        """
        Commit one tick's result for a machine.

        The sample goes into the ring buffer (evicting the oldest at capacity)
        and the assessment, cost and tier are replaced together.
        """
        record = self._record(machine_id)
        with record.lock:
            record.history.append(sample)
            record.sample = sample
            record.assessment = assessment
            record.cost = cost
        return record.snapshot(include_history=False)

    def append_maintenance_log(
        self,
        machine_id: str,
        action: str,
        notes: str,
        operator: str,
        timestamp: Optional[datetime] = None,
    ) -> MaintenanceLogEntry:
        """
        Append an operator maintenance entry.

        Content is not validated; only the machine id must resolve.

        Raises:
            MachineNotFoundError: unknown machine id
        """
        record = self._record(machine_id)
        entry = MaintenanceLogEntry(
            id=uuid.uuid4().hex[:12],
            timestamp=timestamp or utc_now(),
            operator=operator,
            action=action,
            notes=notes,
        )
        with record.lock:
            record.logs.append(entry)
        logger.info(f"🔧 Maintenance log for {machine_id}: {action} by {operator}")
        return entry
