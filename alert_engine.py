"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                        ALERT ENGINE v1.2                                       ║
║                   Machine Fleet Monitor                                        ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║  Purpose: Turn per-tick risk changes into a deduplicated alert stream         ║
║                                                                                ║
║  Rules (per machine, per tick):                                                ║
║  - probability > 85 and not escalated -> HIGH failure_predicted alert          ║
║    (built after an AI root-cause analysis that runs off the tick thread)       ║
║  - probability < 80 -> re-arm escalation (band 80..85 holds the flag)          ║
║  - probability <= 85 and tier changed to warning/critical -> MEDIUM alert      ║
║  - otherwise nothing                                                           ║
║                                                                                ║
║  The alert list is shared by the tick thread, analysis callbacks and API       ║
║  readers; every mutation goes through AlertStore's lock.                       ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from fleet_models import (
    Alert,
    AlertKind,
    AlertSeverity,
    MaintenanceRecommendation,
    RiskTier,
)
from fleet_state import MachineSnapshot
from maintenance_ai_service import fallback_recommendation
from risk_scoring_engine import classify_tier
from settings import ALERTS

logger = logging.getLogger(__name__)

DEFAULT_ESCALATION_THRESHOLD = 85
DEFAULT_REARM_THRESHOLD = 80
DEFAULT_ALERT_CAP = 50


# ═══════════════════════════════════════════════════════════════════════════════
# STATE MACHINE
# ═══════════════════════════════════════════════════════════════════════════════


class AlertAction(str, Enum):
    """What the engine decided for one machine on one tick"""

    NONE = "none"
    TIER_CHANGE = "tier_change"  # MEDIUM threshold_exceeded, emitted immediately
    ESCALATE = "escalate"  # HIGH failure_predicted, emitted when analysis resolves


@dataclass(frozen=True)
class HysteresisState:
    """Per-machine escalation flag"""

    escalated: bool = False


def evaluate(
    previous_tier: RiskTier,
    probability: int,
    state: HysteresisState,
    escalation_threshold: int = DEFAULT_ESCALATION_THRESHOLD,
    rearm_threshold: int = DEFAULT_REARM_THRESHOLD,
) -> Tuple[AlertAction, HysteresisState]:
    """
    Decide the alert for one tick.

    Args:
        previous_tier: Tier committed on the previous tick
        probability: New failure probability
        state: Hysteresis state before this tick

    Returns:
        (action, hysteresis state after this tick)
    """
    if probability > escalation_threshold and not state.escalated:
        return AlertAction.ESCALATE, HysteresisState(escalated=True)

    escalated = state.escalated
    if probability < rearm_threshold:
        escalated = False

    new_tier = classify_tier(probability)
    if (
        probability <= escalation_threshold
        and new_tier != previous_tier
        and new_tier != RiskTier.HEALTHY
    ):
        return AlertAction.TIER_CHANGE, HysteresisState(escalated=escalated)

    return AlertAction.NONE, HysteresisState(escalated=escalated)


# ═══════════════════════════════════════════════════════════════════════════════
# MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════


def build_tier_alert(snapshot: MachineSnapshot) -> Alert:
    assessment = snapshot.assessment
    return Alert(
        machine_id=snapshot.machine_id,
        machine_name=snapshot.name,
        kind=AlertKind.THRESHOLD_EXCEEDED,
        severity=AlertSeverity.MEDIUM,
        message=(
            f"Maintenance warning: {snapshot.name} entered "
            f"{assessment.risk_tier.value.upper()} state "
            f"(Risk: {assessment.failure_probability}%, "
            f"RUL: {assessment.remaining_useful_life_hours}h)"
        ),
    )


def build_failure_alert(
    snapshot: MachineSnapshot, recommendation: MaintenanceRecommendation
) -> Alert:
    steps = "\n".join(
        f"{index}. {step}" for index, step in enumerate(recommendation.steps, start=1)
    )
    savings_k = snapshot.cost.potential_savings / 1000
    message = (
        f"CRITICAL ALERT: {recommendation.summary}\n\n"
        f"ROOT CAUSE: {recommendation.root_cause}\n\n"
        f"ESTIMATED RUL: {snapshot.assessment.remaining_useful_life_hours} Hours\n\n"
        f"REQUIRED STEPS:\n{steps}\n\n"
        f"ECON IMPACT: {savings_k:.1f}k Realizable Savings"
    )
    return Alert(
        machine_id=snapshot.machine_id,
        machine_name=snapshot.name,
        kind=AlertKind.FAILURE_PREDICTED,
        severity=AlertSeverity.HIGH,
        message=message,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# ALERT STORE
# ═══════════════════════════════════════════════════════════════════════════════


class AlertStore:
    """Newest-first alert list capped at `cap` entries"""

    def __init__(self, cap: Optional[int] = None):
        self.cap = cap or ALERTS.alert_list_cap or DEFAULT_ALERT_CAP
        self._alerts: List[Alert] = []
        self._lock = threading.Lock()

    def add(self, alert: Alert) -> Alert:
        with self._lock:
            self._alerts.insert(0, alert)
            del self._alerts[self.cap :]
        return alert

    def list(
        self,
        unread_only: bool = False,
        machine_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Alert]:
        """Copies of the current alerts, newest first"""
        with self._lock:
            alerts = [replace(a) for a in self._alerts]

        if unread_only:
            alerts = [a for a in alerts if not a.read]
        if machine_id:
            alerts = [a for a in alerts if a.machine_id == machine_id]
        if limit is not None:
            alerts = alerts[:limit]
        return alerts

    def mark_read(self, alert_id: str) -> bool:
        """Flip an alert to read; False if it is no longer in the list"""
        with self._lock:
            for alert in self._alerts:
                if alert.id == alert_id:
                    alert.read = True
                    return True
        return False

    def mark_all_read(self) -> int:
        with self._lock:
            count = 0
            for alert in self._alerts:
                if not alert.read:
                    alert.read = True
                    count += 1
        return count

    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for a in self._alerts if not a.read)

    def clear(self) -> None:
        with self._lock:
            self._alerts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)


# ═══════════════════════════════════════════════════════════════════════════════
# ENGINE
# ═══════════════════════════════════════════════════════════════════════════════


class AlertEngine:
    """
    Stateful alert evaluation for the whole fleet

    Owns the per-machine hysteresis flags. Escalations are handed to a
    worker pool: the analysis sees the snapshot from the tick that
    escalated, and its alert is appended whenever the call resolves.
    """

    def __init__(
        self,
        store: AlertStore,
        analyzer,
        dispatcher=None,
        escalation_threshold: Optional[int] = None,
        rearm_threshold: Optional[int] = None,
        max_workers: Optional[int] = None,
    ):
        self.store = store
        self.analyzer = analyzer
        self.dispatcher = dispatcher
        self.escalation_threshold = (
            escalation_threshold
            if escalation_threshold is not None
            else ALERTS.escalation_threshold
        )
        self.rearm_threshold = (
            rearm_threshold if rearm_threshold is not None else ALERTS.rearm_threshold
        )
        self._hysteresis: Dict[str, HysteresisState] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or ALERTS.analysis_workers,
            thread_name_prefix="escalation",
        )
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()

    def hysteresis(self, machine_id: str) -> HysteresisState:
        return self._hysteresis.get(machine_id, HysteresisState())

    def forget(self, machine_id: str) -> None:
        self._hysteresis.pop(machine_id, None)

    def process(self, previous_tier: RiskTier, snapshot: MachineSnapshot) -> AlertAction:
        """
        Evaluate one machine's tick and emit its alert, if any.

        Args:
            previous_tier: Tier committed on the previous tick
            snapshot: New state (sample, assessment, cost) for this tick
        """
        machine_id = snapshot.machine_id
        action, state = evaluate(
            previous_tier,
            snapshot.failure_probability,
            self.hysteresis(machine_id),
            self.escalation_threshold,
            self.rearm_threshold,
        )
        if action == AlertAction.ESCALATE:
            logger.warning(
                f"🚨 {machine_id} escalated at {snapshot.failure_probability}% "
                f"- requesting root-cause analysis"
            )
            # Raises after shutdown; the flag stays clear so a later tick retries
            self._submit_escalation(snapshot)

        self._hysteresis[machine_id] = state

        if action == AlertAction.TIER_CHANGE:
            alert = self.store.add(build_tier_alert(snapshot))
            logger.info(
                f"⚠️ {machine_id} {previous_tier.value} -> "
                f"{snapshot.risk_tier.value} ({snapshot.failure_probability}%) "
                f"alert {alert.id}"
            )

        return action

    def _submit_escalation(self, snapshot: MachineSnapshot) -> Future:
        future = self._executor.submit(self._run_escalation, snapshot)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)
        return future

    def _discard_pending(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _run_escalation(self, snapshot: MachineSnapshot) -> Alert:
        try:
            recommendation = self.analyzer.analyze_machine(snapshot)
        except Exception as e:
            logger.error(f"❌ Analysis raised for {snapshot.machine_id}: {e}")
            recommendation = fallback_recommendation(snapshot.failure_probability)

        alert = self.store.add(build_failure_alert(snapshot, recommendation))
        logger.warning(
            f"🆘 Failure predicted for {snapshot.machine_id} "
            f"(urgency {recommendation.urgency}) alert {alert.id}"
        )

        if self.dispatcher is not None:
            try:
                self.dispatcher.notify(alert)
            except Exception as e:
                logger.warning(f"Notification for alert {alert.id} dropped: {e}")
        return alert

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight escalations; True if none remain"""
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_pending: bool = False) -> None:
        """Stop accepting escalations; running analyses are left to finish"""
        self._executor.shutdown(wait=wait_for_pending)
