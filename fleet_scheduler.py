"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                      FLEET TELEMETRY SCHEDULER v1.2                            ║
║                        Machine Fleet Monitor                                   ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║  Purpose: Periodic tick that advances every machine one step                  ║
║                                                                                ║
║  Architecture:                                                                 ║
║  - Runs every 5 seconds via APScheduler (interval job, never overlapping)     ║
║  - SensorSimulator -> RiskScorer -> CostModel -> AlertEngine -> FleetState    ║
║  - Escalation analyses run off-thread; the tick never waits for them          ║
║                                                                                ║
║  Usage:                                                                        ║
║    python fleet_scheduler.py              # Run as daemon (console only)      ║
║    python fleet_scheduler.py --ticks 10   # Run N ticks and exit              ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""

import argparse
import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

import maintenance_cost_engine
from alert_engine import AlertAction, AlertEngine
from fleet_models import utc_now
from fleet_state import FleetState, MachineNotFoundError
from risk_scoring_engine import RiskScorer
from sensor_simulator import SensorSimulator
from settings import SIMULATION

logger = logging.getLogger(__name__)

TICK_JOB_ID = "fleet_tick"


class FleetScheduler:
    """
    Drives one tick per interval across the whole fleet

    Machines are independent: a failure while advancing one machine is
    logged and the tick moves on to the next.
    """

    def __init__(
        self,
        fleet: FleetState,
        alert_engine: AlertEngine,
        simulator: Optional[SensorSimulator] = None,
        scorer: Optional[RiskScorer] = None,
        interval_seconds: Optional[int] = None,
    ):
        self.fleet = fleet
        self.alert_engine = alert_engine
        self.simulator = simulator or SensorSimulator(SIMULATION.seed)
        self.scorer = scorer or RiskScorer()
        self.interval_seconds = interval_seconds or SIMULATION.tick_interval_seconds
        self.tick_count = 0
        self.last_tick_at: Optional[datetime] = None
        self._scheduler: Optional[BackgroundScheduler] = None

    # ───────────────────────────────────────────────────────────────────────────
    # TICK
    # ───────────────────────────────────────────────────────────────────────────

    def advance_machine(self, machine_id: str, now: Optional[datetime] = None) -> AlertAction:
        """
        Advance a single machine by one step and commit the result.

        The alert engine runs against the tier from the previous commit,
        before the new tier is committed as "previous" for the next tick.
        """
        now = now or utc_now()
        current = self.fleet.get(machine_id, include_history=False)

        sample = self.simulator.next(current.sample)
        assessment = self.scorer.score(sample, current.machine_class, now)
        cost = maintenance_cost_engine.cost(
            current.machine_class, assessment.failure_probability
        )

        updated = replace(current, sample=sample, assessment=assessment, cost=cost)
        action = self.alert_engine.process(current.risk_tier, updated)
        self.fleet.commit(machine_id, sample, assessment, cost)
        return action

    def tick(self) -> int:
        """
        Run one tick over every machine.

        Returns:
            Number of machines advanced successfully
        """
        start = time.monotonic()
        now = utc_now()
        advanced = 0
        escalations = 0
        tier_changes = 0

        for machine_id in self.fleet.machine_ids():
            try:
                action = self.advance_machine(machine_id, now)
            except MachineNotFoundError:
                # Removed between listing and processing
                continue
            except Exception as e:
                logger.error(f"[TICK] Failed to advance {machine_id}: {e}", exc_info=True)
                continue

            advanced += 1
            if action == AlertAction.ESCALATE:
                escalations += 1
            elif action == AlertAction.TIER_CHANGE:
                tier_changes += 1

        self.tick_count += 1
        self.last_tick_at = now
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug(
            f"[TICK] #{self.tick_count}: {advanced} machines, "
            f"{tier_changes} tier changes, {escalations} escalations "
            f"in {elapsed_ms:.1f}ms"
        )
        return advanced

    # ───────────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return

        self._scheduler = BackgroundScheduler(timezone="UTC")
        # max_instances=1 keeps ticks strictly sequential per machine
        self._scheduler.add_job(
            self.tick,
            "interval",
            seconds=self.interval_seconds,
            id=TICK_JOB_ID,
            name=f"Fleet tick (every {self.interval_seconds}s)",
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            f"✅ Fleet scheduler started: {len(self.fleet)} machines, "
            f"tick every {self.interval_seconds}s"
        )

    def stop(self, wait: bool = True) -> None:
        """Stop the timer; in-flight escalation analyses are not cancelled"""
        if not self.running:
            return
        self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info(f"Fleet scheduler stopped after {self.tick_count} ticks")

    def status(self) -> dict:
        return {
            "running": self.running,
            "interval_seconds": self.interval_seconds,
            "tick_count": self.tick_count,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
            "machines": len(self.fleet),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# STANDALONE RUNNER
# ═══════════════════════════════════════════════════════════════════════════════


def main():
    """Main entry point"""
    from alert_engine import AlertStore
    from alert_service import NotificationDispatcher
    from fleet_seed import build_default_fleet
    from logger_config import configure_from_settings
    from maintenance_ai_service import MaintenanceAIService

    parser = argparse.ArgumentParser(description="Machine fleet telemetry scheduler")
    parser.add_argument(
        "--ticks",
        type=int,
        default=0,
        help="Run this many ticks back-to-back and exit (0 = run as daemon)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=SIMULATION.tick_interval_seconds,
        help="Tick interval in seconds",
    )
    args = parser.parse_args()

    configure_from_settings()

    fleet = build_default_fleet(SIMULATION.history_capacity, SIMULATION.seed)
    store = AlertStore()
    engine = AlertEngine(store, MaintenanceAIService(), NotificationDispatcher())
    scheduler = FleetScheduler(fleet, engine, interval_seconds=args.interval)

    if args.ticks:
        for _ in range(args.ticks):
            scheduler.tick()
        engine.drain(timeout=60)
        for alert in store.list():
            logger.info(f"[{alert.severity.value.upper()}] {alert.machine_id}: {alert.message}")
        engine.shutdown()
        return

    scheduler.start()
    try:
        while True:
            time.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        scheduler.stop()
        engine.shutdown()


if __name__ == "__main__":
    main()
