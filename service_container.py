"""
Service Container for Dependency Injection
===========================================

Owns the fleet store, alert engine, collaborators and scheduler so that
nothing lives in module globals. The API lifespan builds one container
and hangs it on app.state; tests build their own.

Author: Fleet Monitor Team
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from alert_engine import AlertEngine, AlertStore
from alert_service import NotificationDispatcher
from fleet_scheduler import FleetScheduler
from fleet_seed import build_default_fleet
from fleet_state import FleetState
from maintenance_ai_service import MaintenanceAIService
from settings import SIMULATION

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Wired services for one running fleet monitor"""

    fleet: FleetState
    alerts: AlertStore
    alert_engine: AlertEngine
    dispatcher: NotificationDispatcher
    ai: MaintenanceAIService
    scheduler: FleetScheduler

    @classmethod
    def build(
        cls,
        fleet: Optional[FleetState] = None,
        ai: Optional[MaintenanceAIService] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        interval_seconds: Optional[int] = None,
    ) -> "ServiceContainer":
        """Create a container, seeding the demo fleet unless one is given"""
        if fleet is None:
            fleet = build_default_fleet(SIMULATION.history_capacity, SIMULATION.seed)
        if ai is None:
            ai = MaintenanceAIService()
        if dispatcher is None:
            dispatcher = NotificationDispatcher()
        alerts = AlertStore()
        engine = AlertEngine(alerts, ai, dispatcher)
        scheduler = FleetScheduler(fleet, engine, interval_seconds=interval_seconds)
        return cls(
            fleet=fleet,
            alerts=alerts,
            alert_engine=engine,
            dispatcher=dispatcher,
            ai=ai,
            scheduler=scheduler,
        )

    def remove_machine(self, machine_id: str) -> None:
        """
        Decommission a machine: drop its record and its escalation flag.

        Raises:
            MachineNotFoundError: unknown machine id
        """
        self.fleet.remove_machine(machine_id)
        self.alert_engine.forget(machine_id)
        logger.info(f"🗑️ Machine {machine_id} removed from the fleet")

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self) -> None:
        """Stop ticking; in-flight analyses and SMS finish on their own"""
        self.scheduler.stop()
        self.alert_engine.shutdown()
        self.dispatcher.shutdown()
        logger.info("Service container shut down")


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency: the container built by the app lifespan"""
    return request.app.state.container
