"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                         ROUTERS PACKAGE v1.2.0                                 ║
║                  Machine Fleet Monitor API routing                             ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║  ┌─────────────────────────┬───────────────────────────────────────────────┐   ║
║  │ Router                  │ Endpoints                                     │   ║
║  ├─────────────────────────┼───────────────────────────────────────────────┤   ║
║  │ fleet_router            │ /fleet, /machines/{id}, logs, analysis, chat  │   ║
║  │ alerts_router           │ /alerts, read state, unread count             │   ║
║  │ notifications_router    │ /notifications/endpoint                       │   ║
║  │ reports_router          │ /reports/fleet, /assistant                    │   ║
║  └─────────────────────────┴───────────────────────────────────────────────┘   ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""

from .alerts_router import router as alerts_router
from .fleet_router import router as fleet_router
from .notifications_router import router as notifications_router
from .reports_router import router as reports_router

__all__ = [
    "fleet_router",
    "alerts_router",
    "notifications_router",
    "reports_router",
    "include_all_routers",
]


def include_all_routers(app) -> None:
    """Mount every router on the FastAPI app"""
    app.include_router(fleet_router)
    app.include_router(alerts_router)
    app.include_router(notifications_router)
    app.include_router(reports_router)
