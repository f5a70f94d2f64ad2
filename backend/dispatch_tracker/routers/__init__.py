"""API routers."""

from dispatch_tracker.routers.health import router as health_router
from dispatch_tracker.routers.incidents import router as incidents_router
from dispatch_tracker.routers.reports import router as reports_router
from dispatch_tracker.routers.stats import router as stats_router

__all__ = ["health_router", "incidents_router", "reports_router", "stats_router"]
