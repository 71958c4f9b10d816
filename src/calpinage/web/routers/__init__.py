"""API routers for the REST API."""

from calpinage.web.routers.jobs import router as jobs_router
from calpinage.web.routers.optimize import router as optimize_router

__all__ = [
    "jobs_router",
    "optimize_router",
]
