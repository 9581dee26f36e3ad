"""
FastAPI Routers - Modular endpoint organization.

Router modules:
- auth: login and profile
- engineers: engineer list, capacity and availability
- projects: project CRUD and skill gap
- assignments: capacity-checked assignment writes
- health: liveness and database checks
"""

from .auth import router as auth_router
from .engineers import router as engineers_router
from .projects import router as projects_router
from .assignments import router as assignments_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "engineers_router",
    "projects_router",
    "assignments_router",
    "health_router",
]
