"""API routers package initialization."""

from app.api.assignments import router as assignments_router
from app.api.teams import router as teams_router
from app.api.scoring import router as scoring_router
from app.api.status_history import router as status_history_router
from app.api.profile import router as profile_router

__all__ = [
    "assignments_router",
    "teams_router",
    "scoring_router",
    "status_history_router",
    "profile_router",
]
