"""
Talent Marketplace - FastAPI Application
Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.logging import configure_logging
from app.api import (
    assignments_router,
    teams_router,
    scoring_router,
    status_history_router,
    profile_router,
)
from app.exceptions import (
    AppException,
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.rate_limit import limiter, rate_limit_exceeded_handler


settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    configure_logging()
    logger.info("Starting %s v%s", settings.app_title, settings.app_version)

    # Create tables when running without migrations (SQLite dev databases)
    if settings.database_url.startswith("sqlite"):
        from app.database import init_db
        await init_db()
        logger.info("Database tables initialized")

    yield
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description="""
    ## Talent Marketplace API

    Matches developers to client jobs and tracks the work through to completion.

    ### Features
    - **Assignments**: Individual developer assignments with a guarded status workflow
    - **Teams**: Assign a whole team to a job and track it as one unit
    - **Scoring**: Rank candidate developers for a job by skills, track record and capacity
    - **Status History**: Append-only audit trail of every status change
    - **Profiles**: Skills, availability, education and portfolio links

    ### Main Endpoints
    - `POST /v1/assignments` - Assign a developer to a job
    - `PATCH /v1/assignments/{id}/status` - Move an assignment through its workflow
    - `POST /v1/scoring/score-job` - Score and rank developers for a job
    - `GET /v1/status-history/all` - Query the audit trail
    """,
    lifespan=lifespan,
)

app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Team routes live under /assignments/team and must be matched before /assignments/{id}
app.include_router(teams_router, prefix=settings.api_prefix)
app.include_router(assignments_router, prefix=settings.api_prefix)
app.include_router(scoring_router, prefix=settings.api_prefix)
app.include_router(status_history_router, prefix=settings.api_prefix)
app.include_router(profile_router, prefix=settings.api_prefix)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
