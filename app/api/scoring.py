"""
Scoring API endpoints.
Developer ranking for jobs, scoring configurations, runs and performance metrics.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.security import CurrentUser, get_current_user, require_admin, require_admin_or_client
from app.database import get_db
from app.exceptions import ForbiddenError
from app.models.user import UserRole
from app.rate_limit import SCORING_RATE_LIMIT, limiter
from app.schemas.common import ApiResponse, envelope
from app.schemas.scoring import (
    DeveloperPerformanceResponse,
    ScoreJobRequest,
    ScoreJobResponse,
    ScoringConfigCreate,
    ScoringConfigResponse,
    ScoringConfigUpdate,
    ScoringRunDetailResponse,
    ScoringRunResponse,
)
from app.services import scoring_service

router = APIRouter(prefix="/scoring", tags=["Scoring"])
settings = get_settings()


# ==================== Scoring ====================

@router.post(
    "/score-job",
    response_model=ApiResponse[ScoreJobResponse],
    summary="Score developers for a job",
    description="Ranks eligible developers with the active config and persists the run.",
)
@limiter.limit(SCORING_RATE_LIMIT)
async def score_job(
    request: Request,
    body: ScoreJobRequest,
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    result = await scoring_service.score_job(db, body, triggered_by=user.id)
    return envelope(request, result, f"Scored {len(result.results)} developers")


@router.get(
    "/recommendations/{job_id}",
    response_model=ApiResponse[ScoreJobResponse],
    summary="Recommend developers for a job",
    description="Same ranking as score-job, without persisting a run.",
)
@limiter.limit(SCORING_RATE_LIMIT)
async def get_recommendations(
    request: Request,
    job_id: UUID,
    limit: int = Query(default=settings.scoring_default_limit, ge=1, le=settings.scoring_max_limit),
    min_score: float = Query(default=0.0, ge=0.0, le=1.0),
    include_inactive_users: bool = Query(default=False),
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    result = await scoring_service.get_recommendations(
        db, job_id, limit=limit, min_score=min_score, include_inactive_users=include_inactive_users
    )
    return envelope(request, result)


# ==================== Configs ====================

@router.post(
    "/configs",
    response_model=ApiResponse[ScoringConfigResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create scoring config",
    description="Creating an active config deactivates every other config.",
)
async def create_config(
    request: Request,
    body: ScoringConfigCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await scoring_service.create_config(db, body)
    return envelope(request, config, "Scoring config created")


@router.get(
    "/configs",
    response_model=ApiResponse[List[ScoringConfigResponse]],
    summary="List scoring configs",
)
async def list_configs(
    request: Request,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await scoring_service.list_configs(db))


@router.get(
    "/configs/active",
    response_model=ApiResponse[ScoringConfigResponse],
    summary="Get active scoring config",
    description="Creates the default config if none is active.",
)
async def get_active_config(
    request: Request,
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    config = await scoring_service.get_active_config(db)
    return envelope(request, ScoringConfigResponse.model_validate(config))


@router.get(
    "/configs/{config_id}",
    response_model=ApiResponse[ScoringConfigResponse],
    summary="Get scoring config",
)
async def get_config(
    request: Request,
    config_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await scoring_service.get_config(db, config_id))


@router.patch(
    "/configs/{config_id}",
    response_model=ApiResponse[ScoringConfigResponse],
    summary="Update scoring config",
    description="Setting is_active deactivates every other config in the same transaction.",
)
async def update_config(
    request: Request,
    config_id: UUID,
    body: ScoringConfigUpdate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await scoring_service.update_config(db, config_id, body)
    return envelope(request, config, "Scoring config updated")


@router.delete(
    "/configs/{config_id}",
    response_model=ApiResponse[ScoringConfigResponse],
    summary="Deactivate scoring config",
)
async def delete_config(
    request: Request,
    config_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await scoring_service.delete_config(db, config_id)
    return envelope(request, config, "Scoring config deactivated")


# ==================== Performance ====================

@router.post(
    "/performance/{developer_id}",
    response_model=ApiResponse[DeveloperPerformanceResponse],
    summary="Recompute developer performance",
)
async def update_developer_performance(
    request: Request,
    developer_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    metric = await scoring_service.update_developer_performance(db, developer_id)
    return envelope(request, metric, "Performance metrics updated")


@router.get(
    "/performance/{developer_id}",
    response_model=ApiResponse[DeveloperPerformanceResponse],
    summary="Get developer performance",
    description="Admins and clients can read any developer; developers only themselves.",
)
async def get_developer_performance(
    request: Request,
    developer_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if user.role == UserRole.DEVELOPER and user.id != developer_id:
        raise ForbiddenError("Developers can only view their own performance")
    metric = await scoring_service.get_developer_performance(db, developer_id)
    return envelope(request, metric)


# ==================== Runs ====================

@router.get(
    "/runs",
    response_model=ApiResponse[List[ScoringRunResponse]],
    summary="List scoring runs",
)
async def list_runs(
    request: Request,
    job_id: Optional[UUID] = Query(default=None, description="Filter by job"),
    limit: int = Query(default=20, ge=1, le=100),
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await scoring_service.list_runs(db, job_id, limit))


@router.get(
    "/runs/{run_id}",
    response_model=ApiResponse[ScoringRunDetailResponse],
    summary="Get scoring run",
    description="Run details with scores ordered by rank.",
)
async def get_run(
    request: Request,
    run_id: UUID,
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await scoring_service.get_run(db, run_id))
