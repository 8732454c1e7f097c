"""
Scoring service layer.

Loads jobs and developer pools into snapshots for the scoring engine,
persists scoring runs, and manages scoring configurations and the
per-developer performance cache.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import get_settings
from app.exceptions import NotFoundError
from app.models import (
    AssignmentScore,
    AssignmentStatus,
    DeveloperPerformanceMetric,
    Job,
    JobAssignment,
    ScoringAlgorithm,
    ScoringConfig,
    ScoringRun,
    User,
    UserRole,
)
from app.schemas.assignment import DeveloperSummary
from app.schemas.scoring import (
    DeveloperPerformanceResponse,
    DeveloperScoreResponse,
    ScoreBreakdownSchema,
    ScoreJobRequest,
    ScoreJobResponse,
    ScoringConfigCreate,
    ScoringConfigResponse,
    ScoringConfigUpdate,
    ScoringRunDetailResponse,
    ScoringRunResponse,
    ScoringWeightsSchema,
)
from app.services.scoring import (
    DEFAULT_WEIGHTS,
    AssignmentRecord,
    DeveloperScore,
    DeveloperSnapshot,
    JobSnapshot,
    ScoringParameters,
    ScoringProfile,
    ScoringWeights,
    SkillRequirement,
    rank_developers,
)

logger = logging.getLogger(__name__)

settings = get_settings()

DEFAULT_CONFIG_NAME = "Default"


# ==================== Configs ====================

def profile_from_config(config: ScoringConfig) -> ScoringProfile:
    """Freeze a stored config into the immutable profile the engine consumes."""
    return ScoringProfile(
        algorithm=config.algorithm,
        weights=ScoringWeights.from_dict(config.weights),
        config_id=config.id,
    )


async def _deactivate_all(db: AsyncSession, except_id: Optional[UUID] = None) -> None:
    stmt = update(ScoringConfig).where(ScoringConfig.is_active.is_(True))
    if except_id is not None:
        stmt = stmt.where(ScoringConfig.id != except_id)
    await db.execute(stmt.values(is_active=False, updated_at=datetime.utcnow()))


async def get_active_config(db: AsyncSession) -> ScoringConfig:
    """The active config; a default one is created when none is active."""
    result = await db.execute(
        select(ScoringConfig)
        .where(ScoringConfig.is_active.is_(True))
        .order_by(ScoringConfig.updated_at.desc())
        .limit(1)
    )
    config = result.scalar_one_or_none()
    if config is not None:
        return config

    config = ScoringConfig(
        name=DEFAULT_CONFIG_NAME,
        description="Default scoring weights",
        algorithm=ScoringAlgorithm.DEFAULT,
        weights=DEFAULT_WEIGHTS.as_dict(),
        constraints={},
        is_active=True,
    )
    db.add(config)
    await db.commit()
    logger.info(f"No active scoring config found; created default config {config.id}")
    return config


async def create_config(db: AsyncSession, data: ScoringConfigCreate) -> ScoringConfigResponse:
    """Create a config; activating it deactivates all others in the same transaction."""
    if data.is_active:
        await _deactivate_all(db)

    config = ScoringConfig(
        name=data.name,
        description=data.description,
        algorithm=data.algorithm,
        weights=data.weights.model_dump(),
        constraints=data.constraints or {},
        is_active=data.is_active,
    )
    db.add(config)
    await db.commit()

    logger.info(f"Scoring config {config.id} created (active={config.is_active})")
    return ScoringConfigResponse.model_validate(config)


async def list_configs(db: AsyncSession) -> List[ScoringConfigResponse]:
    result = await db.execute(
        select(ScoringConfig).order_by(ScoringConfig.created_at.desc())
    )
    return [ScoringConfigResponse.model_validate(c) for c in result.scalars().all()]


async def _get_config_or_404(db: AsyncSession, config_id: UUID) -> ScoringConfig:
    config = await db.get(ScoringConfig, config_id)
    if config is None:
        raise NotFoundError("Scoring config", str(config_id))
    return config


async def get_config(db: AsyncSession, config_id: UUID) -> ScoringConfigResponse:
    return ScoringConfigResponse.model_validate(await _get_config_or_404(db, config_id))


async def update_config(
    db: AsyncSession,
    config_id: UUID,
    data: ScoringConfigUpdate,
) -> ScoringConfigResponse:
    config = await _get_config_or_404(db, config_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("is_active"):
        await _deactivate_all(db, except_id=config.id)

    for key, value in updates.items():
        if key == "weights" and value is not None:
            value = ScoringWeights.from_dict(value).as_dict()
        setattr(config, key, value)
    config.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(config)
    logger.info(f"Scoring config {config_id} updated: {sorted(updates)}")
    return ScoringConfigResponse.model_validate(config)


async def delete_config(db: AsyncSession, config_id: UUID) -> ScoringConfigResponse:
    """Soft delete: the config is kept for run history and only deactivated."""
    config = await _get_config_or_404(db, config_id)
    config.is_active = False
    config.updated_at = datetime.utcnow()
    await db.commit()
    logger.info(f"Scoring config {config_id} deactivated")
    return ScoringConfigResponse.model_validate(config)


# ==================== Snapshots ====================

def job_snapshot(job: Job) -> JobSnapshot:
    return JobSnapshot(
        id=job.id,
        priority=job.priority,
        required_skills=tuple(SkillRequirement.parse_list(job.required_skills)),
        preferred_skills=tuple(SkillRequirement.parse_list(job.preferred_skills)),
        tags=tuple(t for t in (job.tags or []) if isinstance(t, str) and t.strip()),
        estimated_hours=job.estimated_hours,
    )


async def load_eligible_developers(
    db: AsyncSession,
    include_inactive_users: bool = False,
    now: Optional[datetime] = None,
) -> List[User]:
    """Non-deleted developers, restricted to recent logins unless inactive users are included."""
    now = now or datetime.utcnow()
    stmt = (
        select(User)
        .where(User.role == UserRole.DEVELOPER, User.is_deleted.is_(False))
        .options(selectinload(User.profile))
    )
    if not include_inactive_users:
        cutoff = now - timedelta(days=settings.scoring_active_window_days)
        stmt = stmt.where(User.last_login_at.is_not(None), User.last_login_at >= cutoff)

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def build_developer_snapshots(db: AsyncSession, developers: List[User]) -> List[DeveloperSnapshot]:
    """One snapshot per developer with every assignment joined to its job's priority and hours."""
    if not developers:
        return []

    result = await db.execute(
        select(
            JobAssignment.developer_id,
            JobAssignment.status,
            JobAssignment.updated_at,
            Job.priority,
            Job.estimated_hours,
        )
        .join(Job, Job.id == JobAssignment.job_id)
        .where(JobAssignment.developer_id.in_([d.id for d in developers]))
    )
    records: Dict[UUID, List[AssignmentRecord]] = defaultdict(list)
    for developer_id, status, updated_at, priority, hours in result.all():
        records[developer_id].append(AssignmentRecord(
            status=status,
            priority=priority,
            hours=float(hours or 0),
            updated_at=updated_at,
        ))

    return [
        DeveloperSnapshot(
            id=developer.id,
            skills=list(developer.profile.skills or []) if developer.profile else [],
            availability=developer.profile.availability if developer.profile else None,
            assignments=records.get(developer.id, []),
            last_login_at=developer.last_login_at,
        )
        for developer in developers
    ]


# ==================== Score job ====================

def _score_response(score: DeveloperScore, developers: Dict[UUID, User]) -> DeveloperScoreResponse:
    developer = developers.get(score.developer_id)
    return DeveloperScoreResponse(
        rank=score.rank,
        developer_id=score.developer_id,
        total_score=score.total_score,
        breakdown=ScoreBreakdownSchema(**score.breakdown.as_dict()),
        developer=DeveloperSummary.model_validate(developer) if developer else None,
    )


async def _rank_for_job(
    db: AsyncSession,
    job_id: UUID,
    limit: int,
    min_score: float,
    include_inactive_users: bool,
    now: Optional[datetime] = None,
):
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))

    now = now or datetime.utcnow()
    limit = max(1, min(limit, settings.scoring_max_limit))

    config = await get_active_config(db)
    profile = profile_from_config(config)

    developers = await load_eligible_developers(db, include_inactive_users, now)
    snapshots = await build_developer_snapshots(db, developers)

    ranked = rank_developers(
        snapshots,
        job_snapshot(job),
        profile,
        now,
        limit=limit,
        min_score=min_score,
        params=ScoringParameters.from_settings(settings),
    )
    logger.info(
        f"Scored {len(snapshots)} developers for job {job_id}; "
        f"{len(ranked)} retained (config {profile.config_id}, {profile.algorithm.value})"
    )
    return profile, developers, ranked


async def score_job(
    db: AsyncSession,
    request: ScoreJobRequest,
    triggered_by: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> ScoreJobResponse:
    """Rank developers for a job and persist the run with one score row per retained developer."""
    profile, developers, ranked = await _rank_for_job(
        db,
        request.job_id,
        request.limit,
        request.min_score,
        request.include_inactive_users,
        now,
    )

    run = ScoringRun(
        job_id=request.job_id,
        triggered_by=triggered_by,
        algorithm=profile.algorithm,
        config_id=profile.config_id,
    )
    run.scores = [
        AssignmentScore(
            job_id=request.job_id,
            developer_id=score.developer_id,
            total_score=score.total_score,
            breakdown=score.breakdown.as_dict(),
            rank=score.rank,
        )
        for score in ranked
    ]
    db.add(run)
    await db.commit()
    logger.info(f"Scoring run {run.id} persisted for job {request.job_id} with {len(ranked)} scores")

    by_id = {d.id: d for d in developers}
    return ScoreJobResponse(
        job_id=request.job_id,
        run_id=run.id,
        config_id=profile.config_id,
        algorithm=profile.algorithm,
        weights=ScoringWeightsSchema(**profile.weights.as_dict()),
        total_candidates=len(developers),
        results=[_score_response(s, by_id) for s in ranked],
    )


async def get_recommendations(
    db: AsyncSession,
    job_id: UUID,
    limit: int = 10,
    min_score: float = 0.0,
    include_inactive_users: bool = False,
    now: Optional[datetime] = None,
) -> ScoreJobResponse:
    """Same ranking as score_job, without persisting a run."""
    profile, developers, ranked = await _rank_for_job(
        db, job_id, limit, min_score, include_inactive_users, now
    )
    by_id = {d.id: d for d in developers}
    return ScoreJobResponse(
        job_id=job_id,
        run_id=None,
        config_id=profile.config_id,
        algorithm=profile.algorithm,
        weights=ScoringWeightsSchema(**profile.weights.as_dict()),
        total_candidates=len(developers),
        results=[_score_response(s, by_id) for s in ranked],
    )


# ==================== Runs ====================

async def list_runs(
    db: AsyncSession,
    job_id: Optional[UUID] = None,
    limit: int = 20,
) -> List[ScoringRunResponse]:
    stmt = select(ScoringRun).order_by(ScoringRun.created_at.desc()).limit(limit)
    if job_id is not None:
        stmt = stmt.where(ScoringRun.job_id == job_id)
    result = await db.execute(stmt)
    return [ScoringRunResponse.model_validate(r) for r in result.scalars().all()]


async def get_run(db: AsyncSession, run_id: UUID) -> ScoringRunDetailResponse:
    result = await db.execute(
        select(ScoringRun)
        .where(ScoringRun.id == run_id)
        .options(selectinload(ScoringRun.scores))
    )
    run = result.scalar_one_or_none()
    if run is None:
        raise NotFoundError("Scoring run", str(run_id))
    return ScoringRunDetailResponse.model_validate(run)


# ==================== Performance ====================

async def update_developer_performance(
    db: AsyncSession,
    developer_id: UUID,
) -> DeveloperPerformanceResponse:
    """
    Recompute and upsert the cached performance counters of a developer.

    on_time_rate is the share of completed assignments finished on or before
    the job deadline (jobs without a deadline count as on time).
    avg_quality_rating has no source here and is stored as 0.
    """
    developer = await db.get(User, developer_id)
    if developer is None or developer.role != UserRole.DEVELOPER:
        raise NotFoundError("Developer", str(developer_id))

    result = await db.execute(
        select(
            JobAssignment.status,
            JobAssignment.created_at,
            JobAssignment.updated_at,
            Job.deadline,
        )
        .join(Job, Job.id == JobAssignment.job_id)
        .where(JobAssignment.developer_id == developer_id)
    )
    rows = result.all()

    completed = [r for r in rows if r.status == AssignmentStatus.COMPLETED]
    failed_count = sum(1 for r in rows if r.status == AssignmentStatus.FAILED)
    cancelled_count = sum(1 for r in rows if r.status == AssignmentStatus.CANCELLED)

    on_time = sum(1 for r in completed if r.deadline is None or r.updated_at <= r.deadline)
    on_time_rate = on_time / len(completed) if completed else 0.0
    cycle_hours = [
        (r.updated_at - r.created_at).total_seconds() / 3600.0 for r in completed
    ]
    avg_cycle_time = sum(cycle_hours) / len(cycle_hours) if cycle_hours else 0.0

    metric_result = await db.execute(
        select(DeveloperPerformanceMetric)
        .where(DeveloperPerformanceMetric.developer_id == developer_id)
    )
    metric = metric_result.scalar_one_or_none()
    if metric is None:
        metric = DeveloperPerformanceMetric(developer_id=developer_id)
        db.add(metric)

    metric.completed_count = len(completed)
    metric.failed_count = failed_count
    metric.cancelled_count = cancelled_count
    metric.on_time_rate = round(on_time_rate, 4)
    metric.avg_cycle_time_hours = round(avg_cycle_time, 2)
    metric.avg_quality_rating = 0.0
    metric.last_updated_at = datetime.utcnow()

    await db.commit()
    logger.info(
        f"Performance for developer {developer_id}: "
        f"{metric.completed_count} completed, {metric.failed_count} failed, on-time {metric.on_time_rate}"
    )
    return DeveloperPerformanceResponse.model_validate(metric)


async def get_developer_performance(
    db: AsyncSession,
    developer_id: UUID,
) -> DeveloperPerformanceResponse:
    result = await db.execute(
        select(DeveloperPerformanceMetric)
        .where(DeveloperPerformanceMetric.developer_id == developer_id)
    )
    metric = result.scalar_one_or_none()
    if metric is None:
        raise NotFoundError("Performance metric", str(developer_id))
    return DeveloperPerformanceResponse.model_validate(metric)
