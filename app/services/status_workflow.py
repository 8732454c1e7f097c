"""
Assignment status workflow.

A fixed transition table over the five assignment statuses, plus a table of
side-effect triggers keyed by target status. Triggers update the parent job
and run inside the caller's transaction; if one raises, the whole status
change is rolled back.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, FrozenSet, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidTransitionError, NotFoundError
from app.models.assignment import AssignmentStatus, JobAssignment, ACTIVE_ASSIGNMENT_STATUSES
from app.models.job import Job, JobStatus
from app.models.team import TeamAssignment

logger = logging.getLogger(__name__)


TRANSITIONS: Dict[AssignmentStatus, FrozenSet[AssignmentStatus]] = {
    AssignmentStatus.PENDING: frozenset({AssignmentStatus.IN_PROGRESS, AssignmentStatus.CANCELLED}),
    AssignmentStatus.IN_PROGRESS: frozenset({
        AssignmentStatus.COMPLETED,
        AssignmentStatus.FAILED,
        AssignmentStatus.CANCELLED,
    }),
    AssignmentStatus.COMPLETED: frozenset({AssignmentStatus.CANCELLED}),
    AssignmentStatus.FAILED: frozenset({AssignmentStatus.IN_PROGRESS, AssignmentStatus.CANCELLED}),
    AssignmentStatus.CANCELLED: frozenset(),
}

# Stable ordering for error details and responses
_STATUS_ORDER = list(AssignmentStatus)


def allowed_transitions(status: AssignmentStatus) -> List[AssignmentStatus]:
    """Targets reachable from `status`, in declaration order."""
    targets = TRANSITIONS.get(status, frozenset())
    return [s for s in _STATUS_ORDER if s in targets]


def can_transition(current: AssignmentStatus, target: AssignmentStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def validate_transition(current: AssignmentStatus, target: AssignmentStatus) -> None:
    """
    Raise InvalidTransitionError unless `target` is reachable from `current`.

    The error details carry the allowed set so clients can offer valid choices.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(
            current=current.value,
            target=target.value,
            allowed=[s.value for s in allowed_transitions(current)],
        )


# ==================== Side-effect triggers ====================

TriggerHandler = Callable[[AsyncSession, UUID], Awaitable[None]]


async def _load_job(db: AsyncSession, job_id: UUID) -> Job:
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))
    return job


async def _sibling_statuses(db: AsyncSession, job_id: UUID) -> List[AssignmentStatus]:
    """Current statuses of every developer and team assignment of a job."""
    dev_result = await db.execute(
        select(JobAssignment.status).where(JobAssignment.job_id == job_id)
    )
    team_result = await db.execute(
        select(TeamAssignment.status).where(TeamAssignment.job_id == job_id)
    )
    return list(dev_result.scalars().all()) + list(team_result.scalars().all())


def _set_job_status(job: Job, status: JobStatus) -> None:
    if job.status == status:
        return
    job.previous_status = job.status
    job.status = status
    job.status_changed_at = datetime.utcnow()


async def on_pending(db: AsyncSession, job_id: UUID) -> None:
    logger.info(f"Assignment created for job {job_id}; awaiting developer start")


async def on_in_progress(db: AsyncSession, job_id: UUID) -> None:
    job = await _load_job(db, job_id)
    _set_job_status(job, JobStatus.IN_PROGRESS)
    logger.info(f"Job {job_id} marked IN_PROGRESS")


async def on_completed(db: AsyncSession, job_id: UUID) -> None:
    """Complete the job once every non-cancelled assignment of it is complete."""
    await db.flush()
    statuses = [
        s for s in await _sibling_statuses(db, job_id)
        if s != AssignmentStatus.CANCELLED
    ]
    if statuses and all(s == AssignmentStatus.COMPLETED for s in statuses):
        job = await _load_job(db, job_id)
        _set_job_status(job, JobStatus.COMPLETED)
        logger.info(f"All assignments of job {job_id} completed; job marked COMPLETED")


async def on_failed(db: AsyncSession, job_id: UUID) -> None:
    logger.warning(f"Assignment for job {job_id} failed; job may need reassignment")


async def on_cancelled(db: AsyncSession, job_id: UUID) -> None:
    """Reopen the job when nothing is pending or in progress on it anymore."""
    await db.flush()
    statuses = await _sibling_statuses(db, job_id)
    if not any(s in ACTIVE_ASSIGNMENT_STATUSES for s in statuses):
        job = await _load_job(db, job_id)
        _set_job_status(job, JobStatus.APPROVED)
        logger.info(f"No active assignments left on job {job_id}; job reopened as APPROVED")


STATUS_TRIGGERS: Dict[AssignmentStatus, TriggerHandler] = {
    AssignmentStatus.PENDING: on_pending,
    AssignmentStatus.IN_PROGRESS: on_in_progress,
    AssignmentStatus.COMPLETED: on_completed,
    AssignmentStatus.FAILED: on_failed,
    AssignmentStatus.CANCELLED: on_cancelled,
}


async def run_trigger(db: AsyncSession, status: AssignmentStatus, job_id: UUID) -> None:
    """Dispatch the side effect for `status`. Exceptions propagate to the caller."""
    handler = STATUS_TRIGGERS[status]
    await handler(db, job_id)
