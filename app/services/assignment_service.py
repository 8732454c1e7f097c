"""
Developer assignment service layer.
Creation, listing, updates and status transitions for job assignments.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.security import CurrentUser
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models import (
    ACTIVE_ASSIGNMENT_STATUSES,
    AssignmentStatus,
    Job,
    JobAssignment,
    StatusHistory,
    User,
    UserRole,
)
from app.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetailResponse,
    AssignmentUpdate,
    DeveloperSuggestion,
)
from app.schemas.common import PaginatedData, build_pagination
from app.services.status_history_service import AuditContext, record_status_change
from app.services.status_workflow import run_trigger, validate_transition

logger = logging.getLogger(__name__)

DEFAULT_ASSIGNMENT_TYPE = "MANUAL"


async def _get_assignment_or_404(db: AsyncSession, assignment_id: UUID) -> JobAssignment:
    result = await db.execute(
        select(JobAssignment)
        .where(JobAssignment.id == assignment_id)
        .options(selectinload(JobAssignment.job), selectinload(JobAssignment.developer))
        .execution_options(populate_existing=True)
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise NotFoundError("Assignment", str(assignment_id))
    return assignment


def _check_read_access(assignment: JobAssignment, actor: CurrentUser) -> None:
    if actor.is_admin:
        return
    if actor.role == UserRole.DEVELOPER and assignment.developer_id == actor.id:
        return
    if actor.role == UserRole.CLIENT and assignment.job is not None and assignment.job.client_id == actor.id:
        return
    raise ForbiddenError("You do not have access to this assignment")


async def create_assignment(
    db: AsyncSession,
    data: AssignmentCreate,
    actor: CurrentUser,
    audit: Optional[AuditContext] = None,
) -> AssignmentDetailResponse:
    """
    Assign a developer to a job.

    The job must exist, the user must be a developer, and no PENDING or
    IN_PROGRESS assignment may already bind the same pair.
    """
    job = await db.get(Job, data.job_id)
    if job is None:
        raise NotFoundError("Job", str(data.job_id))

    developer = await db.get(User, data.developer_id)
    if developer is None or developer.role != UserRole.DEVELOPER or developer.is_deleted:
        raise ValidationError(
            "Selected user is not a developer",
            details={"developer_id": str(data.developer_id)},
        )

    existing = await db.execute(
        select(JobAssignment.id).where(
            JobAssignment.job_id == data.job_id,
            JobAssignment.developer_id == data.developer_id,
            JobAssignment.status.in_(ACTIVE_ASSIGNMENT_STATUSES),
        )
    )
    existing_id = existing.scalars().first()
    if existing_id is not None:
        raise ConflictError(
            "Developer already has an active assignment for this job",
            details={"assignment_id": str(existing_id)},
        )

    assignment = JobAssignment(
        job_id=data.job_id,
        developer_id=data.developer_id,
        assigned_by=actor.id,
        status=AssignmentStatus.PENDING,
        assignment_type=data.assignment_type or DEFAULT_ASSIGNMENT_TYPE,
        notes=data.notes or None,
    )
    db.add(assignment)
    await db.commit()
    assignment_id = assignment.id
    job_id = assignment.job_id

    logger.info(f"Assignment {assignment_id} created: developer {data.developer_id} -> job {job_id}")

    await record_status_change(
        db,
        assignment_id=assignment_id,
        previous_status=None,
        new_status=AssignmentStatus.PENDING,
        changed_by=actor.id,
        audit=audit,
    )
    await run_trigger(db, AssignmentStatus.PENDING, job_id)

    return AssignmentDetailResponse.model_validate(await _get_assignment_or_404(db, assignment_id))


async def list_assignments(
    db: AsyncSession,
    actor: CurrentUser,
    job_id: Optional[UUID] = None,
    developer_id: Optional[UUID] = None,
    status: Optional[AssignmentStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> PaginatedData[AssignmentDetailResponse]:
    """
    Paginated assignments, newest first.
    Developers only see their own; clients only see assignments on their jobs.
    """
    conditions = []
    if job_id is not None:
        conditions.append(JobAssignment.job_id == job_id)
    if developer_id is not None:
        conditions.append(JobAssignment.developer_id == developer_id)
    if status is not None:
        conditions.append(JobAssignment.status == status)

    if actor.role == UserRole.DEVELOPER:
        conditions.append(JobAssignment.developer_id == actor.id)
    elif actor.role == UserRole.CLIENT:
        conditions.append(
            JobAssignment.job_id.in_(select(Job.id).where(Job.client_id == actor.id))
        )

    count_result = await db.execute(
        select(func.count()).select_from(JobAssignment).where(*conditions)
    )
    total = count_result.scalar() or 0

    result = await db.execute(
        select(JobAssignment)
        .where(*conditions)
        .options(selectinload(JobAssignment.job), selectinload(JobAssignment.developer))
        .order_by(JobAssignment.created_at.desc(), JobAssignment.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return PaginatedData[AssignmentDetailResponse](
        items=[AssignmentDetailResponse.model_validate(a) for a in result.scalars().all()],
        pagination=build_pagination(page, limit, total),
    )


async def get_assignment(
    db: AsyncSession,
    assignment_id: UUID,
    actor: CurrentUser,
) -> AssignmentDetailResponse:
    assignment = await _get_assignment_or_404(db, assignment_id)
    _check_read_access(assignment, actor)
    return AssignmentDetailResponse.model_validate(assignment)


async def update_assignment(
    db: AsyncSession,
    assignment_id: UUID,
    data: AssignmentUpdate,
) -> AssignmentDetailResponse:
    """Update notes and/or type. Status is only changed through the workflow."""
    assignment = await _get_assignment_or_404(db, assignment_id)

    updates = data.model_dump(exclude_unset=True)
    for key, value in updates.items():
        if key == "assignment_type" and not value:
            value = DEFAULT_ASSIGNMENT_TYPE
        setattr(assignment, key, value)
    assignment.updated_at = datetime.utcnow()

    await db.commit()
    return AssignmentDetailResponse.model_validate(await _get_assignment_or_404(db, assignment_id))


async def delete_assignment(db: AsyncSession, assignment_id: UUID) -> None:
    assignment = await db.get(JobAssignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", str(assignment_id))

    await db.execute(delete(StatusHistory).where(StatusHistory.assignment_id == assignment_id))
    await db.delete(assignment)
    await db.commit()
    logger.info(f"Assignment {assignment_id} deleted")


async def change_assignment_status(
    db: AsyncSession,
    assignment_id: UUID,
    new_status: AssignmentStatus,
    actor: CurrentUser,
    audit: Optional[AuditContext] = None,
) -> AssignmentDetailResponse:
    """
    Move an assignment through the workflow.

    Ownership is checked before the transition table. The status write and
    its job side effect commit together; the history record is written after.
    """
    assignment = await db.get(JobAssignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", str(assignment_id))

    if not actor.is_admin and assignment.developer_id != actor.id:
        raise ForbiddenError("Only the assigned developer can change this assignment's status")

    previous_status = assignment.status
    validate_transition(previous_status, new_status)

    assignment.status = new_status
    assignment.updated_at = datetime.utcnow()
    await run_trigger(db, new_status, assignment.job_id)
    await db.commit()

    logger.info(
        f"Assignment {assignment_id} moved {previous_status.value} -> {new_status.value} by {actor.id}"
    )

    await record_status_change(
        db,
        assignment_id=assignment_id,
        previous_status=previous_status,
        new_status=new_status,
        changed_by=actor.id,
        audit=audit,
    )

    return AssignmentDetailResponse.model_validate(await _get_assignment_or_404(db, assignment_id))


def _skill_names(entries) -> List[str]:
    """Skill names from a list of plain strings or {"skill": ...} objects."""
    names = []
    for entry in entries or []:
        if isinstance(entry, dict):
            name = entry.get("skill") or entry.get("name")
        else:
            name = entry
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return names


async def suggest_developers(db: AsyncSession, job_id: UUID) -> List[DeveloperSuggestion]:
    """Developers whose profile skills overlap the job's required skills, best overlap first."""
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))

    required = {name.lower() for name in _skill_names(job.required_skills)}
    if not required:
        return []

    result = await db.execute(
        select(User)
        .where(User.role == UserRole.DEVELOPER, User.is_deleted.is_(False))
        .options(selectinload(User.profile))
    )

    suggestions = []
    for developer in result.scalars().all():
        skills = list(developer.profile.skills or []) if developer.profile else []
        matched = [s for s in skills if isinstance(s, str) and s.lower() in required]
        if not matched:
            continue
        suggestions.append(DeveloperSuggestion(
            id=developer.id,
            firstname=developer.firstname,
            lastname=developer.lastname,
            username=developer.username,
            email=developer.email,
            skills=skills,
            matched_skills=matched,
        ))

    suggestions.sort(key=lambda s: (-len(s.matched_skills), str(s.id)))
    return suggestions
