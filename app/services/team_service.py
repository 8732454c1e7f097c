"""
Team service layer.
Team creation, team-to-job assignment and team assignment status transitions.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.security import CurrentUser
from app.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.models import (
    AssignmentStatus,
    Job,
    Team,
    TeamAssignment,
    TeamMember,
    TeamRole,
    User,
    UserRole,
)
from app.schemas.team import (
    TeamAssignmentDetailResponse,
    TeamCreate,
    TeamResponse,
)
from app.services.status_history_service import AuditContext, record_status_change
from app.services.status_workflow import run_trigger, validate_transition

logger = logging.getLogger(__name__)


def _team_options():
    return selectinload(Team.members).selectinload(TeamMember.user)


async def _get_team(db: AsyncSession, team_id: UUID) -> Team:
    result = await db.execute(
        select(Team)
        .where(Team.id == team_id)
        .options(_team_options())
        .execution_options(populate_existing=True)
    )
    team = result.scalar_one_or_none()
    if team is None:
        raise NotFoundError("Team", str(team_id))
    return team


async def _get_team_assignment(db: AsyncSession, team_assignment_id: UUID) -> TeamAssignment:
    result = await db.execute(
        select(TeamAssignment)
        .where(TeamAssignment.id == team_assignment_id)
        .options(selectinload(TeamAssignment.team).options(_team_options()))
        .execution_options(populate_existing=True)
    )
    team_assignment = result.scalar_one_or_none()
    if team_assignment is None:
        raise NotFoundError("Team assignment", str(team_assignment_id))
    return team_assignment


async def create_team(db: AsyncSession, data: TeamCreate) -> TeamResponse:
    """Create a team whose members are all existing developers."""
    result = await db.execute(
        select(User.id).where(
            User.id.in_(data.developer_ids),
            User.role == UserRole.DEVELOPER,
            User.is_deleted.is_(False),
        )
    )
    found = set(result.scalars().all())
    missing = [str(d) for d in data.developer_ids if d not in found]
    if missing:
        raise ValidationError(
            "Some developers not found or not valid",
            details={"invalid_developer_ids": missing},
        )

    team = Team(name=data.name, description=data.description)
    team.members = [
        TeamMember(user_id=developer_id, role=TeamRole.MEMBER)
        for developer_id in data.developer_ids
    ]
    db.add(team)
    await db.commit()

    logger.info(f"Team {team.id} created with {len(data.developer_ids)} members")
    return TeamResponse.model_validate(await _get_team(db, team.id))


async def assign_team_to_job(
    db: AsyncSession,
    job_id: UUID,
    team_id: UUID,
    actor: CurrentUser,
    notes: Optional[str] = None,
    audit: Optional[AuditContext] = None,
) -> TeamAssignmentDetailResponse:
    """Bind a team to a job in PENDING status and record the initial history entry."""
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))

    team = await db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team", str(team_id))

    team_assignment = TeamAssignment(
        job_id=job_id,
        team_id=team_id,
        assigned_by=actor.id,
        status=AssignmentStatus.PENDING,
        notes=notes or None,
    )
    db.add(team_assignment)
    await db.commit()
    team_assignment_id = team_assignment.id

    logger.info(f"Team {team_id} assigned to job {job_id} ({team_assignment_id})")

    await record_status_change(
        db,
        team_assignment_id=team_assignment_id,
        previous_status=None,
        new_status=AssignmentStatus.PENDING,
        changed_by=actor.id,
        audit=audit,
    )
    await run_trigger(db, AssignmentStatus.PENDING, job_id)

    return TeamAssignmentDetailResponse.model_validate(
        await _get_team_assignment(db, team_assignment_id)
    )


async def create_team_and_assign(
    db: AsyncSession,
    job_id: UUID,
    data: TeamCreate,
    actor: CurrentUser,
    notes: Optional[str] = None,
    audit: Optional[AuditContext] = None,
) -> TeamAssignmentDetailResponse:
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))

    team = await create_team(db, data)
    return await assign_team_to_job(db, job_id, team.id, actor, notes=notes, audit=audit)


async def change_team_assignment_status(
    db: AsyncSession,
    team_assignment_id: UUID,
    new_status: AssignmentStatus,
    actor: CurrentUser,
    audit: Optional[AuditContext] = None,
) -> TeamAssignmentDetailResponse:
    """Same workflow as developer assignments; non-admins must be members of the team."""
    team_assignment = await db.get(TeamAssignment, team_assignment_id)
    if team_assignment is None:
        raise NotFoundError("Team assignment", str(team_assignment_id))

    if not actor.is_admin:
        membership = await db.execute(
            select(TeamMember.id).where(
                TeamMember.team_id == team_assignment.team_id,
                TeamMember.user_id == actor.id,
            )
        )
        if membership.scalars().first() is None:
            raise ForbiddenError("Only members of the assigned team can change its status")

    previous_status = team_assignment.status
    validate_transition(previous_status, new_status)

    team_assignment.status = new_status
    team_assignment.updated_at = datetime.utcnow()
    await run_trigger(db, new_status, team_assignment.job_id)
    await db.commit()

    logger.info(
        f"Team assignment {team_assignment_id} moved "
        f"{previous_status.value} -> {new_status.value} by {actor.id}"
    )

    await record_status_change(
        db,
        team_assignment_id=team_assignment_id,
        previous_status=previous_status,
        new_status=new_status,
        changed_by=actor.id,
        audit=audit,
    )

    return TeamAssignmentDetailResponse.model_validate(
        await _get_team_assignment(db, team_assignment_id)
    )


async def get_team_assignments_for_job(
    db: AsyncSession,
    job_id: UUID,
) -> List[TeamAssignmentDetailResponse]:
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))

    result = await db.execute(
        select(TeamAssignment)
        .where(TeamAssignment.job_id == job_id)
        .options(selectinload(TeamAssignment.team).options(_team_options()))
        .order_by(TeamAssignment.assigned_at.asc())
    )
    return [TeamAssignmentDetailResponse.model_validate(ta) for ta in result.scalars().all()]
