"""
Status history (audit trail) service.

Writes are best-effort: they happen after the primary status write has been
committed, and a failing audit write is logged and rolled back without
failing the request. Reads follow a fixed precedence:
assignment id > team assignment id > changed-by/status filters > everything.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, func, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import NotFoundError
from app.models import (
    AssignmentStatus,
    JobAssignment,
    StatusHistory,
    TeamAssignment,
)
from app.schemas.assignment import DeveloperSummary, JobSummary
from app.schemas.common import build_pagination
from app.schemas.status_history import (
    AssignmentHistoryAggregate,
    StatusHistoryListData,
    StatusHistoryRecordResponse,
    StatusHistoryStats,
    TeamAssignmentHistoryAggregate,
)
from app.schemas.team import TeamAssignmentResponse

logger = logging.getLogger(__name__)


@dataclass
class AuditContext:
    """Request-level details attached to every history record."""
    reason: Optional[str] = None
    notes: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict = field(default_factory=dict)


async def record_status_change(
    db: AsyncSession,
    *,
    new_status: AssignmentStatus,
    changed_by: Optional[UUID],
    previous_status: Optional[AssignmentStatus] = None,
    assignment_id: Optional[UUID] = None,
    team_assignment_id: Optional[UUID] = None,
    audit: Optional[AuditContext] = None,
) -> Optional[StatusHistory]:
    """
    Append one history record and commit it.

    Returns None when the record was skipped (no actor) or could not be written.
    """
    if (assignment_id is None) == (team_assignment_id is None):
        raise ValueError("Exactly one of assignment_id / team_assignment_id is required")

    target = assignment_id or team_assignment_id
    if changed_by is None:
        logger.warning(f"Skipping status history for {target}: no actor supplied")
        return None

    audit = audit or AuditContext()
    record = StatusHistory(
        assignment_id=assignment_id,
        team_assignment_id=team_assignment_id,
        previous_status=previous_status,
        new_status=new_status,
        changed_by=changed_by,
        reason=audit.reason,
        notes=audit.notes,
        ip_address=audit.ip_address,
        user_agent=audit.user_agent,
        metadata_=audit.metadata or None,
    )

    try:
        db.add(record)
        await db.commit()
    except Exception as e:
        logger.error(
            f"Failed to write status history for {target} "
            f"({previous_status} -> {new_status}): {e}",
            exc_info=True,
        )
        await db.rollback()
        return None

    logger.info(
        f"Status history recorded for {target}: "
        f"{previous_status.value if previous_status else None} -> {new_status.value}"
    )
    return record


# ==================== Reads ====================

async def _history_for(
    db: AsyncSession,
    *,
    assignment_ids: Iterable[UUID] = (),
    team_assignment_ids: Iterable[UUID] = (),
) -> Dict[UUID, List[StatusHistoryRecordResponse]]:
    """History records grouped by target id, oldest first."""
    assignment_ids = list(assignment_ids)
    team_assignment_ids = list(team_assignment_ids)
    grouped: Dict[UUID, List[StatusHistoryRecordResponse]] = defaultdict(list)

    if assignment_ids:
        result = await db.execute(
            select(StatusHistory)
            .where(StatusHistory.assignment_id.in_(assignment_ids))
            .order_by(StatusHistory.changed_at.asc())
        )
        for record in result.scalars().all():
            grouped[record.assignment_id].append(StatusHistoryRecordResponse.model_validate(record))

    if team_assignment_ids:
        result = await db.execute(
            select(StatusHistory)
            .where(StatusHistory.team_assignment_id.in_(team_assignment_ids))
            .order_by(StatusHistory.changed_at.asc())
        )
        for record in result.scalars().all():
            grouped[record.team_assignment_id].append(StatusHistoryRecordResponse.model_validate(record))

    return grouped


async def _team_assignments_for_jobs(
    db: AsyncSession,
    job_ids: Iterable[UUID],
) -> Dict[UUID, List[TeamAssignmentResponse]]:
    job_ids = list(set(job_ids))
    grouped: Dict[UUID, List[TeamAssignmentResponse]] = defaultdict(list)
    if not job_ids:
        return grouped

    result = await db.execute(
        select(TeamAssignment)
        .where(TeamAssignment.job_id.in_(job_ids))
        .order_by(TeamAssignment.assigned_at.asc())
    )
    for ta in result.scalars().all():
        grouped[ta.job_id].append(TeamAssignmentResponse.model_validate(ta))
    return grouped


def _assignment_aggregate(
    assignment: JobAssignment,
    history: List[StatusHistoryRecordResponse],
    team_assignments: List[TeamAssignmentResponse],
) -> AssignmentHistoryAggregate:
    return AssignmentHistoryAggregate(
        id=assignment.id,
        job_id=assignment.job_id,
        developer_id=assignment.developer_id,
        status=assignment.status,
        assignment_type=assignment.assignment_type,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
        job=JobSummary.model_validate(assignment.job) if assignment.job else None,
        developer=DeveloperSummary.model_validate(assignment.developer) if assignment.developer else None,
        status_history=history,
        team_assignments=team_assignments,
    )


async def get_assignment_history(db: AsyncSession, assignment_id: UUID) -> AssignmentHistoryAggregate:
    """Single assignment with its full history and the team assignments of its job."""
    result = await db.execute(
        select(JobAssignment)
        .where(JobAssignment.id == assignment_id)
        .options(selectinload(JobAssignment.job), selectinload(JobAssignment.developer))
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise NotFoundError("Assignment", str(assignment_id))

    history = await _history_for(db, assignment_ids=[assignment.id])
    team_assignments = await _team_assignments_for_jobs(db, [assignment.job_id])
    return _assignment_aggregate(
        assignment,
        history.get(assignment.id, []),
        team_assignments.get(assignment.job_id, []),
    )


async def get_team_assignment_history(
    db: AsyncSession,
    team_assignment_id: UUID,
) -> TeamAssignmentHistoryAggregate:
    """Single team assignment with its full history and the team assignments of its job."""
    result = await db.execute(
        select(TeamAssignment)
        .where(TeamAssignment.id == team_assignment_id)
        .options(selectinload(TeamAssignment.job))
    )
    team_assignment = result.scalar_one_or_none()
    if team_assignment is None:
        raise NotFoundError("Team assignment", str(team_assignment_id))

    history = await _history_for(db, team_assignment_ids=[team_assignment.id])
    siblings = await _team_assignments_for_jobs(db, [team_assignment.job_id])
    return TeamAssignmentHistoryAggregate(
        id=team_assignment.id,
        job_id=team_assignment.job_id,
        team_id=team_assignment.team_id,
        status=team_assignment.status,
        assigned_at=team_assignment.assigned_at,
        updated_at=team_assignment.updated_at,
        job=JobSummary.model_validate(team_assignment.job) if team_assignment.job else None,
        status_history=history.get(team_assignment.id, []),
        team_assignments=siblings.get(team_assignment.job_id, []),
    )


async def get_all_status_history(
    db: AsyncSession,
    assignment_id: Optional[UUID] = None,
    team_assignment_id: Optional[UUID] = None,
    changed_by: Optional[UUID] = None,
    status: Optional[AssignmentStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> StatusHistoryListData:
    """
    Audit trail query.

    An assignment id returns exactly one aggregate and ignores every other
    filter and pagination; a team assignment id does the same for a team
    assignment. Otherwise a page of assignments is returned, newest first,
    restricted to those having at least one record matching changed_by/status.
    """
    if assignment_id is not None:
        aggregate = await get_assignment_history(db, assignment_id)
        return StatusHistoryListData(assignments=[aggregate])

    if team_assignment_id is not None:
        aggregate = await get_team_assignment_history(db, team_assignment_id)
        return StatusHistoryListData(team_assignment=aggregate)

    conditions = []
    if changed_by is not None or status is not None:
        history_filter = [StatusHistory.assignment_id == JobAssignment.id]
        if changed_by is not None:
            history_filter.append(StatusHistory.changed_by == changed_by)
        if status is not None:
            history_filter.append(StatusHistory.new_status == status)
        conditions.append(exists().where(*history_filter))

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
    assignments = result.scalars().all()

    history = await _history_for(db, assignment_ids=[a.id for a in assignments])
    team_assignments = await _team_assignments_for_jobs(db, [a.job_id for a in assignments])

    return StatusHistoryListData(
        assignments=[
            _assignment_aggregate(a, history.get(a.id, []), team_assignments.get(a.job_id, []))
            for a in assignments
        ],
        pagination=build_pagination(page, limit, total),
    )


async def get_status_history_stats(db: AsyncSession) -> StatusHistoryStats:
    """Record totals plus current status distribution of assignments."""
    total_result = await db.execute(select(func.count()).select_from(StatusHistory))
    total_records = total_result.scalar() or 0

    by_new_status = await db.execute(
        select(StatusHistory.new_status, func.count())
        .group_by(StatusHistory.new_status)
    )
    by_assignment_status = await db.execute(
        select(JobAssignment.status, func.count())
        .group_by(JobAssignment.status)
    )
    by_team_status = await db.execute(
        select(TeamAssignment.status, func.count())
        .group_by(TeamAssignment.status)
    )

    def as_counts(rows) -> Dict[str, int]:
        counts = {s.value: 0 for s in AssignmentStatus}
        for status_value, count in rows:
            counts[AssignmentStatus(status_value).value] = count
        return counts

    return StatusHistoryStats(
        total_records=total_records,
        records_by_status=as_counts(by_new_status.all()),
        assignments_by_status=as_counts(by_assignment_status.all()),
        team_assignments_by_status=as_counts(by_team_status.all()),
    )
