"""
Status history API endpoints.
Read-only access to the assignment audit trail.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CurrentUser, require_admin, require_admin_or_client
from app.database import get_db
from app.models.assignment import AssignmentStatus
from app.schemas.common import ApiResponse, envelope
from app.schemas.status_history import StatusHistoryListData, StatusHistoryStats
from app.services import status_history_service

router = APIRouter(prefix="/status-history", tags=["Status History"])


@router.get(
    "/all",
    response_model=ApiResponse[StatusHistoryListData],
    summary="Query status history",
    description=(
        "assignmentId returns exactly one assignment with its full history and "
        "ignores every other filter; teamAssignmentId does the same for a team "
        "assignment. Otherwise a page of assignments, optionally restricted to "
        "those with history matching changedBy and/or status."
    ),
)
async def get_all_status_history(
    request: Request,
    assignment_id: Optional[UUID] = Query(default=None, alias="assignmentId"),
    team_assignment_id: Optional[UUID] = Query(default=None, alias="teamAssignmentId"),
    changed_by: Optional[UUID] = Query(default=None, alias="changedBy"),
    status_filter: Optional[AssignmentStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    data = await status_history_service.get_all_status_history(
        db,
        assignment_id=assignment_id,
        team_assignment_id=team_assignment_id,
        changed_by=changed_by,
        status=status_filter,
        page=page,
        limit=limit,
    )
    return envelope(request, data)


@router.get(
    "/stats",
    response_model=ApiResponse[StatusHistoryStats],
    summary="Status history statistics",
)
async def get_status_history_stats(
    request: Request,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await status_history_service.get_status_history_stats(db))
