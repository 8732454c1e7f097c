"""
Team assignment API endpoints under /v1/assignments/team.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.assignments import audit_from_request
from app.core.security import CurrentUser, get_current_user, require_admin
from app.database import get_db
from app.schemas.assignment import StatusChangeRequest
from app.schemas.common import ApiResponse, envelope
from app.schemas.team import (
    TeamAssignRequest,
    TeamAssignmentDetailResponse,
    TeamCreate,
    TeamCreateAndAssignRequest,
    TeamResponse,
)
from app.services import team_service

router = APIRouter(prefix="/assignments/team", tags=["Teams"])


@router.post(
    "",
    response_model=ApiResponse[TeamResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create team",
    description="Creates a team. Every member must be an existing developer.",
)
async def create_team(
    request: Request,
    body: TeamCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    team = await team_service.create_team(db, body)
    return envelope(request, team, "Team created")


@router.post(
    "/assign",
    response_model=ApiResponse[TeamAssignmentDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Assign team to job",
)
async def assign_team(
    request: Request,
    body: TeamAssignRequest,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    team_assignment = await team_service.assign_team_to_job(
        db, body.job_id, body.team_id, user, notes=body.notes, audit=audit_from_request(request)
    )
    return envelope(request, team_assignment, "Team assigned")


@router.post(
    "/create-and-assign",
    response_model=ApiResponse[TeamAssignmentDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create team and assign it to a job",
)
async def create_and_assign_team(
    request: Request,
    body: TeamCreateAndAssignRequest,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    team_data = TeamCreate(name=body.name, description=body.description, developer_ids=body.developer_ids)
    team_assignment = await team_service.create_team_and_assign(
        db, body.job_id, team_data, user, notes=body.notes, audit=audit_from_request(request)
    )
    return envelope(request, team_assignment, "Team created and assigned")


@router.patch(
    "/{team_assignment_id}/status",
    response_model=ApiResponse[TeamAssignmentDetailResponse],
    summary="Change team assignment status",
    description="Same workflow as developer assignments; non-admins must be team members.",
)
async def change_team_assignment_status(
    request: Request,
    team_assignment_id: UUID,
    body: StatusChangeRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team_assignment = await team_service.change_team_assignment_status(
        db, team_assignment_id, body.status, user, audit=audit_from_request(request, body)
    )
    return envelope(request, team_assignment, f"Team assignment status changed to {body.status.value}")


@router.get(
    "/job/{job_id}",
    response_model=ApiResponse[List[TeamAssignmentDetailResponse]],
    summary="List team assignments of a job",
)
async def get_team_assignments(
    request: Request,
    job_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team_assignments = await team_service.get_team_assignments_for_job(db, job_id)
    return envelope(request, team_assignments)
