"""
Assignments API endpoints.
Handles developer-to-job assignments and their status workflow under /v1/assignments.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CurrentUser, get_current_user, require_admin, require_admin_or_client
from app.database import get_db
from app.models.assignment import AssignmentStatus
from app.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetailResponse,
    AssignmentUpdate,
    DeveloperSuggestion,
    StatusChangeRequest,
)
from app.schemas.common import ApiResponse, PaginatedData, envelope
from app.services import assignment_service
from app.services.status_history_service import AuditContext

router = APIRouter(prefix="/assignments", tags=["Assignments"])


def audit_from_request(request: Request, body: Optional[StatusChangeRequest] = None) -> AuditContext:
    """Collect who/where details for the status history record."""
    return AuditContext(
        reason=body.reason if body else None,
        notes=body.notes if body else None,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        metadata=(body.metadata or {}) if body else {},
    )


@router.post(
    "",
    response_model=ApiResponse[AssignmentDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Assign a developer to a job",
    description="Creates a PENDING assignment. Fails with 409 if the developer already has an active one for the job.",
)
async def create_assignment(
    request: Request,
    body: AssignmentCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    assignment = await assignment_service.create_assignment(
        db, body, user, audit=audit_from_request(request)
    )
    return envelope(request, assignment, "Assignment created")


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[AssignmentDetailResponse]],
    summary="List assignments",
    description="Paginated, newest first. Developers only see their own assignments.",
)
async def list_assignments(
    request: Request,
    job_id: Optional[UUID] = Query(default=None, description="Filter by job"),
    developer_id: Optional[UUID] = Query(default=None, description="Filter by developer"),
    status_filter: Optional[AssignmentStatus] = Query(default=None, alias="status", description="Filter by status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = await assignment_service.list_assignments(
        db, user, job_id, developer_id, status_filter, page, limit
    )
    return envelope(request, data)


@router.get(
    "/suggestions/{job_id}",
    response_model=ApiResponse[List[DeveloperSuggestion]],
    summary="Suggest developers",
    description="Developers whose profile skills overlap the job's required skills.",
)
async def suggest_developers(
    request: Request,
    job_id: UUID,
    user: CurrentUser = Depends(require_admin_or_client),
    db: AsyncSession = Depends(get_db),
):
    suggestions = await assignment_service.suggest_developers(db, job_id)
    return envelope(request, suggestions)


@router.get(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentDetailResponse],
    summary="Get assignment",
)
async def get_assignment(
    request: Request,
    assignment_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    assignment = await assignment_service.get_assignment(db, assignment_id, user)
    return envelope(request, assignment)


@router.patch(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentDetailResponse],
    summary="Update assignment",
    description="Updates notes and assignment type. Use /status to change the status.",
)
async def update_assignment(
    request: Request,
    assignment_id: UUID,
    body: AssignmentUpdate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    assignment = await assignment_service.update_assignment(db, assignment_id, body)
    return envelope(request, assignment, "Assignment updated")


@router.patch(
    "/{assignment_id}/status",
    response_model=ApiResponse[AssignmentDetailResponse],
    summary="Change assignment status",
    description=(
        "Moves the assignment through the workflow. Non-admins may only change "
        "their own assignments. Invalid transitions return 400 with the allowed targets."
    ),
)
async def change_assignment_status(
    request: Request,
    assignment_id: UUID,
    body: StatusChangeRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    assignment = await assignment_service.change_assignment_status(
        db, assignment_id, body.status, user, audit=audit_from_request(request, body)
    )
    return envelope(request, assignment, f"Assignment status changed to {body.status.value}")


@router.delete(
    "/{assignment_id}",
    response_model=ApiResponse[None],
    summary="Delete assignment",
)
async def delete_assignment(
    request: Request,
    assignment_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await assignment_service.delete_assignment(db, assignment_id)
    return envelope(request, None, "Assignment deleted")
