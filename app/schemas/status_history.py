"""
Pydantic schemas for the status history (audit) endpoints.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from app.models.assignment import AssignmentStatus
from app.schemas.assignment import DeveloperSummary, JobSummary
from app.schemas.common import PaginationMeta
from app.schemas.team import TeamAssignmentResponse


class StatusHistoryRecordResponse(BaseModel):
    """One audit row."""
    id: UUID
    assignment_id: Optional[UUID] = None
    team_assignment_id: Optional[UUID] = None
    previous_status: Optional[AssignmentStatus] = None
    new_status: AssignmentStatus
    changed_by: UUID
    reason: Optional[str] = None
    notes: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Optional[dict] = Field(default=None, validation_alias=AliasChoices("metadata_", "metadata"))
    changed_at: datetime

    model_config = {"from_attributes": True}


class AssignmentHistoryAggregate(BaseModel):
    """A developer assignment with its full history (oldest first)."""
    id: UUID
    job_id: UUID
    developer_id: UUID
    status: AssignmentStatus
    assignment_type: str
    created_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None
    developer: Optional[DeveloperSummary] = None
    status_history: List[StatusHistoryRecordResponse]
    team_assignments: List[TeamAssignmentResponse]


class TeamAssignmentHistoryAggregate(BaseModel):
    """A team assignment with its full history (oldest first)."""
    id: UUID
    job_id: UUID
    team_id: UUID
    status: AssignmentStatus
    assigned_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None
    status_history: List[StatusHistoryRecordResponse]
    team_assignments: List[TeamAssignmentResponse]


class StatusHistoryListData(BaseModel):
    """Payload of GET /v1/status-history/all."""
    assignments: List[AssignmentHistoryAggregate] = []
    team_assignment: Optional[TeamAssignmentHistoryAggregate] = None
    pagination: Optional[PaginationMeta] = None


class StatusHistoryStats(BaseModel):
    """Payload of GET /v1/status-history/stats."""
    total_records: int
    records_by_status: Dict[str, int]
    assignments_by_status: Dict[str, int]
    team_assignments_by_status: Dict[str, int]
