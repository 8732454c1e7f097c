"""
Pydantic schemas for team and team assignment endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.assignment import AssignmentStatus
from app.models.team import TeamRole
from app.schemas.assignment import DeveloperSummary


class TeamCreate(BaseModel):
    """Request body for POST /v1/assignments/team."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    developer_ids: List[UUID] = Field(..., min_length=1)

    @field_validator("developer_ids")
    @classmethod
    def dedupe_developers(cls, v: List[UUID]) -> List[UUID]:
        """Drop repeated ids while keeping order."""
        return list(dict.fromkeys(v))


class TeamAssignRequest(BaseModel):
    """Request body for POST /v1/assignments/team/assign."""
    job_id: UUID
    team_id: UUID
    notes: Optional[str] = Field(default=None, max_length=2000)


class TeamCreateAndAssignRequest(TeamCreate):
    """Request body for POST /v1/assignments/team/create-and-assign."""
    job_id: UUID
    notes: Optional[str] = Field(default=None, max_length=2000)


class TeamMemberResponse(BaseModel):
    """Team membership row."""
    id: UUID
    user_id: UUID
    role: TeamRole
    joined_at: datetime
    user: Optional[DeveloperSummary] = None

    model_config = {"from_attributes": True}


class TeamResponse(BaseModel):
    """Team with members."""
    id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    members: List[TeamMemberResponse] = []

    model_config = {"from_attributes": True}


class TeamAssignmentResponse(BaseModel):
    """Team bound to a job."""
    id: UUID
    job_id: UUID
    team_id: UUID
    status: AssignmentStatus
    notes: Optional[str] = None
    assigned_by: UUID
    assigned_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TeamAssignmentDetailResponse(TeamAssignmentResponse):
    """Team assignment including the team and its members."""
    team: Optional[TeamResponse] = None
