"""
Pydantic schemas for developer assignment endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.assignment import AssignmentStatus
from app.models.job import JobPriority, JobStatus


class AssignmentCreate(BaseModel):
    """Request body for POST /v1/assignments."""
    job_id: UUID
    developer_id: UUID
    assignment_type: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=2000)


class AssignmentUpdate(BaseModel):
    """Request body for PATCH /v1/assignments/{id}; status changes go through /status."""
    assignment_type: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=2000)


class StatusChangeRequest(BaseModel):
    """Request body for the status endpoints."""
    status: AssignmentStatus
    reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=2000)
    metadata: Optional[dict] = None


class JobSummary(BaseModel):
    """Minimal job info embedded in assignment responses."""
    id: UUID
    title: str
    status: JobStatus
    priority: JobPriority

    model_config = {"from_attributes": True}


class DeveloperSummary(BaseModel):
    """Minimal developer info embedded in responses."""
    id: UUID
    email: str
    username: Optional[str] = None
    firstname: str
    lastname: str

    model_config = {"from_attributes": True}


class AssignmentResponse(BaseModel):
    """Single developer assignment."""
    id: UUID
    job_id: UUID
    developer_id: UUID
    assigned_by: UUID
    status: AssignmentStatus
    assignment_type: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssignmentDetailResponse(AssignmentResponse):
    """Assignment with its job and developer."""
    job: Optional[JobSummary] = None
    developer: Optional[DeveloperSummary] = None


class DeveloperSuggestion(BaseModel):
    """Developer whose profile skills overlap the job's required skills."""
    id: UUID
    firstname: str
    lastname: str
    username: Optional[str] = None
    email: str
    skills: List[str]
    matched_skills: List[str]
