"""
Pydantic schemas for scoring, scoring configuration and performance endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.config import get_settings
from app.models.scoring_config import ScoringAlgorithm
from app.schemas.assignment import DeveloperSummary


# ==================== Weights / Breakdown ====================

class ScoringWeightsSchema(BaseModel):
    """The five factor weights; every factor is always present."""
    skill_match: float = Field(default=0.30, ge=0.0, le=1.0)
    performance: float = Field(default=0.35, ge=0.0, le=1.0)
    availability: float = Field(default=0.20, ge=0.0, le=1.0)
    workload: float = Field(default=0.10, ge=0.0, le=1.0)
    priority: float = Field(default=0.05, ge=0.0, le=1.0)


class ScoreBreakdownSchema(BaseModel):
    """Per-factor scores, each in [0, 1]."""
    skill_match: float
    performance: float
    availability: float
    workload: float
    priority: float


# ==================== Score Job ====================

class ScoreJobRequest(BaseModel):
    """Request body for POST /v1/scoring/score-job."""
    job_id: UUID
    limit: int = Field(default_factory=lambda: get_settings().scoring_default_limit, ge=1, le=50)
    min_score: float = Field(default=0.0, ge=0.0, le=1.0)
    include_inactive_users: bool = False


class DeveloperScoreResponse(BaseModel):
    """One ranked developer."""
    rank: int
    developer_id: UUID
    total_score: float
    breakdown: ScoreBreakdownSchema
    developer: Optional[DeveloperSummary] = None


class ScoreJobResponse(BaseModel):
    """Ranked result, with the run id when the result was persisted."""
    job_id: UUID
    run_id: Optional[UUID] = None
    config_id: Optional[UUID] = None
    algorithm: ScoringAlgorithm
    weights: ScoringWeightsSchema
    total_candidates: int
    results: List[DeveloperScoreResponse]


# ==================== Configs ====================

class ScoringConfigCreate(BaseModel):
    """Request body for POST /v1/scoring/configs."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    algorithm: ScoringAlgorithm = ScoringAlgorithm.DEFAULT
    weights: ScoringWeightsSchema = Field(default_factory=ScoringWeightsSchema)
    constraints: Optional[dict] = None
    is_active: bool = False


class ScoringConfigUpdate(BaseModel):
    """Request body for PATCH /v1/scoring/configs/{id}; omitted fields are kept."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    algorithm: Optional[ScoringAlgorithm] = None
    weights: Optional[ScoringWeightsSchema] = None
    constraints: Optional[dict] = None
    is_active: Optional[bool] = None


class ScoringConfigResponse(BaseModel):
    """Stored scoring configuration."""
    id: UUID
    name: str
    description: Optional[str] = None
    algorithm: ScoringAlgorithm
    weights: ScoringWeightsSchema
    constraints: Optional[dict] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ==================== Runs ====================

class AssignmentScoreResponse(BaseModel):
    """Persisted per-developer score."""
    id: UUID
    developer_id: UUID
    total_score: float
    breakdown: ScoreBreakdownSchema
    rank: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ScoringRunResponse(BaseModel):
    """Scoring run summary."""
    id: UUID
    job_id: UUID
    triggered_by: Optional[UUID] = None
    algorithm: ScoringAlgorithm
    config_id: Optional[UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ScoringRunDetailResponse(ScoringRunResponse):
    """Scoring run with its scores ordered by rank."""
    scores: List[AssignmentScoreResponse]


# ==================== Performance ====================

class DeveloperPerformanceResponse(BaseModel):
    """Cached performance counters for one developer."""
    developer_id: UUID
    completed_count: int
    failed_count: int
    cancelled_count: int
    on_time_rate: float
    avg_cycle_time_hours: float
    avg_quality_rating: float
    last_updated_at: datetime

    model_config = {"from_attributes": True}
