"""Schemas package initialization."""

from app.schemas.common import ApiResponse, PaginatedData, PaginationMeta
from app.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    AssignmentDetailResponse,
    StatusChangeRequest,
    DeveloperSuggestion,
)
from app.schemas.team import (
    TeamCreate,
    TeamAssignRequest,
    TeamCreateAndAssignRequest,
    TeamResponse,
    TeamAssignmentResponse,
    TeamAssignmentDetailResponse,
)
from app.schemas.scoring import (
    ScoreJobRequest,
    ScoreJobResponse,
    ScoringConfigCreate,
    ScoringConfigUpdate,
    ScoringConfigResponse,
    ScoringRunResponse,
    ScoringRunDetailResponse,
    DeveloperPerformanceResponse,
)
from app.schemas.status_history import (
    StatusHistoryRecordResponse,
    StatusHistoryListData,
    StatusHistoryStats,
)
from app.schemas.profile import (
    Availability,
    EducationUpdate,
    CertificationCreate,
    PortfolioLinkCreate,
    ProfileResponse,
)

__all__ = [
    "ApiResponse",
    "PaginatedData",
    "PaginationMeta",
    "AssignmentCreate",
    "AssignmentUpdate",
    "AssignmentResponse",
    "AssignmentDetailResponse",
    "StatusChangeRequest",
    "DeveloperSuggestion",
    "TeamCreate",
    "TeamAssignRequest",
    "TeamCreateAndAssignRequest",
    "TeamResponse",
    "TeamAssignmentResponse",
    "TeamAssignmentDetailResponse",
    "ScoreJobRequest",
    "ScoreJobResponse",
    "ScoringConfigCreate",
    "ScoringConfigUpdate",
    "ScoringConfigResponse",
    "ScoringRunResponse",
    "ScoringRunDetailResponse",
    "DeveloperPerformanceResponse",
    "StatusHistoryRecordResponse",
    "StatusHistoryListData",
    "StatusHistoryStats",
    "Availability",
    "EducationUpdate",
    "CertificationCreate",
    "PortfolioLinkCreate",
    "ProfileResponse",
]
