"""Models package initialization - imports all models for easy access."""

from app.models.user import User, Profile, UserRole
from app.models.job import Job, JobStatus, JobPriority
from app.models.assignment import JobAssignment, AssignmentStatus, ACTIVE_ASSIGNMENT_STATUSES
from app.models.team import Team, TeamMember, TeamAssignment, TeamRole
from app.models.status_history import StatusHistory
from app.models.scoring_config import ScoringConfig, ScoringAlgorithm
from app.models.scoring_run import ScoringRun, AssignmentScore
from app.models.performance_metric import DeveloperPerformanceMetric

__all__ = [
    # Accounts
    "User",
    "Profile",
    "UserRole",
    # Jobs and assignments
    "Job",
    "JobStatus",
    "JobPriority",
    "JobAssignment",
    "AssignmentStatus",
    "ACTIVE_ASSIGNMENT_STATUSES",
    "Team",
    "TeamMember",
    "TeamAssignment",
    "TeamRole",
    # Audit
    "StatusHistory",
    # Scoring
    "ScoringConfig",
    "ScoringAlgorithm",
    "ScoringRun",
    "AssignmentScore",
    "DeveloperPerformanceMetric",
]
