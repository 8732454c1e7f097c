"""Services package initialization."""

from app.services.scoring import (
    ScoringWeights,
    ScoringProfile,
    ScoreBreakdown,
    DeveloperScore,
    rank_developers,
)
from app.services.status_workflow import (
    allowed_transitions,
    validate_transition,
    run_trigger,
)

__all__ = [
    "ScoringWeights",
    "ScoringProfile",
    "ScoreBreakdown",
    "DeveloperScore",
    "rank_developers",
    "allowed_transitions",
    "validate_transition",
    "run_trigger",
]
