"""
Developer scoring engine.

Five independent factor scores, each in [0, 1], are combined into a composite
score with the weights of a scoring profile:

- skill match:  coverage of the job's required (70%) and preferred (30%) skills
- performance:  time-decayed completion rate over the last year, failures penalized
- availability: remaining weekly capacity against the job's estimated hours
- workload:     inverse of the priority-weighted hours currently assigned
- priority:     success rate on recent jobs of the same priority tier

All functions here are pure: they take snapshots and an explicit `now`, so a
fixed input always produces the same ranking.
"""

import logging
import math
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from app.config import Settings, get_settings
from app.models.assignment import AssignmentStatus, ACTIVE_ASSIGNMENT_STATUSES
from app.models.job import JobPriority
from app.models.scoring_config import ScoringAlgorithm

logger = logging.getLogger(__name__)


PRIORITY_WEIGHTS: Dict[JobPriority, int] = {
    JobPriority.LOW: 1,
    JobPriority.MEDIUM: 2,
    JobPriority.HIGH: 3,
    JobPriority.URGENT: 4,
    JobPriority.CRITICAL: 5,
}
MAX_PRIORITY_WEIGHT = 5

LEVEL_SCORES = {
    "BEGINNER": 0.6,
    "INTERMEDIATE": 0.8,
    "EXPERT": 1.0,
}
UNKNOWN_LEVEL_SCORE = 0.7

# Exact-match variant used by the LINEAR algorithm
LINEAR_LEVEL_BONUS = {
    "EXPERT": 1.0,
    "INTERMEDIATE": 0.85,
    "BEGINNER": 0.7,
}

REQUIRED_SKILL_SHARE = 0.7
PREFERRED_SKILL_SHARE = 0.3
NO_SKILLS_SCORE = 0.1
NEUTRAL_SCORE = 0.5

# (max days since last activity, bonus)
ACTIVITY_BONUSES: Tuple[Tuple[int, float], ...] = ((7, 0.1), (30, 0.05), (90, 0.02))

PRIORITY_HISTORY_SIZE = 10
FINISHED_STATUSES = (AssignmentStatus.COMPLETED, AssignmentStatus.FAILED)


def priority_weight(priority: Optional[JobPriority]) -> int:
    return PRIORITY_WEIGHTS.get(priority, 1)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# ==================== Weight profile ====================

FACTOR_NAMES = ("skill_match", "performance", "availability", "workload", "priority")


@dataclass(frozen=True)
class ScoringWeights:
    """Closed record of the five factor weights."""
    skill_match: float = 0.30
    performance: float = 0.35
    availability: float = 0.20
    workload: float = 0.10
    priority: float = 0.05

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ScoringWeights":
        """Build from a stored weights document; missing factors take the defaults."""
        defaults = cls()
        data = data or {}
        return cls(**{
            name: float(data.get(name, getattr(defaults, name)))
            for name in FACTOR_NAMES
        })

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class ScoringProfile:
    """Immutable configuration handed to the scorer for one run."""
    algorithm: ScoringAlgorithm = ScoringAlgorithm.DEFAULT
    weights: ScoringWeights = DEFAULT_WEIGHTS
    config_id: Optional[UUID] = None


@dataclass(frozen=True)
class ScoringParameters:
    """Numeric knobs of the factor formulas."""
    performance_window_days: int = 365
    performance_decay_days: float = 365.0
    performance_failure_penalty: float = 0.5
    default_weekly_hours: float = 40.0
    default_job_hours: float = 40.0
    workload_normalizer: float = 100.0
    skill_match_cutoff: float = 0.2

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ScoringParameters":
        settings = settings or get_settings()
        return cls(
            performance_window_days=settings.performance_window_days,
            performance_decay_days=settings.performance_decay_days,
            performance_failure_penalty=settings.performance_failure_penalty,
            default_weekly_hours=settings.default_weekly_hours,
            default_job_hours=settings.default_job_hours,
            workload_normalizer=settings.workload_normalizer,
            skill_match_cutoff=settings.skill_match_cutoff,
        )


# ==================== Input snapshots ====================

@dataclass(frozen=True)
class SkillRequirement:
    skill: str
    level: Optional[str] = None
    weight: float = 1.0

    @classmethod
    def parse_list(cls, entries) -> List["SkillRequirement"]:
        """Accept stored {"skill", "level", "weight"} objects or bare skill names."""
        requirements = []
        for entry in entries or []:
            if isinstance(entry, str):
                if entry.strip():
                    requirements.append(cls(skill=entry.strip()))
                continue
            if not isinstance(entry, dict) or not entry.get("skill"):
                continue
            weight = entry.get("weight")
            requirements.append(cls(
                skill=str(entry["skill"]).strip(),
                level=(entry.get("level") or None),
                weight=float(weight) if weight is not None else 1.0,
            ))
        return requirements


@dataclass(frozen=True)
class JobSnapshot:
    id: UUID
    priority: JobPriority
    required_skills: Tuple[SkillRequirement, ...] = ()
    preferred_skills: Tuple[SkillRequirement, ...] = ()
    tags: Tuple[str, ...] = ()
    estimated_hours: Optional[float] = None


@dataclass(frozen=True)
class AssignmentRecord:
    """A past or current assignment of a developer, with its job's priority and hours."""
    status: AssignmentStatus
    priority: JobPriority
    hours: float
    updated_at: datetime


@dataclass
class DeveloperSnapshot:
    id: UUID
    skills: List[str] = field(default_factory=list)
    availability: Optional[dict] = None
    assignments: List[AssignmentRecord] = field(default_factory=list)
    last_login_at: Optional[datetime] = None

    @property
    def active_assignments(self) -> List[AssignmentRecord]:
        return [a for a in self.assignments if a.status in ACTIVE_ASSIGNMENT_STATUSES]

    @property
    def last_activity_at(self) -> Optional[datetime]:
        """Latest assignment update, falling back to the last login."""
        if self.assignments:
            return max(a.updated_at for a in self.assignments)
        return self.last_login_at


# ==================== Output ====================

@dataclass(frozen=True)
class ScoreBreakdown:
    """Closed record of the five factor scores."""
    skill_match: float
    performance: float
    availability: float
    workload: float
    priority: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class DeveloperScore:
    developer_id: UUID
    total_score: float
    breakdown: ScoreBreakdown
    rank: int = 0


# ==================== Factors ====================

def _has_skill(developer_skills: Iterable[str], skill: str) -> bool:
    """Case-insensitive containment in either direction."""
    wanted = skill.lower()
    for owned in developer_skills:
        owned = owned.lower()
        if owned and (wanted in owned or owned in wanted):
            return True
    return False


def _skill_level_score(developer_skills: Sequence[str], requirement: SkillRequirement) -> float:
    if not _has_skill(developer_skills, requirement.skill):
        return 0.0
    return LEVEL_SCORES.get((requirement.level or "").upper(), UNKNOWN_LEVEL_SCORE)


def _skill_linear_score(developer_skills: Sequence[str], requirement: SkillRequirement) -> float:
    wanted = requirement.skill.lower()
    if not any(owned.lower() == wanted for owned in developer_skills):
        return 0.0
    return LINEAR_LEVEL_BONUS.get((requirement.level or "").upper(), LINEAR_LEVEL_BONUS["BEGINNER"])


def _weighted_coverage(
    developer_skills: Sequence[str],
    requirements: Sequence[SkillRequirement],
    match: Callable[[Sequence[str], SkillRequirement], float],
) -> float:
    total_weight = sum(r.weight for r in requirements)
    if total_weight <= 0:
        return 0.0
    gained = sum(match(developer_skills, r) * r.weight for r in requirements)
    return clamp(gained / total_weight)


def skill_match_score(
    developer_skills: Sequence[str],
    job: JobSnapshot,
    algorithm: ScoringAlgorithm = ScoringAlgorithm.DEFAULT,
) -> float:
    """
    Required skills count for 70%, preferred for 30%.

    A job without structured skills is matched on its tags, each treated as an
    INTERMEDIATE skill of weight 1. A job with neither scores 0.1 for everyone.
    """
    match = _skill_linear_score if algorithm == ScoringAlgorithm.LINEAR else _skill_level_score
    developer_skills = [s for s in developer_skills if isinstance(s, str)]

    if not job.required_skills and not job.preferred_skills:
        if not job.tags:
            return NO_SKILLS_SCORE
        tag_requirements = [SkillRequirement(skill=t, level="INTERMEDIATE", weight=1.0) for t in job.tags]
        return _weighted_coverage(developer_skills, tag_requirements, match)

    required = _weighted_coverage(developer_skills, job.required_skills, match)
    preferred = _weighted_coverage(developer_skills, job.preferred_skills, match)
    return clamp(required * REQUIRED_SKILL_SHARE + preferred * PREFERRED_SKILL_SHARE)


def _age_days(moment: datetime, now: datetime) -> float:
    return max(0.0, (now - moment).total_seconds() / 86400.0)


def performance_score(
    assignments: Sequence[AssignmentRecord],
    now: datetime,
    params: ScoringParameters = ScoringParameters(),
) -> float:
    """
    (completed - penalty * failed) / (completed + failed), each assignment
    weighted by priority weight * exp(-age_days / decay_days).
    """
    window_start = now - timedelta(days=params.performance_window_days)
    completed_weight = 0.0
    failed_weight = 0.0

    for record in assignments:
        if record.status not in FINISHED_STATUSES or record.updated_at < window_start:
            continue
        weight = priority_weight(record.priority) * math.exp(
            -_age_days(record.updated_at, now) / params.performance_decay_days
        )
        if record.status == AssignmentStatus.COMPLETED:
            completed_weight += weight
        else:
            failed_weight += weight

    total = completed_weight + failed_weight
    if total <= 0:
        return NEUTRAL_SCORE
    return clamp((completed_weight - params.performance_failure_penalty * failed_weight) / total)


def activity_bonus(last_activity: Optional[datetime], now: datetime) -> float:
    if last_activity is None:
        return 0.0
    days = _age_days(last_activity, now)
    for max_days, bonus in ACTIVITY_BONUSES:
        if days <= max_days:
            return bonus
    return 0.0


def _max_weekly_hours(availability: dict, default: float) -> float:
    for key in ("max_hours_per_week", "maxHoursPerWeek", "maxWeeklyHours"):
        value = availability.get(key)
        if value:
            return float(value)
    return default


def _current_weekly_hours(availability: dict) -> float:
    for key in ("current_weekly_hours", "currentWeeklyHours"):
        value = availability.get(key)
        if value:
            return float(value)
    return 0.0


def availability_score(
    developer: DeveloperSnapshot,
    job: JobSnapshot,
    now: datetime,
    params: ScoringParameters = ScoringParameters(),
) -> float:
    """Remaining weekly capacity relative to the job's hours, plus a recency bonus."""
    availability = developer.availability or {}
    max_hours = _max_weekly_hours(availability, params.default_weekly_hours)
    committed = _current_weekly_hours(availability) + sum(a.hours for a in developer.active_assignments)
    remaining = max(0.0, max_hours - committed)

    needed = float(job.estimated_hours) if job.estimated_hours else params.default_job_hours
    capacity = clamp(remaining / needed)

    return min(1.0, capacity + activity_bonus(developer.last_activity_at, now))


def workload_score(
    assignments: Sequence[AssignmentRecord],
    params: ScoringParameters = ScoringParameters(),
) -> float:
    active = [a for a in assignments if a.status in ACTIVE_ASSIGNMENT_STATUSES]
    if not active:
        return 1.0
    avg_complexity = sum(priority_weight(a.priority) * a.hours for a in active) / len(active)
    return clamp(1.0 - avg_complexity / params.workload_normalizer)


def priority_bonus_score(assignments: Sequence[AssignmentRecord], job_priority: JobPriority) -> float:
    """
    Success rate over the last finished assignments at the job's priority tier,
    moved away from neutral by priority_weight / 5.
    """
    finished = sorted(
        (a for a in assignments if a.status in FINISHED_STATUSES and a.priority == job_priority),
        key=lambda a: a.updated_at,
        reverse=True,
    )[:PRIORITY_HISTORY_SIZE]
    if not finished:
        return NEUTRAL_SCORE

    success_rate = sum(1 for a in finished if a.status == AssignmentStatus.COMPLETED) / len(finished)
    pull = priority_weight(job_priority) / MAX_PRIORITY_WEIGHT
    return clamp(NEUTRAL_SCORE + (success_rate - NEUTRAL_SCORE) * pull)


# ==================== Composite ====================

def _safe_factor(name: str, developer_id: UUID, compute: Callable[[], float]) -> float:
    """Run one factor; any failure scores neutral instead of failing the run."""
    try:
        return clamp(float(compute()))
    except Exception as e:
        logger.warning(f"Factor {name} failed for developer {developer_id}: {e}; using {NEUTRAL_SCORE}")
        return NEUTRAL_SCORE


def composite_score(breakdown: ScoreBreakdown, weights: ScoringWeights) -> float:
    return sum(getattr(breakdown, name) * getattr(weights, name) for name in FACTOR_NAMES)


def score_developer(
    developer: DeveloperSnapshot,
    job: JobSnapshot,
    profile: ScoringProfile,
    now: datetime,
    params: ScoringParameters = ScoringParameters(),
) -> DeveloperScore:
    breakdown = ScoreBreakdown(
        skill_match=_safe_factor(
            "skill_match", developer.id,
            lambda: skill_match_score(developer.skills, job, profile.algorithm),
        ),
        performance=_safe_factor(
            "performance", developer.id,
            lambda: performance_score(developer.assignments, now, params),
        ),
        availability=_safe_factor(
            "availability", developer.id,
            lambda: availability_score(developer, job, now, params),
        ),
        workload=_safe_factor(
            "workload", developer.id,
            lambda: workload_score(developer.assignments, params),
        ),
        priority=_safe_factor(
            "priority", developer.id,
            lambda: priority_bonus_score(developer.assignments, job.priority),
        ),
    )
    return DeveloperScore(
        developer_id=developer.id,
        total_score=round(composite_score(breakdown, profile.weights), 6),
        breakdown=breakdown,
    )


def assign_dense_ranks(scores: List[DeveloperScore]) -> List[DeveloperScore]:
    """Rank an already sorted list 1..N; ties are already ordered by developer id."""
    for index, score in enumerate(scores):
        score.rank = index + 1
    return scores


def rank_developers(
    developers: Iterable[DeveloperSnapshot],
    job: JobSnapshot,
    profile: ScoringProfile,
    now: datetime,
    limit: int = 10,
    min_score: float = 0.0,
    params: ScoringParameters = ScoringParameters(),
) -> List[DeveloperScore]:
    """
    Score, filter, sort and rank a developer pool against a job.

    Developers below the skill-match cutoff or below `min_score` are dropped.
    Equal totals are ordered by developer id so the output is deterministic.
    """
    scored = [score_developer(d, job, profile, now, params) for d in developers]
    retained = [
        s for s in scored
        if s.breakdown.skill_match >= params.skill_match_cutoff and s.total_score >= min_score
    ]
    retained.sort(key=lambda s: (-s.total_score, str(s.developer_id)))
    return assign_dense_ranks(retained[:limit])
