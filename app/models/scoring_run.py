"""
ScoringRun and AssignmentScore database models.
One run per scorer invocation, with one ranked score row per retained developer.
"""

import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy import Integer, Float, DateTime, ForeignKey, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, GUID
from app.models.scoring_config import ScoringAlgorithm


class ScoringRun(Base):
    """
    ScoringRun model.
    Immutable snapshot of one scoring execution against a job.
    """
    __tablename__ = "scoring_runs"

    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )
    job_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    triggered_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    algorithm: Mapped[ScoringAlgorithm] = mapped_column(
        Enum(ScoringAlgorithm),
        nullable=False,
        default=ScoringAlgorithm.DEFAULT,
    )
    config_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(),
        ForeignKey("scoring_configs.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    scores: Mapped[List["AssignmentScore"]] = relationship(
        "AssignmentScore",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="AssignmentScore.rank",
    )

    def __repr__(self) -> str:
        return f"<ScoringRun(id={self.id}, job_id={self.job_id}, algorithm={self.algorithm})>"


class AssignmentScore(Base):
    """
    Per-developer score within a run.
    `rank` is 1..N within the run, ordered by descending total_score then developer id.
    """
    __tablename__ = "assignment_scores"
    __table_args__ = (
        UniqueConstraint("run_id", "developer_id", name="uq_assignment_scores_run_developer"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )
    run_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("scoring_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    developer_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    total_score: Mapped[float] = mapped_column(Float, nullable=False)
    breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    run: Mapped["ScoringRun"] = relationship("ScoringRun", back_populates="scores")

    def __repr__(self) -> str:
        return f"<AssignmentScore(run_id={self.run_id}, developer_id={self.developer_id}, rank={self.rank})>"
