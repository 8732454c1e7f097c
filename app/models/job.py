"""
Job database model.
A client's unit of work that developers or teams get assigned to.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, GUID


class JobStatus(str, enum.Enum):
    """Lifecycle status of a job."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class JobPriority(str, enum.Enum):
    """Job priority tiers, lowest first."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"
    CRITICAL = "CRITICAL"


class Job(Base):
    """
    Job model.

    `required_skills` and `preferred_skills` hold lists of
    {"skill": str, "level": BEGINNER|INTERMEDIATE|EXPERT, "weight": float};
    `tags` is a plain list of strings used when no structured skills exist.
    """
    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    client_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus),
        nullable=False,
        default=JobStatus.DRAFT,
        index=True,
    )
    priority: Mapped[JobPriority] = mapped_column(
        Enum(JobPriority),
        nullable=False,
        default=JobPriority.MEDIUM,
    )
    required_skills: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    preferred_skills: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    estimated_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
    status_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    previous_status: Mapped[Optional[JobStatus]] = mapped_column(
        Enum(JobStatus),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title={self.title}, status={self.status})>"
