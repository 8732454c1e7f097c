"""
JobAssignment database model.
Represents the binding of one developer to one job with a lifecycle status.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, GUID

if TYPE_CHECKING:
    from app.models.job import Job
    from app.models.user import User


class AssignmentStatus(str, enum.Enum):
    """Status shared by developer and team assignments."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


ACTIVE_ASSIGNMENT_STATUSES = (AssignmentStatus.PENDING, AssignmentStatus.IN_PROGRESS)


class JobAssignment(Base):
    """
    JobAssignment model.
    At most one PENDING/IN_PROGRESS row may exist per (job, developer); this is
    checked by the service at creation time.
    """
    __tablename__ = "job_assignments"

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
    developer_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_by: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[AssignmentStatus] = mapped_column(
        Enum(AssignmentStatus),
        nullable=False,
        default=AssignmentStatus.PENDING,
        index=True,
    )
    assignment_type: Mapped[str] = mapped_column(String(50), nullable=False, default="MANUAL")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    job: Mapped["Job"] = relationship("Job")
    developer: Mapped["User"] = relationship(
        "User",
        back_populates="assignments",
        foreign_keys=[developer_id],
    )

    def __repr__(self) -> str:
        return f"<JobAssignment(id={self.id}, job_id={self.job_id}, developer_id={self.developer_id}, status={self.status})>"
