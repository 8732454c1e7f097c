"""
StatusHistory database model.
Append-only audit log of assignment and team assignment status changes.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, ForeignKey, Enum, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, GUID
from app.models.assignment import AssignmentStatus


class StatusHistory(Base):
    """
    One row per status transition.
    Exactly one of `assignment_id` / `team_assignment_id` is set. Rows are
    never updated; they are removed only together with their assignment.
    """
    __tablename__ = "status_history"
    __table_args__ = (
        CheckConstraint(
            "(assignment_id IS NULL) != (team_assignment_id IS NULL)",
            name="ck_status_history_single_target",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )
    assignment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(),
        ForeignKey("job_assignments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    team_assignment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(),
        ForeignKey("team_assignments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    previous_status: Mapped[Optional[AssignmentStatus]] = mapped_column(
        Enum(AssignmentStatus),
        nullable=True,
    )
    new_status: Mapped[AssignmentStatus] = mapped_column(
        Enum(AssignmentStatus),
        nullable=False,
        index=True,
    )
    changed_by: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        target = self.assignment_id or self.team_assignment_id
        return f"<StatusHistory(id={self.id}, target={target}, {self.previous_status} -> {self.new_status})>"
