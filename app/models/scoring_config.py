"""
ScoringConfig database model.
Stores named, versioned weighting profiles for the scoring engine.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String, Text, DateTime, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, GUID


class ScoringAlgorithm(str, enum.Enum):
    """Scoring algorithm variants."""
    DEFAULT = "DEFAULT"
    LINEAR = "LINEAR"
    CUSTOM = "CUSTOM"


class ScoringConfig(Base):
    """
    ScoringConfig model for scoring weights and constraints.
    Only one config should be active at a time.

    `weights` always carries the five factor keys: skill_match, performance,
    availability, workload, priority.
    """
    __tablename__ = "scoring_configs"

    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    algorithm: Mapped[ScoringAlgorithm] = mapped_column(
        Enum(ScoringAlgorithm),
        nullable=False,
        default=ScoringAlgorithm.DEFAULT,
    )
    weights: Mapped[dict] = mapped_column(JSON, nullable=False)
    constraints: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

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

    def __repr__(self) -> str:
        return f"<ScoringConfig(id={self.id}, name={self.name}, is_active={self.is_active})>"
