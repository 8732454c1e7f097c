"""
DeveloperPerformanceMetric database model.
Derived per-developer counters recomputed on demand from assignment history.
"""

import uuid
from datetime import datetime

from sqlalchemy import Float, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, GUID


class DeveloperPerformanceMetric(Base):
    """
    One row per developer, upserted by the performance refresh.
    A cache, not an authoritative source.
    """
    __tablename__ = "developer_performance_metrics"

    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )
    developer_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    completed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cancelled_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    on_time_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    avg_cycle_time_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    avg_quality_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    last_updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DeveloperPerformanceMetric(developer_id={self.developer_id}, completed={self.completed_count})>"
