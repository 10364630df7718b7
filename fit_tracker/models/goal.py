"""Monthly goal and goal photo models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fit_tracker.core.enums import PhotoType
from fit_tracker.db.base import Base


class MonthlyGoal(Base):
    """Target workout count for one user/month/year."""

    __tablename__ = "monthly_goals"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_monthly_goals_user_month_year"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-12
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    target_workouts: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_workouts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class GoalPhoto(Base):
    """Before/progress/after picture attached to a month."""

    __tablename__ = "goal_photos"
    __table_args__ = (Index("ix_goal_photos_user_month_year", "user_id", "year", "month"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[PhotoType] = mapped_column(Enum(PhotoType), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
