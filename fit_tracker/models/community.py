"""Community presence - latest shared activity per user."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fit_tracker.db.base import Base


class CommunityPresence(Base):
    """One row per user. Empty workout_name marks a heartbeat-only row."""

    __tablename__ = "community_presence"
    __table_args__ = (Index("ix_community_presence_last_active", "last_active"),)

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    workout_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    exercise_names: Mapped[str] = mapped_column(Text, default="", nullable=False)
    last_active: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
