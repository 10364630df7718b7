"""Community presence schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.schemas.types import UtcDatetime


class PresenceUpdate(BaseModel):
    workout_name: str = Field(..., min_length=1, max_length=255)
    exercise_names: list[str]


class PresenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    user_id: str
    username: str
    profile_image_url: str | None = None
    workout_name: str
    exercise_names: str
    last_active: UtcDatetime


class CommunityFeed(BaseModel):
    active_users: int
    activities: list[PresenceRead]


class PresenceResult(BaseModel):
    success: bool
    message: str
    presence: PresenceRead | None = None


class HeartbeatResult(BaseModel):
    success: bool = True
    last_active: UtcDatetime
