"""User, weekly goal and profile schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.core.constants import MAX_WEEKLY_GOAL, MIN_WEEKLY_GOAL
from fit_tracker.schemas.types import UtcDatetime


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    profile_image_url: str | None = None
    weekly_goal: int
    goal_set_at: UtcDatetime | None = None
    show_in_community: bool = False
    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None


class WeeklyGoalUpdate(BaseModel):
    weekly_goal: int = Field(..., ge=MIN_WEEKLY_GOAL, le=MAX_WEEKLY_GOAL)


class UserProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    username: str | None = None
    profile_image_url: str | None = None
    show_in_community: bool = False


class UserProfileUpdate(BaseModel):
    username: str | None = Field(None, max_length=255)
    profile_image_url: str | None = None
    show_in_community: bool | None = None
