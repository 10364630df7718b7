"""Monthly goal and goal photo schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.core.enums import PhotoType
from fit_tracker.schemas.types import UtcDatetime


class MonthlyGoalUpsert(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)
    target_workouts: int = Field(..., ge=1)


class MonthlyGoalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: str
    month: int
    year: int
    target_workouts: int
    completed_workouts: int = 0
    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None


class GoalPhotoCreate(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)
    image_url: str = Field(..., min_length=1)
    type: PhotoType
    description: str | None = None


class GoalPhotoUpdate(BaseModel):
    description: str | None = None


class GoalPhotoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: str
    image_url: str
    type: PhotoType
    timestamp: UtcDatetime
    month: int
    year: int
    description: str | None = None


class MonthlyGoalData(BaseModel):
    month: int
    year: int
    target_workouts: int
    completed_workouts: int
    workout_dates: list[str]
    completion_percentage: float
    before_photo: GoalPhotoRead | None = None
    latest_photo: GoalPhotoRead | None = None


class GoalStats(BaseModel):
    current_month: MonthlyGoalData
    previous_month: MonthlyGoalData
    total_goal_photos: int
    longest_streak: int
    average_monthly_completion: float


class PhotoDeleteResult(BaseModel):
    success: bool = True
    message: str
