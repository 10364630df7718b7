"""Personal record schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.schemas.types import UtcDatetime


class PersonalRecordCreate(BaseModel):
    exercise_id: int
    weight: float = Field(..., ge=0)
    reps: int = Field(..., ge=0)


class PersonalRecordRead(PersonalRecordCreate):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: str
    date: UtcDatetime
