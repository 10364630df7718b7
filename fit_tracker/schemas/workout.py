"""Workout and WorkoutExercise schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.schemas.exercise import ExerciseRead
from fit_tracker.schemas.types import UtcDatetime


class WorkoutExerciseBase(BaseModel):
    exercise_id: int
    sets: int = Field(..., ge=0)
    reps: str | None = Field(None, max_length=50)  # "10" or "8-12"
    weight: float | None = Field(None, ge=0)
    rest_time: int | None = Field(None, ge=0)  # seconds
    duration_seconds: int = Field(0, ge=0)  # exercise timer
    notes: str | None = None


class WorkoutExerciseEntry(WorkoutExerciseBase):
    """Exercise line inside a workout-with-exercises create payload."""

    pass


class WorkoutExerciseCreate(WorkoutExerciseBase):
    workout_id: int


class WorkoutExerciseUpdate(BaseModel):
    exercise_id: int | None = None
    sets: int | None = Field(None, ge=0)
    reps: str | None = Field(None, max_length=50)
    weight: float | None = Field(None, ge=0)
    rest_time: int | None = Field(None, ge=0)
    duration_seconds: int | None = Field(None, ge=0)
    notes: str | None = None


class WorkoutExerciseRead(WorkoutExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    workout_id: int
    exercise: ExerciseRead | None = None


class WorkoutBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    duration: int | None = Field(None, ge=0)  # minutes
    category: str | None = Field(None, max_length=100)
    notes: str | None = None
    image_url: str | None = None


class WorkoutCreate(WorkoutBase):
    """Plain workout, or workout plus exercises when `exercises` is sent (even empty)."""

    exercises: list[WorkoutExerciseEntry] | None = None

    @property
    def has_exercises(self) -> bool:
        return "exercises" in self.model_fields_set


class WorkoutUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    duration: int | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=100)
    notes: str | None = None
    image_url: str | None = None


class WorkoutRead(WorkoutBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: str
    date: UtcDatetime


class WorkoutReadWithExercises(WorkoutRead):
    exercises: list[WorkoutExerciseRead] = []


class WorkoutDurationDebug(BaseModel):
    id: int
    name: str
    duration: int | None = None
    exercise_count: int
    total_exercise_duration: int  # seconds


class DurationBackfillResult(BaseModel):
    updated: int
    message: str
