"""Dashboard statistics schemas."""

from pydantic import BaseModel

from fit_tracker.schemas.quote import QuoteRead


class HeaviestLift(BaseModel):
    exercise_name: str
    weight: float
    category: str | None = None


class WorkoutStats(BaseModel):
    total_workouts: int
    this_week: int
    personal_record: HeaviestLift | None = None
    daily_quote: QuoteRead | None = None
    weekly_goal: int
    average_duration: float
    can_set_new_goal: bool


class ExerciseStats(BaseModel):
    exercise_id: int
    exercise_name: str
    total_volume: float
    max_weight: float
    total_sets: int
    last_performed: str | None = None
