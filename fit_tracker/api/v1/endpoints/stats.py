"""Dashboard statistics."""

from fastapi import APIRouter, Depends

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.stats import ExerciseStats, WorkoutStats
from fit_tracker.storage import Storage

router = APIRouter()


@router.get("/workouts", response_model=WorkoutStats)
async def workout_stats(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Totals, workouts this week (Monday-start, UTC), heaviest lift, daily quote,
    weekly goal, average duration and whether the goal may be changed this week.
    """
    return await storage.workout_stats(auth_user.id)


@router.get("/exercises", response_model=list[ExerciseStats])
async def exercise_stats(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Per-exercise volume (sets x reps x weight), max weight, total sets, last performed."""
    return await storage.exercise_stats(auth_user.id)
