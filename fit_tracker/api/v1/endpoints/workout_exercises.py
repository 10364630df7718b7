"""Single workout-exercise rows; only within the caller's own workouts."""

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.workout import WorkoutExerciseCreate, WorkoutExerciseRead, WorkoutExerciseUpdate
from fit_tracker.storage import Storage

router = APIRouter()


@router.post("", response_model=WorkoutExerciseRead, status_code=201)
async def add_workout_exercise(
    payload: WorkoutExerciseCreate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if not await storage.get_workout(payload.workout_id, auth_user.id):
        raise HTTPException(status_code=404, detail="Workout not found")
    return await storage.create_workout_exercise(payload.model_dump())


@router.put("/{entry_id}", response_model=WorkoutExerciseRead)
async def update_workout_exercise(
    entry_id: int,
    payload: WorkoutExerciseUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    changes = changes_from(payload, nullable=("reps", "weight", "rest_time", "notes"))
    entry = await storage.update_workout_exercise(entry_id, auth_user.id, changes)
    if not entry:
        raise HTTPException(status_code=404, detail="Workout exercise not found")
    return entry


@router.delete("/{entry_id}", status_code=204)
async def delete_workout_exercise(
    entry_id: int,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if not await storage.delete_workout_exercise(entry_id, auth_user.id):
        raise HTTPException(status_code=404, detail="Workout exercise not found")
    return None
