"""Workout CRUD endpoints, scoped to the current user."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.workout import (
    DurationBackfillResult,
    WorkoutCreate,
    WorkoutDurationDebug,
    WorkoutExerciseRead,
    WorkoutRead,
    WorkoutReadWithExercises,
    WorkoutUpdate,
)
from fit_tracker.services.durations import backfill_durations, duration_report
from fit_tracker.storage import Storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[WorkoutRead])
async def list_workouts(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """List workouts (without exercises), newest first. Both bounds inclusive."""
    end = end_date + timedelta(microseconds=1) if end_date else None
    return await storage.list_workouts(auth_user.id, start=start_date, end=end)


@router.post("", response_model=WorkoutReadWithExercises, status_code=201)
async def create_workout(
    payload: WorkoutCreate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create a workout. When `exercises` is sent, its entries are created in the same unit of work."""
    data = payload.model_dump(exclude={"exercises"})
    if payload.has_exercises:
        entries = [e.model_dump() for e in payload.exercises or []]
        workout = await storage.create_workout_with_exercises(auth_user.id, data, entries)
        logger.info("Workout %s created with %d exercises", workout.id, len(workout.exercises))
        return workout
    return await storage.create_workout(auth_user.id, data)


@router.get("/with-exercises", response_model=list[WorkoutReadWithExercises])
async def list_workouts_with_exercises(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_workouts_with_exercises(auth_user.id)


@router.get("/debug/durations", response_model=list[WorkoutDurationDebug])
async def debug_durations(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Stored duration next to summed exercise timers, per workout."""
    return duration_report(await storage.list_workouts_with_exercises(auth_user.id))


@router.post("/fix-durations", response_model=DurationBackfillResult)
async def fix_durations(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    updated = await backfill_durations(storage, auth_user.id)
    return DurationBackfillResult(updated=updated, message=f"Updated {updated} workout durations")


@router.get("/{workout_id}", response_model=WorkoutReadWithExercises)
async def get_workout(
    workout_id: int,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Get a workout with its exercises (and exercise info)."""
    workout = await storage.get_workout(workout_id, auth_user.id)
    if not workout:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


@router.put("/{workout_id}", response_model=WorkoutReadWithExercises)
async def update_workout(
    workout_id: int,
    payload: WorkoutUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Update a workout (partial)."""
    changes = changes_from(payload, nullable=("duration", "category", "notes", "image_url"))
    workout = await storage.update_workout(workout_id, auth_user.id, changes)
    if not workout:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: int,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Delete a workout and its exercises."""
    if not await storage.delete_workout(workout_id, auth_user.id):
        raise HTTPException(status_code=404, detail="Workout not found")
    return None


@router.get("/{workout_id}/exercises", response_model=list[WorkoutExerciseRead])
async def list_workout_exercises(
    workout_id: int,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if not await storage.get_workout(workout_id, auth_user.id):
        raise HTTPException(status_code=404, detail="Workout not found")
    return await storage.list_workout_exercises(workout_id)
