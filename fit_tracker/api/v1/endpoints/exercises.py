"""Exercise library CRUD endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.schemas.exercise import ExerciseCreate, ExerciseRead, ExerciseUpdate
from fit_tracker.storage import Storage

router = APIRouter()


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(
    category: str | None = None,
    search: str | None = None,
    storage: Storage = Depends(get_storage),
):
    """List exercises ordered by name; filter by category and/or name substring."""
    return await storage.list_exercises(category=category, search=search)


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    storage: Storage = Depends(get_storage),
):
    return await storage.create_exercise(payload.model_dump())


@router.get("/{exercise_id}", response_model=ExerciseRead)
async def get_exercise(
    exercise_id: int,
    storage: Storage = Depends(get_storage),
):
    exercise = await storage.get_exercise(exercise_id)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.put("/{exercise_id}", response_model=ExerciseRead)
async def update_exercise(
    exercise_id: int,
    payload: ExerciseUpdate,
    storage: Storage = Depends(get_storage),
):
    """Update an exercise (partial)."""
    changes = changes_from(payload, nullable=("instructions", "equipment", "image_url"))
    exercise = await storage.update_exercise(exercise_id, changes)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.delete("/{exercise_id}", status_code=204)
async def delete_exercise(
    exercise_id: int,
    storage: Storage = Depends(get_storage),
):
    """Delete an exercise. 409 while any workout still uses it."""
    if not await storage.delete_exercise(exercise_id):
        raise HTTPException(status_code=404, detail="Exercise not found")
    return None
