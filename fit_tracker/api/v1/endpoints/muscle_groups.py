"""Muscle group endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.schemas.category import MuscleGroupCreate, MuscleGroupRead, MuscleGroupUpdate
from fit_tracker.storage import Storage

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[MuscleGroupRead])
async def list_muscle_groups(storage: Storage = Depends(get_storage)):
    return await storage.list_muscle_groups()


@router.post("", response_model=MuscleGroupRead, status_code=201)
async def create_muscle_group(
    payload: MuscleGroupCreate,
    storage: Storage = Depends(get_storage),
):
    return await storage.create_muscle_group(payload.model_dump())


@router.put("/{muscle_group_id}", response_model=MuscleGroupRead)
async def update_muscle_group(
    muscle_group_id: int,
    payload: MuscleGroupUpdate,
    storage: Storage = Depends(get_storage),
):
    changes = changes_from(payload, nullable=("description",))
    group = await storage.update_muscle_group(muscle_group_id, changes)
    if not group:
        raise HTTPException(status_code=404, detail="Muscle group not found")
    return group


@router.delete("/{muscle_group_id}", status_code=204)
async def delete_muscle_group(
    muscle_group_id: int,
    storage: Storage = Depends(get_storage),
):
    """409 while an exercise targets this muscle group."""
    if not await storage.delete_muscle_group(muscle_group_id):
        raise HTTPException(status_code=404, detail="Muscle group not found")
    return None
