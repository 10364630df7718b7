"""Category endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from fit_tracker.storage import Storage

router = APIRouter()


@router.get("", response_model=list[CategoryRead])
async def list_categories(storage: Storage = Depends(get_storage)):
    """Default category first, then by name."""
    return await storage.list_categories()


@router.post("", response_model=CategoryRead, status_code=201)
async def create_category(
    payload: CategoryCreate,
    storage: Storage = Depends(get_storage),
):
    return await storage.create_category(payload.model_dump())


@router.put("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    storage: Storage = Depends(get_storage),
):
    changes = changes_from(payload, nullable=("description",))
    category = await storage.update_category(category_id, changes)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    storage: Storage = Depends(get_storage),
):
    """Delete a category nothing refers to. 409 when exercises or workouts use it."""
    if not await storage.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"success": True, "message": "Category deleted"}
