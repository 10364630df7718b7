"""Monthly goals, goal stats and goal photos."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.goal import (
    GoalPhotoCreate,
    GoalPhotoRead,
    GoalPhotoUpdate,
    GoalStats,
    MonthlyGoalData,
    MonthlyGoalRead,
    MonthlyGoalUpsert,
    PhotoDeleteResult,
)
from fit_tracker.services.dates import utcnow
from fit_tracker.storage import Storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/monthly", response_model=MonthlyGoalData)
async def get_monthly_goal(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=1970, le=9999),
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Target, completed workouts and workout dates for a month (default: current),
    plus the month's before photo and latest photo.
    """
    now = utcnow()
    return await storage.monthly_goal_data(auth_user.id, month or now.month, year or now.year)


@router.put("/monthly", response_model=MonthlyGoalRead)
async def set_monthly_goal(
    payload: MonthlyGoalUpsert,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create or replace the target for (month, year)."""
    return await storage.upsert_monthly_goal(
        auth_user.id, payload.month, payload.year, payload.target_workouts
    )


@router.get("/stats", response_model=GoalStats)
async def goal_stats(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.goal_stats(auth_user.id)


@router.post("/photos", response_model=GoalPhotoRead, status_code=201)
async def add_goal_photo(
    payload: GoalPhotoCreate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.create_goal_photo(auth_user.id, payload.model_dump())


@router.get("/photos/{month}/{year}", response_model=list[GoalPhotoRead])
async def list_goal_photos(
    month: int,
    year: int,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Photos for a month, oldest first."""
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Month must be between 1 and 12")
    return await storage.list_goal_photos(auth_user.id, month, year)


@router.patch("/photos/{photo_id}", response_model=GoalPhotoRead)
async def update_goal_photo(
    photo_id: int,
    payload: GoalPhotoUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Only the description is editable."""
    photo = await storage.update_goal_photo(photo_id, auth_user.id, payload.description)
    if not photo:
        raise HTTPException(status_code=404, detail="Goal photo not found")
    return photo


@router.delete("/photos/{photo_id}", response_model=PhotoDeleteResult)
async def delete_goal_photo(
    photo_id: int,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if not await storage.delete_goal_photo(photo_id, auth_user.id):
        raise HTTPException(status_code=404, detail="Goal photo not found")
    logger.info("User %s deleted goal photo %s", auth_user.id, photo_id)
    return PhotoDeleteResult(message="Photo deleted")
