"""Weekly goal and profile settings for the current user."""

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.api.v1.endpoints.auth import ensure_user
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.user import UserProfileRead, UserProfileUpdate, UserRead, WeeklyGoalUpdate
from fit_tracker.storage import Storage

router = APIRouter()


@router.put("/goal", response_model=UserRead)
async def update_weekly_goal(
    payload: WeeklyGoalUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await ensure_user(storage, auth_user)
    user = await storage.update_user_goal(auth_user.id, payload.weekly_goal)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/profile", response_model=UserProfileRead)
async def get_profile(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await ensure_user(storage, auth_user)


@router.patch("/profile", response_model=UserProfileRead)
async def update_profile(
    payload: UserProfileUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Partial update of username, profile image and community opt-in."""
    await ensure_user(storage, auth_user)
    changes = changes_from(payload, nullable=("username", "profile_image_url"))
    user = await storage.update_user_profile(auth_user.id, changes)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
