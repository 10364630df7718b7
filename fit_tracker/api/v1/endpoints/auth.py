"""Current user: sync the identity provider's view of the caller into users."""

from fastapi import APIRouter, Depends

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.user import UserRead
from fit_tracker.storage import Storage

router = APIRouter()


async def sync_user(storage: Storage, auth_user: AuthUser):
    return await storage.upsert_user(
        auth_user.id,
        email=auth_user.email,
        first_name=auth_user.first_name,
        last_name=auth_user.last_name,
        profile_image_url=auth_user.avatar_url,
    )


async def ensure_user(storage: Storage, auth_user: AuthUser):
    """Existing user row, created from token claims on first sight."""
    user = await storage.get_user(auth_user.id)
    if user is None:
        user = await sync_user(storage, auth_user)
    return user


@router.get("/user", response_model=UserRead)
async def get_auth_user(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Upsert the caller from token claims and return the stored user."""
    return await sync_user(storage, auth_user)
