"""Community feed: opted-in users share what they are training."""

from datetime import timedelta

from fastapi import APIRouter, Depends

from fit_tracker.api.deps import get_app_settings, get_current_user, get_storage
from fit_tracker.api.v1.endpoints.auth import ensure_user
from fit_tracker.core.config import Settings
from fit_tracker.core.constants import ANONYMOUS_USERNAME, COMMUNITY_FEED_LIMIT
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.community import (
    CommunityFeed,
    HeartbeatResult,
    PresenceRead,
    PresenceResult,
    PresenceUpdate,
)
from fit_tracker.services.dates import utcnow
from fit_tracker.storage import Storage

router = APIRouter()


@router.post("/presence", response_model=PresenceResult)
async def update_presence(
    payload: PresenceUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Share the current workout. Nothing is written unless the user opted in."""
    user = await ensure_user(storage, auth_user)
    if not user.show_in_community:
        return PresenceResult(success=False, message="Community sharing is disabled for this user")
    row = await storage.upsert_community_presence(
        user.id,
        username=user.username or user.email or ANONYMOUS_USERNAME,
        profile_image_url=user.profile_image_url,
        workout_name=payload.workout_name,
        exercise_names=", ".join(payload.exercise_names),
    )
    return PresenceResult(success=True, message="Presence updated", presence=PresenceRead.model_validate(row))


@router.post("/heartbeat", response_model=HeartbeatResult)
async def heartbeat(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    row = await storage.touch_community_presence(auth_user.id)
    return HeartbeatResult(last_active=row.last_active)


@router.get("/feed", response_model=CommunityFeed)
async def feed(
    auth_user: AuthUser = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    storage: Storage = Depends(get_storage),
):
    """Recent shared workouts, newest first, and how many users are active right now."""
    now = utcnow()
    activities = await storage.list_community_presence(
        now - timedelta(hours=settings.community_feed_hours), COMMUNITY_FEED_LIMIT
    )
    active = await storage.count_active_users(now - timedelta(minutes=settings.community_active_minutes))
    return CommunityFeed(
        active_users=active,
        activities=[PresenceRead.model_validate(row) for row in activities],
    )
