"""Data export (CSV) and bulk deletion of everything the user owns."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.data import ClearDataResult
from fit_tracker.services.dates import utcnow
from fit_tracker.services.export import build_export_csv, export_filename
from fit_tracker.storage import Storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/export/data")
async def export_data(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """CSV attachment: profile, workouts, workout exercises, personal records, monthly goals."""
    content = build_export_csv(
        await storage.get_user(auth_user.id),
        await storage.list_workouts_with_exercises(auth_user.id),
        await storage.list_personal_records(auth_user.id),
        await storage.list_monthly_goals(auth_user.id),
    )
    filename = export_filename(utcnow().date())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.delete("/clear/data", response_model=ClearDataResult)
async def clear_data(
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Delete workouts, records, goals, photos and presence; reset profile image and opt-in."""
    counts = await storage.clear_user_data(auth_user.id)
    logger.warning("Cleared all data for user %s (%d records)", auth_user.id, counts.total)
    return ClearDataResult(
        message=f"Deleted {counts.total} records",
        deleted_records={**counts.model_dump(), "total": counts.total},
    )
