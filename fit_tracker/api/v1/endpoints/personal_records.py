"""Personal record endpoints."""

from fastapi import APIRouter, Depends

from fit_tracker.api.deps import get_current_user, get_storage
from fit_tracker.core.security import AuthUser
from fit_tracker.schemas.personal_record import PersonalRecordCreate, PersonalRecordRead
from fit_tracker.storage import Storage

router = APIRouter()


@router.get("", response_model=list[PersonalRecordRead])
async def list_personal_records(
    exercise_id: int | None = None,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Newest first, optionally for one exercise."""
    return await storage.list_personal_records(auth_user.id, exercise_id=exercise_id)


@router.post("", response_model=PersonalRecordRead, status_code=201)
async def create_personal_record(
    payload: PersonalRecordCreate,
    auth_user: AuthUser = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.create_personal_record(auth_user.id, payload.model_dump())
