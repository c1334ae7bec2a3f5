"""Runner profile routes, including photo uploads and photo reminders."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from runners_api.api.v1.auth import get_current_user, require_privileged
from runners_api.api.v1.params import RecordId, get_page_params
from runners_api.api.v1.uploads import read_upload_files
from runners_api.core.database import get_db
from runners_api.core.errors import ValidationFailed
from runners_api.models.user import User
from runners_api.schemas.cases import CaseResponse
from runners_api.schemas.common import Page, build_page, one_of
from runners_api.schemas.runners import (
    PHOTO_TYPES,
    PhotoReminderItem,
    RunnerCreateRequest,
    RunnerDeleteResponse,
    RunnerPhotosResponse,
    RunnerResponse,
    RunnerStatusRequest,
    RunnerUpdateRequest,
    RunnerVerifyRequest,
)
from runners_api.schemas.upload import UploadedFile
from runners_api.services import notifications
from runners_api.services import runners as runner_service
from runners_api.services.images import RUNNER_PHOTO_MAX_BYTES, store_images, validate_images
from runners_api.services.pagination import PageParams
from runners_api.services.storage import StorageProvider, get_storage

router = APIRouter()


@router.get("", response_model=Page[RunnerResponse])
def list_runners(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    params: Annotated[PageParams, Depends(get_page_params)],
    status: str | None = Query(default=None, pattern="^(active|inactive)$"),
    q: str | None = Query(default=None, max_length=100),
    mine: bool = False,
) -> Page[RunnerResponse]:
    """Runners visible to the caller. Non-privileged callers only see their own."""
    rows, total = runner_service.list_runners(db, current_user, params, status=status, q=q, mine=mine)
    return build_page(RunnerResponse, rows, total, params.page, params.page_size)


@router.post("", response_model=RunnerResponse, status_code=201)
def create_runner(
    body: RunnerCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> RunnerResponse:
    """Create a runner profile together with its companion case."""
    runner, _case = runner_service.create_runner(db, current_user, body)
    return RunnerResponse.model_validate(runner)


@router.get("/photo-reminders", response_model=list[PhotoReminderItem])
def photo_reminders(
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> list[PhotoReminderItem]:
    """Runners whose six-month photo reminder is due and not yet sent."""
    return [PhotoReminderItem.model_validate(r) for r in runner_service.due_photo_reminders(db, staff)]


@router.get("/{runner_id}", response_model=RunnerResponse)
def get_runner(
    runner_id: RecordId,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> RunnerResponse:
    return RunnerResponse.model_validate(runner_service.get_visible_runner(db, current_user, runner_id))


@router.put("/{runner_id}", response_model=RunnerResponse)
def update_runner(
    runner_id: RecordId,
    body: RunnerUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> RunnerResponse:
    return RunnerResponse.model_validate(runner_service.update_runner(db, current_user, runner_id, body))


@router.put("/{runner_id}/status", response_model=RunnerResponse)
def set_runner_status(
    runner_id: RecordId,
    body: RunnerStatusRequest,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> RunnerResponse:
    return RunnerResponse.model_validate(runner_service.set_runner_status(db, staff, runner_id, body.is_active))


@router.put("/{runner_id}/verify", response_model=RunnerResponse)
def verify_runner(
    runner_id: RecordId,
    body: RunnerVerifyRequest,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> RunnerResponse:
    return RunnerResponse.model_validate(runner_service.set_runner_verified(db, staff, runner_id, body.is_verified))


@router.delete("/{runner_id}", response_model=RunnerDeleteResponse)
def delete_runner(
    runner_id: RecordId,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    hard: bool = False,
) -> RunnerDeleteResponse:
    """Deactivates runners referenced by cases. hard=true (admin/staff) fails with 409 instead."""
    action = runner_service.delete_runner(db, current_user, runner_id, hard=hard)
    return RunnerDeleteResponse(id=runner_id, action=action)


@router.get("/{runner_id}/cases", response_model=list[CaseResponse])
def runner_cases(
    runner_id: RecordId,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[CaseResponse]:
    return [CaseResponse.model_validate(c) for c in runner_service.list_runner_cases(db, current_user, runner_id)]


@router.post("/{runner_id}/photos", response_model=RunnerPhotosResponse)
async def upload_runner_photos(
    runner_id: RecordId,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[StorageProvider, Depends(get_storage)],
    files: Annotated[list[UploadFile], File(description="Up to 10 images, 10MB each")],
    photo_type: Annotated[str, Form(alias="photoType")] = "Profile",
) -> RunnerPhotosResponse:
    """
    Upload photos for a runner. Profile replaces the profile image; Additional appends.
    Every upload restarts the six-month photo reminder window.
    """
    try:
        photo_type = one_of(photo_type, PHOTO_TYPES)
    except ValueError as e:
        raise ValidationFailed(str(e), details={"photoType": str(e)})
    runner = runner_service.get_visible_runner(db, current_user, runner_id)
    images = validate_images(await read_upload_files(files, RUNNER_PHOTO_MAX_BYTES), RUNNER_PHOTO_MAX_BYTES)
    stored = store_images(storage, images, "runners")
    runner = runner_service.record_photos(db, runner, [f["url"] for f in stored], photo_type)
    notifications.notify_photo_updated(runner, current_user, len(stored))
    return RunnerPhotosResponse(
        runner=RunnerResponse.model_validate(runner),
        photo_type=photo_type,
        files=[UploadedFile.model_validate(f) for f in stored],
    )


@router.put("/{runner_id}/photo-reminder-sent", response_model=RunnerResponse)
def mark_photo_reminder_sent(
    runner_id: RecordId,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> RunnerResponse:
    runner = runner_service.mark_photo_reminder_sent(db, staff, runner_id)
    return RunnerResponse.model_validate(runner)
