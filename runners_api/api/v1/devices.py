"""Device registration routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from runners_api.api.v1.auth import get_current_user
from runners_api.core.database import get_db
from runners_api.models.user import User
from runners_api.schemas.devices import DeviceRegisterRequest, DeviceRegisterResponse, DeviceResponse
from runners_api.services import devices as device_service

router = APIRouter()

_PLATFORM_PATTERN = "^(ios|android)$"


@router.post("/register", response_model=DeviceRegisterResponse)
def register_device(
    body: DeviceRegisterRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DeviceRegisterResponse:
    """
    Register or refresh the caller's device for a platform.
    A user's first device also subscribes them to the default topics for their role.
    """
    device, created, topics = device_service.register_device(db, current_user, body)
    return DeviceRegisterResponse(
        device=DeviceResponse.model_validate(device),
        created=created,
        subscribed_topics=topics,
    )


@router.delete("/unregister", response_model=DeviceResponse)
def unregister_device(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    platform: str = Query(..., pattern=_PLATFORM_PATTERN),
) -> DeviceResponse:
    return DeviceResponse.model_validate(device_service.unregister_device(db, current_user, platform))


@router.get("", response_model=list[DeviceResponse])
def list_devices(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[DeviceResponse]:
    return [DeviceResponse.model_validate(d) for d in device_service.list_devices(db, current_user)]


@router.post("/heartbeat", response_model=DeviceResponse)
def heartbeat(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    platform: str = Query(..., pattern=_PLATFORM_PATTERN),
) -> DeviceResponse:
    return DeviceResponse.model_validate(device_service.heartbeat(db, current_user, platform))
