"""Push-notification device registration, upserted per (user, platform)."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from runners_api.core.errors import Conflict, NotFound
from runners_api.core.timeutil import utcnow
from runners_api.models import Device, User
from runners_api.schemas.devices import DeviceRegisterRequest
from runners_api.services import topics

logger = logging.getLogger(__name__)

DEVICE_FIELDS = ("push_token", "app_version", "app_build_number", "device_model", "os_version")


def register_device(db: Session, user: User, body: DeviceRegisterRequest) -> tuple[Device, bool, list[str]]:
    """
    Create or refresh the caller's device for body.platform.

    Returns (device, created, default_topics). Default topics are subscribed
    only when the user had no device rows at all before this call.
    """
    now = utcnow()
    first_device = db.query(Device.id).filter(Device.user_id == user.id).first() is None
    device = (
        db.query(Device)
        .filter(Device.user_id == user.id, Device.platform == body.platform)
        .first()
    )
    created = device is None
    if created:
        device = Device(user_id=user.id, platform=body.platform, created_at=now)
        db.add(device)
    else:
        device.updated_at = now
    for field in DEVICE_FIELDS:
        value = getattr(body, field)
        if value is not None:
            setattr(device, field, value)
    device.is_active = True
    device.last_seen_at = now

    subscribed: list[str] = []
    try:
        # subscribe_defaults flushes, which also sends the pending device insert.
        if first_device:
            subscribed = topics.subscribe_defaults(db, user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Device registration conflicted with a concurrent request; retry", code="DEVICE_CONFLICT")
    db.refresh(device)
    logger.info(
        "Device registered",
        extra={"user_id": user.id, "platform": device.platform, "is_new": created, "default_topics": subscribed},
    )
    return device, created, subscribed


def _get_device(db: Session, user: User, platform: str) -> Device:
    device = (
        db.query(Device)
        .filter(Device.user_id == user.id, Device.platform == platform.strip().lower())
        .first()
    )
    if device is None:
        raise NotFound(f"No {platform} device registered")
    return device


def unregister_device(db: Session, user: User, platform: str) -> Device:
    device = _get_device(db, user, platform)
    device.is_active = False
    device.updated_at = utcnow()
    db.commit()
    db.refresh(device)
    logger.info("Device unregistered", extra={"user_id": user.id, "platform": device.platform})
    return device


def list_devices(db: Session, user: User) -> list[Device]:
    return (
        db.query(Device)
        .filter(Device.user_id == user.id, Device.is_active.is_(True))
        .order_by(Device.platform)
        .all()
    )


def heartbeat(db: Session, user: User, platform: str) -> Device:
    device = _get_device(db, user, platform)
    device.last_seen_at = utcnow()
    db.commit()
    db.refresh(device)
    return device
