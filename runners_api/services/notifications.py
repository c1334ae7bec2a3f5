"""Notification delivery. There is no push provider; every notification is a log line."""

import logging
from typing import Any

from runners_api.models import Runner, User

logger = logging.getLogger(__name__)


def notify_photo_updated(runner: Runner, owner: User, photo_count: int) -> None:
    logger.info(
        "Notification: runner photos updated",
        extra={
            "runner_id": runner.id,
            "owner_id": owner.id,
            "photo_count": photo_count,
            "next_photo_reminder": runner.next_photo_reminder.isoformat() if runner.next_photo_reminder else None,
        },
    )


def notify_photo_reminder(runner: Runner, owner_email: str) -> None:
    logger.info(
        "Notification: photo update reminder",
        extra={"runner_id": runner.id, "owner_email": owner_email},
    )


def broadcast_to_topic(topic: str, title: str, body: str, data: dict[str, Any], recipients: int) -> None:
    logger.info(
        "Notification: topic broadcast",
        extra={"topic": topic, "title": title, "body_len": len(body), "data_keys": sorted(data), "recipients": recipients},
    )
