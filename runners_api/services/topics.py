"""Topic catalogue and per-user subscriptions."""

import logging
import re
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from runners_api.core.errors import ValidationFailed
from runners_api.core.timeutil import utcnow
from runners_api.models import Case, TopicSubscription, User
from runners_api.models.base import MAX_ID
from runners_api.services import notifications

logger = logging.getLogger(__name__)

# name -> (category, description)
TOPIC_CATALOGUE: dict[str, tuple[str, str]] = {
    "org_all": ("global", "All organization announcements"),
    "org_system": ("global", "System status and maintenance"),
    "role_admin": ("role", "Administrator notices"),
    "role_staff": ("role", "Staff notices"),
    "role_parent": ("role", "Parent and guardian notices"),
    "role_moderator": ("role", "Moderator notices"),
    "region_tx_houston": ("region", "Cases in the Houston, TX area"),
    "region_tx_dallas": ("region", "Cases in the Dallas, TX area"),
    "priority_high": ("priority", "High priority cases"),
    "priority_critical": ("priority", "Critical priority cases"),
}
DEFAULT_TOPICS = ("org_all", "org_system")
CASE_TOPIC_PATTERN = re.compile(r"^case_(\d{1,10})$")


def default_topics_for_role(role: str) -> list[str]:
    topics = list(DEFAULT_TOPICS)
    role_topic = f"role_{role}"
    if role_topic in TOPIC_CATALOGUE:
        topics.append(role_topic)
    return topics


def ensure_valid_topic(db: Session, topic: str) -> str:
    """Return topic if it is in the catalogue or names an existing case; else 400 INVALID_TOPIC."""
    if topic in TOPIC_CATALOGUE:
        return topic
    match = CASE_TOPIC_PATTERN.match(topic)
    case_id = int(match.group(1)) if match else 0
    if 1 <= case_id <= MAX_ID and db.query(Case.id).filter(Case.id == case_id).first() is not None:
        return topic
    raise ValidationFailed(
        f"Unknown topic '{topic}'",
        code="INVALID_TOPIC",
        details={"topic": f"Value must be one of: {', '.join(TOPIC_CATALOGUE)} or case_<id>"},
    )


def _get_subscription(db: Session, user_id: int, topic: str) -> TopicSubscription | None:
    return (
        db.query(TopicSubscription)
        .filter(TopicSubscription.user_id == user_id, TopicSubscription.topic == topic)
        .first()
    )


def _subscribe(db: Session, user: User, topic: str, now: datetime) -> TopicSubscription:
    sub = _get_subscription(db, user.id, topic)
    if sub is None:
        sub = TopicSubscription(
            user_id=user.id,
            topic=topic,
            is_subscribed=True,
            subscribed_at=now,
            notification_count=0,
            created_at=now,
        )
        db.add(sub)
        # Flush so a repeated topic in the same batch finds this row.
        db.flush()
    elif not sub.is_subscribed:
        sub.is_subscribed = True
        sub.subscribed_at = now
        sub.unsubscribed_at = None
        sub.updated_at = now
    return sub


def _unsubscribe(db: Session, user: User, topic: str, now: datetime) -> TopicSubscription | None:
    sub = _get_subscription(db, user.id, topic)
    if sub is not None and sub.is_subscribed:
        sub.is_subscribed = False
        sub.unsubscribed_at = now
        sub.updated_at = now
    return sub


def subscribe(db: Session, user: User, topic: str) -> TopicSubscription:
    """Idempotent: subscribing twice leaves one active row."""
    ensure_valid_topic(db, topic)
    sub = _subscribe(db, user, topic, utcnow())
    db.commit()
    db.refresh(sub)
    logger.info("Subscribed to topic", extra={"user_id": user.id, "topic": topic})
    return sub


def unsubscribe(db: Session, user: User, topic: str) -> TopicSubscription | None:
    """Idempotent: returns None when the user never subscribed."""
    ensure_valid_topic(db, topic)
    sub = _unsubscribe(db, user, topic, utcnow())
    db.commit()
    if sub is not None:
        db.refresh(sub)
    logger.info("Unsubscribed from topic", extra={"user_id": user.id, "topic": topic})
    return sub


def subscribe_defaults(db: Session, user: User) -> list[str]:
    """Subscribe user to the default topics for their role. Caller commits."""
    now = utcnow()
    topics = default_topics_for_role(user.role)
    for topic in topics:
        _subscribe(db, user, topic, now)
    return topics


def bulk_update(db: Session, user: User, topics: list[str], subscribe_flag: bool = True) -> dict[str, Any]:
    """
    Apply subscribe (or unsubscribe) to each topic.

    Failures are reported per topic and never abort the rest of the batch.
    """
    now = utcnow()
    results = []
    for topic in topics:
        try:
            ensure_valid_topic(db, topic)
        except ValidationFailed as e:
            results.append({"topic": topic, "success": False, "message": e.message})
            continue
        if subscribe_flag:
            _subscribe(db, user, topic, now)
            results.append({"topic": topic, "success": True, "message": "Subscribed"})
        else:
            _unsubscribe(db, user, topic, now)
            results.append({"topic": topic, "success": True, "message": "Unsubscribed"})
    db.commit()
    successes = sum(1 for r in results if r["success"])
    summary = {"total": len(results), "success": successes, "failures": len(results) - successes}
    logger.info("Bulk topic update", extra={"user_id": user.id, "subscribe": subscribe_flag, **summary})
    return {"results": results, "summary": summary}


def list_subscriptions(db: Session, user: User, active_only: bool = True) -> list[TopicSubscription]:
    query = db.query(TopicSubscription).filter(TopicSubscription.user_id == user.id)
    if active_only:
        query = query.filter(TopicSubscription.is_subscribed.is_(True))
    return query.order_by(TopicSubscription.topic).all()


def available_topics(db: Session, user: User) -> list[dict[str, Any]]:
    """Catalogue topics annotated with the caller's subscription state."""
    active = {s.topic for s in list_subscriptions(db, user)}
    return [
        {"name": name, "category": category, "description": description, "is_subscribed": name in active}
        for name, (category, description) in TOPIC_CATALOGUE.items()
    ]


def topic_status(db: Session, user: User, topic: str) -> dict[str, Any]:
    ensure_valid_topic(db, topic)
    sub = _get_subscription(db, user.id, topic)
    if sub is None:
        return {"topic": topic, "is_subscribed": False, "notification_count": 0, "last_notification_sent": None}
    return {
        "topic": topic,
        "is_subscribed": sub.is_subscribed,
        "notification_count": sub.notification_count,
        "last_notification_sent": sub.last_notification_sent,
    }


def topic_stats(db: Session) -> dict[str, Any]:
    total = db.query(func.count(TopicSubscription.id)).scalar() or 0
    active = (
        db.query(func.count(TopicSubscription.id))
        .filter(TopicSubscription.is_subscribed.is_(True))
        .scalar()
        or 0
    )
    per_topic = (
        db.query(TopicSubscription.topic, func.count(TopicSubscription.id))
        .filter(TopicSubscription.is_subscribed.is_(True))
        .group_by(TopicSubscription.topic)
        .order_by(func.count(TopicSubscription.id).desc(), TopicSubscription.topic)
        .all()
    )
    return {
        "total_subscriptions": total,
        "active_subscriptions": active,
        "topics": [{"topic": topic, "subscribers": count} for topic, count in per_topic],
    }


def notify_topic(db: Session, topic: str, title: str, body: str, data: dict[str, Any]) -> int:
    """Log-only delivery to every active subscriber; returns the recipient count."""
    ensure_valid_topic(db, topic)
    now = utcnow()
    subs = (
        db.query(TopicSubscription)
        .filter(TopicSubscription.topic == topic, TopicSubscription.is_subscribed.is_(True))
        .all()
    )
    for sub in subs:
        sub.notification_count = (sub.notification_count or 0) + 1
        sub.last_notification_sent = now
    db.commit()
    notifications.broadcast_to_topic(topic, title, body, data, len(subs))
    return len(subs)


def cleanup_subscriptions(db: Session, days: int) -> int:
    """Delete unsubscribed rows whose unsubscribe is older than days. Idempotent."""
    cutoff = utcnow() - timedelta(days=days)
    deleted = (
        db.query(TopicSubscription)
        .filter(
            TopicSubscription.is_subscribed.is_(False),
            TopicSubscription.unsubscribed_at.isnot(None),
            TopicSubscription.unsubscribed_at < cutoff,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted > 0:
        logger.info("Subscription cleanup: cutoff=%s, deleted=%s", cutoff.isoformat(), deleted)
    return deleted
