"""Topic subscription routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from runners_api.api.v1.auth import get_current_user, require_privileged
from runners_api.core.database import get_db
from runners_api.models.user import User
from runners_api.schemas.topics import (
    AvailableTopicsResponse,
    BulkSubscribeRequest,
    BulkSubscribeResponse,
    NotifyRequest,
    NotifyResponse,
    SubscriptionResponse,
    TopicRequest,
    TopicStatsResponse,
    TopicStatusResponse,
)
from runners_api.services import topics as topic_service

router = APIRouter()


@router.post("/subscribe", response_model=TopicStatusResponse)
def subscribe(
    body: TopicRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TopicStatusResponse:
    sub = topic_service.subscribe(db, current_user, body.topic)
    return TopicStatusResponse.model_validate(sub)


@router.post("/unsubscribe", response_model=TopicStatusResponse)
def unsubscribe(
    body: TopicRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TopicStatusResponse:
    """Idempotent; unsubscribing from a topic never subscribed to succeeds."""
    sub = topic_service.unsubscribe(db, current_user, body.topic)
    if sub is None:
        return TopicStatusResponse(topic=body.topic, is_subscribed=False)
    return TopicStatusResponse.model_validate(sub)


@router.post("/bulk-subscribe", response_model=BulkSubscribeResponse)
def bulk_subscribe(
    body: BulkSubscribeRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> BulkSubscribeResponse:
    """Per-topic results; unknown topics are reported as failures without failing the batch."""
    result = topic_service.bulk_update(db, current_user, body.topics, subscribe_flag=body.subscribe)
    return BulkSubscribeResponse.model_validate(result)


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
def list_subscriptions(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    include_inactive: bool = Query(default=False, alias="includeInactive"),
) -> list[SubscriptionResponse]:
    subs = topic_service.list_subscriptions(db, current_user, active_only=not include_inactive)
    return [SubscriptionResponse.model_validate(s) for s in subs]


@router.get("/available", response_model=AvailableTopicsResponse)
def available_topics(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> AvailableTopicsResponse:
    return AvailableTopicsResponse.model_validate({"topics": topic_service.available_topics(db, current_user)})


@router.get("/status", response_model=TopicStatusResponse)
def topic_status(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    topic: str = Query(..., min_length=1, max_length=100),
) -> TopicStatusResponse:
    status = topic_service.topic_status(db, current_user, topic.strip().lower())
    return TopicStatusResponse.model_validate(status)


@router.get("/stats", response_model=TopicStatsResponse)
def topic_stats(
    _staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> TopicStatsResponse:
    return TopicStatsResponse.model_validate(topic_service.topic_stats(db))


@router.post("/{topic}/notify", response_model=NotifyResponse)
def notify_topic(
    body: NotifyRequest,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
    topic: str = Path(..., min_length=1, max_length=100),
) -> NotifyResponse:
    """Log-only broadcast; counts the notification on each active subscription."""
    topic = topic.strip().lower()
    recipients = topic_service.notify_topic(db, topic, body.title, body.body, body.data)
    return NotifyResponse(topic=topic, recipients=recipients)
